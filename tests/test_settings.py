"""Configuration settings behaviour tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from app.config import Settings


def test_defaults_use_local_database() -> None:
    """Without a content URL the collection comes from the database."""

    settings = Settings(_env_file=None)

    assert settings.app_name == "ReelShelf"
    assert settings.content_source_url is None
    assert settings.uses_remote_content is False
    assert settings.database_url.startswith("sqlite+aiosqlite://")


def test_blank_content_url_is_ignored() -> None:
    settings = Settings(_env_file=None, CONTENT_SOURCE_URL="   ", CONTENT_SEED_FILE="")

    assert settings.content_source_url is None
    assert settings.content_seed_file is None


def test_remote_content_settings() -> None:
    settings = Settings(
        _env_file=None,
        CONTENT_SOURCE_URL="https://cdn.example.com/catalog.json",
        CONTENT_TIMEOUT=30,
    )

    assert settings.uses_remote_content is True
    assert str(settings.content_source_url) == "https://cdn.example.com/catalog.json"
    assert settings.content_request_timeout == 30.0


def test_seed_file_is_parsed_as_path() -> None:
    settings = Settings(_env_file=None, CONTENT_SEED_FILE="data/catalog.json")

    assert settings.content_seed_file == Path("data/catalog.json")


def test_timeout_bounds_are_enforced() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, CONTENT_TIMEOUT=0)


def test_environment_is_restricted() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, ENVIRONMENT="staging")
