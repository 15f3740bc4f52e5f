"""Pytest configuration and shared catalog fixtures."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable

import pytest


# The ``app`` package sits at the project root; make it importable when the
# project has not been installed.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


from app.models import ContentItem  # noqa: E402


@pytest.fixture
def make_item() -> Callable[..., ContentItem]:
    """Return a factory building content items with sensible defaults."""

    counter = {"value": 0}

    def _make(**overrides: Any) -> ContentItem:
        counter["value"] += 1
        index = counter["value"]
        data: dict[str, Any] = {
            "id": f"item-{index}",
            "title": f"Title {index}",
            "type": "movie",
            "genres": ["Drama"],
            "year": 2020,
            "rating": 7.0,
        }
        data.update(overrides)
        return ContentItem.model_validate(data)

    return _make
