"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="ReelShelf", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    content_source_url: HttpUrl | None = Field(
        default=None, alias="CONTENT_SOURCE_URL"
    )
    content_seed_file: Path | None = Field(default=None, alias="CONTENT_SEED_FILE")
    content_request_timeout: float = Field(
        default=15.0, alias="CONTENT_TIMEOUT", ge=1.0, le=120.0
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./reelshelf.db", alias="DATABASE_URL"
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("content_source_url", "content_seed_file", mode="before")
    @classmethod
    def _strip_blank(cls, value: object) -> object:
        if isinstance(value, str):
            stripped = value.strip()
            return stripped or None
        return value

    @property
    def uses_remote_content(self) -> bool:
        """Whether the collection is fetched over HTTP instead of the database."""

        return self.content_source_url is not None

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
