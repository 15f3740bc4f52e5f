"""Pydantic models describing catalog content and browse state."""

from __future__ import annotations

from typing import Any, Iterable, Literal, Mapping

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    field_validator,
    model_validator,
)

from .sections import ALL, ContentType
from .utils import ensure_content_id, normalize_content_type

FILTER_FIELDS: tuple[str, ...] = ("type", "genre", "year")


class ContentItem(BaseModel):
    """Represents a single media entry of the catalog."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str = Field(validation_alias=AliasChoices("title", "name"))
    type: ContentType
    genres: tuple[str, ...] = Field(
        default=(), validation_alias=AliasChoices("genres", "genre")
    )
    year: int
    rating: float = Field(default=0.0, allow_inf_nan=False)
    description: str | None = Field(
        default=None, validation_alias=AliasChoices("description", "overview")
    )
    poster: HttpUrl | None = None
    backdrop: HttpUrl | None = Field(
        default=None, validation_alias=AliasChoices("backdrop", "background")
    )

    @model_validator(mode="before")
    @classmethod
    def _derive_identifier(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        payload = dict(data)
        title = payload.get("title") or payload.get("name")
        year = payload.get("year")
        if title and year is not None:
            payload["id"] = ensure_content_id(payload.get("id"), str(title), year)
        return payload

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: object) -> object:
        if isinstance(value, str):
            return normalize_content_type(value)
        return value

    @field_validator("genres", mode="before")
    @classmethod
    def _clean_genres(cls, value: object) -> object:
        if value is None:
            return ()
        if isinstance(value, str):
            raw_values: Iterable[object] = value.split(",")
        elif isinstance(value, Iterable):
            raw_values = value
        else:
            return value

        cleaned: list[str] = []
        for entry in raw_values:
            label = str(entry).strip()
            if label and label not in cleaned:
                cleaned.append(label)
        return tuple(cleaned)

    @field_validator("description", mode="before")
    @classmethod
    def _strip_blank(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip() or None
        return value

    def to_card_payload(self) -> dict[str, object]:
        """Return the JSON object used by content cards."""

        card: dict[str, object] = {
            "id": self.id,
            "title": self.title,
            "type": self.type,
            "genres": list(self.genres),
            "year": self.year,
            "rating": self.rating,
        }
        if self.description:
            card["description"] = self.description
        if self.poster:
            card["poster"] = str(self.poster)
        if self.backdrop:
            card["backdrop"] = str(self.backdrop)
        return card


class FilterState(BaseModel):
    """Active type/genre/year selection; every field defaults to ``all``."""

    model_config = ConfigDict(frozen=True)

    type: str = ALL
    genre: str = ALL
    year: str = ALL

    @field_validator("type", "genre", "year", mode="before")
    @classmethod
    def _blank_means_all(cls, value: object) -> object:
        if value is None:
            return ALL
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str):
            return value.strip() or ALL
        return value

    @field_validator("type")
    @classmethod
    def _canonical_type(cls, value: str) -> str:
        # Unknown labels stay as given and simply match nothing.
        if value == ALL:
            return value
        try:
            return normalize_content_type(value)
        except ValueError:
            return value

    @classmethod
    def from_query(cls, params: Mapping[str, str]) -> "FilterState":
        """Build the state from navigation parameters; year is never carried."""

        return cls(type=params.get("type"), genre=params.get("genre"))

    @property
    def is_active(self) -> bool:
        return self.type != ALL or self.genre != ALL or self.year != ALL

    def with_value(self, field: str, value: str | None) -> "FilterState":
        """Return a copy with one filter field replaced."""

        if field not in FILTER_FIELDS:
            raise ValueError(f"Unknown filter field: {field}")
        return FilterState.model_validate({**self.model_dump(), field: value})

    def sync_from_query(self, params: Mapping[str, str]) -> "FilterState":
        """Apply an external URL change; year falls back to ``all``."""

        return FilterState.from_query(params)


class PaginationState(BaseModel):
    """Current page of the latest-releases lane (1-indexed)."""

    model_config = ConfigDict(frozen=True)

    page: int = Field(default=1, ge=1)


class BrowseState(BaseModel):
    """Filter and pagination state of a single catalog navigation."""

    model_config = ConfigDict(frozen=True)

    filters: FilterState = Field(default_factory=FilterState)
    pagination: PaginationState = Field(default_factory=PaginationState)

    @property
    def page(self) -> int:
        return self.pagination.page

    def with_filters(self, filters: FilterState) -> "BrowseState":
        """Return a new state; pagination restarts when the filters change."""

        if filters == self.filters:
            return self
        return BrowseState(filters=filters, pagination=PaginationState())

    def with_filter(self, field: str, value: str | None) -> "BrowseState":
        return self.with_filters(self.filters.with_value(field, value))

    def with_page(self, page: int) -> "BrowseState":
        return BrowseState(filters=self.filters, pagination=PaginationState(page=page))


class FilterChangeRequest(BaseModel):
    """Payload of a filter selection made in the sidebar."""

    filters: FilterState = Field(default_factory=FilterState)
    page: int = Field(default=1, ge=1)
    field: Literal["type", "genre", "year"]
    value: str | None = None

    def browse_state(self) -> BrowseState:
        return BrowseState(
            filters=self.filters, pagination=PaginationState(page=self.page)
        )


class PageTurnRequest(BaseModel):
    """Payload of a previous/next click in the latest-releases lane."""

    page: int = Field(default=1, ge=1)
    direction: Literal["next", "previous"]


class SearchRequest(BaseModel):
    """Raw text submitted from the search box."""

    query: str | None = Field(
        default=None, validation_alias=AliasChoices("query", "q")
    )
