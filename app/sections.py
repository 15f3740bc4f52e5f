"""Fixed section and facet definitions for the catalog page."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


ContentType = Literal["movie", "anime", "webseries"]

ALL = "all"

HERO_SIZE = 5
POPULAR_SIZE = 8
LATEST_PAGE_SIZE = 8
RESULTS_PLACEHOLDER_COUNT = 12


@dataclass(frozen=True)
class SectionDefinition:
    """Describes a ranked or paginated lane shown on the catalog page."""

    key: str
    title: str
    size: int


@dataclass(frozen=True)
class TypeOption:
    """A selectable entry of the type facet."""

    value: str
    label: str


HERO_SECTION = SectionDefinition(key="hero", title="Featured", size=HERO_SIZE)
POPULAR_SECTION = SectionDefinition(
    key="popular", title="Most Popular", size=POPULAR_SIZE
)
LATEST_SECTION = SectionDefinition(
    key="latest", title="Latest Releases", size=LATEST_PAGE_SIZE
)

SECTIONS: tuple[SectionDefinition, ...] = (
    HERO_SECTION,
    POPULAR_SECTION,
    LATEST_SECTION,
)

TYPE_OPTIONS: tuple[TypeOption, ...] = (
    TypeOption(value=ALL, label="All Types"),
    TypeOption(value="movie", label="Movies"),
    TypeOption(value="anime", label="Anime"),
    TypeOption(value="webseries", label="Webseries"),
)

# Spellings seen in content feeds for the canonical type values.
CONTENT_TYPE_ALIASES: dict[str, str] = {
    "movie": "movie",
    "movies": "movie",
    "film": "movie",
    "anime": "anime",
    "webseries": "webseries",
    "web-series": "webseries",
    "web series": "webseries",
    "web_series": "webseries",
}

EMPTY_RESULTS_MESSAGE = "No results found."
EMPTY_RESULTS_HINT = "Try adjusting your filters or clearing them."
