"""Derivation pipeline turning a content collection into catalog slices."""

from __future__ import annotations

import math
from collections import Counter, OrderedDict
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from ..models import BrowseState, ContentItem, FilterState
from ..sections import (
    ALL,
    EMPTY_RESULTS_HINT,
    EMPTY_RESULTS_MESSAGE,
    HERO_SIZE,
    LATEST_PAGE_SIZE,
    POPULAR_SIZE,
    RESULTS_PLACEHOLDER_COUNT,
    SECTIONS,
    TYPE_OPTIONS,
    TypeOption,
)


@dataclass(frozen=True, slots=True)
class GenreCount:
    """Number of catalog items tagged with a genre."""

    name: str
    count: int


@dataclass(slots=True)
class Facets:
    """Filterable dimensions computed over the unfiltered collection."""

    genres: list[GenreCount] = field(default_factory=list)
    years: list[str] = field(default_factory=list)
    types: tuple[TypeOption, ...] = TYPE_OPTIONS

    def to_payload(self) -> dict[str, Any]:
        return {
            "types": [
                {"value": option.value, "label": option.label}
                for option in self.types
            ],
            "genres": [
                {"name": entry.name, "count": entry.count} for entry in self.genres
            ],
            "years": list(self.years),
        }


@dataclass(slots=True)
class LatestPage:
    """One page of the recency-sorted lane."""

    items: list[ContentItem]
    page: int
    total_pages: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    def to_payload(self) -> dict[str, Any]:
        return {
            "items": [item.to_card_payload() for item in self.items],
            "page": self.page,
            "totalPages": self.total_pages,
            "hasPrevious": self.has_previous,
            "hasNext": self.has_next,
        }


@dataclass(slots=True)
class CatalogView:
    """Display-ready slices for one browse state."""

    filters: FilterState
    loading: bool = False
    facets: Facets = field(default_factory=Facets)
    hero: list[ContentItem] = field(default_factory=list)
    popular: list[ContentItem] = field(default_factory=list)
    latest: LatestPage = field(
        default_factory=lambda: LatestPage(items=[], page=1, total_pages=0)
    )
    results: list[ContentItem] = field(default_factory=list)

    @classmethod
    def placeholder(cls, filters: FilterState) -> "CatalogView":
        """Return the view rendered while the collection is still loading."""

        return cls(filters=filters, loading=True)

    @property
    def is_filtering(self) -> bool:
        return is_filtering(self.filters)

    @property
    def is_empty(self) -> bool:
        return self.is_filtering and not self.loading and not self.results

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "loading": self.loading,
            "filters": self.filters.model_dump(),
            "isFiltering": self.is_filtering,
            "activeFilters": active_filter_labels(self.filters),
            "facets": self.facets.to_payload(),
            "sections": [
                {"key": section.key, "title": section.title, "size": section.size}
                for section in SECTIONS
            ],
            "hero": [item.to_card_payload() for item in self.hero],
            "popular": [item.to_card_payload() for item in self.popular],
            "latest": self.latest.to_payload(),
            "results": [item.to_card_payload() for item in self.results],
            "emptyMessage": None,
        }
        if self.is_empty:
            payload["emptyMessage"] = {
                "message": EMPTY_RESULTS_MESSAGE,
                "hint": EMPTY_RESULTS_HINT,
            }
        if self.loading:
            payload["placeholders"] = {
                "hero": 1,
                "section": LATEST_PAGE_SIZE,
                "results": RESULTS_PLACEHOLDER_COUNT,
            }
        return payload


def count_genres(content: Sequence[ContentItem]) -> list[GenreCount]:
    """Return genre occurrence counts, most frequent first.

    Genres with equal counts keep the order in which they were first seen.
    """

    counts = Counter(genre for item in content for genre in item.genres)
    return [GenreCount(name=name, count=count) for name, count in counts.most_common()]


def collect_years(content: Sequence[ContentItem]) -> list[str]:
    """Return ``all`` followed by the distinct release years, newest first."""

    if not content:
        return []
    unique_years = sorted({item.year for item in content}, reverse=True)
    return [ALL, *(str(year) for year in unique_years)]


def build_facets(content: Sequence[ContentItem]) -> Facets:
    return Facets(genres=count_genres(content), years=collect_years(content))


def matches_filters(item: ContentItem, filters: FilterState) -> bool:
    type_match = filters.type == ALL or item.type.lower() == filters.type.lower()
    genre_match = filters.genre == ALL or filters.genre in item.genres
    year_match = filters.year == ALL or str(item.year) == filters.year
    return type_match and genre_match and year_match


def filter_content(
    content: Iterable[ContentItem], filters: FilterState
) -> list[ContentItem]:
    """Return the items satisfying every active filter, in collection order."""

    return [item for item in content if matches_filters(item, filters)]


def is_filtering(filters: FilterState) -> bool:
    return filters.is_active


def active_filter_labels(filters: FilterState) -> list[str]:
    """Return the selected values in type, genre, year order."""

    return [
        value
        for value in (filters.type, filters.genre, filters.year)
        if value != ALL
    ]


def rank_by_rating(content: Iterable[ContentItem]) -> list[ContentItem]:
    # sorted() is stable with reverse=True, so equal ratings keep input order.
    return sorted(content, key=lambda item: item.rating, reverse=True)


def select_hero(
    content: Iterable[ContentItem], limit: int = HERO_SIZE
) -> list[ContentItem]:
    return rank_by_rating(content)[:limit]


def select_popular(
    content: Iterable[ContentItem], limit: int = POPULAR_SIZE
) -> list[ContentItem]:
    return rank_by_rating(content)[:limit]


def sort_latest(content: Iterable[ContentItem]) -> list[ContentItem]:
    return sorted(content, key=lambda item: item.year, reverse=True)


def total_pages(count: int, page_size: int = LATEST_PAGE_SIZE) -> int:
    if count <= 0:
        return 0
    return math.ceil(count / page_size)


def clamp_page(page: int, pages: int) -> int:
    """Return ``page`` pulled back into ``[1, pages]`` (1 when there are none)."""

    if pages <= 0:
        return 1
    return max(1, min(page, pages))


def paginate(
    items: Sequence[ContentItem], page: int, page_size: int = LATEST_PAGE_SIZE
) -> list[ContentItem]:
    """Slice one page out of ``items``; pages outside the range are empty.

    The page is not clamped here, callers do that before asking for a page.
    """

    if page < 1:
        return []
    start = (page - 1) * page_size
    return list(items[start : start + page_size])


def latest_page(
    content: Iterable[ContentItem],
    page: int,
    page_size: int = LATEST_PAGE_SIZE,
) -> LatestPage:
    ordered = sort_latest(content)
    return LatestPage(
        items=paginate(ordered, page, page_size),
        page=page,
        total_pages=total_pages(len(ordered), page_size),
    )


class CatalogEngine:
    """Memoizing front for the derivation functions over one collection.

    Collection-wide derivations are computed on first use and kept for the
    lifetime of the engine; filtered subsets are cached per filter state.
    """

    def __init__(
        self,
        content: Iterable[ContentItem],
        *,
        page_size: int = LATEST_PAGE_SIZE,
        filter_cache_size: int = 32,
    ):
        self._content: tuple[ContentItem, ...] = tuple(content)
        self._page_size = page_size
        self._filter_cache_size = filter_cache_size
        self._facets: Facets | None = None
        self._ranked: list[ContentItem] | None = None
        self._latest: list[ContentItem] | None = None
        self._filtered: OrderedDict[FilterState, list[ContentItem]] = OrderedDict()

    @property
    def content(self) -> tuple[ContentItem, ...]:
        return self._content

    @property
    def page_size(self) -> int:
        return self._page_size

    def facets(self) -> Facets:
        if self._facets is None:
            self._facets = build_facets(self._content)
        return self._facets

    def _ranking(self) -> list[ContentItem]:
        if self._ranked is None:
            self._ranked = rank_by_rating(self._content)
        return self._ranked

    def hero(self) -> list[ContentItem]:
        return self._ranking()[:HERO_SIZE]

    def popular(self) -> list[ContentItem]:
        return self._ranking()[:POPULAR_SIZE]

    def _latest_sorted(self) -> list[ContentItem]:
        if self._latest is None:
            self._latest = sort_latest(self._content)
        return self._latest

    def total_latest_pages(self) -> int:
        return total_pages(len(self._content), self._page_size)

    def latest_page(self, page: int) -> LatestPage:
        return LatestPage(
            items=paginate(self._latest_sorted(), page, self._page_size),
            page=page,
            total_pages=self.total_latest_pages(),
        )

    def filtered(self, filters: FilterState) -> list[ContentItem]:
        cached = self._filtered.get(filters)
        if cached is not None:
            self._filtered.move_to_end(filters)
            return list(cached)
        result = filter_content(self._content, filters)
        self._filtered[filters] = result
        if len(self._filtered) > self._filter_cache_size:
            self._filtered.popitem(last=False)
        return list(result)

    def view(self, state: BrowseState) -> CatalogView:
        """Derive every slice for ``state``; the page is used as given."""

        filters = state.filters
        return CatalogView(
            filters=filters,
            facets=self.facets(),
            hero=self.hero(),
            popular=self.popular(),
            latest=self.latest_page(state.page),
            results=self.filtered(filters) if filters.is_active else [],
        )
