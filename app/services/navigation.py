"""State transitions and outbound URLs for catalog navigation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

from ..models import BrowseState, FilterState, PaginationState
from ..sections import ALL
from ..utils import encode_uri_component

logger = logging.getLogger(__name__)

HOME_PATH = "/"
SEARCH_PATH = "/search"


@dataclass(slots=True)
class NavigationResult:
    """New browse state plus the URL the client should navigate to."""

    state: BrowseState
    redirect: str | None

    def to_payload(self) -> dict[str, Any]:
        return {
            "filters": self.state.filters.model_dump(),
            "page": self.state.page,
            "redirect": self.redirect,
        }


def build_filter_url(filters: FilterState) -> str:
    """Return the home URL carrying the type and genre selections.

    Year stays out of the URL and resets to ``all`` on the next sync.
    """

    params: dict[str, str] = {}
    if filters.type != ALL:
        params["type"] = filters.type
    if filters.genre != ALL:
        params["genre"] = filters.genre
    query = urlencode(params)
    return f"{HOME_PATH}?{query}" if query else HOME_PATH


def change_filter(
    state: BrowseState, field: str, value: str | None
) -> NavigationResult:
    """Apply a filter selection and return where the client should go."""

    new_state = state.with_filter(field, value)
    return NavigationResult(
        state=new_state, redirect=build_filter_url(new_state.filters)
    )


def clear_filters() -> NavigationResult:
    return NavigationResult(state=BrowseState(), redirect=HOME_PATH)


def sync_from_url(state: BrowseState, params: dict[str, str]) -> BrowseState:
    """Sync type/genre from an external URL change into ``state``."""

    return state.with_filters(state.filters.sync_from_query(params))


def go_to_page(
    pagination: PaginationState, page: int, pages: int
) -> PaginationState:
    """Move to ``page`` if it exists, otherwise keep the current page."""

    if page < 1 or page > pages:
        logger.debug("Ignoring navigation to page %s of %s", page, pages)
        return pagination
    return PaginationState(page=page)


def next_page(pagination: PaginationState, pages: int) -> PaginationState:
    return go_to_page(pagination, pagination.page + 1, pages)


def previous_page(pagination: PaginationState, pages: int) -> PaginationState:
    return go_to_page(pagination, pagination.page - 1, pages)


def normalize_query(raw: str | None) -> str | None:
    """Trim a search input; whitespace-only input counts as no query."""

    if raw is None:
        return None
    trimmed = raw.strip()
    return trimmed or None


def build_search_url(raw: str | None) -> str | None:
    """Return the search page URL, or ``None`` when nothing should happen."""

    query = normalize_query(raw)
    if query is None:
        return None
    return f"{SEARCH_PATH}?q={encode_uri_component(query)}"
