"""Runtime coordination of the one-shot content load and derived views."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress

from ..models import BrowseState, PaginationState
from .catalog import CatalogEngine, CatalogView, clamp_page
from .content_source import ContentSource
from .navigation import next_page, previous_page

logger = logging.getLogger(__name__)


class CatalogService:
    """Loads the collection once and serves catalog views from it."""

    def __init__(self, source: ContentSource):
        self._source = source
        self._engine: CatalogEngine | None = None
        self._load_task: asyncio.Task[None] | None = None

    @property
    def is_loading(self) -> bool:
        return self._engine is None

    async def start(self) -> None:
        """Schedule the content load without waiting for it."""

        if self._load_task is None:
            self._load_task = asyncio.create_task(self._load())

    async def stop(self) -> None:
        """Cancel a load that is still pending."""

        if self._load_task is None:
            return
        if not self._load_task.done():
            self._load_task.cancel()
            with suppress(asyncio.CancelledError):
                await self._load_task
        self._load_task = None

    async def wait_until_loaded(self) -> None:
        await self.start()
        if self._load_task is not None:
            await asyncio.shield(self._load_task)

    async def _load(self) -> None:
        try:
            items = await self._source.load()
        except Exception as exc:  # pragma: no cover - background safety net
            logger.exception("Content load failed: %s", exc)
            items = []
        self._engine = CatalogEngine(items)
        logger.info("Catalog ready with %s items", len(items))

    def total_latest_pages(self) -> int:
        if self._engine is None:
            return 0
        return self._engine.total_latest_pages()

    def view(self, state: BrowseState) -> CatalogView:
        """Return the slices for ``state``, or placeholders while loading."""

        if self._engine is None:
            return CatalogView.placeholder(state.filters)
        page = clamp_page(state.page, self._engine.total_latest_pages())
        if page != state.page:
            state = state.with_page(page)
        return self._engine.view(state)

    def turn_page(self, pagination: PaginationState, direction: str) -> PaginationState:
        """Step the latest-releases lane forward or back; edges are no-ops."""

        pages = self.total_latest_pages()
        if direction == "next":
            return next_page(pagination, pages)
        if direction == "previous":
            return previous_page(pagination, pages)
        raise ValueError(f"Unknown page direction: {direction}")
