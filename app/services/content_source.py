"""Data-access collaborators supplying the content collection."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Protocol

import httpx
from pydantic import ValidationError
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db_models import ContentRecord
from ..models import ContentItem

logger = logging.getLogger(__name__)


class ContentSource(Protocol):
    """Anything able to load the full collection once."""

    async def load(self) -> list[ContentItem]:
        ...


def extract_entries(payload: Any) -> list[Any]:
    """Return the raw entry list of a content document."""

    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("items", "content", "results"):
            entries = payload.get(key)
            if isinstance(entries, list):
                return entries
    return []


def parse_content(entries: Iterable[Any]) -> list[ContentItem]:
    """Validate raw entries, skipping malformed ones and duplicate ids."""

    items: list[ContentItem] = []
    seen_ids: set[str] = set()
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            logger.warning("Skipping content entry %s: not an object", index)
            continue
        try:
            item = ContentItem.model_validate(entry)
        except ValidationError as exc:
            logger.warning(
                "Skipping content entry %s: %s error(s)", index, exc.error_count()
            )
            continue
        if item.id in seen_ids:
            logger.warning("Skipping duplicate content id %s", item.id)
            continue
        seen_ids.add(item.id)
        items.append(item)
    return items


def load_seed_file(path: Path) -> list[ContentItem]:
    """Read a JSON content document from disk."""

    with path.open(encoding="utf-8") as handle:
        payload = json.load(handle)
    return parse_content(extract_entries(payload))


class RemoteContentSource:
    """Fetches the collection from a JSON endpoint."""

    def __init__(self, http_client: httpx.AsyncClient, url: str):
        self._client = http_client
        self._url = url

    async def load(self) -> list[ContentItem]:
        try:
            response = await self._client.get(self._url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            logger.warning("Failed to fetch content from %s: %s", self._url, exc)
            return []
        except ValueError as exc:
            logger.warning("Content at %s is not valid JSON: %s", self._url, exc)
            return []

        items = parse_content(extract_entries(payload))
        logger.info("Loaded %s content items from %s", len(items), self._url)
        return items


class DatabaseContentSource:
    """Reads and stores the collection through SQLAlchemy."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def load(self) -> list[ContentItem]:
        try:
            async with self._session_factory() as session:
                stmt = select(ContentRecord).order_by(
                    ContentRecord.position, ContentRecord.created_at
                )
                result = await session.execute(stmt)
                records = list(result.scalars().all())
        except SQLAlchemyError as exc:
            logger.warning("Failed to load content from the database: %s", exc)
            return []

        items = parse_content(self._record_to_payload(record) for record in records)
        logger.info("Loaded %s content items from the database", len(items))
        return items

    async def count(self) -> int:
        async with self._session_factory() as session:
            result = await session.execute(select(func.count(ContentRecord.id)))
            return int(result.scalar_one())

    async def replace_all(self, items: Iterable[ContentItem]) -> int:
        """Replace the stored collection, keeping the given order."""

        records = [
            self._item_to_record(item, position)
            for position, item in enumerate(items)
        ]
        async with self._session_factory() as session:
            async with session.begin():
                await session.execute(delete(ContentRecord))
                session.add_all(records)
        return len(records)

    async def seed_if_empty(self, path: Path) -> int:
        """Load ``path`` into the database unless content already exists."""

        if await self.count():
            return 0
        try:
            items = load_seed_file(path)
        except (OSError, ValueError) as exc:
            logger.warning("Unable to read content seed file %s: %s", path, exc)
            return 0
        stored = await self.replace_all(items)
        logger.info("Seeded %s content items from %s", stored, path)
        return stored

    @staticmethod
    def _item_to_record(item: ContentItem, position: int) -> ContentRecord:
        return ContentRecord(
            id=item.id,
            position=position,
            title=item.title,
            content_type=item.type,
            genres=list(item.genres),
            year=item.year,
            rating=item.rating,
            description=item.description,
            poster=str(item.poster) if item.poster else None,
            backdrop=str(item.backdrop) if item.backdrop else None,
        )

    @staticmethod
    def _record_to_payload(record: ContentRecord) -> dict[str, Any]:
        return {
            "id": record.id,
            "title": record.title,
            "type": record.content_type,
            "genres": record.genres or [],
            "year": record.year,
            "rating": record.rating,
            "description": record.description,
            "poster": record.poster,
            "backdrop": record.backdrop,
        }
