"""Tests for the content data-access collaborators."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx
import pytest
from sqlalchemy import select

from app.database import Database
from app.db_models import ContentRecord
from app.models import ContentItem
from app.services.content_source import (
    DatabaseContentSource,
    RemoteContentSource,
    extract_entries,
    load_seed_file,
    parse_content,
)


SAMPLE_ENTRIES: list[dict[str, Any]] = [
    {
        "id": "m1",
        "title": "Inception",
        "type": "Movie",
        "genre": ["Sci-Fi", "Thriller"],
        "year": 2010,
        "rating": 8.8,
        "poster": "https://example.com/inception.jpg",
    },
    {
        "id": "a1",
        "title": "Cowboy Bebop",
        "type": "anime",
        "genre": ["Sci-Fi"],
        "year": 1998,
        "rating": 8.9,
    },
]


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio without requiring trio."""

    return "asyncio"


def test_extract_entries_accepts_wrapped_documents() -> None:
    assert extract_entries(SAMPLE_ENTRIES) == SAMPLE_ENTRIES
    assert extract_entries({"items": SAMPLE_ENTRIES}) == SAMPLE_ENTRIES
    assert extract_entries({"content": SAMPLE_ENTRIES}) == SAMPLE_ENTRIES
    assert extract_entries({"unexpected": True}) == []
    assert extract_entries("nope") == []


def test_parse_content_skips_malformed_and_duplicates() -> None:
    entries = [
        SAMPLE_ENTRIES[0],
        "not an object",
        {"id": "bad", "title": "Broken", "type": "podcast", "year": 2020},
        {"id": "m1", "title": "Inception again", "type": "movie", "year": 2010},
        SAMPLE_ENTRIES[1],
    ]

    items = parse_content(entries)

    assert [item.id for item in items] == ["m1", "a1"]
    assert items[0].title == "Inception"


def test_load_seed_file(tmp_path) -> None:
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"items": SAMPLE_ENTRIES}), encoding="utf-8")

    items = load_seed_file(path)

    assert [item.title for item in items] == ["Inception", "Cowboy Bebop"]


@pytest.mark.anyio("asyncio")
async def test_remote_source_loads_collection() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"items": SAMPLE_ENTRIES})

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as http_client:
        source = RemoteContentSource(http_client, "https://cdn.example.com/catalog.json")
        items = await source.load()

    assert len(requests) == 1
    assert [item.id for item in items] == ["m1", "a1"]
    assert items[0].type == "movie"


@pytest.mark.anyio("asyncio")
async def test_remote_source_degrades_to_empty_on_http_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"error": "unavailable"})

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as http_client:
        source = RemoteContentSource(http_client, "https://cdn.example.com/catalog.json")
        items = await source.load()

    assert items == []


@pytest.mark.anyio("asyncio")
async def test_remote_source_degrades_to_empty_on_invalid_json() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>oops</html>")

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as http_client:
        source = RemoteContentSource(http_client, "https://cdn.example.com/catalog.json")
        items = await source.load()

    assert items == []


@pytest.mark.anyio("asyncio")
async def test_remote_source_degrades_to_empty_on_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as http_client:
        source = RemoteContentSource(http_client, "https://cdn.example.com/catalog.json")
        items = await source.load()

    assert items == []


def test_database_source_round_trips_order(tmp_path) -> None:
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'content.db'}")
    source = DatabaseContentSource(database.session_factory)
    items = [ContentItem.model_validate(entry) for entry in reversed(SAMPLE_ENTRIES)]

    async def scenario() -> list[ContentItem]:
        await database.create_all()
        try:
            stored = await source.replace_all(items)
            assert stored == 2
            return await source.load()
        finally:
            await database.dispose()

    loaded = asyncio.run(scenario())

    assert loaded == items


def test_database_source_seeds_only_when_empty(tmp_path) -> None:
    seed_path = tmp_path / "seed.json"
    seed_path.write_text(json.dumps(SAMPLE_ENTRIES), encoding="utf-8")
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'content.db'}")
    source = DatabaseContentSource(database.session_factory)

    async def scenario() -> tuple[int, int, int]:
        await database.create_all()
        try:
            first = await source.seed_if_empty(seed_path)
            second = await source.seed_if_empty(seed_path)
            return first, second, await source.count()
        finally:
            await database.dispose()

    assert asyncio.run(scenario()) == (2, 0, 2)


def test_database_source_ignores_missing_seed_file(tmp_path) -> None:
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'content.db'}")
    source = DatabaseContentSource(database.session_factory)

    async def scenario() -> int:
        await database.create_all()
        try:
            return await source.seed_if_empty(tmp_path / "missing.json")
        finally:
            await database.dispose()

    assert asyncio.run(scenario()) == 0


def test_database_source_without_tables_returns_empty(tmp_path) -> None:
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'content.db'}")
    source = DatabaseContentSource(database.session_factory)

    async def scenario() -> list[ContentItem]:
        try:
            return await source.load()
        finally:
            await database.dispose()

    assert asyncio.run(scenario()) == []


def test_seed_file_skips_non_finite_ratings(tmp_path) -> None:
    path = tmp_path / "catalog.json"
    path.write_text(
        '[{"id": "n1", "title": "Broken Score", "type": "movie", "year": 2019, "rating": NaN},'
        ' {"id": "n2", "title": "Fine Score", "type": "movie", "year": 2019, "rating": 7.5}]',
        encoding="utf-8",
    )

    items = load_seed_file(path)

    assert [item.id for item in items] == ["n2"]


def test_stored_records_get_timestamps(tmp_path) -> None:
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'content.db'}")
    source = DatabaseContentSource(database.session_factory)
    items = [ContentItem.model_validate(entry) for entry in SAMPLE_ENTRIES]

    async def scenario() -> list[ContentRecord]:
        await database.create_all()
        try:
            await source.replace_all(items)
            async with database.session_factory() as session:
                result = await session.execute(select(ContentRecord))
                return list(result.scalars().all())
        finally:
            await database.dispose()

    records = asyncio.run(scenario())

    assert len(records) == 2
    assert all(record.created_at is not None for record in records)
    assert all(record.updated_at is not None for record in records)
