"""Entry point for the FastAPI-powered catalog service."""

from __future__ import annotations

import json
import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, Mapping

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from .config import Settings, settings
from .database import Database
from .models import (
    BrowseState,
    FilterChangeRequest,
    FilterState,
    PageTurnRequest,
    PaginationState,
    SearchRequest,
)
from .services.catalog_service import CatalogService
from .services.content_source import (
    ContentSource,
    DatabaseContentSource,
    RemoteContentSource,
)
from .services.navigation import build_search_url, change_filter, clear_filters

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app: FastAPI


async def build_content_source(
    config: Settings, exit_stack: AsyncExitStack
) -> tuple[ContentSource, Database | None]:
    """Return the configured content source and the database it owns, if any."""

    if config.uses_remote_content:
        http_client = await exit_stack.enter_async_context(
            httpx.AsyncClient(
                timeout=httpx.Timeout(config.content_request_timeout, connect=5.0)
            )
        )
        return RemoteContentSource(http_client, str(config.content_source_url)), None

    database = Database(config.database_url)
    await database.create_all()
    database_source = DatabaseContentSource(database.session_factory)
    if config.content_seed_file is not None:
        await database_source.seed_if_empty(config.content_seed_file)
    return database_source, database


@asynccontextmanager
async def lifespan(_: FastAPI):
    exit_stack = AsyncExitStack()
    source, database = await build_content_source(settings, exit_stack)

    catalog_service = CatalogService(source)
    app.state.catalog_service = catalog_service
    await catalog_service.start()

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await catalog_service.stop()
        if database is not None:
            await database.dispose()
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Browsable movie, anime and web series catalog",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_catalog_service(app: FastAPI) -> CatalogService:
    service = getattr(app.state, "catalog_service", None)
    if not isinstance(service, CatalogService):
        raise RuntimeError("Catalog service not initialised")
    return service


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/api/catalog")
    async def catalog_view(request: Request) -> JSONResponse:
        service = get_catalog_service(fastapi_app)
        params = request.query_params
        try:
            page = _coerce_page(params.get("page"))
            filters = FilterState(
                type=params.get("type"),
                genre=params.get("genre"),
                year=params.get("year"),
            )
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail=_errors(exc)) from exc
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        state = BrowseState(filters=filters, pagination=PaginationState(page=page))
        return JSONResponse(service.view(state).to_payload())

    @fastapi_app.post("/api/filters")
    async def filter_change(request: Request) -> JSONResponse:
        payload = await _parse_body(request, FilterChangeRequest)
        result = change_filter(payload.browse_state(), payload.field, payload.value)
        return JSONResponse(result.to_payload())

    @fastapi_app.post("/api/filters/clear")
    async def filter_clear() -> JSONResponse:
        return JSONResponse(clear_filters().to_payload())

    @fastapi_app.post("/api/latest/page")
    async def latest_page_turn(request: Request) -> JSONResponse:
        service = get_catalog_service(fastapi_app)
        payload = await _parse_body(request, PageTurnRequest)
        pagination = service.turn_page(
            PaginationState(page=payload.page), payload.direction
        )
        return JSONResponse(
            {
                "page": pagination.page,
                "totalPages": service.total_latest_pages(),
            }
        )

    @fastapi_app.post("/api/search")
    async def search_submit(request: Request) -> JSONResponse:
        payload = await _parse_body(request, SearchRequest)
        return JSONResponse({"redirect": build_search_url(payload.query)})


async def _parse_body(request: Request, model: type[BaseModel]) -> Any:
    try:
        payload = await request.json()
    except json.JSONDecodeError:
        payload = {}
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid payload")
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=_errors(exc)) from exc


def _coerce_page(value: str | None) -> int:
    if value is None or not value.strip():
        return 1
    try:
        page = int(value)
    except ValueError as exc:
        raise ValueError("Page must be an integer") from exc
    if page < 1:
        raise ValueError("Page must be at least 1")
    return page


def _errors(exc: ValidationError) -> list[Mapping[str, Any]]:
    return exc.errors(include_url=False, include_context=False)


app = create_app()


if __name__ == "__main__":  # pragma: no cover - manual execution
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "development",
    )
