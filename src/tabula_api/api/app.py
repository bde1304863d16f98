"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

import tabula_api.extraction.pymupdf  # noqa: F401  registers the default backend
from tabula_api.api.routes import router
from tabula_api.config import Settings, get_settings
from tabula_api.core.exceptions import (
    ExtractorError,
    InvalidMediaError,
    NotFoundError,
    StorageError,
    TabulaError,
)
from tabula_api.core.registry import ExtractorRegistry
from tabula_api.extraction.orchestrator import TableExtractionService
from tabula_api.storage.database import create_db_engine, create_session_factory
from tabula_api.storage.store import DocumentStore
from tabula_api.utils.logging import get_logger

LOGGER = get_logger(__name__)

_STATUS_CODES: dict[type[TabulaError], int] = {
    NotFoundError: 404,
    InvalidMediaError: 415,
    ExtractorError: 422,
    StorageError: 500,
}


async def _handle_tabula_error(request: Request, exc: TabulaError) -> JSONResponse:
    code = next(
        (code for cls, code in _STATUS_CODES.items() if isinstance(exc, cls)),
        500,
    )
    if code >= 500:
        LOGGER.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc.original_error)
    else:
        LOGGER.info(f"{request.method} {request.url.path} -> {code}: {exc}")
    return JSONResponse(status_code=code, content={"detail": str(exc)})


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application with its store, backend and extraction service."""
    settings = settings or get_settings()
    settings.storage_dir.mkdir(parents=True, exist_ok=True)

    extractor = ExtractorRegistry.get(settings.extractor)()
    engine = create_db_engine(settings.resolved_database_url, echo=settings.database_echo)
    store = DocumentStore(create_session_factory(engine), settings.storage_dir, extractor)

    app = FastAPI(title=settings.app_name, version=settings.app_version)
    app.state.settings = settings
    app.state.store = store
    app.state.extraction_service = TableExtractionService(
        store, extractor, max_workers=settings.max_workers
    )
    app.add_exception_handler(TabulaError, _handle_tabula_error)
    app.include_router(router, prefix=settings.api_prefix)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    LOGGER.info(f"Using extractor '{settings.extractor}', storage at {settings.storage_dir}")
    return app
