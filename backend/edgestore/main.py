"""FastAPI application factory."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from edgestore.application.services import SiteDatabase
from edgestore.config import get_settings
from edgestore.domain.exceptions import StorageQuotaError
from edgestore.infrastructure.dependencies import build_database
from edgestore.infrastructure.logging.log_config import setup_logging
from edgestore.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


async def _poll_storage_changes(database: SiteDatabase, interval: float) -> None:
    """Surface writes made by other processes sharing the same database."""
    poll = getattr(database.sync.source, "poll_changes", None) if database.sync else None
    if poll is None:
        return
    while True:
        await asyncio.sleep(interval)
        try:
            poll()
        except Exception:
            logger.exception("Storage change poll failed")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — build the store, migrate legacy keys, start sync."""
    settings = get_settings()
    setup_logging()

    database: SiteDatabase | None = getattr(app.state, "database", None)
    if database is None:
        database = build_database(settings)
        app.state.database = database

    report = database.start()
    if report.changed:
        logger.info("Migrated legacy keys: %s", ", ".join(report.migrated))

    poller = asyncio.create_task(
        _poll_storage_changes(database, settings.sync_poll_interval_seconds)
    )

    yield

    # Shutdown
    poller.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await poller
    database.close()


async def _storage_quota_handler(request: Request, exc: StorageQuotaError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_507_INSUFFICIENT_STORAGE,
        content={"detail": str(exc), "quota": exc.info.to_payload()},
    )


def create_app(database: SiteDatabase | None = None) -> FastAPI:
    """Factory function that builds and configures the FastAPI application.

    Passing ``database`` pre-wires the store, which is what the tests do.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )
    if database is not None:
        app.state.database = database

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StorageQuotaError, _storage_quota_handler)

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "edgestore.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
