"""Dependency wiring — builds the shared SiteDatabase and exposes it to FastAPI."""

import logging

from fastapi import Request

from edgestore.application.services import SiteDatabase
from edgestore.config import Settings, get_settings
from edgestore.infrastructure.database import (
    create_session_factory,
    create_storage_engine,
    init_schema,
)
from edgestore.infrastructure.database.repositories import SQLAlchemyKeyValueStorage
from edgestore.infrastructure.storage import InMemoryKeyValueStorage, SharedMemoryArea

logger = logging.getLogger(__name__)


def build_storage(settings: Settings) -> SQLAlchemyKeyValueStorage | InMemoryKeyValueStorage:
    """Create the host storage selected by ``settings.storage_backend``.

    Both adapters refuse writes at ``quota_bytes`` so the estimated quota and
    the host's own ceiling agree.
    """
    backend = settings.storage_backend.lower()
    if backend == "memory":
        area = SharedMemoryArea(
            capacity_bytes=settings.quota_bytes, bytes_per_char=settings.bytes_per_char
        )
        return area.attach()
    if backend != "sqlite":
        logger.warning("Unknown storage_backend '%s', using sqlite", settings.storage_backend)

    engine = create_storage_engine(settings.database_url, echo=False)
    init_schema(engine)
    return SQLAlchemyKeyValueStorage(
        create_session_factory(engine),
        capacity_bytes=settings.quota_bytes,
        bytes_per_char=settings.bytes_per_char,
    )


def build_database(settings: Settings | None = None) -> SiteDatabase:
    """Construct the one SiteDatabase for this process (not started yet)."""
    settings = settings or get_settings()
    storage = build_storage(settings)
    return SiteDatabase(storage, change_source=storage, settings=settings)


def get_database(request: Request) -> SiteDatabase:
    """FastAPI dependency: the SiteDatabase created during application startup."""
    return request.app.state.database
