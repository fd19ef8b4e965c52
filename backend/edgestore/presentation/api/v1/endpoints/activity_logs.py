"""Activity log endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, Query

from edgestore.application.services import SiteDatabase
from edgestore.domain.entities import ActivityAction, EntityType
from edgestore.infrastructure.dependencies import get_database

router = APIRouter(prefix="/activity-logs", tags=["Activity Logs"])


@router.get("")
async def list_activity_logs(
    action: ActivityAction | None = None,
    entity_type: EntityType | None = Query(None, alias="entityType"),
    limit: int = Query(100, ge=1, le=1000),
    database: SiteDatabase = Depends(get_database),
) -> list[dict[str, Any]]:
    """Newest entries first, optionally filtered by action and entity type."""
    entries = database.activity.entries()
    if action is not None:
        entries = [e for e in entries if e.action == action]
    if entity_type is not None:
        entries = [e for e in entries if e.entity_type == entity_type]
    return [entry.to_document() for entry in reversed(entries)][:limit]


@router.post("/cleanup")
async def cleanup_activity_logs(
    days: int | None = Query(None, ge=0),
    database: SiteDatabase = Depends(get_database),
) -> dict[str, int]:
    """Drop entries older than ``days`` (default: the configured retention)."""
    return {"removed": database.activity.cleanup(days)}


@router.delete("")
async def clear_activity_logs(
    database: SiteDatabase = Depends(get_database),
) -> dict[str, int]:
    return {"removed": database.activity.clear()}
