"""Site settings document (free-form key/value configuration)."""

from typing import Any

from fastapi import APIRouter, Body, Depends

from edgestore.application.services import SiteDatabase
from edgestore.infrastructure.dependencies import get_database

router = APIRouter(prefix="/site-settings", tags=["Site Settings"])


@router.get("")
async def get_site_settings(database: SiteDatabase = Depends(get_database)) -> dict[str, Any]:
    return database.get_site_settings()


@router.patch("")
async def update_site_settings(
    patch: dict[str, Any] = Body(...),
    database: SiteDatabase = Depends(get_database),
) -> dict[str, Any]:
    """Shallow-merge the given keys into the settings document."""
    return database.update_site_settings(patch)
