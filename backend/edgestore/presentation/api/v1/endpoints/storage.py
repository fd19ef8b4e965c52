"""Storage status, statistics and full reset."""

from fastapi import APIRouter, Depends, status

from edgestore.application.schemas import DataStats, StorageStatus
from edgestore.application.services import SiteDatabase
from edgestore.infrastructure.dependencies import get_database

router = APIRouter(prefix="/storage", tags=["Storage"])


@router.get("", response_model=StorageStatus, response_model_by_alias=True)
async def storage_status(database: SiteDatabase = Depends(get_database)) -> StorageStatus:
    """Estimated usage against the configured quota."""
    return database.storage_status()


@router.get("/stats", response_model=DataStats, response_model_by_alias=True)
async def data_stats(database: SiteDatabase = Depends(get_database)) -> DataStats:
    """Submission totals plus storage usage."""
    return database.submissions.stats()


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_all_data(database: SiteDatabase = Depends(get_database)) -> None:
    """Remove every collection, the site settings and any legacy keys."""
    database.clear_all()
