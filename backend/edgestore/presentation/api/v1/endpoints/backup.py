"""Backup endpoints — download a snapshot, validate a file, restore it."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status

from edgestore.application.schemas import ImportStrategy
from edgestore.application.services import SiteDatabase
from edgestore.domain.exceptions import InvalidBackupError
from edgestore.infrastructure.dependencies import get_database

router = APIRouter(prefix="/backup", tags=["Backup"])


@router.get("/export")
async def export_backup(
    description: str | None = None,
    database: SiteDatabase = Depends(get_database),
) -> Response:
    """Download every collection as a timestamped JSON attachment."""
    content = database.backup.export_json(description)
    filename = database.backup.backup_filename()
    return Response(
        content=content,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/validate")
async def validate_backup(
    data: Any = Body(...),
    database: SiteDatabase = Depends(get_database),
) -> dict[str, Any]:
    """Check a backup file without applying it."""
    return database.backup.validate(data).to_document()


@router.post("/import")
async def import_backup(
    data: Any = Body(...),
    strategy: ImportStrategy = ImportStrategy.REPLACE,
    database: SiteDatabase = Depends(get_database),
) -> dict[str, Any]:
    """Validate, then restore with the ``replace`` or ``merge`` strategy."""
    result = database.backup.validate(data)
    if not result.is_valid:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"errors": result.errors, "warnings": result.warnings},
        )
    try:
        database.backup.import_snapshot(data, strategy)
    except InvalidBackupError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return {
        "status": "imported",
        "strategy": strategy.value,
        "warnings": result.warnings,
        "recordCounts": result.metadata.record_counts if result.metadata else {},
    }
