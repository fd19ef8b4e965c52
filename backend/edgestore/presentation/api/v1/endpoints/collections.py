"""CRUD endpoints for every named collection (services, team, contacts, ...)."""

import json
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import TypeAdapter, ValidationError

from edgestore.application.schemas import RECORD_MODELS
from edgestore.application.services import CollectionRepository, SiteDatabase
from edgestore.domain.entities import CONTENT_COLLECTIONS
from edgestore.domain.exceptions import DuplicateEntityError, EntityNotFoundError
from edgestore.infrastructure.dependencies import get_database

router = APIRouter(prefix="/collections", tags=["Collections"])

_TOGGLEABLE = {spec.name for spec in CONTENT_COLLECTIONS}


def _repository(name: str, database: SiteDatabase) -> CollectionRepository:
    try:
        return database.collection(name)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _unprocessable(exc: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=json.loads(exc.json(include_url=False)),
    )


def _not_found(repository: CollectionRepository, record_id: str) -> HTTPException:
    error = EntityNotFoundError(repository.spec.display_name, record_id)
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))


@router.get("/{name}")
async def list_records(
    name: str,
    database: SiteDatabase = Depends(get_database),
) -> list[dict[str, Any]]:
    """Every record of the collection, in insertion order."""
    repository = _repository(name, database)
    return [record.to_document() for record in repository.all()]


@router.put("/{name}")
async def replace_records(
    name: str,
    records: list[dict[str, Any]] = Body(...),
    database: SiteDatabase = Depends(get_database),
) -> list[dict[str, Any]]:
    """Replace the whole collection."""
    repository = _repository(name, database)
    try:
        parsed = TypeAdapter(list[repository.model]).validate_python(records)
    except ValidationError as e:
        raise _unprocessable(e)
    repository.replace(parsed)
    return [record.to_document() for record in parsed]


@router.post("/{name}", status_code=status.HTTP_201_CREATED)
async def add_record(
    name: str,
    data: dict[str, Any] = Body(...),
    database: SiteDatabase = Depends(get_database),
) -> dict[str, Any]:
    """Append a record. A missing id is generated."""
    repository = _repository(name, database)
    try:
        record = repository.model.model_validate(data)
    except ValidationError as e:
        raise _unprocessable(e)
    try:
        repository.add(record)
    except DuplicateEntityError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return record.to_document()


@router.get("/{name}/{record_id}")
async def get_record(
    name: str,
    record_id: str,
    database: SiteDatabase = Depends(get_database),
) -> dict[str, Any]:
    repository = _repository(name, database)
    record = repository.get(record_id)
    if record is None:
        raise _not_found(repository, record_id)
    return record.to_document()


@router.patch("/{name}/{record_id}")
async def update_record(
    name: str,
    record_id: str,
    data: dict[str, Any] = Body(...),
    database: SiteDatabase = Depends(get_database),
) -> dict[str, Any]:
    """Shallow-merge the given fields onto the record."""
    repository = _repository(name, database)
    _, patch_model = RECORD_MODELS[name]
    try:
        patch = patch_model.model_validate(data)
    except ValidationError as e:
        raise _unprocessable(e)
    record = repository.update(record_id, patch)
    if record is None:
        raise _not_found(repository, record_id)
    return record.to_document()


@router.delete("/{name}/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_record(
    name: str,
    record_id: str,
    database: SiteDatabase = Depends(get_database),
) -> None:
    repository = _repository(name, database)
    if not repository.delete(record_id):
        raise _not_found(repository, record_id)


@router.post("/{name}/{record_id}/activate")
async def activate_record(
    name: str,
    record_id: str,
    database: SiteDatabase = Depends(get_database),
) -> dict[str, Any]:
    return _set_active(name, record_id, True, database)


@router.post("/{name}/{record_id}/deactivate")
async def deactivate_record(
    name: str,
    record_id: str,
    database: SiteDatabase = Depends(get_database),
) -> dict[str, Any]:
    return _set_active(name, record_id, False, database)


def _set_active(name: str, record_id: str, active: bool, database: SiteDatabase) -> dict[str, Any]:
    repository = _repository(name, database)
    if name not in _TOGGLEABLE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Collection '{name}' has no active flag",
        )
    record = repository.set_active(record_id, active)
    if record is None:
        raise _not_found(repository, record_id)
    return record.to_document()
