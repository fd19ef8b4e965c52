"""Shared pydantic configuration for persisted documents.

Documents are stored and exported with camelCase keys; Python code uses the
snake_case field names. Unknown keys are preserved so data written by newer
clients survives a read-modify-write cycle.
"""

from typing import Any, TypeVar, get_args

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for every camelCase JSON document."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_document(self) -> dict[str, Any]:
        """Serialize to the persisted (camelCase, JSON-safe) shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class RecordModel(WireModel):
    """A collection record. Always carries a stable string ``id``."""

    id: str


class PatchModel(BaseModel):
    """Typed partial update: every field optional, merged shallowly by id."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    def changes(self) -> dict[str, Any]:
        """Return only the fields the caller explicitly set."""
        return {name: getattr(self, name) for name in self.model_fields_set}


R = TypeVar("R", bound=RecordModel)


def _accepts_none(model: type[RecordModel], name: str) -> bool:
    field = model.model_fields.get(name)
    return field is None or type(None) in get_args(field.annotation)


def apply_patch(record: R, patch: PatchModel) -> R:
    """Shallow-merge ``patch`` onto ``record`` and return a new validated record.

    An explicit ``None`` clears an optional field and is ignored for a field
    the record cannot leave empty (its timestamps and status).
    """
    model = type(record)
    merged = record.model_dump()
    merged.update(
        (name, value)
        for name, value in patch.changes().items()
        if value is not None or _accepts_none(model, name)
    )
    merged["id"] = record.id
    return type(record).model_validate(merged)
