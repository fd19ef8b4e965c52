"""Pydantic documents for the activity log (audit trail)."""

from typing import Any

from pydantic import Field

from edgestore.domain.entities import ActivityAction, EntityType
from edgestore.domain.identifiers import new_record_id, to_iso, utc_now

from .base import RecordModel, WireModel


class ActivityLogCreate(WireModel):
    """Entry as supplied by a caller; id and timestamp are assigned on append."""

    action: ActivityAction
    entity_type: EntityType
    entity_id: str
    entity_name: str
    user: str = "System"
    details: str | None = None
    metadata: dict[str, Any] | None = None


class ActivityLogEntry(RecordModel):
    """Immutable once written; removed only by the retention sweep or a clear."""

    id: str = Field(default_factory=lambda: new_record_id("log"))
    action: ActivityAction
    entity_type: EntityType
    entity_id: str
    entity_name: str
    user: str = "System"
    timestamp: str = Field(default_factory=lambda: to_iso(utc_now()))
    details: str | None = None
    metadata: dict[str, Any] | None = None
