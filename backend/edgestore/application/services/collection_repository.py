"""Collection repository — CRUD over one persisted collection.

Every mutation replaces the whole collection through the persistent store
(which emits the collection's topic) and then records an activity-log entry.
"""

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

from edgestore.application.schemas import PatchModel, RecordModel, apply_patch
from edgestore.domain.entities import ActivityAction, CollectionSpec
from edgestore.domain.exceptions import DuplicateEntityError

from .activity_logger import ActivityLogger
from .persistent_store import PersistentStore

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=RecordModel)
P = TypeVar("P", bound=PatchModel)


class CollectionRepository(Generic[R, P]):
    """Identity-keyed CRUD for a single collection. Order is insertion order."""

    def __init__(
        self,
        spec: CollectionSpec,
        model: type[R],
        store: PersistentStore,
        activity: ActivityLogger,
        *,
        describe_create: Callable[[R], str | None] | None = None,
    ):
        self._spec = spec
        self._model = model
        self._store = store
        self._activity = activity
        self._describe_create = describe_create

    @property
    def spec(self) -> CollectionSpec:
        return self._spec

    @property
    def model(self) -> type[R]:
        return self._model

    def all(self) -> list[R]:
        return self._store.get_collection(self._spec.storage_key, self._model)

    def get(self, record_id: str) -> R | None:
        return next((r for r in self.all() if r.id == record_id), None)

    def replace(self, records: list[R]) -> None:
        """Atomically replace the whole collection and notify subscribers."""
        self._store.set_collection(self._spec.storage_key, records, self._spec.topic)

    def add(self, record: R) -> R:
        """Append ``record``. Its id must not already be present."""
        records = self.all()
        if any(r.id == record.id for r in records):
            raise DuplicateEntityError(self._spec.display_name, "id", record.id)
        records.append(record)
        self.replace(records)

        details = self._describe_create(record) if self._describe_create else None
        self._log(ActivityAction.CREATE, record.id, self.label_of(record), details)
        return record

    def update(self, record_id: str, patch: P) -> R | None:
        """Shallow-merge ``patch`` onto the record with ``record_id``.

        Returns the updated record, or None (and changes nothing) when the id
        is unknown.
        """
        records = self.all()
        index = self._index_of(records, record_id)
        if index is None:
            logger.debug("update ignored: %s '%s' not found", self._spec.name, record_id)
            return None

        name = self.label_of(records[index])
        records[index] = apply_patch(records[index], patch)
        self.replace(records)
        self._log(
            ActivityAction.UPDATE, record_id, name, f"{self._spec.display_name} updated"
        )
        return records[index]

    def set_active(self, record_id: str, active: bool) -> R | None:
        """Toggle a content record's visibility, logged as activate/deactivate."""
        records = self.all()
        index = self._index_of(records, record_id)
        if index is None:
            return None

        merged = records[index].model_dump()
        merged["active"] = active
        records[index] = self._model.model_validate(merged)
        self.replace(records)
        action = ActivityAction.ACTIVATE if active else ActivityAction.DEACTIVATE
        self._log(action, record_id, self.label_of(records[index]))
        return records[index]

    def delete(self, record_id: str) -> bool:
        """Physically remove the record. Unknown ids are a no-op returning False."""
        records = self.all()
        index = self._index_of(records, record_id)
        if index is None:
            return False

        name = self.label_of(records[index])
        del records[index]
        self.replace(records)
        self._log(ActivityAction.DELETE, record_id, name)
        return True

    def label_of(self, record: R | None) -> str:
        """Human label captured at action time (title, name, author, ...)."""
        if record is not None:
            for field in self._spec.label_fields:
                value = getattr(record, field, None)
                if value:
                    return str(value)
        return self._spec.fallback_label

    def _log(
        self, action: ActivityAction, record_id: str, name: str, details: str | None = None
    ) -> None:
        if self._spec.entity_type is None:
            return
        self._activity.log(action, self._spec.entity_type, record_id, name, details)

    @staticmethod
    def _index_of(records: list[R], record_id: str) -> int | None:
        return next((i for i, r in enumerate(records) if r.id == record_id), None)
