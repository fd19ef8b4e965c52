"""Eviction policy — frees capacity by discarding the oldest visitor submissions.

Only the submission collections (contacts, newsletter subscribers, job
applications) are ever touched; content and user collections are never
evicted. Each collection is trimmed independently and saved with its own
error handling so one failing save does not block the others.
"""

import json
import logging
import math
from datetime import datetime, timezone
from typing import Any

from pydantic.alias_generators import to_camel

from edgestore.application.interfaces import KeyValueStorage
from edgestore.domain.entities import SUBMISSION_COLLECTIONS, CollectionSpec, EvictionReport
from edgestore.domain.identifiers import parse_iso
from edgestore.infrastructure.logging.colored_logger import OperationLogger, OperationStage

from .notification_bus import NotificationBus
from .size_estimator import StorageSizeEstimator

logger = logging.getLogger(__name__)
olog = OperationLogger("EvictionPolicy")

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class EvictionPolicy:
    """Removes the oldest ``fraction`` of each submission collection on demand."""

    def __init__(
        self,
        storage: KeyValueStorage,
        bus: NotificationBus,
        estimator: StorageSizeEstimator,
        *,
        fraction: float = 0.2,
        success_ratio: float = 0.5,
        collections: tuple[CollectionSpec, ...] = SUBMISSION_COLLECTIONS,
    ):
        self._storage = storage
        self._bus = bus
        self._estimator = estimator
        self._fraction = fraction
        self._success_ratio = success_ratio
        self._collections = collections

    def evict(self, bytes_needed: int) -> EvictionReport:
        """Trim every submission collection and report how much was freed.

        The report is successful when the freed bytes reach ``success_ratio``
        of ``bytes_needed``; an insufficient eviction is still reported, never
        retried here.
        """
        report = EvictionReport(bytes_needed=bytes_needed, success_ratio=self._success_ratio)
        olog.step_start(OperationStage.EVICTION, "Attempting to free space", needed=bytes_needed)

        size_before = self._estimator.estimate(fresh=True)

        for spec in self._collections:
            documents = self._read_documents(spec)
            if documents is None:
                report.failed.append(spec.name)
                continue

            to_remove = math.ceil(len(documents) * self._fraction)
            report.removed[spec.name] = to_remove
            if to_remove == 0:
                continue

            kept = self._oldest_first(documents, spec)[to_remove:]
            try:
                self._storage.set_item(spec.storage_key, json.dumps(kept, ensure_ascii=False))
            except Exception as exc:
                olog.step_error(OperationStage.EVICTION, f"Failed to save trimmed {spec.name}", error=exc)
                report.failed.append(spec.name)
                report.removed[spec.name] = 0
                continue

            olog.detail(f"{spec.name}: removed {to_remove} of {len(documents)}")
            self._bus.emit(spec.topic)

        size_after = self._estimator.estimate(fresh=True)
        report.bytes_freed = max(size_before - size_after, 0)

        if report.success:
            olog.step_complete(
                OperationStage.EVICTION,
                f"Freed {report.bytes_freed} bytes",
                needed=bytes_needed,
                removed=report.total_removed,
            )
        else:
            olog.step_warning(
                OperationStage.EVICTION,
                f"Freed only {report.bytes_freed} bytes",
                needed=bytes_needed,
                removed=report.total_removed,
            )
        return report

    def _read_documents(self, spec: CollectionSpec) -> list[dict[str, Any]] | None:
        try:
            raw = self._storage.get_item(spec.storage_key)
            if not raw:
                return []
            documents = json.loads(raw)
        except Exception as exc:
            logger.error("Cannot read %s for eviction: %s", spec.storage_key, exc)
            return None
        if not isinstance(documents, list):
            logger.error("Cannot evict from %s: stored value is not a list", spec.storage_key)
            return None
        return documents

    @staticmethod
    def _oldest_first(documents: list[Any], spec: CollectionSpec) -> list[Any]:
        field = to_camel(spec.timestamp_field or "")

        def sort_key(document: Any) -> datetime:
            if not isinstance(document, dict):
                return _OLDEST
            return parse_iso(document.get(field)) or _OLDEST

        return sorted(documents, key=sort_key)
