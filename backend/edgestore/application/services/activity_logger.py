"""Activity logger — append-only audit trail with age-based retention.

Logging is best-effort: every failure is logged and swallowed so that a full
or corrupt activity log can never break the CRUD operation that triggered it.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from edgestore.application.schemas import ActivityLogCreate, ActivityLogEntry
from edgestore.domain.entities import ACTIVITY_LOGS, ActivityAction, EntityType
from edgestore.domain.identifiers import new_record_id, parse_iso, to_iso, utc_now
from edgestore.infrastructure.logging.colored_logger import OperationLogger, OperationStage

from .persistent_store import PersistentStore

logger = logging.getLogger(__name__)
olog = OperationLogger("ActivityLogger")

DEFAULT_USER = "System"


class ActivityLogger:
    """Records who did what to which entity, and sweeps old entries."""

    def __init__(
        self,
        store: PersistentStore,
        *,
        retention_days: int = 30,
        current_user: Callable[[], str | None] | None = None,
        now: Callable[[], datetime] = utc_now,
    ):
        self._store = store
        self._retention_days = retention_days
        self._current_user = current_user
        self._now = now

    def entries(self) -> list[ActivityLogEntry]:
        return self._store.get_collection(ACTIVITY_LOGS.storage_key, ActivityLogEntry)

    def replace(self, entries: list[ActivityLogEntry]) -> None:
        """Persist ``entries`` wholesale and emit the activity-log topic."""
        self._store.set_collection(ACTIVITY_LOGS.storage_key, entries, ACTIVITY_LOGS.topic)

    def add(self, entry: ActivityLogCreate) -> ActivityLogEntry | None:
        """Append ``entry`` with a fresh id and timestamp, then run the retention sweep."""
        try:
            logs = self.entries()
            data = entry.model_dump()
            data["id"] = new_record_id(ACTIVITY_LOGS.id_prefix)
            data["timestamp"] = to_iso(self._now())
            new_entry = ActivityLogEntry.model_validate(data)
            logs.append(new_entry)
            self.replace(logs)
            self.cleanup()
            return new_entry
        except Exception:
            logger.exception("Failed to add activity log")
            return None

    def log(
        self,
        action: ActivityAction,
        entity_type: EntityType,
        entity_id: str,
        entity_name: str,
        details: str | None = None,
    ) -> ActivityLogEntry | None:
        """Record an action by the current user (``"System"`` when unknown)."""
        try:
            return self.add(
                ActivityLogCreate(
                    action=action,
                    entity_type=entity_type,
                    entity_id=entity_id,
                    entity_name=entity_name,
                    user=self._resolve_user(),
                    details=details,
                )
            )
        except Exception:
            logger.exception("Failed to log activity")
            return None

    def cleanup(self, days_to_keep: int | None = None) -> int:
        """Remove entries older than ``days_to_keep`` days. Returns how many were removed.

        Persists and notifies only when at least one entry was removed.
        """
        days = self._retention_days if days_to_keep is None else days_to_keep
        try:
            logs = self.entries()
            cutoff = self._now() - timedelta(days=days)
            kept = [entry for entry in logs if not self._is_expired(entry, cutoff)]
            removed = len(logs) - len(kept)
            if removed:
                self.replace(kept)
                olog.step_complete(
                    OperationStage.RETENTION,
                    f"Removed {removed} activity log entries",
                    days_to_keep=days,
                )
            return removed
        except Exception:
            logger.exception("Failed to cleanup activity logs")
            return 0

    def clear(self) -> int:
        """Remove every entry. Returns how many were removed."""
        try:
            count = len(self.entries())
            self.replace([])
            return count
        except Exception:
            logger.exception("Failed to clear activity logs")
            return 0

    def _resolve_user(self) -> str:
        if self._current_user is None:
            return DEFAULT_USER
        try:
            return self._current_user() or DEFAULT_USER
        except Exception:
            logger.exception("Failed to get current user")
            return DEFAULT_USER

    @staticmethod
    def _is_expired(entry: ActivityLogEntry, cutoff: datetime) -> bool:
        timestamp = parse_iso(entry.timestamp)
        # Entries with unreadable timestamps are kept rather than silently dropped
        return timestamp is not None and timestamp < cutoff
