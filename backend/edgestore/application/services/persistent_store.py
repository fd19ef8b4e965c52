"""Persistent store — typed whole-collection reads and writes over host storage.

Writes go through an explicit result type: ``try_write`` never raises, and
``set_collection`` turns a quota refusal into eviction plus exactly one retry
before surfacing ``StorageQuotaError``.
"""

import json
import logging
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from edgestore.application.interfaces import KeyValueStorage
from edgestore.application.schemas import RecordModel
from edgestore.domain.entities import (
    QuotaErrorInfo,
    Topic,
    WriteFailed,
    WriteOk,
    WriteQuotaExceeded,
    WriteResult,
)
from edgestore.domain.exceptions import StorageFullError, StorageQuotaError

from .eviction_policy import EvictionPolicy
from .notification_bus import NotificationBus
from .quota_monitor import QuotaMonitor

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=RecordModel)
QuotaErrorListener = Callable[[QuotaErrorInfo], None]

_QUOTA_MESSAGE = (
    "Failed to save data even after cleanup. "
    "Please export your data and clear old entries."
)


class PersistentStore:
    """Single shared store instance — construct once and inject everywhere."""

    def __init__(
        self,
        storage: KeyValueStorage,
        bus: NotificationBus,
        quota_monitor: QuotaMonitor,
        eviction_policy: EvictionPolicy,
    ):
        self._storage = storage
        self._bus = bus
        self._quota = quota_monitor
        self._eviction = eviction_policy
        self._adapters: dict[type, TypeAdapter] = {}
        self._quota_error_listeners: list[QuotaErrorListener] = []

    @property
    def storage(self) -> KeyValueStorage:
        return self._storage

    # ── Reads ───────────────────────────────────────────────────────

    def read_raw(self, key: str) -> str | None:
        """The stored string under ``key``, unparsed."""
        return self._storage.get_item(key)

    def get_collection(
        self, key: str, model: type[R], default: list[R] | None = None
    ) -> list[R]:
        """Return the collection under ``key``; never raises on bad stored data."""
        fallback = list(default) if default is not None else []
        try:
            raw = self.read_raw(key)
            if not raw:
                return fallback
            return self._adapter(model).validate_json(raw)
        except ValidationError as exc:
            logger.error("Error reading %s: stored value does not match schema: %s", key, exc)
        except Exception:
            logger.exception("Error reading %s", key)
        return fallback

    def get_document(self, key: str, default: Any = None) -> Any:
        """Return the parsed JSON value under ``key`` (or ``default``)."""
        try:
            raw = self.read_raw(key)
            return json.loads(raw) if raw else default
        except Exception:
            logger.exception("Error reading %s", key)
            return default

    # ── Writes ──────────────────────────────────────────────────────

    def try_write(self, key: str, value: Any) -> WriteResult:
        """Serialize and write ``value`` once. Never raises."""
        try:
            serialized = self._serialize(value)
        except Exception as exc:
            return WriteFailed(key=key, error=exc)

        try:
            self._storage.set_item(key, serialized)
        except StorageFullError as exc:
            return WriteQuotaExceeded(
                key=key,
                bytes_needed=self._quota.size_of(serialized),
                error=exc,
            )
        except Exception as exc:
            return WriteFailed(key=key, error=exc)
        return WriteOk(key=key, size_bytes=len(serialized))

    def write(self, key: str, value: Any) -> None:
        """Write ``value`` with the full quota protocol (warn, evict, retry once)."""
        self._quota.warn_if_near_capacity()

        result = self.try_write(key, value)
        if isinstance(result, WriteQuotaExceeded):
            logger.warning("Storage quota exceeded writing %s, attempting cleanup...", key)
            report = self._eviction.evict(result.bytes_needed)
            result = self.try_write(key, value)
            if isinstance(result, WriteOk):
                logger.info(
                    "Saved %s after cleanup (freed %d bytes)", key, report.bytes_freed
                )
            elif isinstance(result, WriteQuotaExceeded):
                logger.error("Failed to save %s even after cleanup", key)
                info = self._quota.error_info()
                self._notify_quota_error(info)
                raise StorageQuotaError(_QUOTA_MESSAGE, info) from result.error

        if isinstance(result, WriteFailed):
            logger.error("Error writing %s: %s", key, result.error)
            raise result.error

    def set_collection(self, key: str, records: Sequence[RecordModel], topic: Topic) -> None:
        """Replace the whole collection under ``key``, then emit ``topic``."""
        self.write(key, list(records))
        self._bus.emit(topic)

    def remove(self, key: str) -> None:
        self._storage.remove_item(key)

    # ── Out-of-band quota signal ────────────────────────────────────

    def subscribe_quota_errors(self, listener: QuotaErrorListener) -> Callable[[], None]:
        """Register an observer for unrecoverable quota failures (e.g. a UI banner)."""
        self._quota_error_listeners.append(listener)

        subscribed = True

        def unsubscribe() -> None:
            nonlocal subscribed
            if subscribed:
                subscribed = False
                self._quota_error_listeners.remove(listener)

        return unsubscribe

    def _notify_quota_error(self, info: QuotaErrorInfo) -> None:
        for listener in list(self._quota_error_listeners):
            try:
                listener(info)
            except Exception:
                logger.exception("Quota error listener raised")

    # ── Helpers ─────────────────────────────────────────────────────

    def _adapter(self, model: type[R]) -> TypeAdapter:
        adapter = self._adapters.get(model)
        if adapter is None:
            adapter = TypeAdapter(list[model])
            self._adapters[model] = adapter
        return adapter

    @staticmethod
    def _serialize(value: Any) -> str:
        if isinstance(value, list):
            value = [
                item.to_document() if isinstance(item, RecordModel) else item
                for item in value
            ]
        elif isinstance(value, RecordModel):
            value = value.to_document()
        return json.dumps(value, ensure_ascii=False, allow_nan=False)
