"""Host storage backed by a SQLAlchemy table — survives restarts, shareable across processes."""

import logging
from collections.abc import Callable

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session, sessionmaker

from edgestore.application.interfaces import (
    KeyValueStorage,
    StorageChangeListener,
    StorageChangeSource,
)
from edgestore.domain.exceptions import StorageFullError
from edgestore.infrastructure.database.models import StorageEntryModel

logger = logging.getLogger(__name__)


class SQLAlchemyKeyValueStorage(KeyValueStorage, StorageChangeSource):
    """Implements the host storage port over the ``storage_entries`` table.

    Capacity is enforced with the same (len(key) + len(value)) × bytes_per_char
    arithmetic the quota monitor uses, so "full" means the same thing on both
    sides. Changes made by other processes are discovered by ``poll_changes``.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        capacity_bytes: int | None = None,
        bytes_per_char: int = 2,
    ):
        self._session_factory = session_factory
        self._capacity_bytes = capacity_bytes
        self._bytes_per_char = bytes_per_char
        self._listeners: list[StorageChangeListener] = []
        self._seen_versions: dict[str, int] = self._load_versions()

    # ── KeyValueStorage ─────────────────────────────────────────────

    def get_item(self, key: str) -> str | None:
        with self._session_factory() as session:
            entry = session.get(StorageEntryModel, key)
            return entry.value if entry else None

    def set_item(self, key: str, value: str) -> None:
        with self._session_factory() as session:
            if self._capacity_bytes is not None:
                self._check_capacity(session, key, value)

            entry = session.get(StorageEntryModel, key)
            if entry is None:
                entry = StorageEntryModel(key=key, value=value, version=1)
                session.add(entry)
            else:
                entry.value = value
                entry.version += 1
            session.commit()
            self._seen_versions[key] = entry.version

    def remove_item(self, key: str) -> None:
        with self._session_factory() as session:
            session.execute(delete(StorageEntryModel).where(StorageEntryModel.key == key))
            session.commit()
        self._seen_versions.pop(key, None)

    def keys(self) -> list[str]:
        with self._session_factory() as session:
            return list(session.scalars(select(StorageEntryModel.key)).all())

    # ── StorageChangeSource ─────────────────────────────────────────

    def subscribe(self, listener: StorageChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        subscribed = True

        def unsubscribe() -> None:
            nonlocal subscribed
            if subscribed:
                subscribed = False
                self._listeners.remove(listener)

        return unsubscribe

    def poll_changes(self) -> list[str]:
        """Notify listeners of keys written or removed by someone else since the last poll."""
        current = self._load_versions()
        changed = [
            key for key, version in current.items() if self._seen_versions.get(key) != version
        ]
        changed.extend(key for key in self._seen_versions if key not in current)
        self._seen_versions = current

        for key in changed:
            for listener in list(self._listeners):
                try:
                    listener(key)
                except Exception:
                    logger.exception("Storage change listener raised for key %s", key)
        if changed:
            logger.debug("Detected %d externally changed keys", len(changed))
        return changed

    # ── Helpers ─────────────────────────────────────────────────────

    def _load_versions(self) -> dict[str, int]:
        with self._session_factory() as session:
            rows = session.execute(select(StorageEntryModel.key, StorageEntryModel.version))
            return {key: version for key, version in rows}

    def _check_capacity(self, session: Session, key: str, value: str) -> None:
        others = session.scalar(
            select(
                func.coalesce(
                    func.sum(func.length(StorageEntryModel.key) + func.length(StorageEntryModel.value)),
                    0,
                )
            ).where(StorageEntryModel.key != key)
        )
        required = (len(key) + len(value)) * self._bytes_per_char
        if int(others or 0) * self._bytes_per_char + required > self._capacity_bytes:
            raise StorageFullError(key, required, self._capacity_bytes)
