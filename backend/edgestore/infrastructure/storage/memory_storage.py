"""In-process host storage — several instances attached to one shared area.

Each ``InMemoryKeyValueStorage`` plays the part of one browser tab: it reads
and writes the shared area directly, and is told (through its change
listeners) about keys written by the *other* instances, never its own.
"""

import logging
from collections.abc import Callable

from edgestore.application.interfaces import (
    KeyValueStorage,
    StorageChangeListener,
    StorageChangeSource,
)
from edgestore.domain.exceptions import StorageFullError

logger = logging.getLogger(__name__)


class SharedMemoryArea:
    """The shared key/value area, with an optional byte capacity."""

    def __init__(self, *, capacity_bytes: int | None = None, bytes_per_char: int = 2):
        self.capacity_bytes = capacity_bytes
        self.bytes_per_char = bytes_per_char
        self._data: dict[str, str] = {}
        self._instances: list["InMemoryKeyValueStorage"] = []

    def attach(self) -> "InMemoryKeyValueStorage":
        """Create a new instance (tab) over this area."""
        return InMemoryKeyValueStorage(self)

    def usage_bytes(self) -> int:
        return sum(self._footprint(key, value) for key, value in self._data.items())

    def clear(self) -> None:
        """Wipe the area, as a user clearing site data would."""
        self._data.clear()
        self._broadcast(None, origin=None)

    # Instance-facing helpers

    def _register(self, instance: "InMemoryKeyValueStorage") -> None:
        self._instances.append(instance)

    def _footprint(self, key: str, value: str) -> int:
        return (len(key) + len(value)) * self.bytes_per_char

    def _store(self, key: str, value: str, origin: "InMemoryKeyValueStorage") -> None:
        if self.capacity_bytes is not None:
            previous = self._data.get(key)
            projected = self.usage_bytes() + self._footprint(key, value)
            if previous is not None:
                projected -= self._footprint(key, previous)
            if projected > self.capacity_bytes:
                raise StorageFullError(key, self._footprint(key, value), self.capacity_bytes)
        self._data[key] = value
        self._broadcast(key, origin)

    def _delete(self, key: str, origin: "InMemoryKeyValueStorage") -> None:
        if self._data.pop(key, None) is not None:
            self._broadcast(key, origin)

    def _broadcast(self, key: str | None, origin: "InMemoryKeyValueStorage | None") -> None:
        for instance in list(self._instances):
            if instance is not origin:
                instance._notify(key)


class InMemoryKeyValueStorage(KeyValueStorage, StorageChangeSource):
    """One participant in a ``SharedMemoryArea``.

    Constructed without an area it gets a private one, which is what most
    single-process uses and tests want.
    """

    def __init__(self, area: SharedMemoryArea | None = None):
        self._area = area or SharedMemoryArea()
        self._listeners: list[StorageChangeListener] = []
        self._area._register(self)

    @property
    def area(self) -> SharedMemoryArea:
        return self._area

    # ── KeyValueStorage ─────────────────────────────────────────────

    def get_item(self, key: str) -> str | None:
        return self._area._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._area._store(key, value, origin=self)

    def remove_item(self, key: str) -> None:
        self._area._delete(key, origin=self)

    def keys(self) -> list[str]:
        return list(self._area._data)

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

    def _notify(self, key: str | None) -> None:
        for listener in list(self._listeners):
            try:
                listener(key)
            except Exception:
                logger.exception("Storage change listener raised for key %s", key)
