"""Abstract change-notification interface (port) for cross-instance sync."""

from abc import ABC, abstractmethod
from collections.abc import Callable

StorageChangeListener = Callable[[str | None], None]


class StorageChangeSource(ABC):
    """Port — reports keys changed by *other* instances sharing the same storage.

    A ``None`` key means "everything may have changed" (e.g. the area was cleared).
    """

    @abstractmethod
    def subscribe(self, listener: StorageChangeListener) -> Callable[[], None]:
        """Register a listener and return an idempotent unsubscribe callable."""
        ...
