"""Abstract host storage interface (port) — a string key/value area."""

from abc import ABC, abstractmethod


class KeyValueStorage(ABC):
    """Port for the underlying host storage — implemented in the infrastructure layer.

    Values are opaque strings (serialized JSON). Implementations signal a
    capacity refusal by raising ``StorageFullError``; any other exception is
    treated as an unexpected host failure.
    """

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove ``key``. Removing an absent key is a no-op."""
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        """Return every key currently stored."""
        ...
