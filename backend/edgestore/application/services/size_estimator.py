"""Byte-size estimator for the whole host storage area."""

import logging
import time
from collections.abc import Callable

from edgestore.application.interfaces import KeyValueStorage

logger = logging.getLogger(__name__)


class StorageSizeEstimator:
    """Estimates persisted footprint as Σ (len(key) + len(value)) × bytes_per_char.

    The full scan is cached for ``cache_seconds`` so repeated quota checks
    during a burst of writes do not rescan every key.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        bytes_per_char: int = 2,
        cache_seconds: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._storage = storage
        self._bytes_per_char = bytes_per_char
        self._cache_seconds = cache_seconds
        self._clock = clock
        self._cached_size = 0
        self._checked_at: float | None = None

    @property
    def bytes_per_char(self) -> int:
        return self._bytes_per_char

    def size_of(self, text: str) -> int:
        """Estimated footprint of a single serialized value."""
        return len(text) * self._bytes_per_char

    def estimate(self, *, fresh: bool = False) -> int:
        """Return the estimated usage in bytes, reusing a recent scan unless ``fresh``."""
        now = self._clock()
        if (
            not fresh
            and self._checked_at is not None
            and now - self._checked_at < self._cache_seconds
        ):
            return self._cached_size

        try:
            total = 0
            for key in self._storage.keys():
                value = self._storage.get_item(key)
                if value:
                    total += (len(key) + len(value)) * self._bytes_per_char
        except Exception:
            logger.exception("Error calculating storage size")
            return 0

        self._cached_size = total
        self._checked_at = now
        return total

    def invalidate(self) -> None:
        """Drop the cached scan so the next estimate rescans."""
        self._checked_at = None
