"""Quota monitor — classifies usage against the configured ceiling."""

import logging
import time
from collections.abc import Callable

from edgestore.domain.entities import QuotaErrorInfo, QuotaState, Topic

from .notification_bus import NotificationBus
from .size_estimator import StorageSizeEstimator

logger = logging.getLogger(__name__)


class QuotaMonitor:
    """Reports usage and emits throttled ``storageWarning`` notifications."""

    def __init__(
        self,
        estimator: StorageSizeEstimator,
        bus: NotificationBus,
        *,
        quota_bytes: int = 5 * 1024 * 1024,
        near_capacity_percentage: float = 80.0,
        warning_cooldown_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._estimator = estimator
        self._bus = bus
        self._quota_bytes = quota_bytes
        self._threshold = near_capacity_percentage
        self._cooldown = warning_cooldown_seconds
        self._clock = clock
        self._last_warning_at: float | None = None

    @property
    def quota_bytes(self) -> int:
        return self._quota_bytes

    def size_of(self, text: str) -> int:
        """Estimated footprint of a pending serialized write."""
        return self._estimator.size_of(text)

    def usage_bytes(self) -> int:
        return self._estimator.estimate()

    def usage_percentage(self) -> float:
        """Usage as a percentage of the ceiling, rounded to 2 decimals."""
        return round(self.usage_bytes() / self._quota_bytes * 100, 2)

    def is_near_capacity(self) -> bool:
        return self.usage_percentage() > self._threshold

    def state(self) -> QuotaState:
        usage = self.usage_bytes()
        percentage = round(usage / self._quota_bytes * 100, 2)
        return QuotaState(
            usage_bytes=usage,
            usage_percentage=percentage,
            near_capacity=percentage > self._threshold,
            quota_bytes=self._quota_bytes,
        )

    def error_info(self) -> QuotaErrorInfo:
        """Fresh usage figures for a quota error report."""
        usage = self._estimator.estimate(fresh=True)
        return QuotaErrorInfo(
            usage_percentage=round(usage / self._quota_bytes * 100, 2),
            usage_bytes=usage,
            quota_bytes=self._quota_bytes,
        )

    def warn_if_near_capacity(self) -> bool:
        """Emit ``storageWarning`` when near capacity, at most once per cooldown.

        Returns True when a warning was emitted.
        """
        now = self._clock()
        if self._last_warning_at is not None and now - self._last_warning_at <= self._cooldown:
            return False
        if not self.is_near_capacity():
            return False

        self._last_warning_at = now
        logger.warning(
            "Storage near capacity: %.2f%% of %d bytes",
            self.usage_percentage(),
            self._quota_bytes,
        )
        self._bus.emit(Topic.STORAGE_WARNING)
        return True
