"""Cross-instance sync — re-emit local topics for keys changed elsewhere."""

import logging
from collections.abc import Callable

from edgestore.application.interfaces import StorageChangeSource
from edgestore.domain.entities import (
    ALL_COLLECTIONS,
    SETTINGS_STORAGE_KEY,
    Topic,
    collection_for_key,
)

from .notification_bus import NotificationBus
from .size_estimator import StorageSizeEstimator

logger = logging.getLogger(__name__)


def topic_for_key(key: str) -> Topic | None:
    """Topic announced when ``key`` changes, or None for keys we do not own."""
    if key == SETTINGS_STORAGE_KEY:
        return Topic.SETTINGS
    spec = collection_for_key(key)
    return spec.topic if spec else None


class StorageSync:
    """Bridges a host change source to the local notification bus."""

    def __init__(
        self,
        source: StorageChangeSource,
        bus: NotificationBus,
        estimator: StorageSizeEstimator | None = None,
    ):
        self._source = source
        self._bus = bus
        self._estimator = estimator
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def source(self) -> StorageChangeSource:
        return self._source

    @property
    def running(self) -> bool:
        return self._unsubscribe is not None

    def start(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._source.subscribe(self._on_change)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_change(self, key: str | None) -> None:
        if self._estimator is not None:
            self._estimator.invalidate()

        if key is None:
            # Whole area cleared elsewhere
            for spec in ALL_COLLECTIONS:
                self._bus.emit(spec.topic)
            self._bus.emit(Topic.SETTINGS)
            return

        topic = topic_for_key(key)
        if topic is None:
            logger.debug("Ignoring external change to unrelated key %s", key)
            return
        logger.debug("External change to %s, emitting %s", key, topic.value)
        self._bus.emit(topic)
