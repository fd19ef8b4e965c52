"""Notification bus — in-process named-topic publish/subscribe.

Listeners are plain callables taking no arguments; they re-read whatever
collection they care about when notified. Emission order is registration
order. A listener that raises is logged and skipped so the remaining
listeners of the topic are still notified.
"""

import logging
from collections.abc import Callable

from edgestore.domain.entities import Topic

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class NotificationBus:
    """Maps each topic to its ordered list of listeners."""

    def __init__(self) -> None:
        self._listeners: dict[Topic, list[Listener]] = {}

    def subscribe(self, topic: Topic, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for ``topic``. Returns an idempotent unsubscribe."""
        topic = Topic(topic)
        self._listeners.setdefault(topic, []).append(listener)

        subscribed = True

        def unsubscribe() -> None:
            nonlocal subscribed
            if not subscribed:
                return
            subscribed = False
            self._listeners[topic].remove(listener)

        return unsubscribe

    def emit(self, topic: Topic) -> None:
        """Notify every listener of ``topic`` in registration order."""
        topic = Topic(topic)
        # Copy so listeners may unsubscribe while being notified
        for listener in list(self._listeners.get(topic, ())):
            try:
                listener()
            except Exception:
                logger.exception("Listener for topic '%s' raised — continuing", topic.value)

    def listener_count(self, topic: Topic) -> int:
        return len(self._listeners.get(Topic(topic), ()))
