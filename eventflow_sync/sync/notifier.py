"""
Change notification for synchronized collections.

Live updates from the primary store are not wired in this release: the
default notifier accepts subscriptions and never calls them. Callers
check ``supports_live_updates`` instead of waiting for callbacks.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Unsubscribe = Callable[[], None]
ChangeCallback = Callable[[list[Any]], None]


def _noop() -> None:
    return None


class ChangeNotifier:
    """Fan-out of collection changes to subscribers.

    ``publish`` skips a delivery when the records equal the last ones
    delivered for that collection, so subscribers see each distinct
    state once.
    """

    supports_live_updates: bool = True

    def __init__(self) -> None:
        self._subscribers: dict[str, list[ChangeCallback]] = {}
        self._last_delivered: dict[str, list[Any]] = {}

    def subscribe(self, collection: str, callback: ChangeCallback) -> Unsubscribe:
        """Register a callback for a collection.

        Returns:
            A function that removes the registration; calling it twice is harmless
        """
        callbacks = self._subscribers.setdefault(collection, [])
        callbacks.append(callback)
        logger.debug(f"Subscribed to {collection} ({len(callbacks)} subscribers)")

        def unsubscribe() -> None:
            if callback in callbacks:
                callbacks.remove(callback)
                logger.debug(f"Unsubscribed from {collection}")

        return unsubscribe

    def subscribe_users(self, callback: ChangeCallback) -> Unsubscribe:
        return self.subscribe("users", callback)

    def subscribe_events(self, callback: ChangeCallback) -> Unsubscribe:
        return self.subscribe("events", callback)

    def publish(self, collection: str, records: list[Any]) -> bool:
        """Deliver a collection to its subscribers.

        Returns:
            True if the records were delivered, False if deduplicated or
            nobody is subscribed
        """
        callbacks = self._subscribers.get(collection)
        if not callbacks:
            return False

        if self._last_delivered.get(collection) == records:
            return False

        snapshot = list(records)
        self._last_delivered[collection] = snapshot
        for callback in list(callbacks):
            try:
                callback(list(snapshot))
            except Exception as e:
                logger.error(f"Change callback for {collection} failed: {e}")
        return True


class NoopChangeNotifier(ChangeNotifier):
    """Notifier used while live updates are disabled.

    Subscriptions are not registered and the returned unsubscribe does
    nothing.
    """

    supports_live_updates = False

    def subscribe(self, collection: str, callback: ChangeCallback) -> Unsubscribe:
        logger.debug(f"Live updates disabled; ignoring subscription to {collection}")
        return _noop
