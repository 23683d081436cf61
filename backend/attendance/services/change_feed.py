"""In-process change feed: per-table, per-event notifications for live views.

Subscribers are asyncio consumers (WebSocket handlers); publishers are the
service functions, which usually run in Starlette's worker threads. Delivery
therefore goes through ``loop.call_soon_threadsafe`` on the subscriber's loop.
Messages carry no row data: receivers re-fetch, so duplicate or reordered
notifications are harmless.
"""
import asyncio
import logging
import threading
from collections import defaultdict
from typing import Any, Iterable

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"


class Subscription:
    """A single consumer's queue, bound to the event loop that created it."""

    def __init__(self, feed: "ChangeFeed", keys: list[tuple[str, str]], loop: asyncio.AbstractEventLoop):
        self._feed = feed
        self.keys = keys
        self.loop = loop
        self.queue: asyncio.Queue = asyncio.Queue()

    async def get(self) -> dict[str, Any]:
        return await self.queue.get()

    def deliver(self, message: dict[str, Any]) -> None:
        self.loop.call_soon_threadsafe(self.queue.put_nowait, message)

    def close(self) -> None:
        self._feed.unsubscribe(self)


class ChangeFeed:
    """Fan-out of change notifications keyed by (table, event_id)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: dict[tuple[str, str], set[Subscription]] = defaultdict(set)

    def subscribe(self, tables: Iterable[str], event_id: str) -> Subscription:
        """Register a consumer; must be called from within a running event loop."""
        loop = asyncio.get_running_loop()
        keys = [(table, event_id) for table in tables]
        subscription = Subscription(self, keys, loop)
        with self._lock:
            for key in keys:
                self._subscribers[key].add(subscription)
        logger.debug("Subscribed to %s", keys)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            for key in subscription.keys:
                subscribers = self._subscribers.get(key)
                if subscribers is None:
                    continue
                subscribers.discard(subscription)
                if not subscribers:
                    del self._subscribers[key]

    def publish(self, table: str, event_id: str, action: str) -> int:
        """Notify subscribers of a change; returns how many were reached."""
        message = {"table": table, "event_id": event_id, "type": action}
        with self._lock:
            targets = list(self._subscribers.get((table, event_id), ()))

        delivered = 0
        for subscription in targets:
            try:
                subscription.deliver(message)
            except RuntimeError:
                # Subscriber's loop has shut down without unsubscribing
                logger.debug("Dropping subscriber on closed loop for %s/%s", table, event_id)
                self.unsubscribe(subscription)
                continue
            delivered += 1
        return delivered

    def subscriber_count(self, table: str, event_id: str) -> int:
        with self._lock:
            return len(self._subscribers.get((table, event_id), ()))


feed = ChangeFeed()
