"""
In-process notification bus.

Topics are plain strings. Publishing delivers a payload to every subscriber
registered on the topic at that moment; nothing is retained for late
subscribers.

Usage:
    bus = NotificationBus()

    subscription = bus.subscribe("photo-added")
    await bus.publish("photo-added", {"name": "sunset"})

    async for payload in subscription:
        ...

    subscription.cancel()
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Set

logger = logging.getLogger(__name__)

PHOTO_ADDED = "photo-added"

_CLOSED = object()


class Subscription:
    """
    Cancellable, possibly infinite stream of payloads from one topic.

    Registered on the bus as soon as it is created. Once cancelled it stops
    yielding and cannot be restarted.
    """

    def __init__(self, bus: "NotificationBus", topic: str):
        self.bus = bus
        self.topic = topic
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def pending(self) -> int:
        """Number of delivered payloads not yet consumed."""
        return self._queue.qsize()

    def deliver(self, payload: Any) -> bool:
        """Queue a payload; returns False if already cancelled."""
        if self._cancelled:
            return False
        self._queue.put_nowait(payload)
        return True

    def cancel(self) -> None:
        """Stop delivery, wake any waiting consumer and leave the topic."""
        if self._cancelled:
            return
        self._cancelled = True
        self.bus._unregister(self)
        # Drop undelivered payloads, then wake a pending __anext__
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(_CLOSED)

    async def aclose(self) -> None:
        self.cancel()

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> Any:
        if self._cancelled and self._queue.empty():
            raise StopAsyncIteration
        payload = await self._queue.get()
        if payload is _CLOSED:
            raise StopAsyncIteration
        return payload


class NotificationBus:
    """
    Topic-keyed publish/subscribe registry owned by the gateway.

    The subscriber set of a topic is copied before delivery, so subscribing
    or cancelling during a publish never invalidates the iteration.
    """

    def __init__(self) -> None:
        self._topics: Dict[str, Set[Subscription]] = {}

    def subscribe(self, topic: str) -> Subscription:
        subscription = Subscription(self, topic)
        self._topics.setdefault(topic, set()).add(subscription)
        logger.debug(f"Subscribed to {topic} (total: {self.subscriber_count(topic)})")
        return subscription

    async def publish(self, topic: str, payload: Any) -> int:
        """
        Publish payload to current subscribers of topic.

        Returns:
            Number of subscribers that received the payload
        """
        subscribers = list(self._topics.get(topic, ()))
        if not subscribers:
            logger.debug(f"No subscribers on {topic}, skipping publish")
            return 0

        delivered = sum(1 for subscription in subscribers if subscription.deliver(payload))
        logger.debug(f"Published to {topic}: {delivered} subscribers received")
        return delivered

    def subscriber_count(self, topic: Optional[str] = None) -> int:
        if topic is not None:
            return len(self._topics.get(topic, ()))
        return sum(len(subs) for subs in self._topics.values())

    def _unregister(self, subscription: Subscription) -> None:
        subscribers = self._topics.get(subscription.topic)
        if subscribers is None:
            return
        subscribers.discard(subscription)
        if not subscribers:
            del self._topics[subscription.topic]
        logger.debug(f"Unsubscribed from {subscription.topic}")

    def close(self) -> None:
        """Cancel every open subscription."""
        for subscribers in list(self._topics.values()):
            for subscription in list(subscribers):
                subscription.cancel()
