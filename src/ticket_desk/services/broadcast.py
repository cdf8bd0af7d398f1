"""In-process pub/sub fan-out from ticket calls to display screens.

The hub lives entirely on the event loop and never touches storage. Each
subscriber owns a bounded queue; a subscriber that falls behind loses its
oldest pending messages instead of slowing publishers down.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import uuid
from collections.abc import AsyncIterator
from typing import Final

from ticket_desk.core.settings import settings

logger = logging.getLogger(__name__)

_CLOSED: Final = object()


class Subscription:
    """A receiver registered with the hub under an opaque id.

    Iterate it to receive messages; leaving ``async with`` or calling
    :meth:`close` unregisters it.
    """

    def __init__(
        self, hub: BroadcastHub, subscription_id: str, queue: asyncio.Queue[object]
    ) -> None:
        self.id = subscription_id
        self._hub = hub
        self._queue = queue
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def deliver(self, message: str) -> bool:
        """Queue ``message``; returns True when an older message was dropped."""
        return _offer(self._queue, message)

    @property
    def pending(self) -> int:
        """Number of messages waiting to be consumed."""
        return self._queue.qsize()

    async def get(self) -> str:
        """Wait for the next message; raises StopAsyncIteration once closed."""
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return str(item)

    def close(self) -> None:
        """Unregister from the hub and wake any pending reader."""
        if self._closed:
            return
        self._closed = True
        self._hub.unsubscribe(self.id)
        _offer(self._queue, _CLOSED)

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> str:
        return await self.get()

    async def __aenter__(self) -> Subscription:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()


def _offer(queue: asyncio.Queue[object], item: object) -> bool:
    """Enqueue without blocking, evicting the oldest item when full.

    Returns True when an older item had to be dropped.
    """
    try:
        queue.put_nowait(item)
        return False
    except asyncio.QueueFull:
        with contextlib.suppress(asyncio.QueueEmpty):
            queue.get_nowait()
        queue.put_nowait(item)
        return True


class BroadcastHub:
    """Registry of subscriber queues keyed by subscription id."""

    def __init__(self, queue_size: int | None = None) -> None:
        self._queue_size = max(1, queue_size or settings.subscriber_queue_size)
        self._subscribers: dict[str, Subscription] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> Subscription:
        """Register a new receiver; it only sees messages published from now on."""
        subscription_id = uuid.uuid4().hex
        queue: asyncio.Queue[object] = asyncio.Queue(maxsize=self._queue_size)
        subscription = Subscription(self, subscription_id, queue)
        self._subscribers[subscription_id] = subscription
        logger.debug("Subscriber %s registered (%d total)", subscription_id, self.subscriber_count)
        return subscription

    def unsubscribe(self, subscription_id: str) -> bool:
        """Remove a receiver; unknown or already removed ids are ignored."""
        removed = self._subscribers.pop(subscription_id, None) is not None
        if removed:
            logger.debug(
                "Subscriber %s unregistered (%d left)", subscription_id, self.subscriber_count
            )
        return removed

    def publish(self, message: str) -> int:
        """Deliver ``message`` to every current subscriber without blocking.

        Returns the number of subscribers the message was queued for.
        """
        delivered = 0
        for subscription in list(self._subscribers.values()):
            if subscription.deliver(message):
                logger.debug("Subscriber %s is lagging; dropped oldest message", subscription.id)
            delivered += 1
        return delivered

    def close_all(self) -> None:
        """Terminate every open subscription (used on shutdown)."""
        for subscription in list(self._subscribers.values()):
            subscription.close()


async def event_stream(
    hub: BroadcastHub, connected_message: str | None = None
) -> AsyncIterator[str]:
    """Yield the acknowledgement then every published message until cancelled.

    Registration happens on first iteration and is released in ``finally``,
    which also runs when the peer disconnects and the generator is closed.
    """
    subscription = hub.subscribe()
    try:
        yield connected_message if connected_message is not None else settings.connected_message
        async for message in subscription:
            yield message
    finally:
        subscription.close()


class HeartbeatPublisher:
    """Single shared task publishing a keep-alive message at a fixed interval."""

    def __init__(
        self,
        hub: BroadcastHub,
        interval: float | None = None,
        message: str | None = None,
    ) -> None:
        self.hub = hub
        if interval is None:
            interval = settings.heartbeat_interval_seconds
        self.interval = max(0.01, float(interval))
        self.message = message if message is not None else settings.heartbeat_message
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background heartbeat loop."""
        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background heartbeat loop."""
        if self._task is None:
            return

        self._stopping.set()
        await self._task
        self._task = None

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval)
            except TimeoutError:
                pass
            else:
                return

            if self.hub.publish(self.message) == 0:
                logger.debug("Heartbeat skipped (no listeners)")


class _HubSingleton:
    """Singleton wrapper for BroadcastHub."""

    _instance: BroadcastHub | None = None

    @classmethod
    def get_instance(cls) -> BroadcastHub:
        if cls._instance is None:
            cls._instance = BroadcastHub()
        return cls._instance


def get_broadcast_hub() -> BroadcastHub:
    """Return the process-wide broadcast hub."""
    return _HubSingleton.get_instance()
