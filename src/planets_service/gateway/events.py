"""In-process publish/subscribe broker for newly created planets.

Key Responsibilities:
    - Fan out each published event to every currently registered subscriber
    - Bound every subscriber queue and drop events for subscribers that fall
      behind instead of stalling the publisher
    - End all live streams when the process shuts down

Collaborators:
    - Upstream: ``PlanetService.create_planet`` publishes; the GraphQL
      ``latestPlanet`` subscription consumes
    - Downstream: ``asyncio`` queues owned by each subscription

Side Effects:
    - Updates broker Prometheus metrics

Thread Safety:
    - The subscriber registry is guarded by a mutex. ``publish`` feeds
      ``asyncio`` queues and must be called from the event loop thread.

Delivery:
    - Best effort, at most once per subscriber per event, no replay: a
      subscription only sees events published after it was registered.
"""

from __future__ import annotations

import asyncio
import threading
from types import TracebackType
from typing import Generic, TypeVar

import structlog

from ..observability.metrics import (
    BROKER_EVENTS_DROPPED,
    BROKER_EVENTS_PUBLISHED,
    BROKER_SUBSCRIBERS,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")

_CLOSED = object()


class BrokerClosedError(RuntimeError):
    """Raised when subscribing to a broker that has been shut down."""


class Subscription(Generic[T]):
    """An independent, infinite stream of events for one subscriber.

    Iteration only ends after the subscription is closed, either by the
    subscriber or by broker shutdown; events already queued at that point are
    still delivered first.
    """

    def __init__(self, broker: EventBroker[T], maxsize: int) -> None:
        self._broker = broker
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize=maxsize + 1)
        self._maxsize = maxsize
        self._closed = False
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def offer(self, event: T) -> bool:
        """Queue ``event`` without blocking; ``False`` if closed or dropped for a full queue."""
        if self._closed:
            return False
        if self._queue.qsize() >= self._maxsize:
            self.dropped += 1
            return False
        self._queue.put_nowait(event)
        return True

    def _terminate(self) -> None:
        if self._closed:
            return
        self._closed = True
        # one slot above maxsize is reserved for the sentinel
        self._queue.put_nowait(_CLOSED)

    def close(self) -> None:
        """Unregister from the broker and end the stream once drained."""
        self._broker.unsubscribe(self)
        self._terminate()

    def __aiter__(self) -> Subscription[T]:
        return self

    async def __anext__(self) -> T:
        item = await self._queue.get()
        if item is _CLOSED:
            # keep later __anext__ calls from blocking forever
            self._queue.put_nowait(_CLOSED)
            raise StopAsyncIteration
        return item  # type: ignore[return-value]

    async def __aenter__(self) -> Subscription[T]:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class EventBroker(Generic[T]):
    """Process-wide broadcast channel.

    Created once at application start and closed at shutdown; request
    contexts receive it by reference.
    """

    def __init__(self, *, queue_size: int = 64) -> None:
        if queue_size < 1:
            raise ValueError("queue_size must be at least 1")
        self._queue_size = queue_size
        self._subscriptions: list[Subscription[T]] = []
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def subscribe(self) -> Subscription[T]:
        """Register a new subscriber; it receives every event published from now on."""
        subscription: Subscription[T] = Subscription(self, self._queue_size)
        with self._lock:
            if self._closed:
                raise BrokerClosedError("event broker is closed")
            self._subscriptions.append(subscription)
            count = len(self._subscriptions)
        BROKER_SUBSCRIBERS.set(count)
        logger.debug("broker.subscribed", subscribers=count)
        return subscription

    def unsubscribe(self, subscription: Subscription[T]) -> None:
        with self._lock:
            try:
                self._subscriptions.remove(subscription)
            except ValueError:
                return
            count = len(self._subscriptions)
        BROKER_SUBSCRIBERS.set(count)
        logger.debug("broker.unsubscribed", subscribers=count)

    def publish(self, event: T) -> int:
        """Offer ``event`` to every current subscriber; return how many accepted it."""
        with self._lock:
            targets = list(self._subscriptions)
        BROKER_EVENTS_PUBLISHED.inc()
        delivered = 0
        for subscription in targets:
            if subscription.offer(event):
                delivered += 1
                continue
            if subscription.closed:
                # closed between the snapshot above and this offer
                continue
            BROKER_EVENTS_DROPPED.inc()
            logger.warning("broker.event.dropped", queue_size=self._queue_size)
        return delivered

    async def close(self) -> None:
        """End every live stream; further subscriptions are refused."""
        with self._lock:
            self._closed = True
            targets = list(self._subscriptions)
            self._subscriptions.clear()
        for subscription in targets:
            subscription._terminate()
        BROKER_SUBSCRIBERS.set(0)
        logger.info("broker.closed", subscribers=len(targets))


__all__ = ["BrokerClosedError", "EventBroker", "Subscription"]
