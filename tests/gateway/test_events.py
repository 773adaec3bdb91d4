"""Tests for the in-process event broker."""

from __future__ import annotations

import asyncio

import pytest
from prometheus_client import REGISTRY

from planets_service.gateway.events import BrokerClosedError, EventBroker


async def _drain(subscription, count: int) -> list[object]:
    return [await asyncio.wait_for(subscription.__anext__(), timeout=1) for _ in range(count)]


@pytest.mark.asyncio
async def test_every_subscriber_receives_each_event() -> None:
    broker: EventBroker[str] = EventBroker()
    first = broker.subscribe()
    second = broker.subscribe()

    assert broker.publish("pluto") == 2
    assert broker.publish("eris") == 2

    assert await _drain(first, 2) == ["pluto", "eris"]
    assert await _drain(second, 2) == ["pluto", "eris"]


@pytest.mark.asyncio
async def test_events_published_before_subscribing_are_not_replayed() -> None:
    broker: EventBroker[str] = EventBroker()
    assert broker.publish("early") == 0

    subscription = broker.subscribe()
    broker.publish("late")
    assert await _drain(subscription, 1) == ["late"]


@pytest.mark.asyncio
async def test_slow_subscriber_drops_overflow_without_blocking_others() -> None:
    broker: EventBroker[int] = EventBroker(queue_size=2)
    slow = broker.subscribe()
    fast = broker.subscribe()

    assert broker.publish(1) == 2
    assert await _drain(fast, 1) == [1]
    assert broker.publish(2) == 2
    assert await _drain(fast, 1) == [2]
    assert broker.publish(3) == 1

    assert slow.dropped == 1
    assert await _drain(fast, 1) == [3]
    assert await _drain(slow, 2) == [1, 2]


@pytest.mark.asyncio
async def test_closed_subscription_is_unregistered_and_ends_iteration() -> None:
    broker: EventBroker[str] = EventBroker()
    async with broker.subscribe() as subscription:
        assert broker.subscriber_count == 1
        broker.publish("pluto")
    assert broker.subscriber_count == 0
    assert subscription.closed

    received = [event async for event in subscription]
    assert received == ["pluto"]
    assert broker.publish("eris") == 0


@pytest.mark.asyncio
async def test_broker_close_ends_all_streams() -> None:
    broker: EventBroker[str] = EventBroker()
    subscription = broker.subscribe()
    broker.publish("last")

    await broker.close()

    assert broker.closed
    assert broker.subscriber_count == 0
    assert [event async for event in subscription] == ["last"]
    # a finished stream stays finished
    with pytest.raises(StopAsyncIteration):
        await subscription.__anext__()
    with pytest.raises(BrokerClosedError):
        broker.subscribe()


@pytest.mark.asyncio
async def test_waiting_subscriber_wakes_on_publish() -> None:
    broker: EventBroker[str] = EventBroker()
    subscription = broker.subscribe()
    pending = asyncio.ensure_future(subscription.__anext__())
    await asyncio.sleep(0)
    assert not pending.done()

    broker.publish("ceres")
    assert await asyncio.wait_for(pending, timeout=1) == "ceres"
    subscription.close()


def test_queue_size_must_be_positive() -> None:
    with pytest.raises(ValueError):
        EventBroker(queue_size=0)


def _dropped_total() -> float:
    return REGISTRY.get_sample_value("planets_broker_events_dropped_total") or 0.0


@pytest.mark.asyncio
async def test_closing_subscription_is_not_counted_as_a_drop() -> None:
    broker: EventBroker[str] = EventBroker(queue_size=1)
    subscription = broker.subscribe()
    # closed but still registered, as when close() races a publish
    subscription._terminate()
    before = _dropped_total()

    assert broker.publish("pluto") == 0
    assert subscription.offer("eris") is False

    assert subscription.dropped == 0
    assert _dropped_total() == before


@pytest.mark.asyncio
async def test_full_queue_is_counted_as_a_drop() -> None:
    broker: EventBroker[str] = EventBroker(queue_size=1)
    subscription = broker.subscribe()
    broker.publish("pluto")
    before = _dropped_total()

    assert broker.publish("eris") == 0

    assert subscription.dropped == 1
    assert _dropped_total() == before + 1
    subscription.close()
