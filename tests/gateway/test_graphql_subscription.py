"""Tests for the ``latestPlanet`` subscription."""

from __future__ import annotations

import asyncio
import time
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from planets_service.gateway.events import EventBroker
from planets_service.gateway.graphql.context import build_context
from planets_service.gateway.graphql.schema import schema
from planets_service.models import MassParts, NewPlanetRequest, Planet, PlanetType
from planets_service.services.planets import PlanetService

LATEST_PLANET = "subscription { latestPlanet { id name type } }"


def _request(name: str) -> NewPlanetRequest:
    return NewPlanetRequest(
        name=name,
        planet_type=PlanetType.DWARF_PLANET,
        mean_radius=Decimal("1188.3"),
        mass=MassParts(mantissa=1.303, exponent=22),
    )


async def _wait_for_subscribers(broker: EventBroker[Planet], count: int) -> None:
    for _ in range(100):
        if broker.subscriber_count >= count:
            return
        await asyncio.sleep(0.01)
    raise AssertionError("subscription was never registered")


@pytest.mark.asyncio
async def test_subscribers_receive_only_planets_created_after_subscribing(
    service: PlanetService, broker: EventBroker[Planet]
) -> None:
    await service.create_planet(_request("Ceres"))

    stream = await schema.subscribe(LATEST_PLANET, context_value=build_context(service, broker))
    pending = asyncio.ensure_future(stream.__anext__())
    await _wait_for_subscribers(broker, 1)

    await service.create_planet(_request("Pluto"))
    result = await asyncio.wait_for(pending, timeout=2)

    assert result.errors is None
    assert result.data == {"latestPlanet": {"id": "10", "name": "Pluto", "type": "DWARF_PLANET"}}
    await stream.aclose()


@pytest.mark.asyncio
async def test_every_subscriber_sees_the_same_event(
    service: PlanetService, broker: EventBroker[Planet]
) -> None:
    streams = [
        await schema.subscribe(LATEST_PLANET, context_value=build_context(service, broker))
        for _ in range(2)
    ]
    pending = [asyncio.ensure_future(stream.__anext__()) for stream in streams]
    await _wait_for_subscribers(broker, 2)

    await service.create_planet(_request("Eris"))
    results = await asyncio.wait_for(asyncio.gather(*pending), timeout=2)

    assert [result.data["latestPlanet"]["name"] for result in results] == ["Eris", "Eris"]
    for stream in streams:
        await stream.aclose()


@pytest.mark.asyncio
async def test_stream_ends_when_broker_closes(
    service: PlanetService, broker: EventBroker[Planet]
) -> None:
    stream = await schema.subscribe(LATEST_PLANET, context_value=build_context(service, broker))
    pending = asyncio.ensure_future(stream.__anext__())
    await _wait_for_subscribers(broker, 1)

    await broker.close()

    with pytest.raises(StopAsyncIteration):
        await asyncio.wait_for(pending, timeout=2)


def test_websocket_subscription_receives_created_planet(client: TestClient) -> None:
    broker: EventBroker[Planet] = client.app.state.broker
    with client.websocket_connect("/graphql", subprotocols=["graphql-transport-ws"]) as ws:
        ws.send_json({"type": "connection_init"})
        assert ws.receive_json()["type"] == "connection_ack"
        ws.send_json({"id": "1", "type": "subscribe", "payload": {"query": LATEST_PLANET}})

        deadline = time.monotonic() + 5
        while broker.subscriber_count < 1:
            assert time.monotonic() < deadline, "subscription was never registered"
            time.sleep(0.01)

        created = client.post(
            "/graphql",
            json={
                "query": (
                    "mutation { createPlanet(name: \"Pluto\", planetType: DWARF_PLANET, "
                    "details: {meanRadius: \"1188.3\", mass: {mantissa: 1.303, exponent: 22}}) }"
                )
            },
        ).json()
        assert created == {"data": {"createPlanet": "9"}}

        message = ws.receive_json()
        assert message["type"] == "next"
        assert message["id"] == "1"
        assert message["payload"]["data"]["latestPlanet"] == {
            "id": "9",
            "name": "Pluto",
            "type": "DWARF_PLANET",
        }
        ws.send_json({"id": "1", "type": "complete"})
