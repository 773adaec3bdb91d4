"""Tests for the planet catalog service."""

from __future__ import annotations

import asyncio
from decimal import Decimal

import pytest

from planets_service.gateway.events import EventBroker
from planets_service.models import (
    InhabitedDetails,
    MassParts,
    NewPlanetRequest,
    Planet,
    PlanetType,
    UninhabitedDetails,
)
from planets_service.services.planets import PlanetService
from planets_service.utils.errors import InvalidIdentifier, InvalidNumericLiteral


def _request(**overrides) -> NewPlanetRequest:
    payload = {
        "name": "Pluto",
        "planet_type": PlanetType.DWARF_PLANET,
        "mean_radius": Decimal("1188.3"),
        "mass": MassParts(mantissa=1.303, exponent=22),
    }
    payload.update(overrides)
    return NewPlanetRequest(**payload)


@pytest.mark.asyncio
async def test_list_planets_returns_catalog_order(service: PlanetService) -> None:
    planets = await service.list_planets()
    assert [planet.id for planet in planets] == list(range(1, 9))
    assert planets[0] == Planet(id=1, name="Mercury", planet_type=PlanetType.TERRESTRIAL_PLANET)


@pytest.mark.asyncio
async def test_find_planet_translates_wire_identifier(service: PlanetService) -> None:
    earth = await service.find_planet("3")
    assert earth is not None
    assert earth.name == "Earth"
    assert await service.find_planet("999") is None


@pytest.mark.asyncio
async def test_find_planet_rejects_malformed_identifier(service: PlanetService) -> None:
    with pytest.raises(InvalidIdentifier):
        await service.find_planet("third")


@pytest.mark.asyncio
async def test_batch_details_returns_one_entry_per_existing_planet(service: PlanetService) -> None:
    found = await service.batch_details([1, 3, 3, 999])
    assert set(found) == {1, 3}
    assert isinstance(found[3], UninhabitedDetails)
    assert found[3].mass == 5972 * 10**21


@pytest.mark.asyncio
async def test_create_planet_persists_and_publishes(
    service: PlanetService, broker: EventBroker[Planet]
) -> None:
    subscription = broker.subscribe()
    planet = await service.create_planet(_request(population=Decimal("0.000001")))

    assert planet == Planet(id=9, name="Pluto", planet_type=PlanetType.DWARF_PLANET)
    received = await asyncio.wait_for(subscription.__anext__(), timeout=1)
    assert received == planet

    details = (await service.batch_details([planet.id]))[planet.id]
    assert isinstance(details, InhabitedDetails)
    assert details.mass == 1303 * 10**19
    assert details.population == Decimal("0.000001")
    subscription.close()


@pytest.mark.asyncio
async def test_create_planet_rejects_invalid_mass_without_writing(service: PlanetService) -> None:
    with pytest.raises(InvalidNumericLiteral):
        await service.create_planet(_request(mass=MassParts(mantissa=1.0, exponent=300)))
    assert len(await service.list_planets()) == 8


@pytest.mark.asyncio
async def test_create_planet_without_subscribers(service: PlanetService) -> None:
    planet = await service.create_planet(_request(name="Eris"))
    assert (await service.find_planet(planet.id)) == planet
