"""Planet catalog service.

Translates wire identifiers to storage keys, reads rows through the
persistence gateway, assembles :class:`Planet` values and broadcasts newly
created planets. Blocking gateway calls run in a worker thread so that every
gateway round trip is a suspension point for the calling request.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

import structlog

from ..gateway.events import EventBroker
from ..models import Details, NewPlanetRequest, Planet, PlanetType, details_from_row
from ..storage.repository import NewDetailsRow, NewPlanetRow, PlanetRepository, PlanetRow
from ..utils.identifiers import parse_planet_id
from ..utils.numeric import mass_from_parts

logger = structlog.get_logger(__name__)


def planet_from_row(row: PlanetRow) -> Planet:
    return Planet(id=row.id, name=row.name, planet_type=PlanetType(row.planet_type))


class PlanetService:
    """Entity resolver backing the GraphQL surface."""

    def __init__(self, repository: PlanetRepository, broker: EventBroker[Planet]) -> None:
        self.repository = repository
        self.broker = broker

    async def list_planets(self) -> list[Planet]:
        """Return every planet in the order the gateway yields them."""
        rows = await asyncio.to_thread(self.repository.list_all)
        return [planet_from_row(row) for row in rows]

    async def find_planet(self, raw_id: object) -> Planet | None:
        """Return the planet behind a wire identifier, or ``None`` when it does not exist.

        Raises:
            InvalidIdentifier: If ``raw_id`` is not a valid identifier.
        """
        planet_id = parse_planet_id(raw_id)
        row = await asyncio.to_thread(self.repository.get_by_id, planet_id)
        if row is None:
            logger.debug("planets.not_found", planet_id=planet_id)
            return None
        return planet_from_row(row)

    async def batch_details(self, planet_ids: Iterable[int]) -> dict[int, Details]:
        """Resolve details for a set of planet ids with a single gateway call."""
        rows = await asyncio.to_thread(self.repository.batch_get_details, set(planet_ids))
        return {planet_id: details_from_row(row) for planet_id, row in rows.items()}

    async def create_planet(self, request: NewPlanetRequest) -> Planet:
        """Persist a planet with its details and broadcast it to subscribers."""
        mass = mass_from_parts(request.mass.mantissa, request.mass.exponent)
        row = await asyncio.to_thread(
            self.repository.insert,
            NewPlanetRow(name=request.name, planet_type=request.planet_type.value),
            NewDetailsRow(
                mean_radius=request.mean_radius,
                mass=mass,
                population=request.population,
            ),
        )
        planet = planet_from_row(row)
        delivered = self.broker.publish(planet)
        logger.info(
            "planets.created",
            planet_id=planet.id,
            planet_type=planet.planet_type.value,
            mean_radius=request.mean_radius,
            subscribers=delivered,
        )
        return planet


__all__ = ["PlanetService", "planet_from_row"]
