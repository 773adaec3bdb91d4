"""GraphQL schema definition for the planet catalog."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any, assert_never

import strawberry
import structlog
from graphql import GraphQLError
from strawberry import ID
from strawberry.fastapi import GraphQLRouter
from strawberry.types import ExecutionContext, Info

from ...models import (
    Details,
    InhabitedDetails,
    MassParts,
    NewPlanetRequest,
    Planet,
    PlanetType,
    UninhabitedDetails,
)
from ...utils.identifiers import format_planet_id, parse_planet_id
from .context import GraphQLContext, get_context
from .scalars import BigDecimal, BigInt

logger = structlog.get_logger(__name__)

strawberry.enum(PlanetType, name="PlanetType")


def _planet_to_type(planet: Planet) -> PlanetObject:
    return PlanetObject(
        id=ID(format_planet_id(planet.id)),
        name=planet.name,
        planet_type=planet.planet_type,
    )


def _details_to_type(details: Details) -> DetailsType:
    match details:
        case InhabitedDetails():
            return InhabitedPlanetDetailsType(
                mean_radius=details.mean_radius,
                mass=details.mass,
                population=details.population,
            )
        case UninhabitedDetails():
            return UninhabitedPlanetDetailsType(
                mean_radius=details.mean_radius,
                mass=details.mass,
            )
        case _:
            assert_never(details)


@strawberry.interface(name="Details")
class DetailsType:
    mean_radius: BigDecimal
    mass: BigInt


@strawberry.type(name="InhabitedPlanetDetails")
class InhabitedPlanetDetailsType(DetailsType):
    population: BigDecimal = strawberry.field(description="In billions")


@strawberry.type(name="UninhabitedPlanetDetails")
class UninhabitedPlanetDetailsType(DetailsType):
    pass


@strawberry.federation.type(name="Planet", keys=["id"])
class PlanetObject:
    id: ID
    name: str
    planet_type: PlanetType = strawberry.field(
        name="type", description="From an astronomical point of view"
    )

    @strawberry.field(deprecation_reason="Now it is not in doubt. Do not use this field")
    def is_rotating_around_sun(self) -> bool:
        return True

    @strawberry.field
    async def details(self, info: Info[GraphQLContext, None]) -> DetailsType | None:
        details = await info.context.loaders.details_loader.load(parse_planet_id(str(self.id)))
        return _details_to_type(details)

    @classmethod
    async def resolve_reference(
        cls, info: Info[GraphQLContext, None], id: ID
    ) -> PlanetObject | None:
        planet = await info.context.service.find_planet(str(id))
        return _planet_to_type(planet) if planet is not None else None


@strawberry.input(
    description="Here is supposed that the number should be represented as, for example, `6.42e+23`"
)
class MassInput:
    mantissa: float
    exponent: int


@strawberry.input
class DetailsInput:
    mean_radius: BigDecimal
    mass: MassInput
    population: BigDecimal | None = None


async def _find_planet(info: Info[GraphQLContext, None], id: ID) -> PlanetObject | None:
    planet = await info.context.service.find_planet(str(id))
    if planet is None:
        return None
    return _planet_to_type(planet)


@strawberry.type
class Query:
    @strawberry.field
    async def planets(self, info: Info[GraphQLContext, None]) -> list[PlanetObject]:
        planets = await info.context.service.list_planets()
        return [_planet_to_type(planet) for planet in planets]

    @strawberry.field
    async def planet(self, info: Info[GraphQLContext, None], id: ID) -> PlanetObject | None:
        return await _find_planet(info, id)

    @strawberry.field(description="Entity lookup used for cross-service resolution")
    async def find_planet_by_id(
        self, info: Info[GraphQLContext, None], id: ID
    ) -> PlanetObject | None:
        return await _find_planet(info, id)


@strawberry.type
class Mutation:
    @strawberry.mutation(
        description=(
            "A planet's mass is a large number, so to pass it enter mantissa "
            "and exponent (the base will be 10)"
        )
    )
    async def create_planet(
        self,
        info: Info[GraphQLContext, None],
        name: str,
        planet_type: PlanetType,
        details: DetailsInput,
    ) -> ID:
        request = NewPlanetRequest(
            name=name,
            planet_type=planet_type,
            mean_radius=details.mean_radius,
            mass=MassParts(mantissa=details.mass.mantissa, exponent=details.mass.exponent),
            population=details.population,
        )
        planet = await info.context.service.create_planet(request)
        return ID(format_planet_id(planet.id))


@strawberry.type
class Subscription:
    @strawberry.subscription
    async def latest_planet(
        self, info: Info[GraphQLContext, None]
    ) -> AsyncGenerator[PlanetObject, None]:
        async with info.context.broker.subscribe() as events:
            async for planet in events:
                yield _planet_to_type(planet)


class PlanetsSchema(strawberry.federation.Schema):
    """Federated schema that reports every execution error to the structured log."""

    def process_errors(
        self,
        errors: list[GraphQLError],
        execution_context: ExecutionContext | None = None,
    ) -> None:
        for error in errors:
            original: Any = error.original_error
            logger.warning(
                "graphql.error",
                message=error.message,
                path=error.path,
                code=getattr(original, "code", None),
                operation=getattr(execution_context, "operation_name", None),
            )


schema = PlanetsSchema(
    query=Query,
    mutation=Mutation,
    subscription=Subscription,
    types=[InhabitedPlanetDetailsType, UninhabitedPlanetDetailsType],
)


graphql_router = GraphQLRouter(schema, context_getter=get_context)


__all__ = ["graphql_router", "schema"]
