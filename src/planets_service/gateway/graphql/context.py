"""GraphQL context helpers."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi.requests import HTTPConnection
from strawberry.fastapi.context import BaseContext

from ...models import Planet
from ...services.planets import PlanetService
from ..events import EventBroker
from .loaders import GraphQLLoaders


@dataclass(slots=True)
class GraphQLContext(BaseContext):
    service: PlanetService
    broker: EventBroker[Planet]
    loaders: GraphQLLoaders


def build_context(
    service: PlanetService,
    broker: EventBroker[Planet],
    *,
    max_batch_size: int | None = None,
) -> GraphQLContext:
    """Create the context for one operation with fresh loaders."""
    return GraphQLContext(
        service=service,
        broker=broker,
        loaders=GraphQLLoaders(service, max_batch_size=max_batch_size),
    )


async def get_context(connection: HTTPConnection) -> GraphQLContext:
    """FastAPI dependency resolving the context for HTTP and websocket operations."""
    state = connection.app.state
    return build_context(
        state.service,
        state.broker,
        max_batch_size=state.settings.loader.max_batch_size,
    )
