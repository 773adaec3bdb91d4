"""FastAPI application serving the planet catalog.

Key Responsibilities:
    - Build the process-wide resources (engine, repository, broker, service)
      on startup and release them on shutdown
    - Configure observability and the request lifecycle middleware
    - Mount the GraphQL endpoint (queries, mutations and websocket
      subscriptions) and the health probes

Collaborators:
    - Upstream: ASGI server (Uvicorn)
    - Downstream: GraphQL router, planet service, health service

Side Effects:
    - Creates tables and seeds the catalog when configured
    - Installs logging and tracing configuration

Example:
    >>> from planets_service.gateway.app import create_app
    >>> app = create_app()
    >>> # Run with: uvicorn planets_service.gateway.app:create_app --factory
"""

# ==============================================================================
# IMPORTS
# ==============================================================================

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .. import __version__
from ..config.settings import AppSettings, get_settings
from ..models import Planet
from ..observability import setup_observability
from ..services.health import CheckResult, HealthService, success
from ..services.planets import PlanetService
from ..storage import PlanetRepository, init_database
from ..utils.logging import get_logger
from .events import EventBroker
from .graphql.schema import graphql_router
from .presentation.lifecycle import RequestLifecycleMiddleware
from .routes import health_router

logger = get_logger(__name__)

# ==============================================================================
# APPLICATION FACTORY
# ==============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: AppSettings = app.state.settings
    engine = init_database(settings.database)
    repository = PlanetRepository.from_settings(engine, settings.database)
    broker: EventBroker[Planet] = EventBroker(queue_size=settings.broker.queue_size)

    def database_check() -> CheckResult:
        repository.ping()
        return success("database reachable")

    app.state.repository = repository
    app.state.broker = broker
    app.state.service = PlanetService(repository, broker)
    app.state.health = HealthService(checks={"database": database_check}, version=app.version)
    logger.info("gateway.startup", environment=settings.environment.value)
    try:
        yield
    finally:
        await broker.close()
        engine.dispose()
        logger.info("gateway.shutdown")


def create_app(settings: AppSettings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(
        title="Planets Service",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings

    setup_observability(app, settings)

    app.add_middleware(
        RequestLifecycleMiddleware,
        correlation_header=settings.observability.logging.correlation_id_header,
    )

    app.include_router(health_router)
    app.include_router(graphql_router, prefix="/graphql")
    return app


__all__ = ["create_app", "lifespan"]
