from __future__ import annotations

import os
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from planets_service.config.settings import AppSettings, DatabaseSettings, get_settings
from planets_service.gateway.app import create_app
from planets_service.gateway.events import EventBroker
from planets_service.models import Planet
from planets_service.services.planets import PlanetService
from planets_service.storage import PlanetRepository, init_database


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch) -> Iterator[None]:
    for key in list(os.environ):
        if key.startswith("PS_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path) -> AppSettings:
    return AppSettings(
        database=DatabaseSettings(
            url=f"sqlite:///{tmp_path / 'planets.db'}",
            retry_wait_base=0.0,
            retry_wait_max=0.0,
        )
    )


@pytest.fixture
def engine(settings: AppSettings) -> Iterator[Engine]:
    engine = init_database(settings.database)
    yield engine
    engine.dispose()


@pytest.fixture
def repository(engine: Engine, settings: AppSettings) -> PlanetRepository:
    return PlanetRepository.from_settings(engine, settings.database)


@pytest.fixture
def broker() -> EventBroker[Planet]:
    return EventBroker(queue_size=4)


@pytest.fixture
def service(repository: PlanetRepository, broker: EventBroker[Planet]) -> PlanetService:
    return PlanetService(repository, broker)


@pytest.fixture
def client(settings: AppSettings) -> Iterator[TestClient]:
    with TestClient(create_app(settings)) as test_client:
        yield test_client
