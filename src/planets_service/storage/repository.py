"""Row-level persistence gateway for planets and their details.

Key Responsibilities:
    - Encapsulate the SQL behind catalog reads and writes
    - Serve batched detail lookups with a single ``IN`` query
    - Retry connectivity failures on reads and report them as ``GatewayUnavailable``;
      the insert is never replayed

Collaborators:
    - Upstream: :class:`planets_service.services.planets.PlanetService`
    - Downstream: SQLAlchemy engine created by :mod:`planets_service.storage.engine`

Thread Safety:
    - Safe to call from worker threads; each call checks out its own connection
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import TypeVar

import structlog
from sqlalchemy import insert, select, text
from sqlalchemy.engine import Engine, RowMapping
from sqlalchemy.exc import DisconnectionError, OperationalError
from tenacity import RetryError, Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..config.settings import DatabaseSettings
from ..utils.errors import GatewayUnavailable
from .schema import details, planets

logger = structlog.get_logger(__name__)

_T = TypeVar("_T")

_CONNECTIVITY_ERRORS = (OperationalError, DisconnectionError)

# ==============================================================================
# ROWS
# ==============================================================================


@dataclass(frozen=True, slots=True)
class PlanetRow:
    id: int
    name: str
    planet_type: str


@dataclass(frozen=True, slots=True)
class DetailsRow:
    planet_id: int
    mean_radius: Decimal
    mass: Decimal
    population: Decimal | None


@dataclass(frozen=True, slots=True)
class NewPlanetRow:
    name: str
    planet_type: str


@dataclass(frozen=True, slots=True)
class NewDetailsRow:
    mean_radius: Decimal
    mass: int
    population: Decimal | None = None


def _planet_row(row: RowMapping) -> PlanetRow:
    return PlanetRow(id=int(row["id"]), name=row["name"], planet_type=row["type"])


def _details_row(row: RowMapping) -> DetailsRow:
    return DetailsRow(
        planet_id=int(row["planet_id"]),
        mean_radius=row["mean_radius"],
        mass=row["mass"],
        population=row["population"],
    )


# ==============================================================================
# REPOSITORY
# ==============================================================================


class PlanetRepository:
    """Encapsulates SQL for the planet catalog."""

    def __init__(
        self,
        engine: Engine,
        *,
        retry_attempts: int = 3,
        retry_wait_base: float = 0.2,
        retry_wait_max: float = 2.0,
    ) -> None:
        self._engine = engine
        self._retry_attempts = retry_attempts
        self._retry_wait_base = retry_wait_base
        self._retry_wait_max = retry_wait_max

    @classmethod
    def from_settings(cls, engine: Engine, settings: DatabaseSettings) -> PlanetRepository:
        return cls(
            engine,
            retry_attempts=settings.retry_attempts,
            retry_wait_base=settings.retry_wait_base,
            retry_wait_max=settings.retry_wait_max,
        )

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=self._retry_wait_base, max=self._retry_wait_max),
            retry=retry_if_exception_type(_CONNECTIVITY_ERRORS),
            reraise=False,
        )

    def _call(self, operation: str, func: Callable[[], _T]) -> _T:
        try:
            return self._retrying()(func)
        except RetryError as exc:
            error = exc.last_attempt.exception()
            logger.warning(
                "gateway.unavailable",
                operation=operation,
                attempts=self._retry_attempts,
                error=str(error),
            )
            raise GatewayUnavailable(operation, error) from error

    def _call_once(self, operation: str, func: Callable[[], _T]) -> _T:
        # a lost commit acknowledgement is indistinguishable from a failed write
        try:
            return func()
        except _CONNECTIVITY_ERRORS as exc:
            logger.warning("gateway.unavailable", operation=operation, attempts=1, error=str(exc))
            raise GatewayUnavailable(operation, exc) from exc

    def list_all(self) -> list[PlanetRow]:
        """Return every planet in catalog (primary key) order."""

        def run() -> list[PlanetRow]:
            stmt = select(planets.c.id, planets.c.name, planets.c.type).order_by(planets.c.id)
            with self._engine.connect() as conn:
                return [_planet_row(row) for row in conn.execute(stmt).mappings()]

        return self._call("list_all", run)

    def get_by_id(self, planet_id: int) -> PlanetRow | None:
        def run() -> PlanetRow | None:
            stmt = select(planets.c.id, planets.c.name, planets.c.type).where(
                planets.c.id == planet_id
            )
            with self._engine.connect() as conn:
                row = conn.execute(stmt).mappings().first()
            return _planet_row(row) if row is not None else None

        return self._call("get_by_id", run)

    def get_details_by_id(self, planet_id: int) -> DetailsRow | None:
        def run() -> DetailsRow | None:
            stmt = select(details).where(details.c.planet_id == planet_id)
            with self._engine.connect() as conn:
                row = conn.execute(stmt).mappings().first()
            return _details_row(row) if row is not None else None

        return self._call("get_details_by_id", run)

    def batch_get_details(self, planet_ids: Iterable[int]) -> dict[int, DetailsRow]:
        """Fetch details rows for a set of planet ids; missing ids are absent from the result."""
        keys = sorted(set(planet_ids))
        if not keys:
            return {}

        def run() -> dict[int, DetailsRow]:
            stmt = select(details).where(details.c.planet_id.in_(keys))
            with self._engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
            return {int(row["planet_id"]): _details_row(row) for row in rows}

        return self._call("batch_get_details", run)

    def insert(self, new_planet: NewPlanetRow, new_details: NewDetailsRow) -> PlanetRow:
        """Insert a planet and its details in one transaction and return the stored planet.

        Writes are attempted once; reads are the only retried operations.
        """

        def run() -> PlanetRow:
            with self._engine.begin() as conn:
                planet_id = conn.execute(
                    insert(planets).values(name=new_planet.name, type=new_planet.planet_type)
                ).inserted_primary_key[0]
                conn.execute(
                    insert(details).values(
                        planet_id=planet_id,
                        mean_radius=new_details.mean_radius,
                        mass=new_details.mass,
                        population=new_details.population,
                    )
                )
            return PlanetRow(id=int(planet_id), name=new_planet.name, planet_type=new_planet.planet_type)

        return self._call_once("insert", run)

    def ping(self) -> None:
        """Round-trip a trivial statement to prove connectivity."""

        def run() -> None:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))

        self._call("ping", run)


__all__ = ["DetailsRow", "NewDetailsRow", "NewPlanetRow", "PlanetRepository", "PlanetRow"]
