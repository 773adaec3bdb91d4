"""Database engine setup and catalog seeding.

SQLAlchemy Core (not ORM) is used: every gateway call is a short
statement on a single checked-out connection, with no identity map to
keep consistent between requests.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import structlog
from sqlalchemy import create_engine, event, func, insert, select
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

from ..config.settings import DatabaseSettings
from ..models import PlanetType
from .schema import details, metadata, planets

logger = structlog.get_logger(__name__)

# name, type, mean radius (km), mass (kg), population (billions)
SOLAR_SYSTEM: tuple[tuple[str, PlanetType, str, int, str | None], ...] = (
    ("Mercury", PlanetType.TERRESTRIAL_PLANET, "2439.7", 3285 * 10**20, None),
    ("Venus", PlanetType.TERRESTRIAL_PLANET, "6051.8", 4867 * 10**21, None),
    ("Earth", PlanetType.TERRESTRIAL_PLANET, "6371.0", 5972 * 10**21, None),
    ("Mars", PlanetType.TERRESTRIAL_PLANET, "3389.5", 639 * 10**21, None),
    ("Jupiter", PlanetType.GAS_GIANT, "69911.0", 1898 * 10**24, None),
    ("Saturn", PlanetType.GAS_GIANT, "58232.0", 5683 * 10**23, None),
    ("Uranus", PlanetType.ICE_GIANT, "25362.0", 8681 * 10**22, None),
    ("Neptune", PlanetType.ICE_GIANT, "24622.0", 1024 * 10**23, None),
)


def create_db_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine; SQLite connections get foreign keys enabled."""
    parsed = make_url(url)
    kwargs: dict[str, Any] = {"echo": echo}
    if parsed.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if parsed.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
    engine = create_engine(url, **kwargs)

    if parsed.get_backend_name() == "sqlite":

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def init_database(settings: DatabaseSettings) -> Engine:
    """Create the catalog tables and optionally seed the solar system.

    Idempotent: seeding only happens while the ``planets`` table is empty.
    """
    engine = create_db_engine(settings.url, echo=settings.echo)
    metadata.create_all(engine)
    if settings.seed:
        seed_catalog(engine)
    return engine


def seed_catalog(engine: Engine) -> int:
    """Insert the eight solar system planets in catalog order, returning the count added."""
    with engine.begin() as conn:
        existing = conn.execute(select(func.count()).select_from(planets)).scalar_one()
        if existing:
            return 0
        for name, planet_type, mean_radius, mass, population in SOLAR_SYSTEM:
            planet_id = conn.execute(
                insert(planets).values(name=name, type=planet_type.value)
            ).inserted_primary_key[0]
            conn.execute(
                insert(details).values(
                    planet_id=planet_id,
                    mean_radius=Decimal(mean_radius),
                    mass=mass,
                    population=Decimal(population) if population is not None else None,
                )
            )
    logger.info("catalog.seeded", planets=len(SOLAR_SYSTEM))
    return len(SOLAR_SYSTEM)
