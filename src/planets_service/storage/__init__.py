"""Relational persistence for the planet catalog."""

from .engine import SOLAR_SYSTEM, create_db_engine, init_database, seed_catalog
from .repository import DetailsRow, NewDetailsRow, NewPlanetRow, PlanetRepository, PlanetRow


__all__ = [
    "SOLAR_SYSTEM",
    "DetailsRow",
    "NewDetailsRow",
    "NewPlanetRow",
    "PlanetRepository",
    "PlanetRow",
    "create_db_engine",
    "init_database",
    "seed_catalog",
]
