"""SQLAlchemy Core table definitions for the planet catalog.

Physical quantities are stored as decimal text so that masses in the order of
``10**27`` and beyond survive every backend without floating point rounding.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from sqlalchemy import Column, ForeignKey, Integer, MetaData, Table, Text
from sqlalchemy.engine import Dialect
from sqlalchemy.types import TypeDecorator

from ..utils.numeric import encode_decimal


class ExactDecimal(TypeDecorator[Decimal]):
    """Arbitrary-precision decimal persisted as canonical text."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Dialect) -> str | None:
        if value is None:
            return None
        if isinstance(value, int):
            return str(value)
        return encode_decimal(Decimal(value))

    def process_result_value(self, value: Any, dialect: Dialect) -> Decimal | None:
        if value is None:
            return None
        return Decimal(value)


metadata = MetaData()

planets = Table(
    "planets",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("type", Text, nullable=False),  # PlanetType value
)

details = Table(
    "details",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("planet_id", Integer, ForeignKey("planets.id"), nullable=False, unique=True),
    Column("mean_radius", ExactDecimal, nullable=False),
    Column("mass", ExactDecimal, nullable=False),
    Column("population", ExactDecimal),  # billions; NULL for uninhabited planets
)
