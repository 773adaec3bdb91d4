"""Catalog domain models.

Key Responsibilities:
    - Define the planet value object and its physical type classification
    - Model planet details as a closed union discriminated by inhabitation
    - Validate mutation input before it reaches the persistence gateway

Collaborators:
    - Upstream: Planet service and GraphQL mappers
    - Downstream: Storage rows produced by :mod:`planets_service.storage`

Side Effects:
    - None: Pure data models

Thread Safety:
    - Thread-safe: Dataclasses are frozen and never shared between requests
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Literal, Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.numeric import decode_decimal

# ==============================================================================
# PLANETS
# ==============================================================================


class PlanetType(str, Enum):
    """Classification of a planet from an astronomical point of view."""

    TERRESTRIAL_PLANET = "TerrestrialPlanet"
    GAS_GIANT = "GasGiant"
    ICE_GIANT = "IceGiant"
    DWARF_PLANET = "DwarfPlanet"


@dataclass(frozen=True, slots=True)
class Planet:
    """A catalog record assembled from a persisted planet row."""

    id: int
    name: str
    planet_type: PlanetType


# ==============================================================================
# DETAILS
# ==============================================================================


@dataclass(frozen=True, slots=True)
class UninhabitedDetails:
    mean_radius: Decimal
    mass: int
    kind: Literal["uninhabited"] = "uninhabited"


@dataclass(frozen=True, slots=True)
class InhabitedDetails:
    mean_radius: Decimal
    mass: int
    population: Decimal
    kind: Literal["inhabited"] = "inhabited"


Details = UninhabitedDetails | InhabitedDetails


class DetailsRecord(Protocol):
    """Shape of a persisted details row."""

    mean_radius: Decimal
    mass: Decimal
    population: Decimal | None


def details_from_row(row: DetailsRecord) -> Details:
    """Build the details variant for a row; population presence picks the variant."""
    mass = int(row.mass)
    if row.population is None:
        return UninhabitedDetails(mean_radius=row.mean_radius, mass=mass)
    return InhabitedDetails(mean_radius=row.mean_radius, mass=mass, population=row.population)


# ==============================================================================
# MUTATION INPUT
# ==============================================================================


class MassParts(BaseModel):
    """Mass supplied as ``mantissa * 10**exponent``."""

    model_config = ConfigDict(frozen=True)

    mantissa: float
    exponent: int


class NewPlanetRequest(BaseModel):
    """Transient input consumed once to create a planet and its details."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    planet_type: PlanetType
    mean_radius: Decimal
    mass: MassParts
    population: Decimal | None = None

    @field_validator("mean_radius", "population", mode="before")
    @classmethod
    def _parse_wire_decimal(cls, value: object) -> object:
        if isinstance(value, str):
            return decode_decimal(value)
        return value


__all__ = [
    "Details",
    "DetailsRecord",
    "InhabitedDetails",
    "MassParts",
    "NewPlanetRequest",
    "Planet",
    "PlanetType",
    "UninhabitedDetails",
    "details_from_row",
]
