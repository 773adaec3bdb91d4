"""Domain models for the planet catalog."""

from .planet import (
    Details,
    DetailsRecord,
    InhabitedDetails,
    MassParts,
    NewPlanetRequest,
    Planet,
    PlanetType,
    UninhabitedDetails,
    details_from_row,
)


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
