"""Service layer for the planet catalog."""

from .health import CheckResult, HealthService, failure, success
from .planets import PlanetService, planet_from_row


__all__ = [
    "CheckResult",
    "HealthService",
    "PlanetService",
    "failure",
    "planet_from_row",
    "success",
]
