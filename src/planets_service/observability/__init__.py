"""Observability helpers for the FastAPI application."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from ..utils.logging import configure_logging, configure_tracing
from .metrics import register_metrics

if TYPE_CHECKING:  # pragma: no cover - import hints only
    from fastapi import FastAPI

    from planets_service.config.settings import AppSettings

__all__ = ["setup_observability"]

logger = structlog.get_logger(__name__)


def setup_observability(app: FastAPI, settings: AppSettings) -> None:
    """Configure logging, tracing, and metrics for the app."""
    configure_logging(settings=settings.observability.logging)
    configure_tracing(settings.service_name, settings.telemetry)
    if settings.observability.metrics.enabled:
        register_metrics(app, settings.observability.metrics.path)
    logger.info(
        "observability.configured",
        exporter=settings.telemetry.exporter,
        metrics=settings.observability.metrics.enabled,
    )
