"""Lightweight configuration package exports."""

from __future__ import annotations

from .settings import (
    ENVIRONMENT_DEFAULTS,
    AppSettings,
    BrokerSettings,
    DatabaseSettings,
    Environment,
    LoaderSettings,
    LoggingSettings,
    MetricsSettings,
    ObservabilitySettings,
    TelemetrySettings,
    get_settings,
    load_settings,
)

__all__ = [
    "ENVIRONMENT_DEFAULTS",
    "AppSettings",
    "BrokerSettings",
    "DatabaseSettings",
    "Environment",
    "LoaderSettings",
    "LoggingSettings",
    "MetricsSettings",
    "ObservabilitySettings",
    "TelemetrySettings",
    "get_settings",
    "load_settings",
]
