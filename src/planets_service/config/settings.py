"""Configuration system for the planets service."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from enum import Enum
from functools import lru_cache
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environments supported by the service."""

    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class TelemetrySettings(BaseModel):
    """Configuration block for OpenTelemetry export."""

    exporter: Literal["none", "console", "otlp"] = Field(
        default="none", description="Target exporter type"
    )
    endpoint: str | None = Field(default=None, description="Exporter endpoint")
    sample_ratio: float = Field(default=0.1, ge=0.0, le=1.0)


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: str = Field(default="INFO", description="Log level for application output")
    correlation_id_header: str = Field(
        default="X-Correlation-ID", description="Header used for trace correlation"
    )
    scrub_fields: Sequence[str] = Field(
        default_factory=lambda: ["password", "token", "secret", "authorization"],
        description="Fields that should be redacted in logs",
    )


class MetricsSettings(BaseModel):
    """Prometheus metrics configuration."""

    enabled: bool = True
    path: str = Field(default="/metrics", description="HTTP path for Prometheus metrics")


class ObservabilitySettings(BaseModel):
    """Aggregate observability configuration."""

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    metrics: MetricsSettings = Field(default_factory=MetricsSettings)


class DatabaseSettings(BaseModel):
    """Relational store connection and resilience settings."""

    url: str = Field(default="sqlite:///./planets.db", description="SQLAlchemy database URL")
    echo: bool = Field(default=False, description="Log emitted SQL statements")
    seed: bool = Field(default=True, description="Seed the solar system into an empty catalog")
    retry_attempts: int = Field(
        default=3, ge=1, description="Attempts per gateway call before reporting unavailability"
    )
    retry_wait_base: float = Field(default=0.2, ge=0.0, description="Base backoff in seconds")
    retry_wait_max: float = Field(default=2.0, ge=0.0, description="Maximum backoff in seconds")


class BrokerSettings(BaseModel):
    """In-process publish/subscribe broker settings."""

    queue_size: int = Field(
        default=64, ge=1, description="Events buffered per subscriber before new ones are dropped"
    )


class LoaderSettings(BaseModel):
    """Per-request details loader settings."""

    max_batch_size: int | None = Field(
        default=None, ge=1, description="Split batches above this size; unbounded when unset"
    )


class AppSettings(BaseSettings):
    """Top-level application settings."""

    environment: Environment = Environment.DEV
    debug: bool = False
    service_name: str = "planets-service"
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    broker: BrokerSettings = Field(default_factory=BrokerSettings)
    loader: LoaderSettings = Field(default_factory=LoaderSettings)

    model_config = SettingsConfigDict(env_prefix="PS_", env_nested_delimiter="__")


ENVIRONMENT_DEFAULTS: Mapping[Environment, dict[str, Any]] = {
    Environment.DEV: {
        "debug": True,
    },
    Environment.STAGING: {
        "telemetry": {"exporter": "otlp", "sample_ratio": 0.25},
        "database": {"seed": False},
    },
    Environment.PROD: {
        "telemetry": {"exporter": "otlp", "sample_ratio": 0.05},
        "database": {"seed": False, "retry_attempts": 5},
    },
}


def _deep_update(target: dict[str, Any], updates: Mapping[str, Any]) -> dict[str, Any]:
    for key, value in updates.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            target[key] = _deep_update(dict(current), value)
        else:
            target[key] = value
    return target


def load_settings(environment: str | None = None) -> AppSettings:
    """Load application settings with environment specific defaults applied.

    Environment defaults only fill values that were not set explicitly through
    ``PS_*`` variables.
    """
    env_value = (environment or os.getenv("PS_ENV", "dev")).lower()
    try:
        env = Environment(env_value)
    except ValueError as err:
        raise RuntimeError(f"Invalid configuration: unknown environment '{env_value}'") from err
    try:
        base_settings = AppSettings()
    except ValidationError as err:
        raise RuntimeError(f"Invalid configuration: {err}") from err
    explicit = base_settings.model_dump(exclude_unset=True)
    merged = _deep_update(dict(ENVIRONMENT_DEFAULTS.get(env, {})), explicit)
    merged["environment"] = env
    return AppSettings.model_validate(merged)


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Cached accessor used by production code."""
    return load_settings()
