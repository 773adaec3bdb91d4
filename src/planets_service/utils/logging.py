"""Structured logging, tracing and correlation helpers.

Every log line leaves the process as one JSON object. Structlog callers and
plain ``logging`` records (uvicorn, SQLAlchemy, third-party libraries) run
through the same processor chain: context merge, level and logger name,
timestamp, field scrubbing and exact rendering of catalog numbers.

Collaborators:
    - Upstream: :func:`planets_service.observability.setup_observability`,
      the request lifecycle middleware
    - Downstream: ``logging``, ``structlog`` and the OpenTelemetry SDK

Side Effects:
    - Replaces the root logger handlers and installs a global tracer provider

Thread Safety:
    - Configure once at startup. Correlation identifiers live in structlog's
      context variables and are safe across tasks and threads.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable, Mapping
from contextvars import Token
from decimal import Decimal
from typing import Any

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SpanExporter
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from structlog.types import EventDict, Processor

from planets_service.config.settings import LoggingSettings, TelemetrySettings
from planets_service.utils.numeric import encode_decimal

_CORRELATION_KEY = "correlation_id"
_MASK = "***"

# ==============================================================================
# PROCESSORS
# ==============================================================================


def _mask(value: Any, fields: frozenset[str]) -> Any:
    if isinstance(value, Mapping):
        return {
            key: _MASK if str(key).lower() in fields else _mask(item, fields)
            for key, item in value.items()
        }
    if isinstance(value, list | tuple):
        return [_mask(item, fields) for item in value]
    return value


def _structlog_scrubber(scrub_fields: Iterable[str] | None) -> Processor:
    """Build a processor masking ``scrub_fields`` (case-insensitive) at any depth."""
    fields = frozenset(field.lower() for field in scrub_fields or ())

    def processor(_: Any, __: str, event_dict: EventDict) -> EventDict:
        if not fields:
            return event_dict
        return _mask(event_dict, fields)

    return processor


def _render_exact_numbers(_: Any, __: str, event_dict: EventDict) -> EventDict:
    # Decimal.__str__ may switch to exponent form; keep the wire rendering
    for key, value in event_dict.items():
        if isinstance(value, Decimal) and value.is_finite():
            event_dict[key] = encode_decimal(value)
    return event_dict


def _shared_processors(scrub_fields: Iterable[str] | None) -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        _structlog_scrubber(scrub_fields),
        _render_exact_numbers,
    ]


def build_formatter(scrub_fields: Iterable[str] | None = None) -> structlog.stdlib.ProcessorFormatter:
    """Return the JSON formatter used by every handler the service installs."""
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[structlog.stdlib.ExtraAdder(), *_shared_processors(scrub_fields)],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True, default=str),
        ],
    )


# ==============================================================================
# CONFIGURATION
# ==============================================================================


def _level_value(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    settings: LoggingSettings | None = None,
) -> None:
    """Route structlog and stdlib logging to stdout as JSON lines.

    ``settings`` takes precedence over ``level`` and also supplies the scrub
    list. pytest's capture handlers stay attached so ``caplog`` keeps working.
    """
    scrub_fields: Iterable[str] | None = None
    if settings is not None:
        level = settings.level
        scrub_fields = settings.scrub_fields
    level_value = _level_value(level)
    formatter = build_formatter(scrub_fields)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    kept = [
        existing
        for existing in root_logger.handlers
        if type(existing).__module__.startswith("_pytest.")
    ]
    for existing in kept:
        existing.setFormatter(formatter)
    root_logger.handlers = [*kept, handler]
    root_logger.setLevel(level_value)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(scrub_fields),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def configure_tracing(service_name: str, telemetry: TelemetrySettings) -> TracerProvider | None:
    """Install a tracer provider for ``telemetry.exporter``; ``none`` disables tracing."""
    target = telemetry.exporter.lower()
    if target == "none":
        return None

    provider = TracerProvider(
        resource=Resource(attributes={"service.name": service_name}),
        sampler=TraceIdRatioBased(telemetry.sample_ratio),
    )
    exporter: SpanExporter
    if target == "otlp":
        exporter = OTLPSpanExporter(endpoint=telemetry.endpoint) if telemetry.endpoint else OTLPSpanExporter()
    else:
        exporter = ConsoleSpanExporter()
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    return provider


# ==============================================================================
# CORRELATION IDS
# ==============================================================================


def bind_correlation_id(value: str) -> Mapping[str, Token[Any]]:
    """Attach ``value`` to every log line emitted from the current context."""
    return structlog.contextvars.bind_contextvars(**{_CORRELATION_KEY: value})


def reset_correlation_id(tokens: Mapping[str, Token[Any]] | None) -> None:
    if tokens:
        structlog.contextvars.reset_contextvars(**tokens)
    else:
        structlog.contextvars.unbind_contextvars(_CORRELATION_KEY)


def get_correlation_id() -> str | None:
    return structlog.contextvars.get_contextvars().get(_CORRELATION_KEY)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.stdlib.get_logger(name)


__all__ = [
    "bind_correlation_id",
    "build_formatter",
    "configure_logging",
    "configure_tracing",
    "get_correlation_id",
    "get_logger",
    "reset_correlation_id",
]
