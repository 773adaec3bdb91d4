import json
import logging
from decimal import Decimal

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider

from planets_service.config import LoggingSettings, TelemetrySettings
from planets_service.utils.logging import (
    _structlog_scrubber,
    bind_correlation_id,
    build_formatter,
    configure_logging,
    configure_tracing,
    get_correlation_id,
    get_logger,
    reset_correlation_id,
)


def test_configure_logging_sets_root_level():
    configure_logging(level=logging.DEBUG)
    assert logging.getLogger().level == logging.DEBUG
    configure_logging(level="warning")
    assert logging.getLogger().level == logging.WARNING


def test_configure_tracing_disabled_returns_none():
    assert configure_tracing("service", TelemetrySettings(exporter="none")) is None


def test_configure_tracing_console_exporter():
    telemetry = TelemetrySettings(exporter="console")
    provider = configure_tracing("service", telemetry)
    assert isinstance(provider, TracerProvider)
    assert isinstance(trace.get_tracer_provider(), TracerProvider)


def test_structlog_events_are_json_with_correlation_id(caplog):
    configure_logging(settings=LoggingSettings(scrub_fields=["token"]))
    tokens = bind_correlation_id("corr-123")
    try:
        get_logger("planets.test").info("planets.created", token="super-secret", planet_id=9)
    finally:
        reset_correlation_id(tokens)
    line = json.loads(caplog.text.strip().splitlines()[-1])
    assert line["event"] == "planets.created"
    assert line["correlation_id"] == "corr-123"
    assert line["token"] == "***"
    assert line["planet_id"] == 9
    assert line["level"] == "info"


def test_stdlib_records_share_the_processor_chain(caplog):
    configure_logging(settings=LoggingSettings(scrub_fields=["secret"]))
    tokens = bind_correlation_id("corr-456")
    try:
        logging.getLogger("sqlalchemy.engine").warning("pool exhausted", extra={"secret": "x"})
    finally:
        reset_correlation_id(tokens)
    line = json.loads(caplog.text.strip().splitlines()[-1])
    assert line["event"] == "pool exhausted"
    assert line["logger"] == "sqlalchemy.engine"
    assert line["correlation_id"] == "corr-456"
    assert line["secret"] == "***"


def test_formatter_renders_decimals_exactly():
    record = logging.LogRecord("planets", logging.INFO, __file__, 1, "stored", None, None)
    record.mean_radius = Decimal("1E+3")
    rendered = json.loads(build_formatter().format(record))
    assert rendered["mean_radius"] == "1000"


def test_correlation_id_is_reset():
    tokens = bind_correlation_id("corr-789")
    assert get_correlation_id() == "corr-789"
    reset_correlation_id(tokens)
    assert get_correlation_id() is None


def test_scrubber_masks_nested_fields_case_insensitively():
    processor = _structlog_scrubber(["Password"])
    event = processor(
        None,
        "info",
        {"event": "login", "password": "hunter2", "payload": [{"PASSWORD": "x", "keep": 1}]},
    )
    assert event == {"event": "login", "password": "***", "payload": [{"PASSWORD": "***", "keep": 1}]}
