"""Prometheus metrics for the planets service.

Key Responsibilities:
    - Define request, details batching and broker metrics
    - Mount the Prometheus scrape endpoint on the FastAPI application

Collaborators:
    - Upstream: Request lifecycle middleware, details loader, event broker
    - Downstream: Prometheus scraping ``/metrics``

Thread Safety:
    - Thread-safe: Prometheus client operations are atomic
"""

# ==============================================================================
# IMPORTS
# ==============================================================================

from typing import Any

from prometheus_client import Counter, Gauge, Histogram, make_asgi_app

# ==============================================================================
# METRIC DEFINITIONS
# ==============================================================================

REQUEST_COUNTER = Counter(
    "planets_http_requests_total",
    "Total HTTP requests handled by the gateway",
    ["method", "path", "status"],
)

REQUEST_LATENCY = Histogram(
    "planets_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "path"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

DETAILS_BATCHES_TOTAL = Counter(
    "planets_details_batches_total",
    "Batched details lookups dispatched to the persistence gateway",
    ["outcome"],
)

DETAILS_BATCH_SIZE = Histogram(
    "planets_details_batch_size",
    "Distinct planet ids per details batch",
    buckets=[1, 2, 4, 8, 16, 32, 64, 128, 256],
)

BROKER_EVENTS_PUBLISHED = Counter(
    "planets_broker_events_published_total",
    "Events published to the in-process broker",
)

BROKER_EVENTS_DROPPED = Counter(
    "planets_broker_events_dropped_total",
    "Events dropped because a subscriber queue was full",
)

BROKER_SUBSCRIBERS = Gauge(
    "planets_broker_subscribers",
    "Currently registered broker subscribers",
)


def register_metrics(app: Any, path: str = "/metrics") -> None:
    """Mount the Prometheus ASGI app on ``path``."""
    app.mount(path, make_asgi_app())


__all__ = [
    "BROKER_EVENTS_DROPPED",
    "BROKER_EVENTS_PUBLISHED",
    "BROKER_SUBSCRIBERS",
    "DETAILS_BATCHES_TOTAL",
    "DETAILS_BATCH_SIZE",
    "REQUEST_COUNTER",
    "REQUEST_LATENCY",
    "register_metrics",
]
