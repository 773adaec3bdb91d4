"""Per-request bookkeeping for the HTTP surface.

The middleware accepts the caller's correlation identifier (or mints one),
binds it together with the method and path into structlog's context so every
log line of the request carries them, and records the request metrics once
the response status is known. GraphQL operations, health probes and the
metrics endpoint all pass through it; websocket subscriptions do not.

Example:
    >>> lifecycle = RequestLifecycle(method="POST", path="/graphql")
    >>> lifecycle.complete(200)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from time import perf_counter
from uuid import uuid4

import structlog
from fastapi import Request
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from ...observability.metrics import REQUEST_COUNTER, REQUEST_LATENCY
from ...utils.logging import bind_correlation_id, get_logger, reset_correlation_id

logger = get_logger(__name__)

RESPONSE_TIME_HEADER = "X-Response-Time-Ms"


@dataclass(slots=True)
class RequestLifecycle:
    """Timing and outcome of one HTTP request; metrics are recorded exactly once."""

    method: str
    path: str
    correlation_id: str = field(default_factory=lambda: uuid4().hex)
    started_at: float = field(default_factory=perf_counter)
    finished_at: float | None = None
    status_code: int | None = None
    error: str | None = None

    def complete(self, status_code: int) -> None:
        if self.status_code is not None:
            return
        self.status_code = status_code
        self.finished_at = perf_counter()
        REQUEST_COUNTER.labels(self.method, self.path, str(status_code)).inc()
        REQUEST_LATENCY.labels(self.method, self.path).observe(self.duration_seconds)

    def fail(self, exc: BaseException, *, status_code: int = 500) -> None:
        self.error = f"{type(exc).__name__}: {exc}"
        self.complete(status_code)

    @property
    def duration_seconds(self) -> float:
        return max((self.finished_at or perf_counter()) - self.started_at, 0.0)

    @property
    def duration_ms(self) -> float:
        return round(self.duration_seconds * 1000, 2)


class RequestLifecycleMiddleware(BaseHTTPMiddleware):
    """Correlation, timing and request metrics for every HTTP request."""

    def __init__(self, app: ASGIApp, *, correlation_header: str = "X-Correlation-ID") -> None:
        super().__init__(app)
        self.correlation_header = correlation_header

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        lifecycle = RequestLifecycle(method=request.method, path=request.url.path)
        lifecycle.correlation_id = request.headers.get(self.correlation_header) or lifecycle.correlation_id
        request.state.lifecycle = lifecycle

        tokens = bind_correlation_id(lifecycle.correlation_id)
        scope = structlog.contextvars.bind_contextvars(
            http_method=lifecycle.method, http_path=lifecycle.path
        )
        try:
            response = await call_next(request)
        except Exception as exc:
            lifecycle.fail(exc)
            logger.exception("http.request.failed", duration_ms=lifecycle.duration_ms)
            raise
        else:
            lifecycle.complete(response.status_code)
            response.headers[self.correlation_header] = lifecycle.correlation_id
            response.headers[RESPONSE_TIME_HEADER] = f"{lifecycle.duration_ms:.2f}"
            logger.info(
                "http.request.completed",
                status_code=lifecycle.status_code,
                duration_ms=lifecycle.duration_ms,
            )
            return response
        finally:
            structlog.contextvars.reset_contextvars(**scope)
            reset_correlation_id(tokens)


__all__ = ["RESPONSE_TIME_HEADER", "RequestLifecycle", "RequestLifecycleMiddleware"]
