"""Problem detail helpers and the service error taxonomy.

Key Responsibilities:
    - Provide RFC 7807 compliant data structures describing each failure
    - Supply a base exception that carries problem details and a stable error
      code, plus the concrete errors raised by the catalog components

Collaborators:
    - Upstream: Codec, repository and service code raise the errors below
    - Downstream: GraphQL execution copies :attr:`FoundationError.extensions`
      into ``errors[].extensions``

Side Effects:
    - None; helpers are pure data containers

Thread Safety:
    - Thread-safe; instances are not shared between requests
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

# ==============================================================================
# TYPE DEFINITIONS
# ==============================================================================

__all__ = [
    "DetailsNotFound",
    "FoundationError",
    "GatewayUnavailable",
    "InvalidIdentifier",
    "InvalidNumericLiteral",
    "ProblemDetail",
    "UnsupportedOperation",
]


@dataclass(slots=True)
class ProblemDetail:
    """Lightweight problem details object compliant with RFC 7807."""

    title: str
    status: int
    detail: str | None = None
    type: str = "about:blank"
    instance: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)


class FoundationError(RuntimeError):
    """Base exception that carries a :class:`ProblemDetail` instance."""

    code = "INTERNAL_ERROR"
    status = 500

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        detail: str | None = None,
        type: str | None = None,
        instance: str | None = None,
        extra: Mapping[str, Any] | None = None,
    ) -> None:
        """Initialise the exception with structured problem detail attributes.

        Args:
            message: Human readable error summary.
            status: HTTP status code, defaults to the class level status.
            detail: Optional detailed description of the failure.
            type: Problem type URI, defaults to one derived from the error code.
            instance: Optional URI reference identifying the specific occurrence.
            extra: Additional attributes included in the serialized payload.
        """
        super().__init__(message)
        resolved_status = status if status is not None else self.status
        self.problem = ProblemDetail(
            title=message,
            status=resolved_status,
            detail=detail,
            type=type or f"https://planets-service/errors/{self.code.lower().replace('_', '-')}",
            instance=instance,
            extra=extra or {},
        )

    @property
    def extensions(self) -> dict[str, Any]:
        """GraphQL error extensions; graphql-core copies these onto the error."""
        payload: dict[str, Any] = {"code": self.code, "status": self.problem.status}
        payload.update(self.problem.extra)
        return payload


# ==============================================================================
# CATALOG ERRORS
# ==============================================================================


class InvalidIdentifier(FoundationError):
    """A wire identifier could not be converted to an internal integer key."""

    code = "INVALID_IDENTIFIER"
    status = 400

    def __init__(self, value: object) -> None:
        super().__init__(
            f"Invalid planet identifier: {value!r}",
            detail="Identifiers must be base-10 integers within the 32-bit signed range.",
            extra={"value": str(value)},
        )
        self.value = value


class InvalidNumericLiteral(FoundationError):
    """A numeric wire value or mass component is malformed or out of range."""

    code = "INVALID_NUMERIC_LITERAL"
    status = 400

    def __init__(self, value: object, reason: str | None = None) -> None:
        super().__init__(
            f"Invalid numeric literal: {value!r}",
            detail=reason,
            extra={"value": str(value)},
        )
        self.value = value


class DetailsNotFound(FoundationError):
    """A planet exists without a matching details row."""

    code = "DETAILS_NOT_FOUND"
    status = 500

    def __init__(self, planet_id: int) -> None:
        super().__init__(
            f"Details not found for planet {planet_id}",
            extra={"planet_id": planet_id},
        )
        self.planet_id = planet_id


class GatewayUnavailable(FoundationError):
    """The persistence gateway could not be reached."""

    code = "GATEWAY_UNAVAILABLE"
    status = 503

    def __init__(self, operation: str, reason: str | BaseException | None = None) -> None:
        super().__init__(
            f"Persistence gateway unavailable during {operation}",
            detail=str(reason) if reason is not None else None,
            extra={"operation": operation},
        )
        self.operation = operation


class UnsupportedOperation(FoundationError, NotImplementedError):
    """A component was called in a way its contract forbids."""

    code = "UNSUPPORTED_OPERATION"
    status = 500
