"""Utility modules shared across the service layers."""

from .errors import (
    DetailsNotFound,
    FoundationError,
    GatewayUnavailable,
    InvalidIdentifier,
    InvalidNumericLiteral,
    ProblemDetail,
    UnsupportedOperation,
)


__all__ = [
    "DetailsNotFound",
    "FoundationError",
    "GatewayUnavailable",
    "InvalidIdentifier",
    "InvalidNumericLiteral",
    "ProblemDetail",
    "UnsupportedOperation",
]
