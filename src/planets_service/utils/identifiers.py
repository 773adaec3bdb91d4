"""Identifier utilities for converting opaque wire ids to integer keys."""

from __future__ import annotations

import re

from .errors import InvalidIdentifier

_INTEGER_ID = re.compile(r"[+-]?[0-9]+")

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


def parse_planet_id(value: object) -> int:
    """Return the integer key behind a wire identifier.

    Integers pass through; strings must be plain base-10 literals. Values
    outside the 32-bit signed range of the storage key are rejected.

    Raises:
        InvalidIdentifier: If ``value`` cannot be converted.
    """
    if isinstance(value, bool):
        raise InvalidIdentifier(value)
    if isinstance(value, int):
        key = value
    elif isinstance(value, str) and _INTEGER_ID.fullmatch(value):
        key = int(value)
    else:
        raise InvalidIdentifier(value)
    if not INT32_MIN <= key <= INT32_MAX:
        raise InvalidIdentifier(value)
    return key


def format_planet_id(key: int) -> str:
    """Render an integer key as its wire identifier."""
    return str(key)


__all__ = ["INT32_MAX", "INT32_MIN", "format_planet_id", "parse_planet_id"]
