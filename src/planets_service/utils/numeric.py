"""Arbitrary-precision numeric codec for the wire representation.

Key Responsibilities:
    - Parse and render ``BigDecimal`` values as canonical base-10 strings
    - Render ``BigInt`` values in lower-case scientific notation
    - Materialise masses supplied as mantissa/exponent pairs as exact integers

Collaborators:
    - Upstream: GraphQL scalars and the planet service
    - Downstream: :mod:`decimal` for exact arithmetic

Side Effects:
    - None; all helpers are pure functions

Thread Safety:
    - Thread-safe; helpers never touch the thread-local decimal context for
      precision-sensitive operations

Performance Characteristics:
    - Linear in the number of digits of the value being encoded
"""

from __future__ import annotations

import math
import re
from decimal import Decimal, InvalidOperation

from .errors import InvalidNumericLiteral, UnsupportedOperation

# ==============================================================================
# CONSTANTS
# ==============================================================================

_DECIMAL_LITERAL = re.compile(r"[+-]?[0-9]+(?:\.[0-9]+)?")

FLOAT32_MAX = 3.4028234663852886e38
EXPONENT_MAX = 255

# ==============================================================================
# DECIMALS
# ==============================================================================


def decode_decimal(value: object) -> Decimal:
    """Parse a wire decimal literal.

    Only strings holding an optional sign, integer digits and an optional
    fractional part are accepted; exponent markers, whitespace and non-string
    values are rejected.

    Raises:
        InvalidNumericLiteral: If ``value`` is not a valid decimal literal.
    """
    if not isinstance(value, str):
        raise InvalidNumericLiteral(value, "BigDecimal values must be sent as strings")
    if _DECIMAL_LITERAL.fullmatch(value) is None:
        raise InvalidNumericLiteral(value, "expected a base-10 literal such as '6371.0'")
    return Decimal(value)


def encode_decimal(value: Decimal) -> str:
    """Render a decimal in plain positional notation, keeping its scale."""
    if not value.is_finite():
        raise InvalidNumericLiteral(value, "only finite decimals can be encoded")
    rendered = format(value, "f")
    if rendered.startswith("-") and value.is_zero():
        return rendered[1:]
    return rendered


# ==============================================================================
# INTEGERS
# ==============================================================================


def encode_integer(value: int) -> str:
    """Render an integer in lower-case scientific notation.

    Trailing zeros of the mantissa are dropped and the exponent carries no
    ``+`` sign, e.g. ``5972 * 10**21`` renders as ``"5.972e24"``.
    """
    sign = "-" if value < 0 else ""
    digits = str(abs(value))
    exponent = len(digits) - 1
    fraction = digits[1:].rstrip("0")
    mantissa = f"{digits[0]}.{fraction}" if fraction else digits[0]
    return f"{sign}{mantissa}e{exponent}"


def decode_integer(value: object) -> int:
    """Integers never arrive as raw wire literals.

    Raises:
        UnsupportedOperation: Always; masses are supplied as mantissa/exponent
            pairs and converted with :func:`mass_from_parts`.
    """
    raise UnsupportedOperation(
        "BigInt values cannot be decoded from the wire",
        detail="Supply masses as {mantissa, exponent} pairs instead.",
        extra={"value": str(value)},
    )


def mass_from_parts(mantissa: float, exponent: int) -> int:
    """Return ``mantissa * 10**exponent`` as an exact integer.

    The mantissa is taken at its shortest decimal representation, so
    ``mass_from_parts(6.42, 23) == 642 * 10**21``. Any fractional remainder is
    truncated toward zero.

    Raises:
        InvalidNumericLiteral: If the mantissa is not a finite 32-bit float or
            the exponent falls outside ``0..255``.
    """
    if isinstance(exponent, bool) or not isinstance(exponent, int):
        raise InvalidNumericLiteral(exponent, "exponent must be an integer")
    if not 0 <= exponent <= EXPONENT_MAX:
        raise InvalidNumericLiteral(exponent, f"exponent must be between 0 and {EXPONENT_MAX}")
    if isinstance(mantissa, bool) or not isinstance(mantissa, (int, float)):
        raise InvalidNumericLiteral(mantissa, "mantissa must be a number")
    if not math.isfinite(mantissa) or abs(mantissa) > FLOAT32_MAX:
        raise InvalidNumericLiteral(mantissa, "mantissa must be a finite 32-bit float")
    try:
        sign, digits, exp = Decimal(repr(float(mantissa))).as_tuple()
    except InvalidOperation as exc:  # pragma: no cover - guarded by the checks above
        raise InvalidNumericLiteral(mantissa, str(exc)) from exc
    coefficient = int("".join(map(str, digits)) or "0")
    shift = int(exp) + exponent
    if shift >= 0:
        magnitude = coefficient * 10**shift
    else:
        magnitude = coefficient // 10 ** (-shift)
    return -magnitude if sign else magnitude


__all__ = [
    "EXPONENT_MAX",
    "FLOAT32_MAX",
    "decode_decimal",
    "decode_integer",
    "encode_decimal",
    "encode_integer",
    "mass_from_parts",
]
