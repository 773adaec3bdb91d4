"""Custom GraphQL scalars for arbitrary-precision physical quantities."""

from __future__ import annotations

from decimal import Decimal
from typing import NewType

import strawberry

from ...utils.numeric import decode_decimal, decode_integer, encode_decimal, encode_integer

BigDecimal = strawberry.scalar(
    NewType("BigDecimal", Decimal),
    name="BigDecimal",
    description='Arbitrary-precision decimal as a base-10 string, e.g. "6371.0"',
    serialize=encode_decimal,
    parse_value=decode_decimal,
)

BigInt = strawberry.scalar(
    NewType("BigInt", int),
    name="BigInt",
    description='Arbitrary-precision integer in lower-case scientific notation, e.g. "5.972e24"',
    serialize=encode_integer,
    parse_value=decode_integer,
)

__all__ = ["BigDecimal", "BigInt"]
