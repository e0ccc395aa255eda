# src/jsontimeline/contracts/values.py
"""Typed attribute values.

Every attribute sent to a sink is one of five immutable variants. Code that
consumes values should match over the full variant set (see AttrValue).

Integer holds signed 64-bit values. BigInteger holds signed 128-bit values and
is used for anything outside the signed 64-bit range (including unsigned 64-bit
JSON numbers) and for converted timestamps.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum
from typing import Any

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1
U64_MAX = 2**64 - 1
I128_MIN = -(2**127)
I128_MAX = 2**127 - 1


class AttrKind(StrEnum):
    """Discriminator for the AttrValue variants."""

    BOOL = "bool"
    INTEGER = "integer"
    BIG_INTEGER = "big_integer"
    FLOAT = "float"
    STRING = "string"


@dataclass(frozen=True, slots=True)
class BoolValue:
    value: bool

    kind = AttrKind.BOOL

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True, slots=True)
class IntegerValue:
    value: int

    kind = AttrKind.INTEGER

    def __post_init__(self) -> None:
        if not I64_MIN <= self.value <= I64_MAX:
            raise ValueError(f"Integer value {self.value} is outside the signed 64-bit range")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class BigIntegerValue:
    value: int

    kind = AttrKind.BIG_INTEGER

    def __post_init__(self) -> None:
        if not I128_MIN <= self.value <= I128_MAX:
            raise ValueError(f"BigInteger value {self.value} is outside the signed 128-bit range")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class FloatValue:
    value: float

    kind = AttrKind.FLOAT

    def __str__(self) -> str:
        """Positional decimal form of the shortest round-tripping digits.

        No exponent and no trailing ".0": 1e-07 is "0.0000001", 3.0 is "3".
        """
        if math.isnan(self.value):
            return "NaN"
        if math.isinf(self.value):
            return repr(self.value)
        return format(Decimal(repr(self.value)).normalize(), "f")


@dataclass(frozen=True, slots=True)
class StringValue:
    value: str

    kind = AttrKind.STRING

    def __str__(self) -> str:
        return self.value


AttrValue = BoolValue | IntegerValue | BigIntegerValue | FloatValue | StringValue
"""Tagged union of all attribute value variants."""


def as_number(value: AttrValue) -> float | None:
    """Return the numeric interpretation of a value, or None if it has none.

    Bool and String are not numeric.
    """
    match value:
        case IntegerValue(v) | BigIntegerValue(v):
            return float(v)
        case FloatValue(v):
            return v
        case BoolValue() | StringValue():
            return None


def to_json_payload(value: AttrValue) -> dict[str, Any]:
    """Encode a value as a self-describing JSON object.

    Float NaN and infinities cannot appear in JSON and are encoded as strings.
    """
    payload: Any = value.value
    if isinstance(value, FloatValue) and not math.isfinite(value.value):
        payload = repr(value.value)
    return {"type": value.kind.value, "value": payload}
