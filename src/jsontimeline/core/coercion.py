# src/jsontimeline/core/coercion.py
"""Value coercion from raw scalars to typed attribute values.

Two entry points, one per input boundary:

- json_leaf_to_value(): a scalar decoded by the json module
- string_to_value(): a string captured by the non-JSON line regex

Both are pure functions. Coercion of captured strings is a heuristic, not a
declared-type system: anything that looks numeric becomes a number.
"""

from __future__ import annotations

import math
import re
from typing import Any

from jsontimeline.contracts.values import (
    I64_MAX,
    I64_MIN,
    I128_MAX,
    I128_MIN,
    U64_MAX,
    AttrValue,
    BigIntegerValue,
    BoolValue,
    FloatValue,
    IntegerValue,
    StringValue,
)

# Decimal float syntax: optional sign, digits with a decimal point, optional exponent.
# Deliberately stricter than float(): no whitespace, no underscores.
_FLOAT_PATTERN = re.compile(r"[+-]?(?:\d+\.\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_INT_PATTERN = re.compile(r"[+-]?\d+", re.ASCII)


def json_leaf_to_value(value: Any) -> AttrValue | None:
    """Convert a decoded JSON scalar to an AttrValue.

    Returns None for null and for composites (list/dict); the flattener never
    passes those, but None keeps the function total.

    Integers in signed 64-bit range become Integer, integers up to the unsigned
    64-bit maximum become BigInteger, and any larger integer is represented as
    Float like any other non-integral number.
    """
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return BoolValue(value)
    if isinstance(value, int):
        if I64_MIN <= value <= I64_MAX:
            return IntegerValue(value)
        if 0 <= value <= U64_MAX:
            return BigIntegerValue(value)
        try:
            return FloatValue(float(value))
        except OverflowError:
            return FloatValue(math.inf if value > 0 else -math.inf)
    if isinstance(value, float):
        return FloatValue(value)
    if isinstance(value, str):
        return StringValue(value)
    return None


def string_to_value(text: str) -> AttrValue:
    """Heuristically type a regex-captured string.

    1. Contains "." and parses as a float -> Float
    2. Parses as a signed 128-bit integer -> BigInteger
    3. Otherwise -> String

    Examples:
        >>> string_to_value("3.14")
        FloatValue(value=3.14)
        >>> string_to_value("42")
        BigIntegerValue(value=42)
        >>> string_to_value("abc")
        StringValue(value='abc')
    """
    if "." in text and _FLOAT_PATTERN.fullmatch(text):
        return FloatValue(float(text))

    if _INT_PATTERN.fullmatch(text):
        try:
            number = int(text)
        except ValueError:
            # beyond the interpreter's int string conversion limit
            return StringValue(text)
        if I128_MIN <= number <= I128_MAX:
            return BigIntegerValue(number)

    return StringValue(text)
