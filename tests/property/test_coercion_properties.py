"""Property tests for value coercion."""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from jsontimeline.contracts.values import (
    I64_MAX,
    I64_MIN,
    I128_MAX,
    I128_MIN,
    U64_MAX,
    BigIntegerValue,
    FloatValue,
    IntegerValue,
    StringValue,
)
from jsontimeline.core.coercion import json_leaf_to_value, string_to_value
from tests.property.conftest import integer_text
from tests.property.settings import QUICK_SETTINGS, STANDARD_SETTINGS


@given(n=st.integers(min_value=I64_MIN, max_value=I64_MAX))
@STANDARD_SETTINGS
def test_i64_json_ints_are_integers(n: int) -> None:
    assert json_leaf_to_value(n) == IntegerValue(n)


@given(n=st.integers(min_value=I64_MAX + 1, max_value=U64_MAX))
@STANDARD_SETTINGS
def test_u64_json_ints_are_big_integers(n: int) -> None:
    assert json_leaf_to_value(n) == BigIntegerValue(n)


@given(n=st.integers(min_value=U64_MAX + 1))
@QUICK_SETTINGS
def test_json_ints_beyond_u64_are_floats(n: int) -> None:
    assert isinstance(json_leaf_to_value(n), FloatValue)


@given(text=integer_text)
@STANDARD_SETTINGS
def test_integer_text(text: str) -> None:
    value = string_to_value(text)
    n = int(text)
    if I128_MIN <= n <= I128_MAX:
        assert value == BigIntegerValue(n)
    else:
        assert value == StringValue(text)


@given(x=st.floats(allow_nan=False, allow_infinity=False))
@STANDARD_SETTINGS
def test_float_repr_text_is_float(x: float) -> None:
    text = repr(x)
    if "." in text:
        assert string_to_value(text) == FloatValue(x)


@given(text=st.text(alphabet=st.characters(whitelist_categories=("L",)), min_size=1, max_size=20))
@STANDARD_SETTINGS
def test_letters_stay_strings(text: str) -> None:
    assert string_to_value(text) == StringValue(text)
