# tests/property/conftest.py
"""Shared Hypothesis strategies for property-based tests.

Usage:
    from tests.property.conftest import json_objects

    @given(obj=json_objects)
    def test_flatten_is_deterministic(obj: dict) -> None:
        ...
"""

from __future__ import annotations

from hypothesis import strategies as st

from jsontimeline.contracts.values import I64_MAX, I64_MIN

# JSON-safe primitives (NaN/Infinity cannot appear in input JSON)
json_primitives = (
    st.none()
    | st.booleans()
    | st.integers(min_value=I64_MIN, max_value=I64_MAX)
    | st.floats(allow_nan=False, allow_infinity=False)
    | st.text(max_size=20)
)

# Keys without the path separator, so dotted paths stay unambiguous
object_keys = st.text(
    min_size=1,
    max_size=10,
    alphabet=st.characters(whitelist_categories=("L", "N")),
)

json_values = st.recursive(
    json_primitives,
    lambda children: st.lists(children, max_size=5) | st.dictionaries(object_keys, children, max_size=5),
    max_leaves=30,
)

json_objects = st.dictionaries(object_keys, json_values, max_size=8)

# Signed decimal integers as text, any width
integer_text = st.integers().map(str)
