"""JSON flattening into dotted attribute paths.

Depth-first walk over a decoded JSON object. Object keys extend the path with
the literal key; array elements extend it with their decimal index. Only
scalar leaves produce pairs: null is dropped, and empty objects/arrays vanish.

    {"a": {"b": 1}, "c": [2, 3]}  ->  a.b=1, c.0=2, c.1=3

Output order is traversal order (object insertion order, then array order),
so flattening the same document twice gives the same sequence.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from jsontimeline.contracts.identity import AttrPair
from jsontimeline.core.coercion import json_leaf_to_value

AttributePath = tuple[str, ...]

PATH_SEPARATOR = "."


def join_path(path: AttributePath) -> str:
    return PATH_SEPARATOR.join(path)


def walk_json(node: Any, path: AttributePath = ()) -> Iterator[tuple[AttributePath, Any]]:
    """Yield (path, leaf) for every non-composite value below node.

    Leaves include null; callers decide what to drop.
    """
    if isinstance(node, Mapping):
        for key, child in node.items():
            yield from walk_json(child, (*path, key))
    elif isinstance(node, Sequence) and not isinstance(node, str):
        for index, child in enumerate(node):
            yield from walk_json(child, (*path, str(index)))
    else:
        yield path, node


def iter_flattened(obj: Mapping[str, Any]) -> Iterator[AttrPair]:
    """Lazily yield (dotted key, AttrValue) pairs for a JSON object."""
    for path, leaf in walk_json(obj):
        value = json_leaf_to_value(leaf)
        if value is not None:
            yield join_path(path), value


def flatten_object(obj: Mapping[str, Any]) -> list[AttrPair]:
    """Materialized form of iter_flattened()."""
    return list(iter_flattened(obj))
