# src/jsontimeline/engine/assembler.py
"""Record assembly: one JSON object in, one timeline-attached event out.

Steps, per record:
1. Flatten the object; line attributes pending from the reader come first.
2. Route each attribute to the timeline bucket (configured timeline-name or
   timeline-attr keys) or the event bucket (everything else).
3. Resolve the timeline signature from the first timeline-name key present,
   and add the human-readable timeline name under "name".
4. Resolve the timeline id through the registry.
5. Resolve the event name the same way and add it under "name".
6. Convert the configured timestamp attribute to nanoseconds and add it
   under "timestamp" (the raw attribute is kept).
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any

from jsontimeline.contracts.errors import (
    MalformedInput,
    MissingEventName,
    MissingTimelineIdentity,
    NonNumericTimestamp,
)
from jsontimeline.contracts.identity import AssembledRecord, AttrPair, TimelineSignature
from jsontimeline.contracts.values import (
    I128_MAX,
    I128_MIN,
    AttrValue,
    BigIntegerValue,
    StringValue,
    as_number,
)
from jsontimeline.core.config import ImportSettings, TimestampUnit
from jsontimeline.core.flatten import iter_flattened
from jsontimeline.engine.registry import TimelineRegistry

NAME_KEY = "name"
TIMESTAMP_KEY = "timestamp"


def convert_timestamp(key: str, value: AttrValue, unit: TimestampUnit) -> BigIntegerValue:
    """Convert a timestamp attribute to integer nanoseconds.

    The value is read as a float, scaled by the unit's factor and truncated
    toward zero. Results outside the signed 128-bit range saturate.

    Raises:
        NonNumericTimestamp: If value is Bool or String
    """
    number = as_number(value)
    if number is None:
        raise NonNumericTimestamp(key, value)

    float_ns = number * unit.to_ns_factor()
    if math.isnan(float_ns):
        return BigIntegerValue(0)
    if float_ns >= I128_MAX:
        return BigIntegerValue(I128_MAX)
    if float_ns <= I128_MIN:
        return BigIntegerValue(I128_MIN)
    return BigIntegerValue(int(float_ns))


def _find_first(bucket: Sequence[AttrPair], candidates: Sequence[str]) -> AttrPair | None:
    """Return the first bucket entry whose key is the earliest-listed present candidate."""
    for candidate in candidates:
        for key, value in bucket:
            if key == candidate:
                return key, value
    return None


class RecordAssembler:
    """Turn JSON objects into AssembledRecords.

    Holds no per-record state; the registry is the only thing it mutates.
    """

    def __init__(self, settings: ImportSettings, registry: TimelineRegistry) -> None:
        self._settings = settings
        self._registry = registry
        self._timeline_keys = frozenset(settings.timeline_names) | frozenset(settings.timeline_attrs)

    @property
    def registry(self) -> TimelineRegistry:
        return self._registry

    def classify(self, attrs: Sequence[AttrPair]) -> tuple[list[AttrPair], list[AttrPair]]:
        """Split attributes into (timeline bucket, event bucket), keeping order."""
        timeline_kvs: list[AttrPair] = []
        event_kvs: list[AttrPair] = []
        for key, value in attrs:
            if key in self._timeline_keys:
                timeline_kvs.append((key, value))
            else:
                event_kvs.append((key, value))
        return timeline_kvs, event_kvs

    def assemble(self, record: Any, extra_attrs: Sequence[AttrPair] = ()) -> AssembledRecord:
        """Assemble one record.

        Args:
            record: A decoded JSON value; must be an object
            extra_attrs: Pending non-JSON line attributes, prepended to the record's own

        Raises:
            MalformedInput: record is not a JSON object
            MissingTimelineIdentity: no timeline-name key present
            MissingEventName: no event-name key present
            NonNumericTimestamp: timestamp attribute is not numeric
        """
        if not isinstance(record, Mapping):
            raise MalformedInput(f"Expected JSON object at top level, or in array; got {type(record).__name__}")

        settings = self._settings
        all_kvs = [*extra_attrs, *iter_flattened(record)]
        timeline_kvs, event_kvs = self.classify(all_kvs)

        found = _find_first(timeline_kvs, settings.timeline_names)
        if found is None:
            raise MissingTimelineIdentity(list(settings.timeline_names))
        signature = TimelineSignature(*found)

        timeline_name = (settings.timeline_name_prefix or "") + str(signature.value)
        if timeline_name:
            timeline_kvs.append((NAME_KEY, StringValue(timeline_name)))

        timeline_id = self._registry.resolve_or_create(signature)

        found = _find_first(event_kvs, settings.event_names)
        if found is None:
            raise MissingEventName(list(settings.event_names))
        event_name = (settings.event_name_prefix or "") + str(found[1])
        if not event_name:
            raise MissingEventName(list(settings.event_names))
        event_kvs.append((NAME_KEY, StringValue(event_name)))

        if settings.timestamp_attr is not None:
            found = _find_first(event_kvs, [settings.timestamp_attr])
            if found is not None:
                event_kvs.append((TIMESTAMP_KEY, convert_timestamp(*found, settings.timestamp_unit)))

        return AssembledRecord(
            timeline_id=timeline_id,
            timeline_attrs=tuple(timeline_kvs),
            event_attrs=tuple(event_kvs),
            signature=signature,
        )
