# tests/fixtures/sinks.py
"""Test sinks.

CollectSink records every call so tests can assert on exactly what the
engine asked the sink to do.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from jsontimeline.contracts import AttrValue, InternedKey, TimelineId


@dataclass
class SentEvent:
    timeline_id: TimelineId | None
    ordering: int
    attrs: list[tuple[str, AttrValue]]

    def get(self, key: str) -> AttrValue | None:
        for k, v in self.attrs:
            if k == key:
                return v
        return None


class CollectSink:
    """Sink that records every call.

    Usage:
        sink = CollectSink()
        sink = CollectSink(fail_on="send_event")  # raise on that operation
    """

    name = "collect"

    def __init__(self, *, fail_on: str | None = None) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.key_names: dict[InternedKey, str] = {}
        self.open: TimelineId | None = None
        self.events: list[SentEvent] = []
        self.metadata: list[tuple[TimelineId | None, list[tuple[str, AttrValue]]]] = []
        self.closed = False
        self._fail_on = fail_on

    def _maybe_fail(self, op: str) -> None:
        if self._fail_on == op:
            raise ConnectionError(f"sink unavailable during {op}")

    def _named(self, attrs: Iterable[tuple[InternedKey, AttrValue]]) -> list[tuple[str, AttrValue]]:
        return [(self.key_names[handle], value) for handle, value in attrs]

    def open_timeline(self, timeline_id: TimelineId) -> None:
        self._maybe_fail("open_timeline")
        self.calls.append(("open_timeline", timeline_id))
        self.open = timeline_id

    def declare_key(self, key: str) -> InternedKey:
        self._maybe_fail("declare_key")
        assert key not in self.key_names.values(), f"key {key!r} declared twice"
        handle = InternedKey(len(self.key_names))
        self.key_names[handle] = key
        self.calls.append(("declare_key", key, handle))
        return handle

    def set_timeline_metadata(self, attrs: Iterable[tuple[InternedKey, AttrValue]]) -> None:
        self._maybe_fail("set_timeline_metadata")
        named = self._named(attrs)
        self.calls.append(("set_timeline_metadata", named))
        self.metadata.append((self.open, named))

    def send_event(self, ordering: int, attrs: Iterable[tuple[InternedKey, AttrValue]]) -> None:
        self._maybe_fail("send_event")
        named = self._named(attrs)
        self.calls.append(("send_event", ordering, named))
        self.events.append(SentEvent(timeline_id=self.open, ordering=ordering, attrs=named))

    def close(self) -> None:
        self.closed = True

    def ops(self) -> list[str]:
        return [call[0] for call in self.calls]
