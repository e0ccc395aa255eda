"""NullSink - a sink that discards everything.

Used for dry runs: the whole import runs (parsing, assembly, interning,
metadata dedup) but nothing is delivered. Keys still get distinct handles so
the session behaves exactly as it would against a real sink.
"""

from collections.abc import Iterable
from itertools import count

from jsontimeline.contracts.identity import InternedKey, TimelineId
from jsontimeline.contracts.values import AttrValue


class NullSink:
    """Counts calls, keeps nothing."""

    name = "null"
    plugin_version = "1.0.0"

    def __init__(self) -> None:
        self._handles = count()
        self.timelines_opened = 0
        self.keys_declared = 0
        self.metadata_calls = 0
        self.events = 0

    def open_timeline(self, timeline_id: TimelineId) -> None:
        self.timelines_opened += 1

    def declare_key(self, key: str) -> InternedKey:
        self.keys_declared += 1
        return InternedKey(next(self._handles))

    def set_timeline_metadata(self, attrs: Iterable[tuple[InternedKey, AttrValue]]) -> None:
        self.metadata_calls += 1

    def send_event(self, ordering: int, attrs: Iterable[tuple[InternedKey, AttrValue]]) -> None:
        self.events += 1

    def close(self) -> None:
        pass
