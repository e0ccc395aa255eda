# src/jsontimeline/engine/session.py
"""Sink session: key interning, renaming and timeline-metadata dedup.

A SinkSession wraps one IngestSinkProtocol for the duration of a run and owns
all of the run's sink-facing caches:

- one KeyTable per scope (timeline, event) that normalizes keys with the scope
  prefix, applies the configured renames, and declares each distinct key with
  the sink exactly once
- a last-sent cache of (timeline id, interned key) -> value, so a timeline
  attribute is only re-sent when its value changes
- the currently open timeline, so open_timeline is only called on a switch

Event attributes are never deduplicated; every event is sent in full.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from jsontimeline.contracts.identity import AttrPair, InternedKey, PreparedEvent, TimelineId
from jsontimeline.contracts.sink import IngestSinkProtocol
from jsontimeline.contracts.values import AttrValue
from jsontimeline.core.config import AttrKeyRename

TIMELINE_SCOPE = "timeline"
EVENT_SCOPE = "event"


def normalize_key(scope: str, key: str) -> str:
    """Prefix key with "<scope>." unless it already has it.

    >>> normalize_key("timeline", "host")
    'timeline.host'
    >>> normalize_key("timeline", "timeline.host")
    'timeline.host'
    """
    prefix = f"{scope}."
    return key if key.startswith(prefix) else prefix + key


class KeyTable:
    """Rename table plus interned-key cache for one scope.

    Renames are looked up after normalization, so "host" and "timeline.host"
    name the same original key. The cache only grows.
    """

    def __init__(self, scope: str, sink: IngestSinkProtocol, renames: Iterable[AttrKeyRename] = ()) -> None:
        self.scope = scope
        self._sink = sink
        self._renames: dict[str, str] = {}
        for rename in renames:
            # First rename for a key wins (CLI renames are listed first)
            self._renames.setdefault(normalize_key(scope, rename.original), normalize_key(scope, rename.new))
        self._interned: dict[str, InternedKey] = {}

    def resolve_name(self, key: str) -> str:
        """Normalized, renamed form of key."""
        normalized = normalize_key(self.scope, key)
        return self._renames.get(normalized, normalized)

    def intern(self, key: str) -> InternedKey:
        """Handle for key, declaring it with the sink on first use."""
        name = self.resolve_name(key)
        handle = self._interned.get(name)
        if handle is None:
            handle = self._sink.declare_key(name)
            self._interned[name] = handle
        return handle

    def __len__(self) -> int:
        return len(self._interned)


@dataclass(slots=True)
class SessionStats:
    """Counters for sink calls actually made."""

    timelines_opened: int = 0
    metadata_updates: int = 0
    metadata_skipped: int = 0
    events_sent: int = 0


class SinkSession:
    """Deliver prepared events to a sink with interning and metadata dedup.

    Not thread-safe: one session serves one sequential stream of events.
    """

    def __init__(
        self,
        sink: IngestSinkProtocol,
        *,
        rename_timeline_attrs: Iterable[AttrKeyRename] = (),
        rename_event_attrs: Iterable[AttrKeyRename] = (),
    ) -> None:
        self.sink = sink
        self.timeline_keys = KeyTable(TIMELINE_SCOPE, sink, rename_timeline_attrs)
        self.event_keys = KeyTable(EVENT_SCOPE, sink, rename_event_attrs)
        self._sent_timeline_attrs: dict[tuple[TimelineId, InternedKey], AttrValue] = {}
        self._current_timeline: TimelineId | None = None
        self.stats = SessionStats()

    @property
    def current_timeline(self) -> TimelineId | None:
        return self._current_timeline

    def send(self, event: PreparedEvent) -> None:
        """Send one event, with any changed timeline metadata, to the sink."""
        self.open_timeline(event.timeline_id)
        self.update_timeline_metadata(event.timeline_id, event.timeline_attrs)

        interned_event_attrs = [(self.event_keys.intern(key), value) for key, value in event.event_attrs]
        self.sink.send_event(event.ordering, interned_event_attrs)
        self.stats.events_sent += 1

    def open_timeline(self, timeline_id: TimelineId) -> None:
        if self._current_timeline != timeline_id:
            self.sink.open_timeline(timeline_id)
            self._current_timeline = timeline_id
            self.stats.timelines_opened += 1

    def update_timeline_metadata(self, timeline_id: TimelineId, attrs: Iterable[AttrPair]) -> None:
        """Send the attributes whose value differs from what was last sent.

        The open timeline must be timeline_id. Each changed attribute goes in
        its own metadata call, and the cache is updated only after the call
        returns, so a failed call leaves the attribute eligible for resend.
        """
        if self._current_timeline != timeline_id:
            raise RuntimeError(f"Timeline {timeline_id} is not open (open: {self._current_timeline})")

        for key, value in attrs:
            handle = self.timeline_keys.intern(key)
            cache_key = (timeline_id, handle)
            if cache_key in self._sent_timeline_attrs and self._sent_timeline_attrs[cache_key] == value:
                self.stats.metadata_skipped += 1
                continue
            self.sink.set_timeline_metadata([(handle, value)])
            self._sent_timeline_attrs[cache_key] = value
            self.stats.metadata_updates += 1

    def close(self) -> None:
        self.sink.close()
