"""Ingest sink protocol.

The sink is the durability boundary: once a call returns, its effect is
considered delivered. The engine never retries a failed call, and exceptions
raised by a sink propagate unchanged.

Lifecycle:
1. open_timeline(id) - select the timeline subsequent calls apply to
2. declare_key(key) - register a scope-prefixed key once, get a handle back
3. set_timeline_metadata(attrs) - update attributes on the open timeline
4. send_event(ordering, attrs) - append one event to the open timeline
5. close() - flush and release resources
"""

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from jsontimeline.contracts.identity import InternedKey, TimelineId
from jsontimeline.contracts.values import AttrValue


@runtime_checkable
class IngestSinkProtocol(Protocol):
    """Protocol every ingest sink implements.

    Example:
        class PrintSink:
            name = "print"

            def open_timeline(self, timeline_id: TimelineId) -> None:
                print("timeline", timeline_id)
            ...
    """

    name: str

    def open_timeline(self, timeline_id: TimelineId) -> None:
        """Make timeline_id the target of subsequent metadata and event calls."""
        ...

    def declare_key(self, key: str) -> InternedKey:
        """Register a scope-prefixed attribute key and return its handle."""
        ...

    def set_timeline_metadata(self, attrs: Iterable[tuple[InternedKey, AttrValue]]) -> None:
        """Apply timeline-scoped attribute updates to the open timeline."""
        ...

    def send_event(self, ordering: int, attrs: Iterable[tuple[InternedKey, AttrValue]]) -> None:
        """Append one event to the open timeline at the given ordering position."""
        ...

    def close(self) -> None:
        """Flush and release resources."""
        ...
