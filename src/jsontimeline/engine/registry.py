"""Timeline identity registry.

Maps each TimelineSignature to a TimelineId for the lifetime of one run. Ids
are allocated on first sight and never evicted or reassigned.

The registry is shared by every input of a run, so the same signature seen in
two files resolves to the same timeline. Each input still keeps its own
ordering counter, so such timelines receive conflicting orderings; that is
accepted behaviour, not something the registry tries to reconcile.
"""

from __future__ import annotations

import threading
from collections.abc import Callable

from jsontimeline.contracts.identity import TimelineId, TimelineSignature, allocate_timeline_id
from jsontimeline.core.logging import get_logger

logger = get_logger(__name__)


class TimelineRegistry:
    """Thread-safe signature -> timeline id mapping.

    Example:
        registry = TimelineRegistry()
        tid = registry.resolve_or_create(TimelineSignature("host", StringValue("a")))
        assert registry.resolve_or_create(TimelineSignature("host", StringValue("a"))) == tid
    """

    def __init__(self, allocate: Callable[[], TimelineId] = allocate_timeline_id) -> None:
        self._allocate = allocate
        self._known: dict[TimelineSignature, TimelineId] = {}
        self._lock = threading.Lock()

    def resolve_or_create(self, signature: TimelineSignature) -> TimelineId:
        """Return the id for signature, allocating one on first sight."""
        with self._lock:
            timeline_id = self._known.get(signature)
            if timeline_id is None:
                timeline_id = self._allocate()
                self._known[signature] = timeline_id
                logger.debug(
                    "timeline_allocated",
                    key=signature.key,
                    value=str(signature.value),
                    timeline_id=str(timeline_id),
                )
            return timeline_id

    def get(self, signature: TimelineSignature) -> TimelineId | None:
        with self._lock:
            return self._known.get(signature)

    def __len__(self) -> int:
        with self._lock:
            return len(self._known)

    def __contains__(self, signature: object) -> bool:
        with self._lock:
            return signature in self._known
