"""Timeline identity and prepared-event contracts."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import NewType

from jsontimeline.contracts.values import AttrValue

TimelineId = NewType("TimelineId", uuid.UUID)
"""Opaque timeline identifier, allocated once per distinct TimelineSignature."""

InternedKey = NewType("InternedKey", int)
"""Sink-assigned handle for a declared attribute key."""

AttrPair = tuple[str, AttrValue]
"""A flat (dotted key, typed value) attribute pair."""


def allocate_timeline_id() -> TimelineId:
    """Allocate a new globally unique timeline id."""
    return TimelineId(uuid.uuid4())


@dataclass(frozen=True, slots=True)
class TimelineSignature:
    """The (key, value) pair that determines a timeline's identity.

    Two records with equal signatures always land on the same timeline.
    Equality is variant-aware: Integer 1 and String "1" are different
    signatures.
    """

    key: str
    value: AttrValue


@dataclass(frozen=True, slots=True)
class AssembledRecord:
    """One record after classification and name resolution.

    The ordering position is assigned by the caller once assembly succeeds.
    """

    timeline_id: TimelineId
    timeline_attrs: tuple[AttrPair, ...]
    event_attrs: tuple[AttrPair, ...]
    signature: TimelineSignature


@dataclass(frozen=True, slots=True)
class PreparedEvent:
    """An assembled record with its ordering position, ready for the sink."""

    timeline_id: TimelineId
    timeline_attrs: tuple[AttrPair, ...]
    ordering: int
    event_attrs: tuple[AttrPair, ...]

    @classmethod
    def from_record(cls, record: AssembledRecord, ordering: int) -> PreparedEvent:
        if ordering < 0:
            raise ValueError(f"ordering must be non-negative, got {ordering}")
        return cls(
            timeline_id=record.timeline_id,
            timeline_attrs=record.timeline_attrs,
            ordering=ordering,
            event_attrs=record.event_attrs,
        )
