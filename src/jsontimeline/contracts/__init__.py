"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core/engine.
Settings classes are NOT re-exported here - import them from
jsontimeline.core.config.
"""

from jsontimeline.contracts.errors import (
    AttributeCaptureMismatch,
    MalformedInput,
    MissingEventName,
    MissingTimelineIdentity,
    NonNumericTimestamp,
    NoRegexConfigured,
    RecordAssemblyError,
    RecordImportError,
    UnmatchedNonJsonLine,
)
from jsontimeline.contracts.events import ImportStatus, ImportSummary, InputSummary
from jsontimeline.contracts.identity import (
    AssembledRecord,
    AttrPair,
    InternedKey,
    PreparedEvent,
    TimelineId,
    TimelineSignature,
    allocate_timeline_id,
)
from jsontimeline.contracts.sink import IngestSinkProtocol
from jsontimeline.contracts.values import (
    AttrKind,
    AttrValue,
    BigIntegerValue,
    BoolValue,
    FloatValue,
    IntegerValue,
    StringValue,
)

__all__ = [
    "AssembledRecord",
    "AttrKind",
    "AttrPair",
    "AttrValue",
    "AttributeCaptureMismatch",
    "BigIntegerValue",
    "BoolValue",
    "FloatValue",
    "ImportStatus",
    "ImportSummary",
    "IngestSinkProtocol",
    "InputSummary",
    "IntegerValue",
    "InternedKey",
    "MalformedInput",
    "MissingEventName",
    "MissingTimelineIdentity",
    "NoRegexConfigured",
    "NonNumericTimestamp",
    "PreparedEvent",
    "RecordAssemblyError",
    "RecordImportError",
    "StringValue",
    "TimelineId",
    "TimelineSignature",
    "UnmatchedNonJsonLine",
    "allocate_timeline_id",
]
