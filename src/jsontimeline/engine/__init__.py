"""Import engine: reading, assembly, identity and the sink session."""

from jsontimeline.engine.assembler import RecordAssembler, convert_timestamp
from jsontimeline.engine.importer import Importer
from jsontimeline.engine.reader import JsonRecords, LineAttributes, MixedFormatReader, PendingAttributes
from jsontimeline.engine.registry import TimelineRegistry
from jsontimeline.engine.session import SinkSession

__all__ = [
    "Importer",
    "JsonRecords",
    "LineAttributes",
    "MixedFormatReader",
    "PendingAttributes",
    "RecordAssembler",
    "SinkSession",
    "TimelineRegistry",
    "convert_timestamp",
]
