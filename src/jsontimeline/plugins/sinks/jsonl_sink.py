# src/jsontimeline/plugins/sinks/jsonl_sink.py
"""JSONL sink plugin.

Writes every sink call as one JSON object per line, to a file or stdout:

    {"op": "open_timeline", "timeline_id": "<uuid>"}
    {"op": "declare_key", "key": "timeline.host", "handle": 0}
    {"op": "timeline_metadata", "attrs": [[0, {"type": "string", "value": "a"}]]}
    {"op": "event", "ordering": 0, "attrs": [[1, {"type": "integer", "value": 3}]]}

The output is a faithful transcript of what a network ingest client would
have been asked to do, so it can be replayed or inspected.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import IO, Any, Literal

from pydantic import BaseModel

from jsontimeline.contracts.identity import InternedKey, TimelineId
from jsontimeline.contracts.values import AttrValue, to_json_payload


class JSONLSinkConfig(BaseModel):
    """Configuration for the JSONL sink."""

    model_config = {"frozen": True}

    path: str = "-"
    encoding: str = "utf-8"
    mode: Literal["write", "append"] = "write"


class JSONLSink:
    """Write sink calls as JSON lines.

    Config options:
        path: Output path, or "-" for stdout (default)
        encoding: File encoding (default: "utf-8")
        mode: "write" (truncate) or "append"

    The file is opened lazily on the first call and flushed after every line.
    """

    name = "jsonl"
    plugin_version = "1.0.0"

    def __init__(self, path: str | Path = "-", *, encoding: str = "utf-8", mode: str = "write") -> None:
        cfg = JSONLSinkConfig(path=str(path), encoding=encoding, mode=mode)
        self._path = cfg.path
        self._encoding = cfg.encoding
        self._mode = cfg.mode
        self._file: IO[str] | None = None
        self._owns_file = False
        self._next_handle = 0

    def _get_file(self) -> IO[str]:
        if self._file is None:
            if self._path == "-":
                self._file = sys.stdout
            else:
                file_mode = "a" if self._mode == "append" else "w"
                self._file = open(self._path, file_mode, encoding=self._encoding)  # noqa: SIM115 - closed in close()
                self._owns_file = True
        return self._file

    def _write(self, record: dict[str, Any]) -> None:
        f = self._get_file()
        f.write(json.dumps(record, allow_nan=False) + "\n")
        f.flush()

    @staticmethod
    def _encode_attrs(attrs: Iterable[tuple[InternedKey, AttrValue]]) -> list[list[Any]]:
        return [[handle, to_json_payload(value)] for handle, value in attrs]

    def open_timeline(self, timeline_id: TimelineId) -> None:
        self._write({"op": "open_timeline", "timeline_id": str(timeline_id)})

    def declare_key(self, key: str) -> InternedKey:
        handle = InternedKey(self._next_handle)
        self._next_handle += 1
        self._write({"op": "declare_key", "key": key, "handle": handle})
        return handle

    def set_timeline_metadata(self, attrs: Iterable[tuple[InternedKey, AttrValue]]) -> None:
        self._write({"op": "timeline_metadata", "attrs": self._encode_attrs(attrs)})

    def send_event(self, ordering: int, attrs: Iterable[tuple[InternedKey, AttrValue]]) -> None:
        self._write({"op": "event", "ordering": ordering, "attrs": self._encode_attrs(attrs)})

    def close(self) -> None:
        if self._file is not None and self._owns_file:
            self._file.close()
        self._file = None
        self._owns_file = False
