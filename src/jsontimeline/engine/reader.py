# src/jsontimeline/engine/reader.py
"""Mixed-format reader: JSON objects, JSON arrays and regex-matched lines.

The reader walks a text buffer one step at a time. Each step skips leading
whitespace and looks at the next character:

- "[" - a complete JSON array; each element becomes a record
- "{" - one complete JSON object
- anything else - the rest of the line, matched against the non-JSON regex;
  its captures become attributes named positionally by non_json_attrs

Trailing content after a JSON value stays in the buffer for the next step, so
several values may share one line. Non-JSON lines do not become records of
their own: their attributes annotate the JSON records that follow (see
PendingAttributes).

NOTE: Non-standard JSON constants (NaN, Infinity, -Infinity) are rejected
at parse time. Use null for missing values.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from itertools import zip_longest
from typing import Any

from jsontimeline.contracts.errors import (
    AttributeCaptureMismatch,
    MalformedInput,
    NoRegexConfigured,
    UnmatchedNonJsonLine,
)
from jsontimeline.contracts.identity import AttrPair
from jsontimeline.core.coercion import string_to_value

_WHITESPACE = re.compile(r"\s*")


def _reject_nonfinite_constant(value: str) -> None:
    """Reject NaN/Infinity, which json accepts by default but RFC 8259 does not."""
    raise ValueError(f"Non-standard JSON constant '{value}' not allowed. Use null for missing values.")


_DECODER = json.JSONDecoder(parse_constant=_reject_nonfinite_constant)


@dataclass(frozen=True, slots=True)
class JsonRecords:
    """JSON values parsed in one step (one object, or every element of an array).

    Elements are not checked here; the assembler rejects non-objects.
    """

    values: tuple[Any, ...]
    position: int


@dataclass(frozen=True, slots=True)
class LineAttributes:
    """Attributes extracted from one non-JSON line."""

    attrs: tuple[AttrPair, ...]
    line: str


ReaderStep = JsonRecords | LineAttributes


@dataclass(slots=True)
class TextCursor:
    """A position in one input's text buffer. Only ever moves forward."""

    text: str
    pos: int = 0

    def skip_whitespace(self) -> None:
        match = _WHITESPACE.match(self.text, self.pos)
        if match is not None:
            self.pos = match.end()

    def peek(self) -> str | None:
        return self.text[self.pos] if self.pos < len(self.text) else None

    @property
    def remaining(self) -> str:
        return self.text[self.pos :]


class MixedFormatReader:
    """Step through a text buffer, yielding JSON records and line attributes.

    Not restartable after an error: the cursor stays at the failing value.
    Build a new reader over cursor.remaining to resume past it.
    """

    def __init__(
        self,
        text: str,
        *,
        non_json_regex: re.Pattern[str] | None = None,
        non_json_attrs: Sequence[str] = (),
    ) -> None:
        self.cursor = TextCursor(text)
        self._regex = non_json_regex
        self._attr_names = tuple(non_json_attrs)

    def __iter__(self) -> Iterator[ReaderStep]:
        while (step := self.step()) is not None:
            yield step

    def step(self) -> ReaderStep | None:
        """Consume one JSON value or one line. Returns None at end of input.

        Raises:
            MalformedInput: JSON value failed to parse
            NoRegexConfigured: Non-JSON line and no regex
            UnmatchedNonJsonLine: Non-JSON line the regex does not match
            AttributeCaptureMismatch: Captures and attribute names disagree
        """
        self.cursor.skip_whitespace()
        ch = self.cursor.peek()
        if ch is None:
            return None
        if ch == "[":
            start = self.cursor.pos
            array = self._decode()
            return JsonRecords(values=tuple(array), position=start)
        if ch == "{":
            start = self.cursor.pos
            return JsonRecords(values=(self._decode(),), position=start)
        return self._read_line()

    def _decode(self) -> Any:
        try:
            value, end = _DECODER.raw_decode(self.cursor.text, self.cursor.pos)
        except json.JSONDecodeError as e:
            raise MalformedInput(
                f"JSON parse error at line {e.lineno} col {e.colno}: {e.msg}",
                position=e.pos,
            ) from e
        except ValueError as e:
            # NaN/Infinity rejected by _reject_nonfinite_constant
            raise MalformedInput(f"JSON parse error: {e}", position=self.cursor.pos) from e
        self.cursor.pos = end
        return value

    def _read_line(self) -> LineAttributes:
        text = self.cursor.text
        start = self.cursor.pos
        newline = text.find("\n", start)
        end = len(text) if newline == -1 else newline
        line = text[start:end].removesuffix("\r")

        if self._regex is None:
            raise NoRegexConfigured(line=line)
        attrs = tuple(extract_line_attributes(line, self._regex, self._attr_names))

        self.cursor.pos = end
        return LineAttributes(attrs=attrs, line=line)


def extract_line_attributes(line: str, regex: re.Pattern[str], attr_names: Sequence[str]) -> list[AttrPair]:
    """Pair the first regex match's capture groups with attribute names.

    Raises:
        UnmatchedNonJsonLine: The regex does not match the line
        AttributeCaptureMismatch: A capture has no name, a name has no capture,
            or a capture group did not participate in the match
    """
    match = regex.search(line)
    if match is None:
        raise UnmatchedNonJsonLine(f"Non-json line did not match the supplied regex: {line!r}", line=line)

    attrs: list[AttrPair] = []
    _missing = object()
    for name, capture in zip_longest(attr_names, match.groups(), fillvalue=_missing):
        if capture is _missing:
            raise AttributeCaptureMismatch(
                f"Requested non-json attr '{name}' has no corresponding regex capture",
                line=line,
            )
        if name is _missing:
            raise AttributeCaptureMismatch(
                f"Regex capture {capture!r} has no corresponding attr; specify one with --non-json-attr",
                line=line,
            )
        if capture is None:
            raise AttributeCaptureMismatch(
                f"Regex capture for non-json attr '{name}' had no corresponding match",
                line=line,
            )
        attrs.append((name, string_to_value(capture)))
    return attrs


@dataclass(slots=True)
class PendingAttributes:
    """Line attributes waiting for the next JSON records.

    Attributes from consecutive non-JSON lines accumulate. They apply to
    every record of the next non-empty JSON step and are then flushed; an
    empty array carries no records and leaves them pending.
    """

    _attrs: list[AttrPair] = field(default_factory=list)

    def extend(self, attrs: Sequence[AttrPair]) -> None:
        self._attrs.extend(attrs)

    def snapshot(self) -> tuple[AttrPair, ...]:
        return tuple(self._attrs)

    def flush(self) -> None:
        self._attrs.clear()

    def __len__(self) -> int:
        return len(self._attrs)
