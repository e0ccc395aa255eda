"""Import error hierarchy.

None of these are retried by the engine. They propagate to the caller, which
either aborts the run or (for RecordAssemblyError subclasses, when configured
with on_record_error="skip") drops the offending record.
"""

from __future__ import annotations

from typing import Any


class RecordImportError(Exception):
    """Base class for every error raised while turning input into events."""


class RecordAssemblyError(RecordImportError):
    """A single record could not be assembled into an event.

    The reader is unaffected, so processing may continue with the next record.
    """


class MalformedInput(RecordAssemblyError):
    """JSON parse failure, or a record that is not a JSON object.

    Parse failures are raised by the reader and always abort the input, since
    the cursor cannot advance past text it failed to parse.
    """

    def __init__(self, message: str, *, position: int | None = None) -> None:
        self.position = position
        super().__init__(message)


class UnmatchedNonJsonLine(RecordImportError):
    """A non-JSON line did not match the configured regex."""

    def __init__(self, message: str, *, line: str) -> None:
        self.line = line
        super().__init__(message)


class NoRegexConfigured(UnmatchedNonJsonLine):
    """Non-JSON input was found but no regex was configured to parse it."""

    def __init__(self, *, line: str) -> None:
        super().__init__(
            "Found non-json data. Supply a non-json regex (--non-json-regex) to parse it.",
            line=line,
        )


class AttributeCaptureMismatch(RecordImportError):
    """Regex captures and configured non-JSON attribute names disagree."""

    def __init__(self, message: str, *, line: str) -> None:
        self.line = line
        super().__init__(message)


class MissingTimelineIdentity(RecordAssemblyError):
    """No configured timeline-name key is present in a record."""

    def __init__(self, candidates: list[str]) -> None:
        self.candidates = candidates
        super().__init__(
            "Could not determine timeline name and identity for event. "
            f"Make sure a timeline-name is given and at least one of {candidates} "
            "is present in each input event."
        )


class MissingEventName(RecordAssemblyError):
    """No configured event-name key is present in a record."""

    def __init__(self, candidates: list[str]) -> None:
        self.candidates = candidates
        super().__init__(
            "Could not determine event name. "
            f"Make sure an event-name is given and at least one of {candidates} "
            "is present in each input event."
        )


class NonNumericTimestamp(RecordAssemblyError):
    """The configured timestamp attribute holds a non-numeric value."""

    def __init__(self, key: str, value: Any) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Found non-numeric value in timestamp field '{key}': {value}")
