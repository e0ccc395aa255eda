"""Run outcome reporting.

Summaries are produced by the importer and consumed by CLI formatters for
human-readable or structured output.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any


class ImportStatus(StrEnum):
    """Final status of an import run."""

    COMPLETED = "completed"
    INTERRUPTED = "interrupted"


@dataclass(slots=True)
class InputSummary:
    """Per-input counters.

    events_sent is also the next ordering value for this input, since
    orderings start at zero and advance by one per sent event.
    """

    path: Path
    events_sent: int = 0
    records_skipped: int = 0


@dataclass(slots=True)
class ImportSummary:
    """Outcome of a whole import run."""

    run_id: str | None
    inputs: list[InputSummary] = field(default_factory=list)
    timelines: int = 0
    metadata_updates: int = 0
    status: ImportStatus = ImportStatus.COMPLETED

    @property
    def events_sent(self) -> int:
        return sum(i.events_sent for i in self.inputs)

    @property
    def records_skipped(self) -> int:
        return sum(i.records_skipped for i in self.inputs)

    @property
    def interrupted(self) -> bool:
        return self.status == ImportStatus.INTERRUPTED

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "status": self.status.value,
            "timelines": self.timelines,
            "events_sent": self.events_sent,
            "records_skipped": self.records_skipped,
            "metadata_updates": self.metadata_updates,
            "inputs": [
                {"path": str(i.path), "events_sent": i.events_sent, "records_skipped": i.records_skipped}
                for i in self.inputs
            ],
        }
