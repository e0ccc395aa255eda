# src/jsontimeline/engine/importer.py
"""Import driver: inputs -> reader -> assembler -> sink session.

Inputs are processed one after another. Each input has its own ordering
counter starting at zero, advanced once per event handed to the sink. The
timeline registry and the sink session (with its key and metadata caches)
are shared across inputs for the whole run.

Interruption: a threading.Event is polled between records. When it is set
the importer stops reading; a sink call already in progress completes first.
"""

from __future__ import annotations

import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from jsontimeline.contracts.errors import RecordAssemblyError
from jsontimeline.contracts.events import ImportStatus, ImportSummary, InputSummary
from jsontimeline.contracts.identity import AttrPair, PreparedEvent
from jsontimeline.contracts.sink import IngestSinkProtocol
from jsontimeline.core.config import ImportSettings
from jsontimeline.core.logging import get_logger
from jsontimeline.engine.assembler import RecordAssembler
from jsontimeline.engine.reader import JsonRecords, LineAttributes, MixedFormatReader, PendingAttributes
from jsontimeline.engine.registry import TimelineRegistry
from jsontimeline.engine.session import SinkSession

logger = get_logger(__name__)


class ImportInterrupted(Exception):
    """Raised internally to unwind out of an input when shutdown is requested."""


class Importer:
    """Run an import over the configured inputs.

    Example:
        importer = Importer(settings.metadata, JSONLSink(path="-"))
        summary = importer.run()
    """

    def __init__(
        self,
        settings: ImportSettings,
        sink: IngestSinkProtocol,
        *,
        registry: TimelineRegistry | None = None,
    ) -> None:
        self._settings = settings
        self._registry = registry if registry is not None else TimelineRegistry()
        self._assembler = RecordAssembler(settings, self._registry)
        self._session = SinkSession(
            sink,
            rename_timeline_attrs=settings.rename_timeline_attrs,
            rename_event_attrs=settings.rename_event_attrs,
        )
        self._regex = settings.compile_non_json_regex()

    @property
    def registry(self) -> TimelineRegistry:
        return self._registry

    @property
    def session(self) -> SinkSession:
        return self._session

    def run(self, shutdown_event: threading.Event | None = None) -> ImportSummary:
        """Import every configured input in order.

        Args:
            shutdown_event: Optional pre-created shutdown flag, polled between records

        Returns:
            ImportSummary with per-input counters

        Raises:
            RecordImportError: First unrecoverable input error
            FileNotFoundError: An input does not exist
        """
        run_id = str(self._settings.run_id) if self._settings.run_id is not None else None
        summary = ImportSummary(run_id=run_id)
        shutdown = shutdown_event if shutdown_event is not None else threading.Event()

        for path in self._settings.inputs:
            if not path.exists():
                logger.warning("input_missing", path=str(path))

        try:
            for path in self._settings.inputs:
                input_summary = InputSummary(path=path)
                summary.inputs.append(input_summary)
                try:
                    self.import_text(self._read(path), input_summary, shutdown)
                except ImportInterrupted:
                    summary.status = ImportStatus.INTERRUPTED
                    logger.warning(
                        "import_interrupted",
                        path=str(path),
                        events_sent=input_summary.events_sent,
                    )
                    break
                logger.info(
                    "input_complete",
                    path=str(path),
                    events_sent=input_summary.events_sent,
                    records_skipped=input_summary.records_skipped,
                )
        finally:
            summary.timelines = len(self._registry)
            summary.metadata_updates = self._session.stats.metadata_updates

        return summary

    def _read(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    def import_text(
        self,
        text: str,
        input_summary: InputSummary,
        shutdown: threading.Event | None = None,
    ) -> None:
        """Import one input's text, advancing input_summary as events are sent.

        Raises:
            ImportInterrupted: shutdown was set between records
        """
        reader = MixedFormatReader(
            text,
            non_json_regex=self._regex,
            non_json_attrs=self._settings.non_json_attrs,
        )
        pending = PendingAttributes()

        for step in reader:
            match step:
                case LineAttributes(attrs=attrs):
                    pending.extend(attrs)
                case JsonRecords(values=values) if values:
                    extra = pending.snapshot()
                    for value in values:
                        if shutdown is not None and shutdown.is_set():
                            raise ImportInterrupted
                        self._import_record(value, extra, input_summary)
                    pending.flush()

    def _import_record(self, value: Any, extra: tuple[AttrPair, ...], input_summary: InputSummary) -> None:
        try:
            record = self._assembler.assemble(value, extra)
        except RecordAssemblyError as e:
            if self._settings.on_record_error != "skip":
                raise
            input_summary.records_skipped += 1
            logger.warning(
                "record_skipped",
                path=str(input_summary.path),
                error=str(e),
                error_type=type(e).__name__,
            )
            return

        self._session.send(PreparedEvent.from_record(record, input_summary.events_sent))
        input_summary.events_sent += 1

    def close(self) -> None:
        self._session.close()


@contextmanager
def shutdown_handler_context() -> Iterator[threading.Event]:
    """Install SIGINT/SIGTERM handlers that set a shutdown event.

    On first signal: sets the event and restores the default SIGINT handler,
    so a second Ctrl-C raises KeyboardInterrupt immediately.

    Off the main thread, signal registration is skipped (signal.signal()
    raises ValueError there); the event still works but only programmatically.
    """
    shutdown_event = threading.Event()

    if threading.current_thread() is not threading.main_thread():
        yield shutdown_event
        return

    original_sigint = signal.getsignal(signal.SIGINT)
    original_sigterm = signal.getsignal(signal.SIGTERM)

    def _handler(signum: int, frame: Any) -> None:
        shutdown_event.set()
        signal.signal(signal.SIGINT, signal.default_int_handler)

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)
    try:
        yield shutdown_event
    finally:
        signal.signal(signal.SIGINT, original_sigint)
        signal.signal(signal.SIGTERM, original_sigterm)
