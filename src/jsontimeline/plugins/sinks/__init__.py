"""Built-in ingest sinks."""

from jsontimeline.contracts.sink import IngestSinkProtocol
from jsontimeline.core.config import SinkSettings
from jsontimeline.plugins.sinks.jsonl_sink import JSONLSink
from jsontimeline.plugins.sinks.null_sink import NullSink

__all__ = ["JSONLSink", "NullSink", "create_sink"]


def create_sink(settings: SinkSettings) -> IngestSinkProtocol:
    """Instantiate the sink named by settings.kind."""
    if settings.kind == "null":
        return NullSink()
    return JSONLSink(path=settings.path, encoding=settings.encoding)
