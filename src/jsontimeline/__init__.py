"""
jsontimeline: import loosely structured JSON and text logs as timeline events.

Reads JSON objects, JSON arrays of objects, and regex-matched text lines,
flattens them into dotted attribute paths, and forwards them to an ingest
sink as events attached to identified timelines.
"""

__version__ = "0.1.0"
