"""Structured event logging for mathextract.

Provides an event schema, a filesystem NDJSON sink, and safe emit
helpers that never raise uncaught exceptions.
"""

from mathextract.logging.events import (
    EventLevel,
    EventType,
    ExtractEvent,
    configure_logging,
    emit,
    emit_info,
    emit_warning,
    get_sink,
    truncate_context,
)
from mathextract.logging.sink import EventSink

__all__ = [
    "EventLevel",
    "EventSink",
    "EventType",
    "ExtractEvent",
    "configure_logging",
    "emit",
    "emit_info",
    "emit_warning",
    "get_sink",
    "truncate_context",
]
