"""Structured event logging for dataorganizer.

Provides the event schema, a filesystem NDJSON sink, and safe emit
helpers that never raise.
"""

from dataorganizer.logging.events import (
    Event,
    EventLevel,
    EventType,
    emit,
    emit_error,
    emit_info,
    emit_warning,
    get_sink,
    set_log_dir,
    truncate_context,
)
from dataorganizer.logging.sink import EventSink

__all__ = [
    "Event",
    "EventLevel",
    "EventSink",
    "EventType",
    "emit",
    "emit_error",
    "emit_info",
    "emit_warning",
    "get_sink",
    "set_log_dir",
    "truncate_context",
]
