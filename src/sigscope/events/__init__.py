"""Event decoding and the event log."""

from .log import EventLog, LogFilter, build_log_entry, filter_entries
from .schema import EventDecodeError, InstrumentationEvent, decode_event

__all__ = [
    "EventLog", "LogFilter", "build_log_entry", "filter_entries",
    "EventDecodeError", "InstrumentationEvent", "decode_event",
]
