"""
Event log.

Node-level instrumentation events are recorded as LogEntry records.
The log feeds both the log view (through LogFilter) and the cascade
builder (through ``cascade_input``).
"""

from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, Iterable, List, Optional

from ..core.types import LogEntry, Node, SourceLocation
from .schema import NodeEvent, event_payload

_VERBS: Dict[str, str] = {
    "signal:write": "written",
    "signal:read": "read",
    "computed:read": "read",
    "computed:value": "evaluated",
    "effect:run": "ran",
    "effect:created": "created",
    "effect:dispose": "disposed",
    "subscribe:notify": "notified",
}


def summarize(event_type: str, label: str, payload: Dict[str, Any]) -> str:
    """One-line human description of an event."""
    if event_type == "signal:write":
        for key in ("newValue", "value"):
            if key in payload:
                return f"{label} set to {payload[key]!r}"
    return f"{label} {_VERBS.get(event_type, event_type)}"


def build_log_entry(
    entry_id: str,
    event: NodeEvent,
    timestamp: float,
    node: Optional[Node] = None,
) -> LogEntry:
    """
    Turn a decoded node event into a log entry.

    ``node`` is the stored graph node after the event was applied, used to
    fill in the name and source location the event itself may lack.
    """
    payload = event_payload(event)
    location: Optional[SourceLocation] = event.data.source_location
    if location is None and node is not None:
        location = node.source_location

    node_name = event.data.name or (node.name if node else None)
    label = node_name or (location.display if location else event.node_id)

    return LogEntry(
        id=entry_id,
        timestamp=timestamp,
        event_type=event.type,
        origin_id=event.origin_id,
        node_id=event.node_id,
        node_name=node_name,
        source_location=location,
        payload=payload,
        category=event.category,
        summary=summarize(event.type, label, payload),
        is_internal=location is None,
    )


class EventLog:
    """Bounded, append-only log; the oldest entries fall off first."""

    def __init__(self, max_entries: int = 1000):
        self._entries: Deque[LogEntry] = deque(maxlen=max_entries)

    def append(self, entry: LogEntry) -> None:
        self._entries.append(entry)

    def entries(self) -> List[LogEntry]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    @property
    def max_entries(self) -> int:
        return self._entries.maxlen or 0

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class LogFilter:
    """Log view filter. ``category`` is ``"all"`` or an EventCategory value."""
    category: str = "all"
    search: str = ""
    hide_internal: bool = True
    node_id: Optional[str] = None
    origin_id: Optional[str] = None

    def matches(self, entry: LogEntry) -> bool:
        if self.origin_id and entry.origin_id != self.origin_id:
            return False
        if self.node_id and entry.node_id != self.node_id:
            return False
        if self.category != "all" and entry.category != self.category:
            return False
        if self.hide_internal and entry.is_internal:
            return False
        if self.search:
            needle = self.search.lower()
            haystack = (entry.event_type, entry.node_name or "", entry.summary or "")
            if not any(needle in field.lower() for field in haystack):
                return False
        return True


def filter_entries(entries: Iterable[LogEntry], log_filter: LogFilter) -> List[LogEntry]:
    return [entry for entry in entries if log_filter.matches(entry)]


def cascade_input(
    entries: Iterable[LogEntry],
    origin_id: Optional[str],
    hide_internal: bool,
) -> List[LogEntry]:
    """Entries the cascade builder sees: active origin and internal filter only."""
    return filter_entries(
        entries, LogFilter(hide_internal=hide_internal, origin_id=origin_id)
    )
