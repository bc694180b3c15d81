"""Unit tests for the event log and its filters."""

import pytest

from sigscope.core.types import EventCategory, LogEntry, Node, SourceLocation
from sigscope.events.log import (
    EventLog,
    LogFilter,
    build_log_entry,
    cascade_input,
    filter_entries,
    summarize,
)
from sigscope.events.schema import decode_event

LOC = {"file": "app.ts", "line": 1, "column": 1}


def entry(entry_id, event_type="signal:write", origin="A", node_id="s1",
          category=EventCategory.SIGNAL, internal=False, name=None, summary=None,
          timestamp=0.0):
    return LogEntry(
        id=entry_id,
        timestamp=timestamp,
        event_type=event_type,
        origin_id=origin,
        node_id=node_id,
        node_name=name,
        category=category,
        summary=summary,
        is_internal=internal,
    )


class TestSummarize:
    def test_write_with_value(self):
        assert summarize("signal:write", "count", {"value": 3}) == "count set to 3"
        assert summarize("signal:write", "name", {"newValue": "bob"}) == "name set to 'bob'"

    def test_verbs(self):
        assert summarize("computed:value", "doubled", {}) == "doubled evaluated"
        assert summarize("effect:run", "logger", {}) == "logger ran"
        assert summarize("signal:write", "count", {}) == "count written"


class TestBuildLogEntry:
    def test_from_event_with_location(self):
        event = decode_event({
            "type": "signal:write",
            "originId": "ctx",
            "data": {"signalId": "s1", "name": "count", "value": 2, "sourceLocation": LOC},
        }).unwrap()

        log_entry = build_log_entry("log_1", event, 7.0)

        assert log_entry.id == "log_1"
        assert log_entry.timestamp == 7.0
        assert log_entry.node_id == "s1"
        assert log_entry.node_name == "count"
        assert log_entry.category == EventCategory.SIGNAL
        assert log_entry.summary == "count set to 2"
        assert not log_entry.is_internal

    def test_falls_back_to_stored_node(self):
        event = decode_event({
            "type": "effect:run",
            "originId": "ctx",
            "data": {"effectId": "e1"},
        }).unwrap()
        stored = Node(
            id="e1", origin_id="ctx", name="logger",
            source_location=SourceLocation(file="app.ts", line=9),
        )

        log_entry = build_log_entry("log_2", event, 1.0, node=stored)

        assert log_entry.node_name == "logger"
        assert log_entry.source_location.file == "app.ts"
        assert not log_entry.is_internal

    def test_internal_without_location(self):
        event = decode_event({
            "type": "computed:read",
            "originId": "ctx",
            "data": {"computedId": "c1"},
        }).unwrap()

        log_entry = build_log_entry("log_3", event, 1.0)

        assert log_entry.is_internal
        assert log_entry.summary == "c1 read"


class TestEventLog:
    def test_bounded(self):
        log = EventLog(max_entries=3)
        for i in range(5):
            log.append(entry(f"log_{i}"))

        assert len(log) == 3
        assert [e.id for e in log.entries()] == ["log_2", "log_3", "log_4"]
        assert log.max_entries == 3

    def test_clear(self):
        log = EventLog()
        log.append(entry("log_1"))
        log.clear()
        assert log.entries() == []


class TestLogFilter:
    @pytest.fixture
    def entries(self):
        return [
            entry("1", origin="A", name="count", summary="count set to 1"),
            entry("2", "computed:value", origin="A", node_id="c1",
                  category=EventCategory.COMPUTED, name="doubled"),
            entry("3", "effect:run", origin="B", node_id="e1",
                  category=EventCategory.EFFECT, internal=True),
        ]

    def test_default_hides_internal(self, entries):
        assert [e.id for e in filter_entries(entries, LogFilter())] == ["1", "2"]

    def test_category(self, entries):
        f = LogFilter(category="computed")
        assert [e.id for e in filter_entries(entries, f)] == ["2"]

    def test_search_is_case_insensitive(self, entries):
        f = LogFilter(search="DOUBLED")
        assert [e.id for e in filter_entries(entries, f)] == ["2"]
        f = LogFilter(search="set to")
        assert [e.id for e in filter_entries(entries, f)] == ["1"]

    def test_node_and_origin(self, entries):
        f = LogFilter(hide_internal=False, origin_id="B")
        assert [e.id for e in filter_entries(entries, f)] == ["3"]
        f = LogFilter(node_id="c1")
        assert [e.id for e in filter_entries(entries, f)] == ["2"]

    def test_cascade_input_ignores_category_and_search(self, entries):
        assert [e.id for e in cascade_input(entries, None, False)] == ["1", "2", "3"]
        assert [e.id for e in cascade_input(entries, "A", True)] == ["1", "2"]
