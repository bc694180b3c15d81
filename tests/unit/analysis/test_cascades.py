"""Unit tests for cascade reconstruction."""

import pytest

from sigscope.analysis.cascades import CascadeBuilder, build_cascades, is_connected
from sigscope.core.graph import GraphStore
from sigscope.core.types import Edge, EventCategory, LogEntry, Node, NodeType

CATEGORIES = {
    "signal": EventCategory.SIGNAL,
    "computed": EventCategory.COMPUTED,
    "effect": EventCategory.EFFECT,
    "subscribe": EventCategory.SUBSCRIBE,
}


def event(timestamp, event_type, node_id, entry_id=None):
    return LogEntry(
        id=entry_id or f"log_{timestamp:g}_{node_id}",
        timestamp=timestamp,
        event_type=event_type,
        origin_id="A",
        node_id=node_id,
        category=CATEGORIES[event_type.split(":")[0]],
    )


@pytest.fixture
def state():
    #  s1 -> c1 -> e1,  s2 -> e2,  s3 isolated
    store = GraphStore()
    store.upsert_node(Node(id="s1", origin_id="A", type=NodeType.SIGNAL, name="count"))
    store.upsert_node(Node(id="s2", origin_id="A", type=NodeType.SIGNAL))
    store.upsert_node(Node(id="s3", origin_id="A", type=NodeType.SIGNAL))
    store.upsert_node(Node(id="c1", origin_id="A", type=NodeType.DERIVED))
    store.upsert_node(Node(id="e1", origin_id="A", type=NodeType.EFFECT))
    store.upsert_node(Node(id="e2", origin_id="A", type=NodeType.EFFECT))
    store.add_edge(Edge.between("c1", "s1"))
    store.add_edge(Edge.between("e1", "c1"))
    store.add_edge(Edge.between("e2", "s2"))
    return store.state


class TestCascadeBuilder:
    def test_isolated_writes(self, state):
        cascades = build_cascades(
            [event(0, "signal:write", "s1"), event(200, "signal:write", "s2")], state
        )

        assert len(cascades) == 2
        assert all(c.effects == [] for c in cascades)
        assert cascades[0].end_time == cascades[0].start_time == 0
        assert cascades[1].root_node.id == "s2"

    def test_attachment(self, state):
        cascades = build_cascades([
            event(0, "signal:write", "s1"),
            event(5, "computed:value", "c1"),
            event(10, "effect:run", "e1"),
        ], state)

        assert len(cascades) == 1
        cascade = cascades[0]
        assert cascade.root_event.node_id == "s1"
        assert cascade.root_node.name == "count"
        assert [(e.event.node_id, e.delta_ms, e.depth) for e in cascade.effects] == [
            ("c1", 5, 1),
            ("e1", 10, 2),
        ]
        assert cascade.end_time - cascade.start_time == 10
        assert cascade.duration_ms == 10
        assert cascade.affected_node_ids == {"s1", "c1", "e1"}
        assert cascade.effects[1].node.type == NodeType.EFFECT

    def test_window_exclusion(self, state):
        cascades = build_cascades([
            event(0, "signal:write", "s1"),
            event(5, "computed:value", "c1"),
            event(60, "effect:run", "e1"),
        ], state)

        assert [e.event.node_id for e in cascades[0].effects] == ["c1"]
        assert cascades[0].end_time == 5

    def test_window_boundary_is_inclusive(self, state):
        cascades = build_cascades([
            event(0, "signal:write", "s1"),
            event(50, "computed:value", "c1"),
        ], state)
        assert len(cascades[0].effects) == 1

    def test_disconnected_exclusion(self, state):
        cascades = build_cascades([
            event(0, "signal:write", "s1"),
            event(3, "effect:run", "e2"),
        ], state)
        assert cascades[0].effects == []

    def test_chain_needs_frontier(self, state):
        # e1 is two hops from s1; without c1 in the frontier it cannot attach
        cascades = build_cascades([
            event(0, "signal:write", "s1"),
            event(4, "effect:run", "e1"),
        ], state)
        assert cascades[0].effects == []

    def test_unreached_depth_falls_back_to_one(self, state):
        # c1 is read by the root e1, but nothing flows from e1 back to c1
        cascades = build_cascades([
            event(0, "signal:write", "e1"),
            event(2, "computed:value", "c1"),
        ], state)

        effect = cascades[0].effects[0]
        assert effect.event.node_id == "c1"
        assert effect.depth == 1

    def test_upstream_node_reports_fallback_depth(self, state):
        cascades = build_cascades([
            event(0, "signal:write", "c1"),
            event(1, "signal:read", "s1"),
            event(2, "computed:read", "s1"),
        ], state)
        # signal:read is neither root nor effect class and is ignored
        assert [(e.event.event_type, e.depth) for e in cascades[0].effects] == [
            ("computed:read", 1),
        ]

    def test_nodeless_effect_always_attaches(self, state):
        nodeless = LogEntry(
            id="marker", timestamp=7, event_type="effect:run",
            origin_id="A", category=EventCategory.EFFECT,
        )
        cascades = build_cascades([event(0, "signal:write", "s1"), nodeless], state)

        effect = cascades[0].effects[0]
        assert effect.event.id == "marker"
        assert effect.node is None
        assert effect.depth == 0
        assert cascades[0].affected_node_ids == {"s1"}

    def test_effects_before_first_root_ignored(self, state):
        cascades = build_cascades([
            event(0, "computed:value", "c1"),
            event(1, "signal:write", "s1"),
        ], state)
        assert len(cascades) == 1
        assert cascades[0].effects == []

    def test_unsorted_input(self, state):
        cascades = build_cascades([
            event(10, "effect:run", "e1"),
            event(5, "computed:value", "c1"),
            event(0, "signal:write", "s1"),
        ], state)

        assert [e.event.node_id for e in cascades[0].effects] == ["c1", "e1"]

    def test_next_root_closes_cascade(self, state):
        cascades = build_cascades([
            event(0, "signal:write", "s1"),
            event(5, "computed:value", "c1"),
            event(20, "signal:write", "s2"),
            event(25, "effect:run", "e2"),
        ], state)

        assert len(cascades) == 2
        assert cascades[0].end_time == 5
        assert [e.event.node_id for e in cascades[1].effects] == ["e2"]
        assert cascades[1].effects[0].delta_ms == 5

    def test_cascade_ids(self, state):
        cascades = build_cascades([event(0, "signal:write", "s1", entry_id="log_1")], state)
        assert cascades[0].id == "cascade_0_log_1"

    def test_unknown_root_node(self, state):
        cascades = build_cascades([event(0, "signal:write", "ghost")], state)
        assert cascades[0].root_node is None
        assert cascades[0].affected_node_ids == {"ghost"}

    def test_empty_input(self, state):
        assert build_cascades([], state) == []

    def test_custom_window(self, state):
        builder = CascadeBuilder(window_ms=3)
        cascades = builder.build([
            event(0, "signal:write", "s1"),
            event(5, "computed:value", "c1"),
        ], state)
        assert cascades[0].effects == []


class TestIsConnected:
    def test_reads_frontier(self, state):
        assert is_connected("c1", {"s1"}, state)

    def test_read_by_frontier(self, state):
        assert is_connected("s1", {"c1"}, state)

    def test_not_adjacent(self, state):
        assert not is_connected("e1", {"s1"}, state)
        assert not is_connected("e2", {"s1", "c1"}, state)
