"""Unit tests for the metrics projector."""

from sigscope.analysis.metrics import compute_metrics, count_orphans
from sigscope.core.graph import GraphStore
from sigscope.core.types import Edge, Node, NodeType


def build_store():
    store = GraphStore()
    store.upsert_node(Node(id="s1", origin_id="A", type=NodeType.SIGNAL))
    store.upsert_node(Node(id="lonely", origin_id="A", type=NodeType.SIGNAL))
    store.upsert_node(Node(id="c1", origin_id="A", type=NodeType.DERIVED))
    store.upsert_node(Node(id="e1", origin_id="A", type=NodeType.EFFECT))
    store.upsert_node(Node(id="sub", origin_id="A", type=NodeType.SUBSCRIBE))
    store.add_edge(Edge.between("c1", "s1"))
    store.add_edge(Edge.between("e1", "c1"))
    store.add_edge(Edge.between("e1", "s1"))
    return store


class TestComputeMetrics:
    def test_connection_counts(self):
        metrics = compute_metrics(build_store().state)

        assert metrics["s1"].connection_count == 2
        assert metrics["c1"].connection_count == 2
        assert metrics["e1"].connection_count == 2
        assert metrics["lonely"].connection_count == 0

    def test_signal_without_dependents_is_orphaned(self):
        metrics = compute_metrics(build_store().state)
        assert metrics["lonely"].is_orphaned
        assert not metrics["s1"].is_orphaned

    def test_terminal_sinks_never_orphaned(self):
        metrics = compute_metrics(build_store().state)
        assert not metrics["e1"].is_orphaned
        assert not metrics["sub"].is_orphaned

    def test_derived_without_dependents_is_orphaned(self):
        store = build_store()
        store.remove_edge("e1", "c1")
        assert compute_metrics(store.state)["c1"].is_orphaned

    def test_does_not_mutate(self):
        store = build_store()
        before = store.snapshot()
        compute_metrics(store.state)
        assert store.snapshot() == before

    def test_count_orphans(self):
        assert count_orphans(build_store().state) == 1

    def test_empty_graph(self):
        assert compute_metrics(GraphStore().state) == {}
