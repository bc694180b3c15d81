"""
Focused view: one hop around a node.
"""

from typing import Optional

from ..core.types import FocusedView, GraphState, edge_key


def focused_view(state: GraphState, node_id: str) -> Optional[FocusedView]:
    """
    The node, its direct producers and consumers, and the edges between.

    Ids in adjacency whose node or edge record is missing are skipped.
    """
    center = state.nodes.get(node_id)
    if center is None:
        return None

    dependency_ids = sorted(state.dependencies.get(node_id, ()))
    dependent_ids = sorted(state.dependents.get(node_id, ()))

    dependencies = [state.nodes[i] for i in dependency_ids if i in state.nodes]
    dependents = [state.nodes[i] for i in dependent_ids if i in state.nodes]

    dependency_edges = [
        state.edges[key]
        for key in (edge_key(node_id, producer_id) for producer_id in dependency_ids)
        if key in state.edges
    ]
    dependent_edges = [
        state.edges[key]
        for key in (edge_key(consumer_id, node_id) for consumer_id in dependent_ids)
        if key in state.edges
    ]

    return FocusedView(
        center=center,
        dependencies=dependencies,
        dependents=dependents,
        dependency_edges=dependency_edges,
        dependent_edges=dependent_edges,
    )
