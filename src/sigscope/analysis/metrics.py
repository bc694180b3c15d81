"""
Per-node connectivity metrics.

A pure projection of the graph tables; nothing here mutates state.
"""

from typing import Dict

from ..core.types import TERMINAL_NODE_TYPES, GraphState, NodeMetrics


def compute_metrics(state: GraphState) -> Dict[str, NodeMetrics]:
    """
    Connection count and orphan flag for every node.

    A node is orphaned when nothing consumes it, unless it is a terminal
    sink (effect or subscriber).
    """
    metrics: Dict[str, NodeMetrics] = {}
    for node_id, node in state.nodes.items():
        dependency_count = len(state.dependencies.get(node_id, ()))
        dependent_count = len(state.dependents.get(node_id, ()))
        metrics[node_id] = NodeMetrics(
            connection_count=dependency_count + dependent_count,
            is_orphaned=dependent_count == 0 and node.type not in TERMINAL_NODE_TYPES,
        )
    return metrics


def count_orphans(state: GraphState) -> int:
    return sum(1 for m in compute_metrics(state).values() if m.is_orphaned)
