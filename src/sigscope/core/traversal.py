"""
Traversal index backed by rustworkx.

The graph store keeps plain adjacency tables because they are cheap to
mutate one event at a time. Multi-hop questions (how far is this effect
from the written signal, what does this signal eventually reach) are
answered on a rustworkx PyDiGraph built from a frozen view of those
tables.

It manages:
- The bimap between string node ids and rustworkx integer indices.
- Edges in propagation direction (producer -> consumer).
"""

from typing import Dict, Optional, Set

import rustworkx as rx

from .types import GraphState


def _unit_cost(_edge) -> float:
    return 1.0


class TraversalIndex:
    """
    Read-only propagation graph for one GraphState.

    Build it once per query batch; it does not follow later mutations.
    """

    def __init__(self, state: GraphState):
        self._graph = rx.PyDiGraph(multigraph=False)
        self._id_to_idx: Dict[str, int] = {}
        self._idx_to_id: Dict[int, str] = {}

        for node_id in state.nodes:
            self._index(node_id)

        for producer_id, consumer_ids in state.dependents.items():
            u_idx = self._index(producer_id)
            for consumer_id in consumer_ids:
                v_idx = self._index(consumer_id)
                self._graph.add_edge(u_idx, v_idx, None)

    def _index(self, node_id: str) -> int:
        idx = self._id_to_idx.get(node_id)
        if idx is None:
            idx = self._graph.add_node(node_id)
            self._id_to_idx[node_id] = idx
            self._idx_to_id[idx] = node_id
        return idx

    def has_node(self, node_id: str) -> bool:
        return node_id in self._id_to_idx

    def depth_from(self, root_id: str, target_id: str) -> Optional[int]:
        """
        Fewest hops from root to target following dependents.

        Returns 0 when root and target are the same node and None when
        no path exists.
        """
        if root_id == target_id:
            return 0
        if root_id not in self._id_to_idx or target_id not in self._id_to_idx:
            return None

        source = self._id_to_idx[root_id]
        goal = self._id_to_idx[target_id]
        lengths = rx.digraph_dijkstra_shortest_path_lengths(
            self._graph, source, _unit_cost, goal=goal
        )
        found = dict(lengths.items())
        if goal not in found:
            return None
        return int(found[goal])

    def descendants(self, node_id: str) -> Set[str]:
        """Every node the given node's changes can reach."""
        if node_id not in self._id_to_idx:
            return set()
        indices = rx.descendants(self._graph, self._id_to_idx[node_id])
        return {self._idx_to_id[idx] for idx in indices}

    def ancestors(self, node_id: str) -> Set[str]:
        """Every node whose changes can reach the given node."""
        if node_id not in self._id_to_idx:
            return set()
        indices = rx.ancestors(self._graph, self._id_to_idx[node_id])
        return {self._idx_to_id[idx] for idx in indices}

    @property
    def node_count(self) -> int:
        return self._graph.num_nodes()

    @property
    def edge_count(self) -> int:
        return self._graph.num_edges()
