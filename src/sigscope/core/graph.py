"""
Graph Store for the reactive dependency graph.

It manages:
- The node and edge tables.
- Both adjacency directions (consumer -> producers, producer -> consumers).
- Per-origin snapshot replacement that leaves other origins untouched.

Adjacency and edge records are always kept in lockstep: an adjacency
entry exists exactly when the matching Edge record exists, and empty
adjacency sets are pruned.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Set

from .types import Edge, GraphState, Node, NodeType, edge_key

logger = logging.getLogger(__name__)


def merge_node(existing: Node, incoming: Node) -> Node:
    """
    Combine a stored node with a newer record for the same id.

    Richer data is never replaced by poorer data:
    - ``source_location`` is kept unless the stored one is empty.
    - ``name`` is kept unless the incoming record has one.
    - ``created_at`` is the earliest of the two.
    - ``type`` follows the incoming record, which refines inferred types.
    - ``origin_id`` and ``id`` never change.
    """
    source_location = existing.source_location or incoming.source_location
    return existing.model_copy(
        update={
            "type": incoming.type,
            "name": incoming.name or existing.name,
            "source_location": source_location,
            "created_at": min(existing.created_at, incoming.created_at),
        }
    )


def _link(table: Dict[str, Set[str]], key: str, value: str) -> None:
    bucket = table.get(key)
    if bucket is None:
        bucket = set()
        table[key] = bucket
    bucket.add(value)


def _unlink(table: Dict[str, Set[str]], key: str, value: str) -> None:
    bucket = table.get(key)
    if bucket is None:
        return
    bucket.discard(value)
    if not bucket:
        del table[key]


class GraphStore:
    """
    Authoritative owner of the graph tables.

    Only the ingestion path mutates a store; every other component reads
    ``state`` and treats it as immutable for the duration of a query.
    """

    def __init__(self):
        self._state = GraphState()

    @property
    def state(self) -> GraphState:
        """Live state. Read-only by convention; use ``snapshot`` to keep it."""
        return self._state

    def snapshot(self) -> GraphState:
        return self._state.copy_state()

    # --- Mutation ---

    def upsert_node(self, node: Node) -> None:
        """Insert a node, or merge it into the stored record for its id."""
        if not node.id:
            logger.debug("Dropping node without id")
            return

        existing = self._state.nodes.get(node.id)
        if existing is None:
            self._state.nodes[node.id] = node
        else:
            self._state.nodes[node.id] = merge_node(existing, node)

    def add_edge(self, edge: Edge) -> None:
        """Add a dependency edge. Adding an existing edge is a no-op."""
        if not edge.producer_id or not edge.consumer_id:
            logger.debug("Dropping edge with missing endpoint: %s", edge.id)
            return

        key = edge_key(edge.consumer_id, edge.producer_id)
        if key in self._state.edges:
            return

        if edge.id != key:
            edge = edge.model_copy(update={"id": key})

        self._state.edges[key] = edge
        _link(self._state.dependencies, edge.consumer_id, edge.producer_id)
        _link(self._state.dependents, edge.producer_id, edge.consumer_id)

    def remove_edge(self, consumer_id: str, producer_id: str) -> None:
        """Remove a dependency edge. Removing an absent edge is a no-op."""
        key = edge_key(consumer_id, producer_id)
        if key not in self._state.edges:
            return

        del self._state.edges[key]
        _unlink(self._state.dependencies, consumer_id, producer_id)
        _unlink(self._state.dependents, producer_id, consumer_id)

    def replace_origin(
        self,
        origin_id: str,
        nodes: Iterable[Node],
        edges: Iterable[Edge],
        timestamp: float,
    ) -> None:
        """
        Replace everything owned by one origin with a fresh snapshot.

        Nodes and edges belonging to other origins survive untouched; a
        snapshot node whose id another origin already owns is skipped.
        Adjacency is rebuilt from the surviving edges before the
        snapshot's edges are added back.
        """
        state = self._state

        kept_nodes = {
            node_id: node
            for node_id, node in state.nodes.items()
            if node.origin_id != origin_id
        }
        kept_edges = [
            edge for edge in state.edges.values()
            if edge.origin_id != origin_id
        ]

        foreign_owners = {node_id: node.origin_id for node_id, node in kept_nodes.items()}

        state.nodes = kept_nodes
        state.edges = {}
        state.dependencies = {}
        state.dependents = {}
        for edge in kept_edges:
            self.add_edge(edge)

        node_count = 0
        for node in nodes:
            if not node.id:
                continue
            owner = foreign_owners.get(node.id)
            if owner is not None:
                logger.debug("Snapshot for %s skips node %s owned by %s", origin_id, node.id, owner)
                continue
            self.upsert_node(
                node.model_copy(update={"origin_id": origin_id, "created_at": timestamp})
            )
            node_count += 1

        edge_count = 0
        for edge in edges:
            if not edge.producer_id or not edge.consumer_id:
                continue
            self.add_edge(
                Edge.between(
                    edge.consumer_id,
                    edge.producer_id,
                    tracked_at=timestamp,
                    origin_id=origin_id,
                )
            )
            edge_count += 1

        logger.info(
            "Replaced origin %s: %d nodes, %d edges (%d nodes from other origins kept)",
            origin_id, node_count, edge_count, len(foreign_owners),
        )

    def clear(self) -> None:
        self._state = GraphState()

    # --- Queries ---

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._state.nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._state.nodes

    def has_edge(self, consumer_id: str, producer_id: str) -> bool:
        return edge_key(consumer_id, producer_id) in self._state.edges

    def get_dependencies(self, node_id: str) -> Set[str]:
        """Producers the node reads."""
        return set(self._state.dependencies.get(node_id, ()))

    def get_dependents(self, node_id: str) -> Set[str]:
        """Consumers that read the node."""
        return set(self._state.dependents.get(node_id, ()))

    def get_nodes_by_type(self, node_type: NodeType) -> List[Node]:
        return [n for n in self._state.nodes.values() if n.type == node_type]

    def get_nodes_by_origin(self, origin_id: str) -> List[Node]:
        return [n for n in self._state.nodes.values() if n.origin_id == origin_id]

    def find_nodes(self, pattern: str) -> List[str]:
        """
        Find nodes matching a substring pattern.

        Searches IDs and names.
        """
        pattern_lower = pattern.lower()
        return [
            node.id for node in self.iter_nodes()
            if pattern_lower in node.id.lower()
            or (node.name and pattern_lower in node.name.lower())
        ]

    def iter_nodes(self) -> Iterator[Node]:
        return iter(list(self._state.nodes.values()))

    def iter_edges(self) -> Iterator[Edge]:
        return iter(list(self._state.edges.values()))

    @property
    def node_count(self) -> int:
        return len(self._state.nodes)

    @property
    def edge_count(self) -> int:
        return len(self._state.edges)
