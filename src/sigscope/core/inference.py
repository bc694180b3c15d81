"""
Placeholder inference for nodes referenced before they are announced.

An edge event can arrive before the creation events of its endpoints.
Rather than leave dangling adjacency, a minimal node is inserted with a
type guessed from the id; the richer event merges into it later.
"""

import logging

from .graph import GraphStore
from .types import Node, NodeType

logger = logging.getLogger(__name__)


def infer_node_type(node_id: str) -> NodeType:
    """
    Guess a node type from runtime naming conventions.

    Runtimes tend to embed the primitive kind in generated ids
    (``computed_12``, ``effectRunner``). Anything else is assumed to be
    a plain signal.
    """
    if "computed" in node_id or "Computed" in node_id:
        return NodeType.DERIVED
    if "effect" in node_id or "Effect" in node_id:
        return NodeType.EFFECT
    return NodeType.SIGNAL


def ensure_node(store: GraphStore, node_id: str, origin_id: str, timestamp: float) -> None:
    """Insert a placeholder node unless the store already knows the id."""
    if not node_id or store.has_node(node_id):
        return

    node_type = infer_node_type(node_id)
    logger.debug("Inferred placeholder %s node for %s", node_type.value, node_id)
    store.upsert_node(
        Node(
            id=node_id,
            type=node_type,
            origin_id=origin_id,
            created_at=timestamp,
        )
    )
