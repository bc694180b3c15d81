"""
Core modules for sigscope.

This package contains the fundamental building blocks:
- types: Data structures (Node, Edge, LogEntry, Cascade, etc.)
- graph: The graph store and node merge rule
- inference: Placeholder nodes for ids seen before their creation event
- traversal: rustworkx index for multi-hop queries
"""

from .graph import GraphStore, merge_node
from .inference import ensure_node, infer_node_type
from .traversal import TraversalIndex
from .types import (
    Cascade, CascadeEffect, Edge, EventCategory, FocusedView, GraphState,
    LogEntry, Node, NodeMetrics, NodeType, SourceLocation, TimelineState,
    TimeRange, edge_key,
)

__all__ = [
    # Types
    "Cascade", "CascadeEffect", "Edge", "EventCategory", "FocusedView",
    "GraphState", "LogEntry", "Node", "NodeMetrics", "NodeType",
    "SourceLocation", "TimelineState", "TimeRange", "edge_key",
    # Graph
    "GraphStore", "merge_node", "ensure_node", "infer_node_type",
    "TraversalIndex",
]
