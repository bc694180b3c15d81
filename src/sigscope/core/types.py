"""
Core type definitions for sigscope.

Everything the engine stores or hands to a visualization host is a
pydantic model, so query results can be dumped straight to JSON.
"""

from enum import StrEnum
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field


class NodeType(StrEnum):
    """Categories of reactive nodes."""
    SIGNAL = "signal"
    DERIVED = "derived"
    EFFECT = "effect"
    SUBSCRIBE = "subscribe"


# Sinks: having no consumers is their normal state.
TERMINAL_NODE_TYPES = frozenset({NodeType.EFFECT, NodeType.SUBSCRIBE})


class EventCategory(StrEnum):
    """Coarse grouping of log entries, used by filters."""
    SIGNAL = "signal"
    COMPUTED = "computed"
    EFFECT = "effect"
    SUBSCRIBE = "subscribe"


class SourceLocation(BaseModel):
    """Where a node was declared in user code."""
    file: str
    line: Optional[int] = None
    column: Optional[int] = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    @property
    def display(self) -> str:
        parts = [self.file]
        if self.line is not None:
            parts.append(str(self.line))
            if self.column is not None:
                parts.append(str(self.column))
        return ":".join(parts)


class Node(BaseModel):
    """
    A reactive node (signal, derived value, effect or subscriber).

    Identity is the id; type, name and source location may be refined
    by later events (see ``merge_node``).
    """
    id: str
    type: NodeType = NodeType.SIGNAL
    name: Optional[str] = None
    origin_id: str
    source_location: Optional[SourceLocation] = None
    created_at: float = 0.0

    model_config = ConfigDict(frozen=False, extra="ignore")

    @property
    def label(self) -> str:
        return self.name or self.id


def edge_key(consumer_id: str, producer_id: str) -> str:
    """Deterministic edge id for a (consumer, producer) pair."""
    return f"{consumer_id}->{producer_id}"


class Edge(BaseModel):
    """
    Directed dependency: the consumer reads the producer.
    """
    id: str
    producer_id: str
    consumer_id: str
    tracked_at: float = 0.0
    origin_id: Optional[str] = None

    @classmethod
    def between(
        cls,
        consumer_id: str,
        producer_id: str,
        tracked_at: float = 0.0,
        origin_id: Optional[str] = None,
    ) -> "Edge":
        return cls(
            id=edge_key(consumer_id, producer_id),
            producer_id=producer_id,
            consumer_id=consumer_id,
            tracked_at=tracked_at,
            origin_id=origin_id,
        )


class GraphState(BaseModel):
    """
    The four co-maintained tables of the dependency graph.

    ``dependencies`` maps consumer -> producers and ``dependents`` maps
    producer -> consumers. Empty sets are never stored.
    """
    nodes: Dict[str, Node] = Field(default_factory=dict)
    edges: Dict[str, Edge] = Field(default_factory=dict)
    dependencies: Dict[str, Set[str]] = Field(default_factory=dict)
    dependents: Dict[str, Set[str]] = Field(default_factory=dict)

    def copy_state(self) -> "GraphState":
        """Detached copy; mutating it never touches the original."""
        return GraphState(
            nodes={k: v.model_copy() for k, v in self.nodes.items()},
            edges={k: v.model_copy() for k, v in self.edges.items()},
            dependencies={k: set(v) for k, v in self.dependencies.items()},
            dependents={k: set(v) for k, v in self.dependents.items()},
        )


class LogEntry(BaseModel):
    """
    One instrumentation event as recorded in the event log.

    ``is_internal`` is set when no source location could be attributed,
    which marks framework-internal nodes.
    """
    id: str
    timestamp: float
    event_type: str
    origin_id: str
    node_id: Optional[str] = None
    node_name: Optional[str] = None
    source_location: Optional[SourceLocation] = None
    payload: Dict[str, Any] = Field(default_factory=dict)
    category: EventCategory
    summary: Optional[str] = None
    is_internal: bool = False


class NodeMetrics(BaseModel):
    connection_count: int
    is_orphaned: bool


class FocusedView(BaseModel):
    """One-hop neighbourhood around a center node."""
    center: Node
    dependencies: List[Node] = Field(default_factory=list)
    dependents: List[Node] = Field(default_factory=list)
    dependency_edges: List[Edge] = Field(default_factory=list)
    dependent_edges: List[Edge] = Field(default_factory=list)


class CascadeEffect(BaseModel):
    event: LogEntry
    node: Optional[Node] = None
    delta_ms: float
    depth: int


class Cascade(BaseModel):
    """
    A root signal write plus the downstream work attributed to it.
    """
    id: str
    root_event: LogEntry
    root_node: Optional[Node] = None
    effects: List[CascadeEffect] = Field(default_factory=list)
    start_time: float
    end_time: float
    affected_node_ids: Set[str] = Field(default_factory=set)

    @property
    def duration_ms(self) -> float:
        return self.end_time - self.start_time


class TimeRange(BaseModel):
    start: float
    end: float


class TimelineState(BaseModel):
    cascades: List[Cascade] = Field(default_factory=list)
    current_index: Optional[int] = None
    time_range: Optional[TimeRange] = None


class OriginSummary(BaseModel):
    """Per-origin counts for the context picker."""
    id: str
    node_counts: Dict[str, int] = Field(default_factory=dict)
    edge_count: int = 0
    log_entry_count: int = 0
