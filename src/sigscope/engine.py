"""
Inspector Engine.

Owns every piece of state for one inspected runtime session: the graph
store, the event log, the filters and the timeline cursor. Nothing is
module-global, so several engines can run side by side without sharing
caches.

Events are applied one at a time in arrival order. ``ingest`` never
raises: malformed or unknown records are counted, logged at DEBUG and
skipped.
"""

import itertools
import logging
import time
from collections import Counter
from typing import Any, Callable, Dict, Iterable, List, Optional

from .analysis.cascades import CascadeBuilder
from .analysis.focus import focused_view
from .analysis.metrics import compute_metrics, count_orphans
from .analysis.timeline import TimelineSelection, compute_time_range
from .config import EngineConfig
from .core.graph import GraphStore
from .core.inference import ensure_node
from .core.types import (
    Cascade,
    Edge,
    FocusedView,
    GraphState,
    LogEntry,
    Node,
    NodeMetrics,
    OriginSummary,
    TimelineState,
)
from .events.log import EventLog, LogFilter, build_log_entry, cascade_input, filter_entries
from .events.schema import (
    DependencyEvent,
    NodeEvent,
    SnapshotEvent,
    decode_event,
)

logger = logging.getLogger(__name__)


def _wall_clock_ms() -> float:
    return time.time() * 1000.0


class InspectorEngine:
    """
    Graph maintenance and cascade reconstruction for an event feed.

    Query surface for a visualization host:
    - get_graph_snapshot / get_metrics / get_focused_view
    - get_timeline_state / select_cascade / next_cascade / prev_cascade

    ``hide_internal`` starts out true, so entries whose node has no source
    location are left out of the cascade timeline. A feed without
    ``sourceLocation`` data yields no cascades until
    ``set_hide_internal(False)`` is called or the config turns it off.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.config = config or EngineConfig()
        self._clock = clock or _wall_clock_ms
        self._store = GraphStore()
        self._log = EventLog(self.config.max_log_entries)
        self._entry_ids = itertools.count(1)
        self._timeline = TimelineSelection()
        self._builder = CascadeBuilder(window_ms=self.config.cascade_window_ms)
        self._active_origin: Optional[str] = self.config.active_origin
        self._hide_internal: bool = self.config.hide_internal
        self._selected_node_id: Optional[str] = None
        self._timeline_dirty = False
        self._dropped: Counter = Counter()

    # --- Ingestion ---

    def ingest(self, raw: Any) -> bool:
        """
        Apply one raw event record.

        Returns True when the record was applied, False when it was dropped.
        """
        result = decode_event(raw)
        if result.is_err():
            error = result.unwrap_err()
            self._dropped[error.reason] += 1
            logger.debug("Dropped %s event %s %s", error.reason, error.event_type, error.detail)
            return False

        event = result.unwrap()
        timestamp = event.timestamp if event.timestamp is not None else self._clock()

        if isinstance(event, SnapshotEvent):
            self._apply_snapshot(event, timestamp)
        elif isinstance(event, DependencyEvent):
            self._apply_dependency(event, timestamp)
        else:
            self._apply_node_event(event, timestamp)
        return True

    def ingest_many(self, records: Iterable[Any]) -> int:
        """Apply records in order; returns how many were applied."""
        return sum(1 for raw in records if self.ingest(raw))

    def _apply_snapshot(self, event: SnapshotEvent, timestamp: float) -> None:
        nodes = [
            Node(
                id=item.id,
                type=item.type,
                name=item.name,
                origin_id=event.origin_id,
                source_location=item.source_location,
                created_at=timestamp,
            )
            for item in event.data.nodes
        ]
        edges = [
            Edge.between(item.consumer_id, item.producer_id, timestamp, event.origin_id)
            for item in event.data.edges
        ]
        self._store.replace_origin(event.origin_id, nodes, edges, timestamp)

        if self._selected_node_id and not self._store.has_node(self._selected_node_id):
            self._selected_node_id = None
        self._timeline_dirty = True

    def _apply_dependency(self, event: DependencyEvent, timestamp: float) -> None:
        producer_id = event.data.producer_id
        consumer_id = event.data.consumer_id

        if event.type == "dependency:pruned":
            self._store.remove_edge(consumer_id, producer_id)
        else:
            ensure_node(self._store, producer_id, event.origin_id, timestamp)
            ensure_node(self._store, consumer_id, event.origin_id, timestamp)
            self._store.add_edge(
                Edge.between(consumer_id, producer_id, timestamp, event.origin_id)
            )
        self._timeline_dirty = True

    def _apply_node_event(self, event: NodeEvent, timestamp: float) -> None:
        self._store.upsert_node(
            Node(
                id=event.node_id,
                type=event.node_type,
                name=event.data.name,
                origin_id=event.origin_id,
                source_location=event.data.source_location,
                created_at=timestamp,
            )
        )
        entry = build_log_entry(
            f"log_{next(self._entry_ids)}",
            event,
            timestamp,
            node=self._store.get_node(event.node_id),
        )
        self._log.append(entry)
        self._timeline_dirty = True

    # --- Graph queries ---

    @property
    def store(self) -> GraphStore:
        return self._store

    def get_graph_snapshot(self) -> GraphState:
        """Detached copy of the graph tables."""
        return self._store.snapshot()

    def get_metrics(self) -> Dict[str, NodeMetrics]:
        return compute_metrics(self._store.state)

    def get_focused_view(self, node_id: Optional[str] = None) -> Optional[FocusedView]:
        """One-hop view around ``node_id``, or around the selected node."""
        target = node_id if node_id is not None else self._selected_node_id
        if target is None:
            return None
        return focused_view(self._store.state, target)

    def select_node(self, node_id: Optional[str]) -> None:
        self._selected_node_id = node_id

    @property
    def selected_node_id(self) -> Optional[str]:
        return self._selected_node_id

    # --- Log queries ---

    def log_entries(self, log_filter: Optional[LogFilter] = None) -> List[LogEntry]:
        entries = self._log.entries()
        if log_filter is None:
            return entries
        return filter_entries(entries, log_filter)

    # --- Timeline ---

    def set_active_origin(self, origin_id: Optional[str]) -> None:
        if origin_id != self._active_origin:
            self._active_origin = origin_id
            self._timeline_dirty = True

    def set_hide_internal(self, hide_internal: bool) -> None:
        if hide_internal != self._hide_internal:
            self._hide_internal = hide_internal
            self._timeline_dirty = True

    @property
    def active_origin(self) -> Optional[str]:
        return self._active_origin

    @property
    def hide_internal(self) -> bool:
        return self._hide_internal

    def rebuild_timeline(self) -> None:
        """Rebuild every cascade from the current log, graph and filters."""
        entries = cascade_input(self._log.entries(), self._active_origin, self._hide_internal)
        cascades = self._builder.build(entries, self._store.state)
        self._timeline.replace(cascades, compute_time_range(entries))
        self._timeline_dirty = False

    def _ensure_timeline(self) -> None:
        if self._timeline_dirty:
            self.rebuild_timeline()

    def get_timeline_state(self) -> TimelineState:
        self._ensure_timeline()
        return self._timeline.state()

    def select_cascade(self, index: Optional[int]) -> None:
        self._ensure_timeline()
        self._timeline.select(index)

    def next_cascade(self) -> None:
        self._ensure_timeline()
        self._timeline.next()

    def prev_cascade(self) -> None:
        self._ensure_timeline()
        self._timeline.prev()

    def current_cascade(self) -> Optional[Cascade]:
        self._ensure_timeline()
        return self._timeline.current()

    def clear_timeline(self) -> None:
        self._timeline.clear()
        self._timeline_dirty = False

    # --- Housekeeping ---

    def origins(self) -> List[OriginSummary]:
        """Per-origin node, edge and log counts, ordered by origin id."""
        summaries: Dict[str, OriginSummary] = {}

        def summary(origin_id: str) -> OriginSummary:
            if origin_id not in summaries:
                summaries[origin_id] = OriginSummary(id=origin_id)
            return summaries[origin_id]

        for node in self._store.iter_nodes():
            counts = summary(node.origin_id).node_counts
            counts[node.type.value] = counts.get(node.type.value, 0) + 1
        for edge in self._store.iter_edges():
            if edge.origin_id:
                summary(edge.origin_id).edge_count += 1
        for entry in self._log.entries():
            summary(entry.origin_id).log_entry_count += 1

        return [summaries[key] for key in sorted(summaries)]

    def stats(self) -> Dict[str, Any]:
        nodes_by_type: Dict[str, int] = Counter(
            node.type.value for node in self._store.iter_nodes()
        )
        return {
            "total_nodes": self._store.node_count,
            "total_edges": self._store.edge_count,
            "nodes_by_type": dict(nodes_by_type),
            "orphans": count_orphans(self._store.state),
            "log_entries": len(self._log),
            "dropped_events": dict(self._dropped),
            "origins": len(self.origins()),
        }

    def clear(self) -> None:
        self._store.clear()
        self._log.clear()
        self._timeline.clear()
        self._selected_node_id = None
        self._timeline_dirty = False
        self._dropped.clear()
