"""
Cascade reconstruction.

Groups the event log into cascades: a root signal write plus the derived
evaluations and effect runs attributed to it. Attribution is heuristic:
an event joins the open cascade when it falls inside the time window of
the root AND its node is one hop from a node already in the cascade.

The result is rebuilt from scratch whenever the log or the filters
change; nothing here is patched incrementally.
"""

import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Set

from ..config import CASCADE_EFFECT_EVENTS, CASCADE_ROOT_EVENTS, CASCADE_WINDOW_MS
from ..core.traversal import TraversalIndex
from ..core.types import Cascade, CascadeEffect, GraphState, LogEntry, Node

logger = logging.getLogger(__name__)

# Depth reported for a connected event with no downstream path from the root.
UNREACHED_DEPTH = 1


def _format_timestamp(timestamp: float) -> str:
    timestamp = float(timestamp)
    return str(int(timestamp)) if timestamp.is_integer() else str(timestamp)


@dataclass
class _OpenCascade:
    root_event: LogEntry
    root_node: Optional[Node]
    effects: List[CascadeEffect] = field(default_factory=list)
    affected_node_ids: Set[str] = field(default_factory=set)

    @property
    def start_time(self) -> float:
        return self.root_event.timestamp

    def close(self) -> Cascade:
        end_time = self.effects[-1].event.timestamp if self.effects else self.start_time
        return Cascade(
            id=f"cascade_{_format_timestamp(self.root_event.timestamp)}_{self.root_event.id}",
            root_event=self.root_event,
            root_node=self.root_node,
            effects=list(self.effects),
            start_time=self.start_time,
            end_time=end_time,
            affected_node_ids=set(self.affected_node_ids),
        )


def is_connected(node_id: str, frontier: Set[str], state: GraphState) -> bool:
    """
    True when the node is one hop from the frontier in either direction.

    Either the node reads something in the frontier, or something in the
    frontier reads the node.
    """
    if frontier & state.dependencies.get(node_id, set()):
        return True
    return any(node_id in state.dependencies.get(affected, ()) for affected in frontier)


class CascadeBuilder:
    """
    Segments a slice of the event log into cascades.

    The slice should already be filtered (origin, internal nodes) by the
    caller; ordering is not assumed and entries are sorted by timestamp.
    """

    def __init__(
        self,
        window_ms: float = CASCADE_WINDOW_MS,
        root_events: FrozenSet[str] = CASCADE_ROOT_EVENTS,
        effect_events: FrozenSet[str] = CASCADE_EFFECT_EVENTS,
    ):
        self.window_ms = window_ms
        self.root_events = root_events
        self.effect_events = effect_events

    def build(self, entries: Iterable[LogEntry], state: GraphState) -> List[Cascade]:
        ordered = sorted(entries, key=lambda e: e.timestamp)
        if not ordered:
            return []

        index = TraversalIndex(state)
        cascades: List[Cascade] = []
        current: Optional[_OpenCascade] = None

        for entry in ordered:
            if entry.event_type in self.root_events:
                if current is not None:
                    cascades.append(current.close())
                current = self._open(entry, state)
                continue

            if current is None or entry.event_type not in self.effect_events:
                continue

            delta = entry.timestamp - current.start_time
            if delta > self.window_ms:
                continue

            node_id = entry.node_id
            if node_id and not is_connected(node_id, current.affected_node_ids, state):
                continue

            current.effects.append(
                CascadeEffect(
                    event=entry,
                    node=state.nodes.get(node_id) if node_id else None,
                    delta_ms=delta,
                    depth=self._depth(index, current, node_id),
                )
            )
            if node_id:
                current.affected_node_ids.add(node_id)

        if current is not None:
            cascades.append(current.close())

        logger.debug("Built %d cascades from %d entries", len(cascades), len(ordered))
        return cascades

    @staticmethod
    def _open(entry: LogEntry, state: GraphState) -> _OpenCascade:
        node_id = entry.node_id
        return _OpenCascade(
            root_event=entry,
            root_node=state.nodes.get(node_id) if node_id else None,
            affected_node_ids={node_id} if node_id else set(),
        )

    @staticmethod
    def _depth(index: TraversalIndex, cascade: _OpenCascade, node_id: Optional[str]) -> int:
        root_id = cascade.root_event.node_id
        if not node_id or not root_id:
            return 0
        depth = index.depth_from(root_id, node_id)
        return UNREACHED_DEPTH if depth is None else depth


def build_cascades(
    entries: Iterable[LogEntry],
    state: GraphState,
    window_ms: float = CASCADE_WINDOW_MS,
) -> List[Cascade]:
    """Convenience wrapper around CascadeBuilder with default event classes."""
    return CascadeBuilder(window_ms=window_ms).build(entries, state)
