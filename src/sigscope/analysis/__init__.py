"""Read-only projections over the graph and the event log."""

from .cascades import CascadeBuilder, build_cascades
from .focus import focused_view
from .metrics import compute_metrics
from .timeline import TimelineSelection

__all__ = [
    "CascadeBuilder", "build_cascades", "focused_view",
    "compute_metrics", "TimelineSelection",
]
