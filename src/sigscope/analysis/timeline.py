"""
Timeline selection state.

Holds the cascade list produced by the builder, which cascade the user is
looking at, and the time span of the input. The list is replaced
wholesale on every rebuild; callers keep indices, never cascade objects.
"""

from typing import Iterable, List, Optional

from ..core.types import Cascade, LogEntry, TimelineState, TimeRange


def compute_time_range(entries: Iterable[LogEntry]) -> Optional[TimeRange]:
    """True min/max timestamp; input order is irrelevant."""
    timestamps = [entry.timestamp for entry in entries]
    if not timestamps:
        return None
    return TimeRange(start=min(timestamps), end=max(timestamps))


class TimelineSelection:
    """Cascade list plus a saturating cursor into it."""

    def __init__(self):
        self._cascades: List[Cascade] = []
        self._current_index: Optional[int] = None
        self._time_range: Optional[TimeRange] = None

    def replace(self, cascades: List[Cascade], time_range: Optional[TimeRange]) -> None:
        """Swap in a freshly built list, keeping the cursor inside it."""
        self._cascades = list(cascades)
        self._time_range = time_range
        if self._current_index is not None:
            self.select(self._current_index)

    def select(self, index: Optional[int]) -> None:
        if index is None or not self._cascades:
            self._current_index = None
            return
        self._current_index = max(0, min(index, len(self._cascades) - 1))

    def next(self) -> None:
        if not self._cascades:
            return
        if self._current_index is None:
            self.select(0)
        else:
            self.select(self._current_index + 1)

    def prev(self) -> None:
        if not self._cascades:
            return
        if self._current_index is None:
            self.select(len(self._cascades) - 1)
        else:
            self.select(self._current_index - 1)

    def current(self) -> Optional[Cascade]:
        if self._current_index is None:
            return None
        return self._cascades[self._current_index]

    def clear(self) -> None:
        self._cascades = []
        self._current_index = None
        self._time_range = None

    @property
    def current_index(self) -> Optional[int]:
        return self._current_index

    def state(self) -> TimelineState:
        return TimelineState(
            cascades=list(self._cascades),
            current_index=self._current_index,
            time_range=self._time_range,
        )
