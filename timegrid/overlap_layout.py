"""
Column assignment for overlapping intervals on one day.

A sweep line walks the interval endpoints in time order. Each interval
that starts takes the lowest free column (first fit); each interval that
ends frees its column for later starts. At every distinct instant the
number of lanes in use is recorded, and every interval alive at that
instant is widened to at least that many lanes.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

from .clipper import ClippedInterval, Position
from .events import DEFAULT_DURATION, Event

logger = logging.getLogger(__name__)

# Endpoint kinds; ends sort before starts at the same instant, so an
# interval ending exactly when another begins does not overlap it.
_END = 0
_START = 1


@dataclass(frozen=True)
class Layout:
    """Placement of one clipped interval in the day grid."""
    event: Event
    start: datetime
    end: datetime
    column: int
    total_columns: int
    is_partial: bool = False
    position: Position = Position.FULL


def intervals_overlap(a, b) -> bool:
    """Half-open overlap test for anything with ``start``/``end``."""
    return a.start < b.end and b.start < a.end


class _ColumnArena:
    """Column slots holding the index of the interval that occupies them."""

    def __init__(self):
        self._slots: list[Optional[int]] = []

    def acquire(self, index: int) -> int:
        for column, owner in enumerate(self._slots):
            if owner is None:
                self._slots[column] = index
                return column
        self._slots.append(index)
        return len(self._slots) - 1

    def release(self, column: int):
        self._slots[column] = None
        while self._slots and self._slots[-1] is None:
            self._slots.pop()

    def width(self) -> int:
        """Highest occupied column + 1, or 0 when empty."""
        return len(self._slots)


def _sorted_intervals(
    intervals: Iterable[ClippedInterval], default_duration: timedelta,
) -> list[ClippedInterval]:
    prepared = []
    for interval in intervals:
        if interval.end <= interval.start:
            logger.debug("Interval for %r has no duration, widening to %s", interval.event.id, default_duration)
            interval = ClippedInterval(
                interval.event, interval.start, interval.start + default_duration,
                interval.is_partial, interval.position,
            )
        prepared.append(interval)
    # Input order must not influence the result
    prepared.sort(key=lambda iv: (iv.start, iv.end, iv.event.id, iv.event.title))
    return prepared


def layout_intervals(
    intervals: Iterable[ClippedInterval],
    default_duration: timedelta = DEFAULT_DURATION,
) -> list[Layout]:
    """
    Assign a column and a lane count to every interval of one day.

    Guarantees:
    - intervals whose [start, end) ranges overlap never share a column
    - an interval's total_columns is never smaller than the number of
      lanes in use at any instant during its lifetime
    - every interval is reported exactly once, in the order it first
      became active

    Returns:
        Layout records, one per input interval.
    """
    ordered = _sorted_intervals(intervals, default_duration)
    if not ordered:
        return []

    timepoints: list[tuple[datetime, int, int]] = []
    for index, interval in enumerate(ordered):
        timepoints.append((interval.start, _START, index))
        timepoints.append((interval.end, _END, index))
    timepoints.sort()

    arena = _ColumnArena()
    active: dict[int, int] = {}          # interval index -> column
    columns: dict[int, int] = {}         # kept after the interval ends
    totals: dict[int, int] = {}
    emission_order: list[int] = []

    for i, (time, kind, index) in enumerate(timepoints):
        if kind == _START:
            column = arena.acquire(index)
            active[index] = column
            columns[index] = column
        else:
            arena.release(active.pop(index))

        batch_done = i == len(timepoints) - 1 or timepoints[i + 1][0] != time
        if not batch_done:
            continue

        batch_total = arena.width()
        for active_index in active:
            if active_index in totals:
                totals[active_index] = max(totals[active_index], batch_total)
            else:
                totals[active_index] = max(batch_total, 1)
                emission_order.append(active_index)

    layouts = []
    for index in emission_order:
        interval = ordered[index]
        layouts.append(Layout(
            event=interval.event,
            start=interval.start,
            end=interval.end,
            column=columns[index],
            total_columns=totals[index],
            is_partial=interval.is_partial,
            position=interval.position,
        ))
    return layouts
