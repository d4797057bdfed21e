"""
Press-and-hold drag rescheduling.

States::

    idle --pointer_down--> pending --long press--> dragging --pointer_up--> idle
                              |                                   ^
                              +-------- pointer_up (click) -------+

A press released before the long-press timer fires is a click. Once
dragging, pointer positions are snapped to the grid and reported as a
live preview; releasing over a day column emits one reschedule request
that keeps the event's original duration.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Callable, Optional, Sequence

from .events import Event
from .geometry import MINUTES_PER_DAY
from .scheduler import Scheduler, TimerHandle
from .timezone_utils import TimezoneLike, combine_local

logger = logging.getLogger(__name__)

LONG_PRESS_MS = 300
SNAP_MINUTES = 15


class DragPhase(Enum):
    IDLE = "idle"
    PENDING = "pending"       # Pressed, waiting for the long-press timer
    DRAGGING = "dragging"


@dataclass(frozen=True)
class DragPreview:
    """Snapped drop target under the pointer."""
    day: date
    hour: int
    minute: int

    @property
    def minutes(self) -> int:
        return self.hour * 60 + self.minute


@dataclass
class DragState:
    phase: DragPhase
    event: Event
    anchor_pointer: tuple[float, float]
    duration: timedelta = timedelta(0)
    preview: Optional[DragPreview] = None
    pointer: tuple[float, float] = (0.0, 0.0)

    @property
    def duration_minutes(self) -> float:
        return self.duration.total_seconds() / 60.0


@dataclass(frozen=True)
class RescheduleRequest:
    event: Event
    new_start: datetime
    new_end: datetime


@dataclass(frozen=True)
class ColumnGeometry:
    """
    Horizontal placement of the day columns a drag can drop into.

    ``left``/``top`` are the grid origin in pointer coordinates; all
    columns share ``column_width``.
    """
    days: Sequence[date]
    left: float = 0.0
    column_width: float = 100.0
    top: float = 0.0
    minute_height: float = 1.0
    snap_minutes: int = SNAP_MINUTES

    def column_at(self, x: float) -> Optional[int]:
        """Index of the day column containing ``x``, or None outside the grid."""
        if not self.days or self.column_width <= 0:
            return None
        offset = x - self.left
        if offset < 0 or offset >= self.column_width * len(self.days):
            return None
        return int(offset // self.column_width)

    def snap_minutes_at(self, y: float) -> int:
        """Minute of day at ``y``, floored to the snap step and kept inside the day."""
        minutes = (y - self.top) / self.minute_height
        last_slot = MINUTES_PER_DAY - self.snap_minutes
        minutes = max(0.0, min(minutes, float(last_slot)))
        return int(minutes // self.snap_minutes) * self.snap_minutes

    def locate(self, x: float, y: float) -> Optional[DragPreview]:
        index = self.column_at(x)
        if index is None:
            return None
        minutes = self.snap_minutes_at(y)
        return DragPreview(self.days[index], minutes // 60, minutes % 60)


class DragRescheduler:
    """
    State machine turning pointer input into reschedule requests.

    The owner forwards pointer events and supplies the column geometry.
    Callbacks are plain notifications; their return values are ignored.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        columns: ColumnGeometry,
        tz: TimezoneLike = None,
        on_click: Optional[Callable[[Event], None]] = None,
        on_drop: Optional[Callable[[Event, datetime, datetime], None]] = None,
        on_preview: Optional[Callable[[Optional[DragState]], None]] = None,
        long_press_ms: int = LONG_PRESS_MS,
    ):
        self._scheduler = scheduler
        self._columns = columns
        self._tz = tz
        self._on_click = on_click
        self._on_drop = on_drop
        self._on_preview = on_preview
        self._long_press_ms = long_press_ms
        self._state: Optional[DragState] = None
        self._timer: Optional[TimerHandle] = None

    @property
    def state(self) -> Optional[DragState]:
        return self._state

    @property
    def phase(self) -> DragPhase:
        return self._state.phase if self._state else DragPhase.IDLE

    def set_columns(self, columns: ColumnGeometry):
        """Replace the drop geometry, e.g. after a resize or date change."""
        self._columns = columns

    def pointer_down(self, event: Event, x: float, y: float):
        if self._state is not None:
            self.cancel()
        self._state = DragState(
            phase=DragPhase.PENDING,
            event=event,
            anchor_pointer=(x, y),
            pointer=(x, y),
        )
        self._timer = self._scheduler.call_later(self._long_press_ms, self._begin_drag)

    def _begin_drag(self):
        self._timer = None
        state = self._state
        if state is None or state.phase != DragPhase.PENDING:
            return
        state.phase = DragPhase.DRAGGING
        state.duration = state.event.duration
        state.preview = self._columns.locate(*state.pointer)
        logger.debug("Drag started for %r (%s)", state.event.id, state.duration)
        self._notify_preview()

    def pointer_move(self, x: float, y: float):
        state = self._state
        if state is None:
            return
        state.pointer = (x, y)
        if state.phase != DragPhase.DRAGGING:
            return
        preview = self._columns.locate(x, y)
        if preview != state.preview:
            state.preview = preview
            self._notify_preview()

    def pointer_up(self, x: float, y: float) -> Optional[RescheduleRequest]:
        """
        Finish the gesture.

        Returns:
            The reschedule request that was emitted, or None for a click,
            a cancelled drag, or a release outside every day column.
        """
        state = self._state
        if state is None:
            return None
        self._reset()

        if state.phase == DragPhase.PENDING:
            if self._on_click:
                self._on_click(state.event)
            return None

        preview = self._columns.locate(x, y)
        if preview is None:
            logger.debug("Drop of %r outside the grid discarded", state.event.id)
            return None

        new_start = combine_local(preview.day, preview.hour, preview.minute, self._tz)
        new_end = new_start + state.duration
        request = RescheduleRequest(state.event, new_start, new_end)
        if self._on_drop:
            self._on_drop(state.event, new_start, new_end)
        return request

    def cancel(self):
        """Abort the current gesture; no click or drop is reported."""
        self._reset()

    def dispose(self):
        self._reset()

    def _reset(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        had_preview = self._state is not None and self._state.preview is not None
        self._state = None
        if had_preview and self._on_preview:
            self._on_preview(None)

    def _notify_preview(self):
        if self._on_preview:
            self._on_preview(self._state)
