"""
Timegrid Core Module

Layout core for the day and week time grid:
- Configuration parsing (config.py)
- Event model and input normalization (events.py)
- All-day / timed routing (classifier.py)
- Per-day clipping of multi-day events (clipper.py)
- Overlap column assignment (overlap_layout.py)
- Pixel geometry (geometry.py)
- Drag rescheduling state machine (drag.py)
- Current-time line (time_cursor.py)
- Owned timers (scheduler.py)
- Day/week render pass (render.py)
"""

from .config import Config
from .events import Event, normalize_events
from .classifier import is_all_day_event, split_events
from .clipper import ClippedInterval, Position, clip_to_day
from .overlap_layout import Layout, layout_intervals
from .geometry import GridMetrics, Rect, map_geometry
from .drag import ColumnGeometry, DragPhase, DragRescheduler
from .time_cursor import TimeCursor, cursor_position
from .scheduler import Scheduler, TimerHandle
from .render import CalendarCallbacks, DayRender, WeekRender, render_day, render_week

__all__ = [
    'Config',
    'Event',
    'normalize_events',
    'is_all_day_event',
    'split_events',
    'ClippedInterval',
    'Position',
    'clip_to_day',
    'Layout',
    'layout_intervals',
    'GridMetrics',
    'Rect',
    'map_geometry',
    'ColumnGeometry',
    'DragPhase',
    'DragRescheduler',
    'TimeCursor',
    'cursor_position',
    'Scheduler',
    'TimerHandle',
    'CalendarCallbacks',
    'DayRender',
    'WeekRender',
    'render_day',
    'render_week',
]
