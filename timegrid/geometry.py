"""
Mapping of layouts into pixel space.

The grid is a fixed scale: ``minute_height`` pixels per minute of the day
(1.0 by default, so a day is 1440 px tall). Horizontal values are relative
to the width of one day column, which defaults to 100 so that the results
read as percentages.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from .timezone_utils import TimezoneLike, combine_local, local_date, minutes_of_day

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class GridMetrics:
    """Scale and spacing of the time grid."""
    minute_height: float = 1.0
    min_event_height: float = 20.0
    gutter: float = 8.0

    @property
    def hour_height(self) -> float:
        return self.minute_height * 60

    @property
    def day_height(self) -> float:
        return self.minute_height * MINUTES_PER_DAY

    @classmethod
    def from_layout_config(cls, layout, gutter: Optional[float] = None) -> 'GridMetrics':
        """Build metrics from a LayoutConfig; ``gutter`` defaults to the day gutter."""
        return cls(
            minute_height=layout.minute_height,
            min_event_height=layout.min_event_height,
            gutter=layout.day_gutter if gutter is None else gutter,
        )


@dataclass(frozen=True)
class Rect:
    top: float
    height: float
    left: float
    width: float

    @property
    def bottom(self) -> float:
        return self.top + self.height


def map_geometry(
    start: datetime,
    end: datetime,
    column: int,
    total_columns: int,
    metrics: GridMetrics = GridMetrics(),
    column_width: float = 100.0,
    tz: TimezoneLike = None,
) -> Rect:
    """
    Convert a placed interval into a rectangle.

    The height never drops below ``metrics.min_event_height``; this only
    affects drawing, not which intervals overlap.
    """
    start_minutes = minutes_of_day(start, tz)
    if local_date(end, tz) > local_date(start, tz):
        end_minutes = MINUTES_PER_DAY
    else:
        end_minutes = minutes_of_day(end, tz)

    # Never run past midnight
    duration = min(max(end_minutes - start_minutes, 0), MINUTES_PER_DAY - start_minutes)
    height = max(duration * metrics.minute_height, metrics.min_event_height)

    total_columns = max(total_columns, 1)
    width = (column_width - metrics.gutter) / total_columns
    left = column * width

    return Rect(
        top=start_minutes * metrics.minute_height,
        height=height,
        left=left,
        width=width,
    )


def z_index(column: int) -> int:
    """Stacking order of a block; later columns draw on top."""
    return column + 1


def shows_time_label(rect: Rect, threshold: float = 40) -> bool:
    """Whether a block is tall enough for its time-range subtitle."""
    return rect.height >= threshold


def slot_at(day: date, hour: int, relative_y: float, cell_height: float, tz: TimezoneLike = None) -> datetime:
    """
    Instant for a click inside an hour cell.

    The upper half of the cell selects hh:00, the lower half hh:30.
    """
    hour = max(0, min(23, hour))
    minute = 0 if relative_y < cell_height / 2 else 30
    return combine_local(day, hour, minute, tz)


def slot_at_y(day: date, y: float, metrics: GridMetrics = GridMetrics(), tz: TimezoneLike = None) -> datetime:
    """Instant for a click at grid offset ``y`` of a day column."""
    hour_height = metrics.hour_height
    y = max(0.0, min(y, metrics.day_height - 1))
    hour = int(y // hour_height)
    return slot_at(day, hour, y - hour * hour_height, hour_height, tz)


def initial_scroll_offset(now_hour: int, metrics: GridMetrics = GridMetrics(), margin: float = 100) -> float:
    """Scroll position that shows the current hour a little below the top."""
    return max(0.0, now_hour * metrics.hour_height - margin)
