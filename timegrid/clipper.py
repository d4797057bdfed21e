"""
Per-day clipping of timed events.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional

from .classifier import occurs_on_day
from .events import Event
from .timezone_utils import TimezoneLike, end_of_day, local_date, start_of_day


class Position(Enum):
    """Where a clipped interval sits within its event's span."""
    FULL = "full"       # Event starts and ends on this day
    START = "start"     # First day of a multi-day event
    MIDDLE = "middle"   # Neither first nor last day
    END = "end"         # Last day of a multi-day event


@dataclass(frozen=True)
class ClippedInterval:
    """
    The part of an event visible on one specific day.

    For example, an event "Sat 17:00 - Mon 04:00" yields:
    - Saturday: 17:00-23:59:59.999, position START
    - Sunday:   00:00-23:59:59.999, position MIDDLE
    - Monday:   00:00-04:00,        position END
    """
    event: Event
    start: datetime
    end: datetime
    is_partial: bool
    position: Position

    @property
    def duration_minutes(self) -> float:
        return (self.end - self.start).total_seconds() / 60.0


def clip_to_day(event: Event, day: date, tz: TimezoneLike = None) -> Optional[ClippedInterval]:
    """
    Clip an event to the bounds of ``day``.

    Returns None if the event does not appear on this day, including an
    event that ends exactly at this day's midnight, which leaves nothing
    to draw.
    """
    if not occurs_on_day(event, day, tz):
        return None

    day_start = start_of_day(day, tz)
    day_end = end_of_day(day, tz)
    start_day = local_date(event.start, tz)
    end_day = local_date(event.end, tz)

    if start_day == end_day:
        start = max(event.start, day_start)
        end = min(event.end, day_end)
        return ClippedInterval(event, start, max(start, end), False, Position.FULL)

    if day == start_day:
        position = Position.START
        start, end = event.start, day_end
    elif day == end_day:
        position = Position.END
        start, end = day_start, event.end
    else:
        position = Position.MIDDLE
        start, end = day_start, day_end

    # Clamp into the day so the result never has a negative duration
    start = min(max(start, day_start), day_end)
    end = min(max(end, day_start), day_end)
    if end <= start:
        return None

    return ClippedInterval(event, start, end, True, position)


def clip_events(events, day: date, tz: TimezoneLike = None) -> list[ClippedInterval]:
    """Clip every event to ``day``, dropping those not visible on it."""
    clipped = []
    for event in events:
        interval = clip_to_day(event, day, tz)
        if interval is not None:
            clipped.append(interval)
    return clipped
