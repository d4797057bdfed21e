"""
Routing of events into the all-day lane or the timed grid.
"""

from datetime import date, time as dt_time
from typing import Iterable

from .events import Event
from .timezone_utils import TimezoneLike, is_same_day, start_of_day, to_local_datetime

_MIDNIGHT = dt_time(0, 0)


def is_all_day_event(event: Event, tz: TimezoneLike = None) -> bool:
    """
    Check if an event belongs in the all-day lane.

    Besides the explicit flag, an event running from exactly 00:00 to
    23:59 of the same day, or to 00:00 of a later day, counts as all-day.
    This normalizes "00:00-24:00" events whose flag was never set.
    """
    if event.is_all_day:
        return True

    local_start = to_local_datetime(event.start, tz)
    local_end = to_local_datetime(event.end, tz)

    if local_start.time() != _MIDNIGHT:
        return False

    if local_end.date() == local_start.date():
        return local_end.hour == 23 and local_end.minute == 59
    return local_end.date() > local_start.date() and local_end.time() == _MIDNIGHT


def occurs_on_day(event: Event, day: date, tz: TimezoneLike = None) -> bool:
    """True if the event starts, ends, or is in progress on ``day``."""
    if is_same_day(event.start, day, tz) or is_same_day(event.end, day, tz):
        return True
    return event.start < start_of_day(day, tz) < event.end


def split_events(events: Iterable[Event], day: date, tz: TimezoneLike = None) -> tuple[list[Event], list[Event]]:
    """
    Split the events visible on ``day`` into (all_day, timed).

    All-day events are listed on their start day only. Timed events are
    listed on every day they touch; the clipper decides what part shows.
    Input order is kept within each list.
    """
    all_day: list[Event] = []
    timed: list[Event] = []

    for event in events:
        if is_all_day_event(event, tz):
            if is_same_day(event.start, day, tz):
                all_day.append(event)
        elif occurs_on_day(event, day, tz):
            timed.append(event)

    return all_day, timed
