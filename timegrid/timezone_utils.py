"""
Timezone utilities for Timegrid.

Provides unified timezone conversion functions for the layout core.
Event instants are timezone-aware; every calendar-day decision (same day,
day bounds, minute of day) is made in the render timezone.
"""

import logging
import time as _time
from datetime import date, datetime, time as dt_time, tzinfo
from typing import Optional, Union

import pytz

logger = logging.getLogger(__name__)

TimezoneLike = Union[str, tzinfo, None]

# Default timezone - can be overridden by config
_local_timezone_name: str = "UTC"

# Last representable instant of a day, millisecond precision
END_OF_DAY = dt_time(23, 59, 59, 999000)


def set_timezone(timezone_name: str):
    """Set the render timezone for the application."""
    global _local_timezone_name
    resolve_timezone(timezone_name)
    _local_timezone_name = timezone_name


def resolve_timezone(timezone_name: str):
    """
    Look up an IANA timezone by name.

    Raises:
        ValueError: if the name is not a known timezone.
    """
    try:
        return pytz.timezone(timezone_name)
    except pytz.UnknownTimeZoneError:
        raise ValueError(f"Unknown timezone: {timezone_name!r}") from None


def get_local_timezone():
    """
    Get the render timezone as a pytz timezone object.

    Falls back to the system timezone, then to a fixed offset, when the
    configured name cannot be resolved.
    """
    try:
        return pytz.timezone(_local_timezone_name)
    except pytz.UnknownTimeZoneError:
        logger.warning("Unknown timezone %r, falling back to system zone", _local_timezone_name)
    try:
        return pytz.timezone(_time.tzname[0])
    except pytz.UnknownTimeZoneError:
        is_dst = _time.localtime().tm_isdst
        offset_seconds = -_time.altzone if is_dst else -_time.timezone
        return pytz.FixedOffset(offset_seconds // 60)


def as_timezone(tz: TimezoneLike):
    """Normalize a timezone argument (name, tzinfo or None) to a tzinfo."""
    if tz is None:
        return get_local_timezone()
    if isinstance(tz, str):
        return resolve_timezone(tz)
    return tz


def localize(dt: datetime, tz: TimezoneLike = None) -> datetime:
    """Attach the render timezone to a naive wall-clock datetime."""
    zone = as_timezone(tz)
    if dt.tzinfo is not None:
        return dt.astimezone(zone)
    if hasattr(zone, "localize"):
        return zone.localize(dt)
    return dt.replace(tzinfo=zone)


def to_local_datetime(dt: datetime, tz: TimezoneLike = None) -> datetime:
    """
    Convert an aware datetime to the render timezone.

    Naive datetimes are taken to already be wall-clock time in that zone.
    """
    if dt.tzinfo is not None:
        return dt.astimezone(as_timezone(tz))
    return localize(dt, tz)


def local_date(dt: datetime, tz: TimezoneLike = None) -> date:
    """Calendar date of an instant in the render timezone."""
    return to_local_datetime(dt, tz).date()


def is_same_day(dt: datetime, day: date, tz: TimezoneLike = None) -> bool:
    return local_date(dt, tz) == day


def start_of_day(day: date, tz: TimezoneLike = None) -> datetime:
    """00:00:00.000 of ``day`` in the render timezone."""
    return localize(datetime.combine(day, dt_time.min), tz)


def end_of_day(day: date, tz: TimezoneLike = None) -> datetime:
    """23:59:59.999 of ``day`` in the render timezone."""
    return localize(datetime.combine(day, END_OF_DAY), tz)


def combine_local(day: date, hour: int, minute: int, tz: TimezoneLike = None) -> datetime:
    """Build ``day@hour:minute`` as an aware instant in the render timezone."""
    return localize(datetime.combine(day, dt_time(hour=hour, minute=minute)), tz)


def minutes_of_day(dt: datetime, tz: TimezoneLike = None) -> int:
    """
    Wall-clock minutes since local midnight.

    Returns:
        An integer in 0..1439 (e.g. 870 for 14:30).
    """
    local_dt = to_local_datetime(dt, tz)
    return local_dt.hour * 60 + local_dt.minute
