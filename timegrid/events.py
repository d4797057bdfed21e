"""
Event model for the layout core.

Events are owned by an external store; the core only reads them. Incoming
records are normalized once, on the way in, so the layout stages never see
an unparsable instant or a non-positive duration.
"""

import json
import logging
import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Optional

import pytz

from .timezone_utils import TimezoneLike, localize

logger = logging.getLogger(__name__)

DEFAULT_DURATION = timedelta(minutes=30)

_TRUE_STRINGS = ("true", "yes", "1", "on")
_FALSE_STRINGS = ("false", "no", "0", "off", "")


def _utc_now() -> datetime:
    return datetime.now(pytz.UTC)


def parse_flag(value: Any, default: bool = False) -> bool:
    """Interpret a boolean field that may arrive as a string or number."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    logger.warning("Unrecognised flag value %r, using %s", value, default)
    return default


def parse_instant(value: Any, tz: TimezoneLike = None) -> Optional[datetime]:
    """
    Parse an instant from the input contract.

    Accepts datetimes, ISO-8601 strings (``Z`` suffix means UTC) and epoch
    milliseconds. Naive values are wall-clock time in ``tz``.

    Returns:
        An aware datetime, or None when the value cannot be interpreted.
    """
    if isinstance(value, datetime):
        return localize(value, tz)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=pytz.UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
        return localize(parsed, tz)
    return None


@dataclass(frozen=True)
class Event:
    """
    A calendar event as seen by the layout core.

    ``start`` and ``end`` are always timezone-aware and ``end > start``
    once the event has passed through :func:`coerce_event`.
    """
    id: str
    title: str
    start: datetime
    end: datetime
    is_all_day: bool = False
    color: str = "bg-blue-500"
    calendar_id: str = ""
    location: str = ""
    participants: tuple[str, ...] = field(default_factory=tuple)
    description: str = ""
    notification: Optional[int] = None

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def duration_minutes(self) -> int:
        return int(self.duration.total_seconds() // 60)

    def rescheduled(self, new_start: datetime, new_end: datetime) -> 'Event':
        """Copy of this event moved to a new time range."""
        return replace(self, start=new_start, end=new_end)

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        tz: TimezoneLike = None,
        clock: Callable[[], datetime] = _utc_now,
        default_duration: timedelta = DEFAULT_DURATION,
    ) -> 'Event':
        """
        Build an event from an input-contract mapping.

        Both camelCase (``startDate``) and snake_case (``start``) keys are
        understood. Malformed instants and inverted intervals are repaired,
        never raised; so are optional fields of the wrong type.
        """
        def pick(*keys, default=None):
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return default

        event_id = str(pick("id", "uid", default=""))

        participants = pick("participants", default=())
        if isinstance(participants, (str, int, float)):
            participants = [participants]
        elif not isinstance(participants, (list, tuple)):
            logger.warning("Event %r has unusable participants %r, ignoring", event_id, participants)
            participants = []

        notification = pick("notification")
        try:
            notification = int(notification) if notification is not None else None
        except (TypeError, ValueError):
            notification = None

        return coerce_event(
            event_id=event_id,
            title=str(pick("title", "summary", default="")),
            start=pick("startDate", "start"),
            end=pick("endDate", "end"),
            is_all_day=parse_flag(pick("isAllDay", "is_all_day", "all_day", default=False)),
            color=str(pick("color", default="bg-blue-500")),
            calendar_id=str(pick("calendarId", "calendar_id", default="")),
            location=str(pick("location", default="")),
            participants=tuple(str(p) for p in participants),
            description=str(pick("description", default="")),
            notification=notification,
            tz=tz,
            clock=clock,
            default_duration=default_duration,
        )


def coerce_event(
    event_id: str,
    title: str,
    start: Any,
    end: Any,
    tz: TimezoneLike = None,
    clock: Callable[[], datetime] = _utc_now,
    default_duration: timedelta = DEFAULT_DURATION,
    **attributes,
) -> Event:
    """
    Create an :class:`Event`, repairing bad time data.

    * unparsable start -> now; unparsable end -> now + default_duration
    * end <= start -> end = start + default_duration
    """
    now = clock()
    start_dt = parse_instant(start, tz)
    end_dt = parse_instant(end, tz)

    if start_dt is None:
        logger.warning("Event %r has an invalid start %r, using now", event_id, start)
        start_dt = now
    if end_dt is None:
        logger.warning("Event %r has an invalid end %r, using now + %s", event_id, end, default_duration)
        end_dt = now + default_duration
    if end_dt <= start_dt:
        logger.debug("Event %r ends before it starts, forcing a %s duration", event_id, default_duration)
        end_dt = start_dt + default_duration

    return Event(id=event_id, title=title, start=start_dt, end=end_dt, **attributes)


def normalize_events(
    events: Iterable[Any],
    tz: TimezoneLike = None,
    clock: Callable[[], datetime] = _utc_now,
    default_duration: timedelta = DEFAULT_DURATION,
) -> list[Event]:
    """
    Normalize a mixed list of mappings and :class:`Event` objects.

    Events that already are :class:`Event` instances still get their
    interval checked, since callers may construct them directly.
    """
    normalized = []
    for item in events:
        if isinstance(item, Event):
            if item.start.tzinfo is None or item.end.tzinfo is None:
                item = replace(item, start=localize(item.start, tz), end=localize(item.end, tz))
            if item.end <= item.start:
                item = replace(item, end=item.start + default_duration)
            normalized.append(item)
        else:
            normalized.append(Event.from_dict(item, tz, clock, default_duration))
    return normalized


def load_events_file(
    path: Path,
    tz: TimezoneLike = None,
    default_duration: timedelta = DEFAULT_DURATION,
) -> list[Event]:
    """Read a JSON array of input-contract records."""
    with open(path, 'r', encoding='utf-8') as f:
        records = json.load(f)
    if not isinstance(records, list):
        raise ValueError(f"{path}: expected a JSON array of events")
    events = normalize_events(records, tz, default_duration=default_duration)
    logger.debug("Loaded %d events from %s", len(events), path)
    return events
