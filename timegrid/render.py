"""
Render pass for the day and week views.

Turns a raw event list into positioned blocks per day plus the all-day
lane, ready for a drawing surface. Everything here is recomputed from
scratch on each call; nothing is cached between calls.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Callable, Iterable, Optional

from .classifier import split_events
from .clipper import Position, clip_events
from .config import Config
from .events import Event, normalize_events
from .geometry import GridMetrics, Rect, map_geometry, shows_time_label, z_index
from .overlap_layout import Layout, layout_intervals
from .timezone_utils import to_local_datetime

logger = logging.getLogger(__name__)

_POSITION_LABEL_KEYS = {
    Position.START: "continues",
    Position.END: "ends",
    Position.MIDDLE: "continues_both",
}


@dataclass(frozen=True)
class EventBlock:
    """A laid-out event with everything needed to draw it."""
    layout: Layout
    rect: Rect
    z_index: int
    title: str
    time_label: str
    position_label: str
    show_time_label: bool

    @property
    def event(self) -> Event:
        return self.layout.event


@dataclass
class DayRender:
    day: date
    layouts: list[Layout] = field(default_factory=list)
    blocks: list[EventBlock] = field(default_factory=list)
    all_day: list[Event] = field(default_factory=list)


@dataclass
class WeekRender:
    days: list[DayRender]
    all_day_lane_height: int = 0

    @property
    def all_day_members(self) -> list[list[Event]]:
        return [day.all_day for day in self.days]


@dataclass
class CalendarCallbacks:
    """
    Notifications fired towards the hosting application.

    All are fire-and-forget; unset handlers are ignored.
    """
    on_time_slot_click: Optional[Callable[[datetime], None]] = None
    on_event_click: Optional[Callable[[Event], None]] = None
    on_event_drop: Optional[Callable[[Event, datetime, datetime], None]] = None
    on_edit_event: Optional[Callable[[Event], None]] = None
    on_delete_event: Optional[Callable[[Event], None]] = None
    on_share_event: Optional[Callable[[Event], None]] = None
    on_bookmark_event: Optional[Callable[[Event], None]] = None

    def notify(self, name: str, *args):
        handler = getattr(self, name)
        if handler is None:
            logger.debug("No handler for %s", name)
            return
        handler(*args)


def week_days(anchor: date, first_day_of_week: int = 0) -> list[date]:
    """
    The seven dates of the week containing ``anchor``.

    ``first_day_of_week`` counts from Sunday (0) to Saturday (6).
    """
    # date.weekday() counts from Monday; shift so Sunday is 0
    sunday_based = (anchor.weekday() + 1) % 7
    start = anchor - timedelta(days=(sunday_based - first_day_of_week) % 7)
    return [start + timedelta(days=i) for i in range(7)]


def period_label(days: list[date], config: Config) -> str:
    """
    Toolbar caption for the visible days, using localized names.

    One day reads "Tue 5 March 2024"; a week reads "3 - 9 March 2024",
    naming both months (and years) when the week spans them.
    """
    localization = config.localization
    first, last = days[0], days[-1]
    first_month = localization.get_month_name(first.month)
    if len(days) == 1:
        day_name = localization.get_day_name((first.weekday() + 1) % 7)
        return f"{day_name} {first.day} {first_month} {first.year}"
    last_month = localization.get_month_name(last.month)
    if first.year != last.year:
        return f"{first.day} {first_month} {first.year} - {last.day} {last_month} {last.year}"
    if first.month != last.month:
        return f"{first.day} {first_month} - {last.day} {last_month} {last.year}"
    return f"{first.day} - {last.day} {first_month} {first.year}"


def format_time_range(start: datetime, end: datetime, tz) -> str:
    """24-hour "HH:MM - HH:MM" in the render timezone."""
    local_start = to_local_datetime(start, tz)
    local_end = to_local_datetime(end, tz)
    return f"{local_start.strftime('%H:%M')} - {local_end.strftime('%H:%M')}"


def position_label(layout: Layout, config: Config) -> str:
    """Suffix marking a continuation of a multi-day event."""
    if not layout.is_partial:
        return ""
    key = _POSITION_LABEL_KEYS.get(layout.position)
    return config.localization.label(key) if key else ""


def _build_blocks(layouts: list[Layout], metrics: GridMetrics, config: Config) -> list[EventBlock]:
    blocks = []
    for layout in layouts:
        rect = map_geometry(
            layout.start, layout.end, layout.column, layout.total_columns,
            metrics, tz=config.timezone,
        )
        blocks.append(EventBlock(
            layout=layout,
            rect=rect,
            z_index=z_index(layout.column),
            title=layout.event.title,
            time_label=format_time_range(layout.start, layout.end, config.timezone),
            position_label=position_label(layout, config),
            show_time_label=shows_time_label(rect, config.layout.time_label_min_height),
        ))
    return blocks


def _render_one_day(events: list[Event], day: date, config: Config, metrics: GridMetrics) -> DayRender:
    all_day, timed = split_events(events, day, config.timezone)
    layouts = layout_intervals(
        clip_events(timed, day, config.timezone), config.layout.default_duration,
    )
    return DayRender(
        day=day,
        layouts=layouts,
        blocks=_build_blocks(layouts, metrics, config),
        all_day=all_day,
    )


def render_day(
    events: Iterable[Any],
    day: date,
    config: Optional[Config] = None,
    metrics: Optional[GridMetrics] = None,
) -> DayRender:
    """Lay out one day. ``events`` may mix input mappings and Event objects."""
    config = config or Config()
    metrics = metrics or GridMetrics.from_layout_config(config.layout, config.layout.day_gutter)
    normalized = normalize_events(
        events, config.timezone, default_duration=config.layout.default_duration,
    )
    return _render_one_day(normalized, day, config, metrics)


def render_week(
    events: Iterable[Any],
    anchor: date,
    config: Optional[Config] = None,
    metrics: Optional[GridMetrics] = None,
) -> WeekRender:
    """Lay out the week containing ``anchor``, honouring the configured first day."""
    config = config or Config()
    metrics = metrics or GridMetrics.from_layout_config(config.layout, config.layout.week_gutter)
    normalized = normalize_events(
        events, config.timezone, default_duration=config.layout.default_duration,
    )

    days = [
        _render_one_day(normalized, day, config, metrics)
        for day in week_days(anchor, config.first_day_of_week)
    ]
    busiest = max((len(day.all_day) for day in days), default=0)
    lane_height = busiest * config.layout.all_day_item_height

    logger.debug(
        "Rendered week of %s: %d blocks, all-day lane %dpx",
        days[0].day, sum(len(d.blocks) for d in days), lane_height,
    )
    return WeekRender(days=days, all_day_lane_height=lane_height)


def all_day_lane_height(day_render: DayRender, config: Config) -> int:
    """Height of the all-day row for a single-day view."""
    return len(day_render.all_day) * config.layout.all_day_item_height
