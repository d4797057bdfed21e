"""
Configuration parser for Timegrid.

Handles TOML file parsing into typed configuration sections.
"""

import logging
import os
import tomllib
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Optional

from .timezone_utils import resolve_timezone

logger = logging.getLogger(__name__)

SUPPORTED_LOCALES = ("en", "zh")


@dataclass
class LayoutConfig:
    """Configuration for the time grid geometry and interaction timing."""
    interface_font: str = "Sans"
    interface_font_size: int = 11
    text_font: str = "Sans"
    text_font_size: int = 10
    hour_height: int = 60              # 60 px per hour -> 1 px per minute
    min_event_height: int = 20         # Short events stay legible
    day_gutter: int = 8                # Right-hand gutter in day view (px)
    week_gutter: int = 4               # Right-hand gutter per week column (px)
    snap_minutes: int = 15             # Drag quantization step
    long_press_ms: int = 300           # Press-and-hold before a drag starts
    tick_interval_ms: int = 60000      # Now-indicator refresh
    scroll_margin: int = 100           # Initial scroll keeps now this far below the top
    time_label_min_height: int = 40    # Blocks shorter than this hide their time label
    all_day_item_height: int = 24      # Height of one all-day lane item
    default_duration_minutes: int = 30 # Replacement duration for malformed events

    @property
    def minute_height(self) -> float:
        return self.hour_height / 60.0

    @property
    def default_duration(self) -> timedelta:
        return timedelta(minutes=self.default_duration_minutes)


@dataclass
class BindingsConfig:
    """Configuration for keyboard bindings."""
    next: str = "Right"  # Key to go to next period
    prev: str = "Left"   # Key to go to previous period
    today: str = "T"


# Darker accent per event color token, used for the left stripe of a block
DEFAULT_EVENT_ACCENTS = {
    "bg-blue-500": "#3C74C4",
    "bg-yellow-500": "#C39248",
    "bg-red-500": "#C14D4D",
    "bg-green-500": "#3C996C",
    "bg-purple-500": "#A44DB3",
    "bg-pink-500": "#C14D84",
    "bg-indigo-500": "#3D63B3",
    "bg-orange-500": "#C27048",
    "bg-teal-500": "#3C8D8D",
}

# Fill per event color token
DEFAULT_EVENT_FILLS = {
    "bg-blue-500": "#3B82F6",
    "bg-yellow-500": "#EAB308",
    "bg-red-500": "#EF4444",
    "bg-green-500": "#22C55E",
    "bg-purple-500": "#A855F7",
    "bg-pink-500": "#EC4899",
    "bg-indigo-500": "#6366F1",
    "bg-orange-500": "#F97316",
    "bg-teal-500": "#14B8A6",
}


@dataclass
class ColorsConfig:
    """Configuration for UI colors."""
    # Calendar/Grid Colors
    day_column_background: str = "#ffffff"
    hour_line: str = "#e5e7eb"
    cell_border: str = "#e0e0e0"
    allday_cell_background: str = "#fafafa"
    current_time_line: str = "#0066FF"
    drag_preview: str = "rgba(0, 102, 255, 0.25)"

    # Header Colors
    header_background: str = "#f5f5f5"
    today_highlight_text: str = "#0066FF"

    fallback_accent: str = "#3A3A3A"
    fallback_fill: str = "#6B7280"
    event_accents: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_EVENT_ACCENTS))
    event_fills: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_EVENT_FILLS))

    def accent_for(self, token: str) -> str:
        """Darker stripe color for an event color token."""
        return self.event_accents.get(token, self.fallback_accent)

    def fill_for(self, token: str) -> str:
        """Background color for an event color token; raw hex tokens pass through."""
        if token.startswith("#"):
            return token
        return self.event_fills.get(token, self.fallback_fill)


_LOCALE_PRESETS = {
    "en": {
        # Sunday first, matching first_day_of_week = 0
        "day_names": ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"],
        "month_names": [
            "January", "February", "March", "April", "May", "June",
            "July", "August", "September", "October", "November", "December",
        ],
        "continues": " (continues...)",
        "ends": " (...ends)",
        "continues_both": " (...continues...)",
        "all_day": "All day",
        "menu_edit": "Edit",
        "menu_share": "Share",
        "menu_bookmark": "Bookmark",
        "menu_delete": "Delete",
        "view_day": "Day",
        "view_week": "Week",
        "button_today": "Today",
    },
    "zh": {
        "day_names": ["周日", "周一", "周二", "周三", "周四", "周五", "周六"],
        "month_names": [
            "一月", "二月", "三月", "四月", "五月", "六月",
            "七月", "八月", "九月", "十月", "十一月", "十二月",
        ],
        "continues": " (继续...)",
        "ends": " (...结束)",
        "continues_both": " (...继续...)",
        "all_day": "全天",
        "menu_edit": "修改",
        "menu_share": "分享",
        "menu_bookmark": "书签",
        "menu_delete": "删除",
        "view_day": "日",
        "view_week": "周",
        "button_today": "今天",
    },
}


@dataclass
class LocalizationConfig:
    """Localized label text. The locale never affects layout behavior."""
    locale: str = "en"
    overrides: dict[str, object] = field(default_factory=dict)

    def __post_init__(self):
        if self.locale not in SUPPORTED_LOCALES:
            logger.warning("Unsupported locale %r, using 'en'", self.locale)
            self.locale = "en"

    def label(self, key: str) -> str:
        if key in self.overrides:
            return self.overrides[key]
        return _LOCALE_PRESETS[self.locale][key]

    def get_day_name(self, weekday: int) -> str:
        """Get localized day name for weekday (0=Sunday, 6=Saturday)."""
        names = self.label("day_names")
        return names[weekday] if 0 <= weekday < len(names) else ""

    def get_month_name(self, month: int) -> str:
        """Get localized month name (1=January, 12=December)."""
        names = self.label("month_names")
        return names[month - 1] if 1 <= month <= len(names) else ""


@dataclass
class Config:
    """Main configuration container for Timegrid."""

    timezone: str = "UTC"
    first_day_of_week: int = 0  # 0=Sunday ... 6=Saturday
    events_file: Optional[Path] = None
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    bindings: BindingsConfig = field(default_factory=BindingsConfig)
    localization: LocalizationConfig = field(default_factory=LocalizationConfig)
    colors: ColorsConfig = field(default_factory=ColorsConfig)

    @property
    def locale(self) -> str:
        return self.localization.locale

    @classmethod
    def get_default_config_path(cls) -> Path:
        """Get the default configuration file path."""
        xdg_config = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
        return Path(xdg_config) / 'timegrid' / 'timegrid.toml'

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> 'Config':
        """
        Load configuration from a TOML file.

        Without an explicit path the default location is tried and built-in
        defaults are used when it does not exist.

        Raises:
            FileNotFoundError: an explicit ``config_path`` does not exist.
            ValueError: the timezone, first day of week or a layout value is invalid.
        """
        if config_path is None:
            config_path = cls.get_default_config_path()
            if not config_path.exists():
                logger.debug("No config at %s, using defaults", config_path)
                return cls()

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'rb') as f:
            data = tomllib.load(f)
        logger.debug("Loaded config sections %s from %s", list(data.keys()), config_path)

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        """Build a Config from already-parsed TOML tables."""
        general = data.get('General', {})
        timezone = general.get('timezone', cls.timezone)
        resolve_timezone(timezone)

        first_day_of_week = general.get('first_day_of_week', cls.first_day_of_week)
        if not isinstance(first_day_of_week, int) or not 0 <= first_day_of_week <= 6:
            raise ValueError(f"first_day_of_week must be 0..6, got {first_day_of_week!r}")

        events_file = general.get('events_file')
        if events_file:
            events_file = Path(os.path.expanduser(events_file))

        # Parse Layout section
        layout_data = data.get('Layout', {})
        layout = LayoutConfig(**{
            name: layout_data.get(name, getattr(LayoutConfig, name))
            for name in LayoutConfig.__dataclass_fields__
        })
        if layout.snap_minutes <= 0 or 60 % layout.snap_minutes:
            raise ValueError(f"snap_minutes must divide an hour, got {layout.snap_minutes}")
        if not isinstance(layout.default_duration_minutes, int) or layout.default_duration_minutes <= 0:
            raise ValueError(
                f"default_duration_minutes must be a positive integer, got {layout.default_duration_minutes!r}"
            )

        bindings_data = data.get('Bindings', {})
        bindings = BindingsConfig(
            next=bindings_data.get('next', BindingsConfig.next),
            prev=bindings_data.get('prev', BindingsConfig.prev),
            today=bindings_data.get('today', BindingsConfig.today),
        )

        # Parse Localization section; anything besides locale overrides a label
        localization_data = dict(data.get('Localization', {}))
        locale = localization_data.pop('locale', general.get('locale', 'en'))
        for key in ('day_names', 'month_names'):
            if isinstance(localization_data.get(key), str):
                localization_data[key] = localization_data[key].split()
        localization = LocalizationConfig(locale=locale, overrides=localization_data)

        # Parse Colors section; [Colors.events] and [Colors.accents] map tokens
        colors_data = dict(data.get('Colors', {}))
        fills = {**DEFAULT_EVENT_FILLS, **colors_data.pop('events', {})}
        accents = {**DEFAULT_EVENT_ACCENTS, **colors_data.pop('accents', {})}
        colors = ColorsConfig(
            event_fills=fills,
            event_accents=accents,
            **{
                name: colors_data[name]
                for name in ColorsConfig.__dataclass_fields__
                if name in colors_data and name not in ('event_fills', 'event_accents')
            },
        )

        return cls(
            timezone=timezone,
            first_day_of_week=first_day_of_week,
            events_file=events_file,
            layout=layout,
            bindings=bindings,
            localization=localization,
            colors=colors,
        )
