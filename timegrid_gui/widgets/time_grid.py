"""
Time grid widget for the day and week views.

One TimeGridView shows ``num_days`` day columns (1 for the day view, 7 for
the week view) under an all-day lane. Layout comes from timegrid.render;
this module only places widgets where the render pass says.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Optional

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel,
    QScrollArea, QFrame, QApplication, QStyle
)
from PySide6.QtCore import Qt, Signal, QPoint
from PySide6.QtGui import QFont, QFontMetrics, QMouseEvent

from timegrid.config import Config
from timegrid.drag import ColumnGeometry, DragRescheduler, DragState
from timegrid.events import Event
from timegrid.geometry import GridMetrics, initial_scroll_offset, slot_at_y
from timegrid.render import (
    CalendarCallbacks, DayRender, EventBlock,
    all_day_lane_height, render_day, render_week, week_days
)
from timegrid.time_cursor import TimeCursor
from ..qt_scheduler import QtScheduler
from .event_widget import AllDayEventWidget, EventWidget

logger = logging.getLogger(__name__)


def _get_time_column_width() -> int:
    """Calculate time column width based on actual font metrics."""
    sample_label = QLabel("00:00")
    metrics = QFontMetrics(sample_label.font())
    return metrics.horizontalAdvance("00:00") + 15


class AllDayEventCell(QWidget):
    """A cell for displaying all-day events for a single day."""

    event_clicked = Signal(object)
    menu_triggered = Signal(str, object)

    def __init__(self, config: Config, parent=None):
        super().__init__(parent)
        self.config = config
        self._event_widgets: list[AllDayEventWidget] = []
        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(2, 2, 2, 2)
        self._layout.setSpacing(2)
        self._layout.setAlignment(Qt.AlignTop)
        colors = config.colors
        self.setStyleSheet(
            f"background-color: {colors.allday_cell_background}; border-bottom: 1px solid {colors.cell_border};"
        )

    def set_events(self, events: list[Event]):
        self.clear_events()
        for event in events:
            widget = AllDayEventWidget(event, self.config, parent=self)
            widget.clicked.connect(self.event_clicked.emit)
            widget.menu_triggered.connect(self.menu_triggered.emit)
            self._layout.addWidget(widget)
            self._event_widgets.append(widget)

    def clear_events(self):
        for widget in self._event_widgets:
            widget.deleteLater()
        self._event_widgets.clear()


class AllDayEventsRow(QWidget):
    """Row displaying all-day events across the visible days."""

    event_clicked = Signal(object)
    menu_triggered = Signal(str, object)

    def __init__(self, config: Config, num_days: int = 1, parent=None):
        super().__init__(parent)
        self._cells: list[AllDayEventCell] = []
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(1)

        for _ in range(num_days):
            cell = AllDayEventCell(config)
            cell.event_clicked.connect(self.event_clicked.emit)
            cell.menu_triggered.connect(self.menu_triggered.emit)
            layout.addWidget(cell, 1)
            self._cells.append(cell)

    def set_events_for_day(self, day_index: int, events: list[Event]):
        if 0 <= day_index < len(self._cells):
            self._cells[day_index].set_events(events)

    def set_lane_height(self, height: int):
        """Every day shares the height of the busiest one."""
        if height <= 0:
            self.setFixedHeight(0)
            self.hide()
        else:
            self.setFixedHeight(height + 4)
            self.show()


class DayColumnWidget(QWidget):
    """
    A single day column with absolute positioning for events.

    Blocks are placed from their render rectangles; horizontal values are
    percentages of the column width.
    """

    slot_clicked = Signal(object)  # datetime

    def __init__(self, for_date: date, config: Config, metrics: GridMetrics, parent=None):
        super().__init__(parent)
        self._date = for_date
        self.config = config
        self._metrics = metrics
        self._blocks: list[EventBlock] = []
        self._event_widgets: list[EventWidget] = []
        self._setup_ui()

    @property
    def date(self) -> date:
        return self._date

    def _setup_ui(self):
        colors = self.config.colors
        hour_height = self.config.layout.hour_height
        self.setFixedHeight(24 * hour_height)
        self.setStyleSheet(f"background-color: {colors.day_column_background}; border: 1px solid {colors.cell_border};")

        for hour in range(1, 24):
            line = QFrame(self)
            line.setFrameStyle(QFrame.HLine | QFrame.Plain)
            line.setStyleSheet(f"background-color: {colors.hour_line};")
            line.setGeometry(0, hour * hour_height, 2000, 1)

        self._time_indicator = QFrame(self)
        self._time_indicator.setFrameStyle(QFrame.HLine | QFrame.Plain)
        self._time_indicator.setStyleSheet(f"background-color: {colors.current_time_line};")
        self._time_indicator.hide()
        self._cursor_position: Optional[int] = None

    def set_day_render(self, day_render: DayRender) -> list[EventWidget]:
        """Replace the column contents; returns the new event widgets."""
        self._date = day_render.day
        self._blocks = list(day_render.blocks)
        for widget in self._event_widgets:
            widget.deleteLater()
        self._event_widgets = [EventWidget(block, self.config, parent=self) for block in self._blocks]
        self._position_event_widgets()
        for widget in self._event_widgets:
            widget.show()
        return self._event_widgets

    def _position_event_widgets(self):
        width = self.width()
        # Later columns stack on top of earlier ones
        for widget in sorted(self._event_widgets, key=lambda w: w.block.z_index):
            rect = widget.block.rect
            x = int(rect.left * width / 100)
            w = max(int(rect.width * width / 100) - 1, 1)
            widget.setGeometry(x, int(rect.top) + 1, w, max(int(rect.height) - 2, 1))
            widget.raise_()
        self._time_indicator.raise_()

    def set_cursor_position(self, position: Optional[int]):
        """Show the now line at ``position`` minutes, or hide it for None."""
        self._cursor_position = position
        if position is None:
            self._time_indicator.hide()
            return
        y_pos = int(position * self._metrics.minute_height)
        self._time_indicator.setGeometry(0, y_pos, self.width(), 2)
        self._time_indicator.show()
        self._time_indicator.raise_()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._position_event_widgets()
        self.set_cursor_position(self._cursor_position)

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() == Qt.LeftButton:
            dt = slot_at_y(self._date, event.position().y(), self._metrics, self.config.timezone)
            self.slot_clicked.emit(dt)
        super().mousePressEvent(event)


class TimeGridView(QWidget):
    """
    Day or week time grid with all-day lane, now line and drag rescheduling.

    Interaction is reported through a CalendarCallbacks object; the view
    never changes the events it was given.
    """

    date_changed = Signal(object)  # date

    def __init__(
        self,
        config: Config,
        num_days: int = 7,
        callbacks: Optional[CalendarCallbacks] = None,
        parent=None,
    ):
        super().__init__(parent)
        self.config = config
        self.callbacks = callbacks or CalendarCallbacks()
        self._num_days = num_days
        self._events: list[Any] = []
        gutter = config.layout.day_gutter if num_days == 1 else config.layout.week_gutter
        self._metrics = GridMetrics.from_layout_config(config.layout, gutter)

        self._scheduler = QtScheduler(self)
        self._cursor = TimeCursor(
            config.timezone, self._scheduler,
            on_tick=self._update_time_indicator,
            interval_ms=config.layout.tick_interval_ms,
        )
        self._date = self._cursor.today()
        self._day_columns: list[DayColumnWidget] = []

        self._setup_ui()
        self._drag = DragRescheduler(
            self._scheduler,
            self._column_geometry(),
            tz=config.timezone,
            on_click=lambda event: self.callbacks.notify("on_event_click", event),
            on_drop=self._on_drop,
            on_preview=self._on_drag_preview,
            long_press_ms=config.layout.long_press_ms,
        )
        self.refresh()
        self._cursor.start()
        self._scheduler.call_later(0, self.scroll_to_now)

    @property
    def num_days(self) -> int:
        return self._num_days

    @property
    def current_date(self) -> date:
        return self._date

    def visible_days(self) -> list[date]:
        if self._num_days == 1:
            return [self._date]
        return week_days(self._date, self.config.first_day_of_week)

    def _setup_ui(self):
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        colors = self.config.colors
        layout_config = self.config.layout
        time_col_width = _get_time_column_width()
        scrollbar_width = QApplication.style().pixelMetric(QStyle.PM_ScrollBarExtent)

        # Header with day names
        header = QWidget()
        header.setStyleSheet(f"background: {colors.header_background};")
        header_layout = QHBoxLayout(header)
        header_layout.setContentsMargins(time_col_width, 0, scrollbar_width, 0)
        header_layout.setSpacing(1)
        self._header_labels = []
        for _ in range(self._num_days):
            label = QLabel()
            label.setAlignment(Qt.AlignCenter)
            header_layout.addWidget(label, 1)
            self._header_labels.append(label)
        main_layout.addWidget(header)

        # All-day lane with time column spacer
        all_day_container = QWidget()
        all_day_layout = QHBoxLayout(all_day_container)
        all_day_layout.setContentsMargins(0, 0, scrollbar_width, 0)
        all_day_layout.setSpacing(0)
        all_day_spacer = QLabel(self.config.localization.label("all_day"))
        all_day_spacer.setStyleSheet(f"background: {colors.header_background};")
        all_day_spacer.setFixedWidth(time_col_width)
        all_day_spacer.setWordWrap(True)
        all_day_layout.addWidget(all_day_spacer)

        self._all_day_row = AllDayEventsRow(self.config, num_days=self._num_days)
        self._all_day_row.event_clicked.connect(
            lambda event: self.callbacks.notify("on_event_click", event)
        )
        self._all_day_row.menu_triggered.connect(self.callbacks.notify)
        self._all_day_row.hide()
        all_day_layout.addWidget(self._all_day_row, 1)
        main_layout.addWidget(all_day_container)

        # Scroll area for time grid
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)

        self._grid = QWidget()
        content_layout = QHBoxLayout(self._grid)
        content_layout.setContentsMargins(0, 0, 0, 0)
        content_layout.setSpacing(0)

        hour_height = layout_config.hour_height
        time_widget = QWidget()
        time_widget.setFixedWidth(time_col_width)
        time_widget.setFixedHeight(24 * hour_height)
        time_widget.setStyleSheet(f"background: {colors.header_background};")
        time_layout = QVBoxLayout(time_widget)
        time_layout.setContentsMargins(0, 0, 0, 0)
        time_layout.setSpacing(0)

        # Labels are centered on the hour lines
        top_spacer = QWidget()
        top_spacer.setFixedHeight(hour_height // 2)
        time_layout.addWidget(top_spacer)
        for hour in range(1, 24):
            lbl = QLabel(f"{hour:02d}:00")
            lbl.setFixedHeight(hour_height)
            lbl.setAlignment(Qt.AlignCenter)
            time_layout.addWidget(lbl)
        bot_spacer = QWidget()
        bot_spacer.setFixedHeight(hour_height - hour_height // 2)
        time_layout.addWidget(bot_spacer)
        content_layout.addWidget(time_widget)

        for day in self.visible_days():
            col = DayColumnWidget(day, self.config, self._metrics)
            col.slot_clicked.connect(lambda dt: self.callbacks.notify("on_time_slot_click", dt))
            content_layout.addWidget(col, 1)
            self._day_columns.append(col)

        # Ghost block following the pointer while dragging
        self._drag_ghost = QLabel(self._grid)
        self._drag_ghost.setAlignment(Qt.AlignTop | Qt.AlignLeft)
        self._drag_ghost.setStyleSheet(
            f"background-color: {colors.drag_preview}; border: 1px dashed {colors.current_time_line};"
            " border-radius: 4px; padding: 2px;"
        )
        self._drag_ghost.setAttribute(Qt.WA_TransparentForMouseEvents)
        self._drag_ghost.hide()

        scroll.setWidget(self._grid)
        self._scroll = scroll
        main_layout.addWidget(scroll, 1)

    def _update_headers(self):
        localization = self.config.localization
        colors = self.config.colors
        font_name = self.config.layout.interface_font
        font_size = self.config.layout.interface_font_size
        today = self._cursor.today()
        for label, col in zip(self._header_labels, self._day_columns):
            d = col.date
            day_name = localization.get_day_name((d.weekday() + 1) % 7)
            label.setText(f"{day_name} {d.day}")
            style = (
                f"font-family: '{font_name}'; font-size: {font_size}pt; font-weight: bold;"
                f" padding: 8px; background: {colors.header_background};"
            )
            if d == today:
                style += f" color: {colors.today_highlight_text};"
            label.setStyleSheet(style)

    def _column_geometry(self) -> ColumnGeometry:
        first = self._day_columns[0]
        return ColumnGeometry(
            days=[col.date for col in self._day_columns],
            left=first.x(),
            column_width=first.width(),
            top=first.y(),
            minute_height=self._metrics.minute_height,
            snap_minutes=self.config.layout.snap_minutes,
        )

    # --- data -----------------------------------------------------------

    def set_events(self, events: Iterable[Any]):
        self._events = list(events)
        self.refresh()

    def set_date(self, d: date):
        self._date = d
        self.refresh()
        self.date_changed.emit(d)

    def refresh(self):
        """Re-run the render pass and rebuild every column."""
        self._drag.cancel()
        if self._num_days == 1:
            day_render = render_day(self._events, self._date, self.config, self._metrics)
            renders = [day_render]
            lane_height = all_day_lane_height(day_render, self.config)
        else:
            week = render_week(self._events, self._date, self.config, self._metrics)
            renders = week.days
            lane_height = week.all_day_lane_height

        for index, (col, day_render) in enumerate(zip(self._day_columns, renders)):
            for widget in col.set_day_render(day_render):
                widget.pointer_pressed.connect(self._on_pointer_pressed)
                widget.pointer_moved.connect(self._on_pointer_moved)
                widget.pointer_released.connect(self._on_pointer_released)
                widget.menu_triggered.connect(self.callbacks.notify)
            self._all_day_row.set_events_for_day(index, day_render.all_day)
        self._all_day_row.set_lane_height(lane_height)

        self._update_headers()
        self._update_time_indicator(self._cursor.position)
        self._drag.set_columns(self._column_geometry())

    # --- navigation -----------------------------------------------------

    def go_next(self):
        self.set_date(self._date + timedelta(days=self._num_days))

    def go_previous(self):
        self.set_date(self._date - timedelta(days=self._num_days))

    def go_today(self):
        self.set_date(self._cursor.today())

    def scroll_to_now(self):
        offset = initial_scroll_offset(
            self._cursor.position // 60, self._metrics, self.config.layout.scroll_margin
        )
        self._scroll.verticalScrollBar().setValue(int(offset))

    # --- now line -------------------------------------------------------

    def _update_time_indicator(self, _position: int):
        for col in self._day_columns:
            col.set_cursor_position(self._cursor.position_for(col.date))

    # --- drag -----------------------------------------------------------

    def _grid_point(self, global_pos: QPoint) -> tuple[float, float]:
        local = self._grid.mapFromGlobal(global_pos)
        return float(local.x()), float(local.y())

    def _on_pointer_pressed(self, event: Event, global_pos: QPoint):
        self._drag.set_columns(self._column_geometry())
        self._drag.pointer_down(event, *self._grid_point(global_pos))

    def _on_pointer_moved(self, global_pos: QPoint):
        self._drag.pointer_move(*self._grid_point(global_pos))

    def _on_pointer_released(self, global_pos: QPoint):
        self._drag.pointer_up(*self._grid_point(global_pos))

    def _on_drop(self, event: Event, new_start: datetime, new_end: datetime):
        logger.debug("Event %r dropped at %s - %s", event.id, new_start, new_end)
        self.callbacks.notify("on_event_drop", event, new_start, new_end)

    def _on_drag_preview(self, state: Optional[DragState]):
        if state is None or state.preview is None:
            self._drag_ghost.hide()
            return
        preview = state.preview
        col = next((c for c in self._day_columns if c.date == preview.day), None)
        if col is None:
            self._drag_ghost.hide()
            return
        minute_height = self._metrics.minute_height
        height = max(state.duration_minutes * minute_height, self._metrics.min_event_height)
        self._drag_ghost.setText(f"{preview.hour:02d}:{preview.minute:02d}  {state.event.title}")
        self._drag_ghost.setFont(QFont(self.config.layout.text_font, self.config.layout.text_font_size))
        self._drag_ghost.setGeometry(
            col.x(), col.y() + int(preview.minutes * minute_height), col.width(), int(height)
        )
        self._drag_ghost.show()
        self._drag_ghost.raise_()

    # --- teardown -------------------------------------------------------

    def dispose(self):
        """Stop the drag machine, the now-line tick and every timer owned by the view."""
        self._drag.dispose()
        self._cursor.stop()
        self._scheduler.dispose()

    def closeEvent(self, event):
        self.dispose()
        super().closeEvent(event)
