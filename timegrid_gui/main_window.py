"""
Main Window for Timegrid.

Toolbar with day/week switching and navigation over a stacked pair of time
grids. Events live in memory; drops and deletes update that list and
re-render both views.
"""

import logging
from datetime import date, datetime
from typing import Any, Iterable, Optional

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QToolBar, QPushButton, QLabel,
    QComboBox, QStackedWidget, QStatusBar, QApplication, QSizePolicy
)
from PySide6.QtGui import QCloseEvent, QFont, QKeySequence, QShortcut

from timegrid.config import Config
from timegrid.events import Event, normalize_events
from timegrid.render import CalendarCallbacks, period_label, week_days
from timegrid.timezone_utils import to_local_datetime
from .widgets.time_grid import TimeGridView

logger = logging.getLogger(__name__)

VIEW_DAY = "day"
VIEW_WEEK = "week"


class MainWindow(QMainWindow):
    """
    Main application window.

    Contains:
    - Toolbar with navigation and view switching
    - Day and week time grids sharing one event list
    """

    def __init__(
        self,
        config: Config,
        events: Iterable[Any] = (),
        initial_date: Optional[date] = None,
        initial_view: str = VIEW_WEEK,
        parent=None,
    ):
        super().__init__(parent)
        self.config = config
        self._events: list[Event] = normalize_events(
            events, config.timezone, default_duration=config.layout.default_duration,
        )

        # Apply text_font as application default (for tooltips, event content, etc.)
        QApplication.instance().setFont(QFont(config.layout.text_font, config.layout.text_font_size))
        self._interface_font = QFont(config.layout.interface_font, config.layout.interface_font_size)

        self._callbacks = CalendarCallbacks(
            on_time_slot_click=self._on_time_slot_click,
            on_event_click=self._on_event_click,
            on_event_drop=self._on_event_drop,
            on_edit_event=self._on_edit_event,
            on_delete_event=self._on_delete_event,
            on_share_event=self._on_share_event,
            on_bookmark_event=self._on_bookmark_event,
        )

        self._setup_window()
        self._setup_ui()
        self._setup_toolbar()
        self._setup_shortcuts()
        self._setup_statusbar()

        self._set_view(initial_view)
        if initial_date is not None:
            self._current_view().set_date(initial_date)
        self._refresh_events()

    def _setup_window(self):
        """Configure main window properties."""
        self.setWindowTitle("Timegrid")
        self.setMinimumSize(800, 600)
        self.resize(1200, 800)

    def _setup_ui(self):
        """Set up the main UI layout."""
        main_widget = QWidget()
        main_layout = QVBoxLayout(main_widget)
        main_layout.setContentsMargins(0, 0, 0, 0)

        self._day_view = TimeGridView(self.config, num_days=1, callbacks=self._callbacks)
        self._week_view = TimeGridView(self.config, num_days=7, callbacks=self._callbacks)
        self._day_view.date_changed.connect(self._on_date_changed)
        self._week_view.date_changed.connect(self._on_date_changed)

        self._stack = QStackedWidget()
        self._stack.addWidget(self._day_view)
        self._stack.addWidget(self._week_view)
        main_layout.addWidget(self._stack)

        self.setCentralWidget(main_widget)

    def _setup_toolbar(self):
        """Set up the navigation toolbar."""
        localization = self.config.localization
        toolbar = QToolBar("Navigation")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)
        if toolbar.layout():
            toolbar.layout().setContentsMargins(8, 12, 8, 8)

        self._date_label = QLabel()
        date_font = QFont(self._interface_font)
        date_font.setBold(True)
        self._date_label.setFont(date_font)
        self._date_label.setMinimumWidth(200)
        toolbar.addWidget(self._date_label)

        toolbar.addSeparator()

        self._view_combo = QComboBox()
        self._view_combo.setFont(self._interface_font)
        self._view_combo.addItem(localization.label("view_day"), VIEW_DAY)
        self._view_combo.addItem(localization.label("view_week"), VIEW_WEEK)
        self._view_combo.currentIndexChanged.connect(self._on_view_combo_changed)
        toolbar.addWidget(self._view_combo)

        toolbar.addSeparator()

        self._prev_btn = QPushButton("<")
        self._prev_btn.setFont(self._interface_font)
        self._prev_btn.setToolTip("Previous")
        self._prev_btn.clicked.connect(self._go_previous)
        toolbar.addWidget(self._prev_btn)

        self._today_btn = QPushButton(localization.label("button_today"))
        self._today_btn.setFont(self._interface_font)
        self._today_btn.clicked.connect(self._go_today)
        toolbar.addWidget(self._today_btn)

        self._next_btn = QPushButton(">")
        self._next_btn.setFont(self._interface_font)
        self._next_btn.setToolTip("Next")
        self._next_btn.clicked.connect(self._go_next)
        toolbar.addWidget(self._next_btn)

        spacer = QWidget()
        spacer.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Preferred)
        toolbar.addWidget(spacer)

        self._quit_btn = QPushButton("Quit")
        self._quit_btn.setFont(self._interface_font)
        self._quit_btn.clicked.connect(self.close)
        toolbar.addWidget(self._quit_btn)

    def _setup_shortcuts(self):
        """Set up keyboard shortcuts from config bindings."""
        bindings = self.config.bindings
        QShortcut(QKeySequence(bindings.prev), self).activated.connect(self._go_previous)
        QShortcut(QKeySequence(bindings.next), self).activated.connect(self._go_next)
        QShortcut(QKeySequence(bindings.today), self).activated.connect(self._go_today)

    def _setup_statusbar(self):
        """Set up the status bar."""
        self._statusbar = QStatusBar()
        self._statusbar.setFont(self._interface_font)
        self.setStatusBar(self._statusbar)
        self._statusbar.showMessage("Ready")

    # --- views ----------------------------------------------------------

    def _current_view(self) -> TimeGridView:
        return self._stack.currentWidget()

    def _set_view(self, view: str):
        target = self._day_view if view == VIEW_DAY else self._week_view
        source = self._current_view()
        if source is not target:
            target.set_date(source.current_date)
        self._stack.setCurrentWidget(target)
        index = self._view_combo.findData(view)
        if index >= 0 and index != self._view_combo.currentIndex():
            self._view_combo.setCurrentIndex(index)
        self._update_date_label()

    def _on_view_combo_changed(self, index: int):
        view = self._view_combo.itemData(index)
        if view:
            self._set_view(view)

    def _go_previous(self):
        self._current_view().go_previous()

    def _go_next(self):
        self._current_view().go_next()

    def _go_today(self):
        self._current_view().go_today()

    def _on_date_changed(self, d: date):
        self._update_date_label()

    def _update_date_label(self):
        """Update the date label in the toolbar with localized day and month names."""
        view = self._current_view()
        current_date = view.current_date
        if view.num_days == 1:
            days = [current_date]
        else:
            days = week_days(current_date, self.config.first_day_of_week)
        self._date_label.setText(period_label(days, self.config))

    def _refresh_events(self):
        """Push the event list into both views."""
        self._day_view.set_events(self._events)
        self._week_view.set_events(self._events)
        self._statusbar.showMessage(f"Loaded {len(self._events)} events", 3000)

    # --- callbacks ------------------------------------------------------

    def _replace_event(self, old: Event, new: Optional[Event]):
        events = []
        for item in self._events:
            if item is old or item.id == old.id:
                if new is not None:
                    events.append(new)
            else:
                events.append(item)
        self._events = events
        self._refresh_events()

    def _on_time_slot_click(self, dt: datetime):
        local = to_local_datetime(dt, self.config.timezone)
        self._statusbar.showMessage(f"Slot {local.strftime('%Y/%m/%d %H:%M')}", 3000)

    def _on_event_click(self, event: Event):
        self._statusbar.showMessage(event.title, 3000)

    def _on_event_drop(self, event: Event, new_start: datetime, new_end: datetime):
        if new_start == event.start and new_end == event.end:
            return
        logger.info("Rescheduling %r to %s", event.id, new_start.isoformat())
        self._replace_event(event, event.rescheduled(new_start, new_end))

    def _on_edit_event(self, event: Event):
        logger.info("Edit requested for %r", event.id)
        self._statusbar.showMessage(f"Edit: {event.title}", 3000)

    def _on_delete_event(self, event: Event):
        logger.info("Deleting %r", event.id)
        self._replace_event(event, None)

    def _on_share_event(self, event: Event):
        local_start = to_local_datetime(event.start, self.config.timezone)
        QApplication.clipboard().setText(f"{event.title} {local_start.strftime('%Y/%m/%d %H:%M')}")
        self._statusbar.showMessage(f"Copied: {event.title}", 3000)

    def _on_bookmark_event(self, event: Event):
        logger.info("Bookmark requested for %r", event.id)
        self._statusbar.showMessage(f"Bookmarked: {event.title}", 3000)

    def closeEvent(self, event: QCloseEvent):
        """Handle window close."""
        self._day_view.dispose()
        self._week_view.dispose()
        super().closeEvent(event)
