"""
Event Widget for displaying individual calendar events.

Shows a laid-out event block with its color, title and time range. Pointer
input is not interpreted here; presses, moves and releases are forwarded in
global coordinates so the owning grid can run the drag state machine.
"""

from PySide6.QtWidgets import QWidget, QLabel, QVBoxLayout, QFrame, QMenu, QSizePolicy
from PySide6.QtCore import Qt, Signal, QPoint
from PySide6.QtGui import QFont, QMouseEvent, QContextMenuEvent

from timegrid.config import Config
from timegrid.events import Event
from timegrid.render import EventBlock


MENU_ACTIONS = (
    ("menu_edit", "on_edit_event"),
    ("menu_share", "on_share_event"),
    ("menu_bookmark", "on_bookmark_event"),
    ("menu_delete", "on_delete_event"),
)


def get_contrasting_text_color(bg_color: str) -> str:
    """Calculate whether black or white text contrasts better with the background."""
    color = bg_color.lstrip('#')
    if len(color) == 3:
        color = ''.join([c*2 for c in color])

    try:
        r = int(color[0:2], 16)
        g = int(color[2:4], 16)
        b = int(color[4:6], 16)
    except (ValueError, IndexError):
        return "#000000"

    luminance = (0.299 * r + 0.587 * g + 0.114 * b) / 255
    return "#000000" if luminance > 0.5 else "#ffffff"


def lighten_color(hex_color: str, factor: float = 0.3) -> str:
    """Lighten a hex color by the given factor."""
    color = hex_color.lstrip('#')
    if len(color) == 3:
        color = ''.join([c*2 for c in color])

    try:
        r = int(color[0:2], 16)
        g = int(color[2:4], 16)
        b = int(color[4:6], 16)
    except (ValueError, IndexError):
        return hex_color

    r = int(min(255, r + (255 - r) * factor))
    g = int(min(255, g + (255 - g) * factor))
    b = int(min(255, b + (255 - b) * factor))
    return f"#{r:02x}{g:02x}{b:02x}"


def _sanitize_text(text: str) -> str:
    """Convert line breaks to spaces for single-line display."""
    return ' '.join(text.split()) if text else text


class _EventFrame(QFrame):
    """Shared styling and context menu for timed and all-day event widgets."""

    # Emitted with the menu callback name, e.g. "on_edit_event"
    menu_triggered = Signal(str, object)

    def __init__(self, event: Event, config: Config, parent: QWidget = None):
        super().__init__(parent)
        self.event = event
        self.config = config
        self.setFont(QFont(config.layout.text_font, config.layout.text_font_size))
        self.setFrameStyle(QFrame.StyledPanel | QFrame.Plain)
        self.setCursor(Qt.PointingHandCursor)

    def _apply_style(self) -> None:
        colors = self.config.colors
        fill = colors.fill_for(self.event.color)
        accent = colors.accent_for(self.event.color)
        text_color = get_contrasting_text_color(fill)
        name = type(self).__name__

        self.setStyleSheet(f"""
            {name} {{
                background-color: {fill};
                border: none;
                border-left: 4px solid {accent};
                border-radius: 4px;
                color: {text_color};
            }}
            {name}:hover {{
                background-color: {lighten_color(fill, 0.2)};
            }}
            QLabel {{
                color: {text_color};
                background: transparent;
                border: none;
                padding: 0px;
                margin: 0px;
            }}
        """)

    def contextMenuEvent(self, menu_event: QContextMenuEvent) -> None:
        localization = self.config.localization
        menu = QMenu(self)
        actions = {}
        for label_key, callback_name in MENU_ACTIONS:
            actions[menu.addAction(localization.label(label_key))] = callback_name
        chosen = menu.exec(menu_event.globalPos())
        if chosen is not None:
            self.menu_triggered.emit(actions[chosen], self.event)


class EventWidget(_EventFrame):
    """
    Widget representing a single timed event block in a day column.

    The time range is shown only when the block is tall enough for it.
    """

    pointer_pressed = Signal(object, QPoint)   # event, global position
    pointer_moved = Signal(QPoint)
    pointer_released = Signal(QPoint)

    def __init__(self, block: EventBlock, config: Config, parent: QWidget = None):
        super().__init__(block.event, config, parent)
        self.block = block
        self._pressed = False
        self._setup_ui()
        self._apply_style()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 2, 4, 2)
        layout.setSpacing(0)
        layout.setAlignment(Qt.AlignTop)

        text_font = self.font()
        title_font = QFont(text_font)
        title_font.setBold(True)

        title_label = QLabel(_sanitize_text(self.block.title) + self.block.position_label)
        title_label.setWordWrap(False)
        title_label.setTextFormat(Qt.PlainText)
        title_label.setFont(title_font)
        layout.addWidget(title_label)

        if self.block.show_time_label:
            time_label = QLabel(self.block.time_label)
            time_label.setFont(text_font)
            layout.addWidget(time_label)

        if self.event.location:
            self.setToolTip(f"{self.event.title}\n{self.block.time_label}\n{self.event.location}")
        else:
            self.setToolTip(f"{self.event.title}\n{self.block.time_label}")

    def mousePressEvent(self, mouse_event: QMouseEvent) -> None:
        if mouse_event.button() == Qt.LeftButton:
            self._pressed = True
            self.pointer_pressed.emit(self.event, mouse_event.globalPosition().toPoint())
        else:
            super().mousePressEvent(mouse_event)

    def mouseMoveEvent(self, mouse_event: QMouseEvent) -> None:
        if self._pressed:
            self.pointer_moved.emit(mouse_event.globalPosition().toPoint())
        else:
            super().mouseMoveEvent(mouse_event)

    def mouseReleaseEvent(self, mouse_event: QMouseEvent) -> None:
        if mouse_event.button() == Qt.LeftButton and self._pressed:
            self._pressed = False
            self.pointer_released.emit(mouse_event.globalPosition().toPoint())
        else:
            super().mouseReleaseEvent(mouse_event)


class AllDayEventWidget(_EventFrame):
    """Single-line bar for an event in the all-day lane."""

    clicked = Signal(object)

    def __init__(self, event: Event, config: Config, parent: QWidget = None):
        super().__init__(event, config, parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 2, 4, 2)
        label = QLabel(_sanitize_text(event.title))
        label.setTextFormat(Qt.PlainText)
        layout.addWidget(label)
        self.setToolTip(f"{event.title}\n{config.localization.label('all_day')}")
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
        self.setFixedHeight(config.layout.all_day_item_height - 2)
        self._apply_style()

    def mousePressEvent(self, mouse_event: QMouseEvent) -> None:
        if mouse_event.button() == Qt.LeftButton:
            self.clicked.emit(self.event)
        super().mousePressEvent(mouse_event)
