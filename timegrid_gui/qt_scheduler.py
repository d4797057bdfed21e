"""
QTimer-backed scheduler.

Timers are parented to the owning widget, so Qt also stops them when
the widget is destroyed.
"""

from typing import Callable

from PySide6.QtCore import QObject, QTimer

from timegrid.scheduler import Scheduler


class QtScheduler(Scheduler):
    """Scheduler running its callbacks on the Qt event loop."""

    def __init__(self, owner: QObject):
        super().__init__()
        self._owner = owner

    def _start_timer(self, delay_ms: int, fire: Callable[[], None], repeating: bool) -> QTimer:
        timer = QTimer(self._owner)
        timer.setSingleShot(not repeating)
        timer.timeout.connect(fire)
        timer.start(delay_ms)
        return timer

    def _stop_timer(self, timer: QTimer) -> None:
        timer.stop()
        timer.deleteLater()
