"""
The "current time" line of the time grid.
"""

import logging
from datetime import date, datetime
from typing import Callable, Optional

import pytz

from .scheduler import Scheduler, TimerHandle
from .timezone_utils import TimezoneLike, as_timezone

logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 60000


def _utc_now() -> datetime:
    return datetime.now(pytz.UTC)


def cursor_position(now: datetime, tz: TimezoneLike = None) -> int:
    """
    Minutes since midnight of ``now`` as shown on a wall clock in ``tz``.

    With one pixel per minute this is also the line's vertical offset.
    """
    if now.tzinfo is None:
        now = pytz.UTC.localize(now)
    local_now = now.astimezone(as_timezone(tz))
    return local_now.hour * 60 + local_now.minute


class TimeCursor:
    """
    Periodically refreshed position of the current-time line.

    The tick runs on the owning view's scheduler and is cancelled by
    stop() or by disposing that scheduler.
    """

    def __init__(
        self,
        tz: TimezoneLike,
        scheduler: Scheduler,
        on_tick: Optional[Callable[[int], None]] = None,
        clock: Callable[[], datetime] = _utc_now,
        interval_ms: int = TICK_INTERVAL_MS,
    ):
        self._tz = as_timezone(tz)
        self._scheduler = scheduler
        self._on_tick = on_tick
        self._clock = clock
        self._interval_ms = interval_ms
        self._timer: Optional[TimerHandle] = None
        self.position = cursor_position(clock(), self._tz)

    @property
    def running(self) -> bool:
        return self._timer is not None and self._timer.active

    def start(self):
        if self.running:
            return
        self.refresh()
        self._timer = self._scheduler.call_every(self._interval_ms, self.refresh)

    def stop(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def refresh(self) -> int:
        self.position = cursor_position(self._clock(), self._tz)
        if self._on_tick:
            self._on_tick(self.position)
        return self.position

    def today(self) -> date:
        """Calendar date of now in the cursor's timezone."""
        now = self._clock()
        if now.tzinfo is None:
            now = pytz.UTC.localize(now)
        return now.astimezone(self._tz).date()

    def position_for(self, day: date) -> Optional[int]:
        """The line offset for ``day``, or None unless ``day`` is today."""
        if day != self.today():
            return None
        return self.position
