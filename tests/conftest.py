"""
Pytest configuration and shared fixtures.
"""

import sys
from datetime import datetime
from pathlib import Path

import pytest
import pytz

# Add repo root to sys.path so tests can import timegrid without installing
REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from timegrid.events import Event  # noqa: E402
from timegrid.scheduler import Scheduler  # noqa: E402


class _ManualTimer:
    def __init__(self, due, interval, fire, repeating):
        self.due = due
        self.interval = interval
        self.fire = fire
        self.repeating = repeating
        self.stopped = False


class ManualScheduler(Scheduler):
    """Scheduler driven by a virtual millisecond clock."""

    def __init__(self):
        super().__init__()
        self.now_ms = 0
        self._timers: list[_ManualTimer] = []
        self.released: list[_ManualTimer] = []

    def _start_timer(self, delay_ms, fire, repeating):
        timer = _ManualTimer(self.now_ms + delay_ms, max(delay_ms, 1), fire, repeating)
        self._timers.append(timer)
        return timer

    def _stop_timer(self, timer):
        timer.stopped = True
        self.released.append(timer)

    def live_timers(self) -> int:
        """Back-end timers started but never handed back to _stop_timer."""
        return sum(1 for t in self._timers if t not in self.released)

    def advance(self, ms: int):
        """Move virtual time forward, firing every timer that falls due."""
        target = self.now_ms + ms
        while True:
            live = [t for t in self._timers if not t.stopped and t.due <= target]
            if not live:
                break
            timer = min(live, key=lambda t: t.due)
            self.now_ms = timer.due
            if timer.repeating:
                timer.due += timer.interval
            else:
                timer.stopped = True
            timer.fire()
        self.now_ms = target


@pytest.fixture
def scheduler():
    sched = ManualScheduler()
    yield sched
    sched.dispose()


@pytest.fixture
def tz():
    """Render timezone with DST, so day math is not just UTC arithmetic."""
    return pytz.timezone("Europe/Amsterdam")


@pytest.fixture
def at(tz):
    """Build an aware datetime in the render timezone: at(2024, 3, 5, 9, 30)."""
    def _at(year, month, day, hour=0, minute=0, second=0, microsecond=0):
        return tz.localize(datetime(year, month, day, hour, minute, second, microsecond))
    return _at


@pytest.fixture
def make_event(at):
    """Event factory taking (start, end) as (y, m, d, h, mi) tuples or datetimes."""
    counter = {"n": 0}

    def _make(start, end, title=None, event_id=None, **attributes):
        counter["n"] += 1
        if isinstance(start, tuple):
            start = at(*start)
        if isinstance(end, tuple):
            end = at(*end)
        event_id = event_id or f"e{counter['n']}"
        return Event(id=event_id, title=title or event_id, start=start, end=end, **attributes)

    return _make


@pytest.fixture
def fixed_clock(at):
    """Clock frozen at 2024-03-05 14:37 local time."""
    now = at(2024, 3, 5, 14, 37)
    return lambda: now
