"""
Owned timer scheduling.

The long-press timer and the once-a-minute tick are the only deferred
work in the core. Both go through a Scheduler object owned by the view,
so that disposing the view cancels everything it started.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict

logger = logging.getLogger(__name__)


class TimerHandle:
    """Cancellable reference to a scheduled callback."""

    def __init__(self, scheduler: 'Scheduler', ticket: int, repeating: bool):
        self._scheduler = scheduler
        self.ticket = ticket
        self.repeating = repeating

    @property
    def active(self) -> bool:
        return self._scheduler.is_pending(self.ticket)

    def cancel(self) -> None:
        self._scheduler.cancel(self.ticket)


class Scheduler(ABC):
    """
    Base class for timer back ends.

    Subclasses only start and stop the underlying timer; ticket
    bookkeeping and disposal live here.
    """

    def __init__(self):
        self._pending: Dict[int, Any] = {}
        self._next_ticket = 1
        self._disposed = False

    @abstractmethod
    def _start_timer(self, delay_ms: int, fire: Callable[[], None], repeating: bool) -> Any:
        """Start a back-end timer and return whatever is needed to stop it."""

    @abstractmethod
    def _stop_timer(self, timer: Any) -> None:
        """Stop a timer previously returned by _start_timer."""

    def _schedule(self, delay_ms: int, callback: Callable[[], None], repeating: bool) -> TimerHandle:
        if self._disposed:
            raise RuntimeError("Scheduler has been disposed")
        ticket = self._next_ticket
        self._next_ticket += 1

        def _fire():
            if ticket not in self._pending:
                return
            if not repeating:
                # Fired one-shots release their back-end timer right away
                self._stop_timer(self._pending.pop(ticket))
            callback()

        self._pending[ticket] = self._start_timer(max(0, int(delay_ms)), _fire, repeating)
        return TimerHandle(self, ticket, repeating)

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay_ms`` milliseconds."""
        return self._schedule(delay_ms, callback, repeating=False)

    def call_every(self, interval_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` every ``interval_ms`` milliseconds until cancelled."""
        return self._schedule(interval_ms, callback, repeating=True)

    def is_pending(self, ticket: int) -> bool:
        return ticket in self._pending

    def pending_count(self) -> int:
        return len(self._pending)

    def cancel(self, ticket: int) -> None:
        timer = self._pending.pop(ticket, None)
        if timer is not None:
            self._stop_timer(timer)

    def dispose(self) -> None:
        """Cancel every outstanding timer; the scheduler cannot be reused."""
        for ticket in list(self._pending):
            self.cancel(ticket)
        self._disposed = True
        logger.debug("%s disposed", type(self).__name__)
