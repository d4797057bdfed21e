"""Timegrid GUI widgets."""

from .event_widget import EventWidget, AllDayEventWidget
from .time_grid import TimeGridView, DayColumnWidget, AllDayEventsRow

__all__ = ['EventWidget', 'AllDayEventWidget', 'TimeGridView', 'DayColumnWidget', 'AllDayEventsRow']
