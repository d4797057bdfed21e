"""
Timegrid GUI Module

PySide6-based day and week views on top of the timegrid layout core.
"""

from .main_window import MainWindow
from .qt_scheduler import QtScheduler

__all__ = ['MainWindow', 'QtScheduler']
