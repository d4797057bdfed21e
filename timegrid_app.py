#!/usr/bin/env python3
"""
Timegrid - A PySide6 day and week time grid.

This is the main entry point for the application.
"""

import sys
import argparse
import logging
from datetime import date
from pathlib import Path

from PySide6.QtWidgets import QApplication
from PySide6.QtCore import Qt

from timegrid.config import Config
from timegrid.events import load_events_file
from timegrid.logging import configure_logging
from timegrid.timezone_utils import set_timezone
from timegrid_gui.main_window import MainWindow, VIEW_DAY, VIEW_WEEK

logger = logging.getLogger("timegrid")


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Timegrid - day and week views with overlap layout and drag rescheduling"
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        help="Path to configuration file (default: auto-detect)"
    )
    parser.add_argument(
        "--events",
        type=Path,
        help="JSON file with an array of events (overrides [General] events_file)"
    )
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        help="Date to show initially, YYYY-MM-DD (default: today)"
    )
    parser.add_argument(
        "--view",
        choices=[VIEW_DAY, VIEW_WEEK],
        default=VIEW_WEEK,
        help="Initial view"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output"
    )
    return parser.parse_args(argv)


def main():
    """Main entry point."""
    args = parse_args()
    configure_logging(args.debug)

    try:
        config = Config.load(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(f"\nDefault location: {Config.get_default_config_path()}", file=sys.stderr)
        print("""
Example configuration:

[General]
timezone = "Europe/Berlin"
locale = "en"
first_day_of_week = 1
events_file = "~/events.json"

[Layout]
hour_height = 60
snap_minutes = 15
""", file=sys.stderr)
        sys.exit(1)
    except (ValueError, OSError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        sys.exit(1)

    set_timezone(config.timezone)

    events = []
    events_file = args.events or config.events_file
    if events_file:
        try:
            events = load_events_file(events_file, config.timezone, config.layout.default_duration)
        except (OSError, ValueError) as e:
            print(f"Error loading events from {events_file}: {e}", file=sys.stderr)
            sys.exit(1)

    logger.debug(
        "Loaded configuration from %s (timezone %s, %d events)",
        args.config or Config.get_default_config_path(), config.timezone, len(events),
    )

    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    app = QApplication(sys.argv)
    app.setApplicationName("Timegrid")
    app.setApplicationVersion("0.1")
    app.setStyle("Fusion")

    window = MainWindow(config, events=events, initial_date=args.date, initial_view=args.view)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
