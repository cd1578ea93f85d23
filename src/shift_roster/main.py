"""
Main Entry Point for Shift Roster

Wires the record store, roster engine and menu together and provides the
command-line entry point with logging and error handling.
"""

import sys
import logging
import argparse
import traceback
from pathlib import Path
from datetime import datetime
from typing import List, Optional

from shift_roster.data_manager import JsonRecordStore
from shift_roster.scheduler_logic import ShiftRoster
from shift_roster.ui import MainMenu
from shift_roster.reporting import ExportManager


def setup_logging(level: str = "INFO", log_dir: str = "logs"):
    """Setup application logging.

    The log file receives messages at ``level``; the console only shows
    warnings so the menu output stays readable.
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    log_file = log_path / f"shift_roster_{datetime.now().strftime('%Y%m%d')}.log"

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file, encoding='utf-8'),
            console_handler
        ],
        force=True
    )

    return logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="shift-roster",
        description="Record employees, shifts and shift assignments in JSON files."
    )
    parser.add_argument("--data-dir", default="data",
                        help="directory holding employees.json, shifts.json, assignments.json and config.json")
    parser.add_argument("--log-dir", default="logs", help="directory for log files")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--export", metavar="EMPLOYEE_ID",
                        help="export this employee's schedule instead of starting the menu")
    parser.add_argument("--format", dest="format_type", default="csv",
                        choices=list(ExportManager.FORMATS))
    parser.add_argument("--output", help="export file path (default: generated name in the current directory)")
    return parser.parse_args(argv)


def handle_exception(exc_type, exc_value, exc_traceback):
    """Global exception handler"""
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return

    logger = logging.getLogger(__name__)
    logger.error(
        "Uncaught exception",
        exc_info=(exc_type, exc_value, exc_traceback)
    )


class ShiftRosterApp:
    """Main application class"""

    def __init__(self, data_dir: str = "data"):
        self.logger = logging.getLogger(__name__)
        self.data_dir = Path(data_dir)
        self.record_store = None
        self.roster = None
        self.export_manager = None

    def initialize(self) -> bool:
        """Initialize application components"""
        try:
            self.logger.info("Initializing Shift Roster")

            self.record_store = JsonRecordStore(self.data_dir)
            self.logger.info(f"Data directory: {self.data_dir.resolve()}")

            # The store itself warns once per unreadable file
            corrupted = self.record_store.corrupted_collections()
            if corrupted:
                self.logger.info(f"Starting with {len(corrupted)} unreadable collection(s): {', '.join(corrupted)}")

            self.roster = ShiftRoster(self.record_store)
            self.export_manager = ExportManager(self.roster)
            return True

        except Exception as e:
            self.logger.error(f"Failed to initialize application: {e}")
            self.logger.error(traceback.format_exc())
            return False

    def run_menu(self, input_func=None, output_func=None) -> bool:
        """Run the interactive menu"""
        if not self.initialize():
            return False
        MainMenu(self.roster, input_func, output_func).run()
        self.logger.info("Menu closed normally")
        return True

    def run_export(self, employee_id: str, format_type: str, output_path: Optional[str] = None) -> bool:
        """Export one schedule and report where it went"""
        if not self.initialize():
            return False

        if output_path is None:
            output_path = self.export_manager.get_default_filename(employee_id, format_type)

        success = self.export_manager.export_schedule(employee_id, format_type, output_path)
        if success:
            self.logger.info(f"Exported schedule of {employee_id} to {output_path}")
            print(f"Schedule exported to {output_path}")
        else:
            print(f"Export failed for employee {employee_id}", file=sys.stderr)
        return success


def main(argv: Optional[List[str]] = None):
    """Main entry point"""
    args = parse_args(argv)

    sys.excepthook = handle_exception

    logger = setup_logging(args.log_level, args.log_dir)
    logger.info("=" * 50)
    logger.info("Starting Shift Roster")
    logger.info("=" * 50)

    app = ShiftRosterApp(args.data_dir)
    if args.export:
        success = app.run_export(args.export, args.format_type, args.output)
    else:
        success = app.run_menu()

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
