"""
User Interface for Shift Roster

Repeating text menu for listing and adding employees, assigning shifts and
viewing an employee's schedule.
"""

from typing import Callable, Optional
import logging

from .scheduler_logic import ShiftRoster
from .reporting import format_employee_table, format_schedule_line, SCHEDULE_HEADER

logger = logging.getLogger(__name__)

MENU_OPTIONS = [
    "1. Show all employees",
    "2. Add new employee",
    "3. Assign employee to shift",
    "4. View employee schedule",
    "5. Exit",
]


class MainMenu:
    """Interactive menu loop; input and output are injectable for tests"""

    def __init__(self, roster: ShiftRoster,
                 input_func: Optional[Callable[[str], str]] = None,
                 output_func: Optional[Callable[[str], None]] = None):
        self.roster = roster
        self.input = input_func or input
        self.output = output_func or print
        self.handlers = {
            "1": self.show_all_employees,
            "2": self.add_employee_menu,
            "3": self.assign_employee_menu,
            "4": self.view_schedule_menu,
        }

    def prompt(self, label: str) -> str:
        return self.input(label).strip()

    def print_menu(self):
        self.output("")
        for option in MENU_OPTIONS:
            self.output(option)

    def show_all_employees(self):
        self.output("")
        for line in format_employee_table(self.roster.get_employees()):
            self.output(line)

    def add_employee_menu(self):
        name = self.prompt("Enter employee name: ")
        phone = self.prompt("Enter phone number: ")
        self.output(self.roster.add_employee(name, phone).message)

    def assign_employee_menu(self):
        employee_id = self.prompt("Enter employee ID: ")
        shift_id = self.prompt("Enter shift ID: ")
        self.output(self.roster.assign_employee_to_shift(employee_id, shift_id).message)

    def view_schedule_menu(self):
        employee_id = self.prompt("Enter employee ID: ")

        # Header goes out even when the employee is unknown
        self.output(SCHEDULE_HEADER)

        result = self.roster.get_employee_schedule(employee_id)
        if not result.ok:
            return

        for shift in result.rows:
            self.output(format_schedule_line(shift))

    def run(self):
        """Run until the user picks Exit or input ends"""
        self.output(f"Shift Roster (max daily hours: {self.roster.max_daily_hours:g})")
        while True:
            self.print_menu()
            try:
                choice = self.prompt("What is your choice> ")
                if choice == "5":
                    break
                handler = self.handlers.get(choice)
                if handler is None:
                    self.output("Invalid choice")
                    continue
                handler()
            except (EOFError, KeyboardInterrupt):
                logger.info("Input closed, leaving menu")
                self.output("")
                break
