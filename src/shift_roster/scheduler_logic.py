"""
Roster Logic for Shift Roster

Validation and query rules applied on top of the record store: employee ID
generation, employee registration, shift assignment with duplicate checks,
and per-employee schedule retrieval ordered by date and start time.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Union
import logging

from .data_manager import ASSIGNMENTS, EMPLOYEES, Assignment, Employee, RecordStore, Shift

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


class ValidationMessage:
    """User-facing outcome messages of roster operations"""
    INVALID_INPUT = "Invalid input."
    EMPLOYEE_ADDED = "Employee added..."
    EMPLOYEE_NOT_FOUND = "Employee does not exist"
    SHIFT_NOT_FOUND = "Shift does not exist"
    ALREADY_ASSIGNED = "Employee already assigned to shift"
    SHIFT_RECORDED = "Shift Recorded"


@dataclass
class OperationResult:
    """Result of a roster operation; failures are returned, never raised"""
    ok: bool
    message: str = ""
    rows: Optional[List[Shift]] = None
    record: Optional[Any] = None
    total_hours: Optional[float] = None


def _clean(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _id_number(employee_id: Any) -> int:
    """Numeric part of an ID like E042; anything unparsable counts as 0"""
    suffix = str(employee_id)[1:]
    if not (suffix.isascii() and suffix.isdigit()):
        return 0
    return int(suffix)


def get_next_employee_id(employees: Iterable[Union[Employee, Dict[str, Any]]]) -> str:
    """Next ID in the E001, E002, ... sequence, above every existing number"""
    max_number = 0
    for emp in employees:
        emp_id = emp.get("employeeId") if isinstance(emp, dict) else emp.employee_id
        max_number = max(max_number, _id_number(emp_id))
    return "E" + str(max_number + 1).zfill(3)


def sort_shifts(shifts: Iterable[Shift]) -> List[Shift]:
    """Shifts ordered by the raw date + start time string; ties keep input order"""
    return sorted(shifts, key=lambda s: s.date + s.start_time)


def _parse_clock(value: Any) -> Optional[int]:
    """Minutes since midnight for "HH:MM", or None when malformed"""
    if not isinstance(value, str):
        return None
    parts = value.split(":")
    if len(parts) != 2 or not all(p.isascii() and p.isdigit() for p in parts):
        return None
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        return None
    return hours * 60 + minutes


def compute_shift_duration(start_time: str, end_time: str) -> float:
    """
    Length of a shift in hours.

    A shift ending before it starts crosses midnight. Malformed or
    out-of-range times give 0 instead of raising.
    """
    start = _parse_clock(start_time)
    end = _parse_clock(end_time)
    if start is None or end is None:
        return 0
    if end < start:
        end += MINUTES_PER_DAY
    return (end - start) / 60


class ShiftRoster:
    """Roster engine; every call works on a fresh snapshot of the record store"""

    def __init__(self, record_store: RecordStore):
        self.record_store = record_store

    @property
    def max_daily_hours(self) -> float:
        # Read for display only; no operation enforces it
        return self.record_store.get_max_daily_hours()

    def get_employees(self) -> List[Employee]:
        return self.record_store.get_all_employees()

    def add_employee(self, name: str, phone: str) -> OperationResult:
        """Register a new employee under the next free ID"""
        name = _clean(name)
        phone = _clean(phone)

        if not name or not phone:
            logger.info("Rejected new employee: name and phone are required")
            return OperationResult(False, ValidationMessage.INVALID_INPUT)

        with self.record_store.locked(EMPLOYEES):
            employees = self.record_store.get_all_employees()
            employee = Employee(
                employee_id=get_next_employee_id(employees),
                name=name,
                phone=phone
            )
            self.record_store.add_employee(employee)
        logger.info(f"Added employee {employee.employee_id}")

        return OperationResult(True, ValidationMessage.EMPLOYEE_ADDED, record=employee)

    def assign_employee_to_shift(self, employee_id: str, shift_id: str) -> OperationResult:
        """
        Record that an employee works a shift.

        Checks run in a fixed order and stop at the first failure: blank
        input, unknown employee, unknown shift, existing assignment.
        """
        employee_id = _clean(employee_id)
        shift_id = _clean(shift_id)

        if not employee_id or not shift_id:
            return OperationResult(False, ValidationMessage.INVALID_INPUT)

        if self.record_store.find_employee(employee_id) is None:
            logger.info(f"Assignment rejected, unknown employee {employee_id}")
            return OperationResult(False, ValidationMessage.EMPLOYEE_NOT_FOUND)

        if self.record_store.find_shift(shift_id) is None:
            logger.info(f"Assignment rejected, unknown shift {shift_id}")
            return OperationResult(False, ValidationMessage.SHIFT_NOT_FOUND)

        # Duplicate check and append must not interleave with another writer
        with self.record_store.locked(ASSIGNMENTS):
            if self.record_store.find_assignment(employee_id, shift_id) is not None:
                logger.info(f"Assignment rejected, {employee_id} already on {shift_id}")
                return OperationResult(False, ValidationMessage.ALREADY_ASSIGNED)

            assignment = Assignment(employee_id=employee_id, shift_id=shift_id)
            self.record_store.add_assignment(assignment)
        logger.info(f"Assigned {employee_id} to shift {shift_id}")

        return OperationResult(True, ValidationMessage.SHIFT_RECORDED, record=assignment)

    def get_employee_schedule(self, employee_id: str) -> OperationResult:
        """Sorted shifts of one employee; assignments to vanished shifts are skipped"""
        employee_id = _clean(employee_id)

        if not employee_id:
            return OperationResult(False, "")

        if self.record_store.find_employee(employee_id) is None:
            return OperationResult(False, "")

        rows = []
        for assignment in self.record_store.get_assignments_by_employee(employee_id):
            shift = self.record_store.find_shift(assignment.shift_id)
            if shift is None:
                logger.debug(f"Skipping assignment of {employee_id} to missing shift {assignment.shift_id}")
                continue
            rows.append(shift)

        return OperationResult(True, rows=sort_shifts(rows))

    def get_schedule_hours(self, employee_id: str) -> OperationResult:
        """Schedule of one employee together with the total of its shift durations"""
        result = self.get_employee_schedule(employee_id)
        if not result.ok:
            return result

        result.total_hours = sum(compute_shift_duration(s.start_time, s.end_time) for s in result.rows)
        return result
