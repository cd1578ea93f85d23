"""
Data Manager for Shift Roster

Handles all file I/O for the employees, shifts and assignments collections.
Each collection lives in its own JSON array file; a missing or unreadable
file is treated as an empty collection.
"""

import json
import logging
import math
import threading
from abc import ABC, abstractmethod
from copy import deepcopy
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

EMPLOYEES = "employees"
SHIFTS = "shifts"
ASSIGNMENTS = "assignments"
COLLECTIONS = (EMPLOYEES, SHIFTS, ASSIGNMENTS)

DEFAULT_MAX_DAILY_HOURS = 9


class DataManagerError(Exception):
    """Base exception for record store operations"""
    pass


class DataSaveError(DataManagerError):
    """Raised when saving a collection fails"""
    pass


class DataValidationError(DataManagerError):
    """Raised when an unknown collection is requested"""
    pass


def _text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass
class Employee:
    """Employee record as persisted in employees.json"""
    employee_id: str
    name: str
    phone: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "employeeId": self.employee_id,
            "name": self.name,
            "phone": self.phone
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Employee':
        return cls(
            employee_id=_text(data.get("employeeId")),
            name=_text(data.get("name")),
            phone=_text(data.get("phone"))
        )


@dataclass
class Shift:
    """Shift record; times are "HH:MM" strings, dates are kept as written"""
    shift_id: str
    date: str
    start_time: str
    end_time: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shiftId": self.shift_id,
            "date": self.date,
            "startTime": self.start_time,
            "endTime": self.end_time
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Shift':
        return cls(
            shift_id=_text(data.get("shiftId")),
            date=_text(data.get("date")),
            start_time=_text(data.get("startTime")),
            end_time=_text(data.get("endTime"))
        )


@dataclass
class Assignment:
    """Link between one employee and one shift"""
    employee_id: str
    shift_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "employeeId": self.employee_id,
            "shiftId": self.shift_id
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Assignment':
        return cls(
            employee_id=_text(data.get("employeeId")),
            shift_id=_text(data.get("shiftId"))
        )


class LoadStatus(Enum):
    OK = "ok"
    MISSING = "missing"
    CORRUPTED = "corrupted"


@dataclass
class LoadResult:
    """Outcome of reading one collection.

    ``records`` is always a list; ``status`` tells a genuinely empty
    collection apart from one whose file is missing or unreadable.
    """
    records: List[Any] = field(default_factory=list)
    status: LoadStatus = LoadStatus.OK
    detail: str = ""

    @property
    def is_available(self) -> bool:
        return self.status is LoadStatus.OK


def parse_max_daily_hours(config: Any) -> float:
    """Read maxDailyHours from a config mapping, falling back to the default"""
    if not isinstance(config, dict):
        return DEFAULT_MAX_DAILY_HOURS
    raw = config.get("maxDailyHours")
    if isinstance(raw, bool):
        return DEFAULT_MAX_DAILY_HOURS
    try:
        hours = float(raw)
    except (TypeError, ValueError):
        return DEFAULT_MAX_DAILY_HOURS
    if math.isnan(hours) or hours <= 0:
        return DEFAULT_MAX_DAILY_HOURS
    return hours


class RecordStore(ABC):
    """Storage interface the roster engine reads from and appends to"""

    def __init__(self):
        # Reentrant so a caller holding a collection lock can still append to it
        self._locks = {name: threading.RLock() for name in COLLECTIONS}

    @abstractmethod
    def load_collection(self, name: str) -> LoadResult:
        """Return every record of a collection along with how it was loaded"""
        pass

    @abstractmethod
    def append(self, name: str, record: Dict[str, Any]) -> None:
        """Append one record to the end of a collection"""
        pass

    @abstractmethod
    def load_config(self) -> LoadResult:
        """Return the configuration object wrapped in a LoadResult"""
        pass

    def _check_collection(self, name: str):
        if name not in COLLECTIONS:
            raise DataValidationError(f"Unknown collection: {name}")

    def locked(self, name: str):
        """Lock guarding a collection; hold it across a read-check-append sequence"""
        self._check_collection(name)
        return self._locks[name]

    def get_all(self, name: str) -> List[Any]:
        return self.load_collection(name).records

    def find(self, name: str, predicate: Callable[[Dict[str, Any]], bool]) -> Optional[Dict[str, Any]]:
        """First record of a collection matching predicate, or None"""
        for record in self.get_all(name):
            if isinstance(record, dict) and predicate(record):
                return record
        return None

    # Employees
    def get_all_employees(self) -> List[Employee]:
        return [Employee.from_dict(r) for r in self.get_all(EMPLOYEES) if isinstance(r, dict)]

    def find_employee(self, employee_id: str) -> Optional[Employee]:
        record = self.find(EMPLOYEES, lambda r: _text(r.get("employeeId")) == employee_id)
        return Employee.from_dict(record) if record is not None else None

    def add_employee(self, employee: Employee) -> None:
        self.append(EMPLOYEES, employee.to_dict())

    # Shifts
    def get_all_shifts(self) -> List[Shift]:
        return [Shift.from_dict(r) for r in self.get_all(SHIFTS) if isinstance(r, dict)]

    def find_shift(self, shift_id: str) -> Optional[Shift]:
        record = self.find(SHIFTS, lambda r: _text(r.get("shiftId")) == shift_id)
        return Shift.from_dict(record) if record is not None else None

    def add_shift(self, shift: Shift) -> None:
        self.append(SHIFTS, shift.to_dict())

    # Assignments
    def get_all_assignments(self) -> List[Assignment]:
        return [Assignment.from_dict(r) for r in self.get_all(ASSIGNMENTS) if isinstance(r, dict)]

    def find_assignment(self, employee_id: str, shift_id: str) -> Optional[Assignment]:
        record = self.find(
            ASSIGNMENTS,
            lambda r: _text(r.get("employeeId")) == employee_id and _text(r.get("shiftId")) == shift_id
        )
        return Assignment.from_dict(record) if record is not None else None

    def get_assignments_by_employee(self, employee_id: str) -> List[Assignment]:
        return [a for a in self.get_all_assignments() if a.employee_id == employee_id]

    def add_assignment(self, assignment: Assignment) -> None:
        self.append(ASSIGNMENTS, assignment.to_dict())

    # Configuration
    def get_max_daily_hours(self) -> float:
        loaded = self.load_config()
        if not loaded.is_available or not loaded.records:
            return DEFAULT_MAX_DAILY_HOURS
        return parse_max_daily_hours(loaded.records[0])


class JsonRecordStore(RecordStore):
    """Record store backed by one JSON array file per collection"""

    FILE_NAMES = {
        EMPLOYEES: "employees.json",
        SHIFTS: "shifts.json",
        ASSIGNMENTS: "assignments.json",
    }
    CONFIG_FILE_NAME = "config.json"

    def __init__(self, data_dir: Union[str, Path] = "data"):
        super().__init__()
        self.data_dir = Path(data_dir)

    def path_for(self, name: str) -> Path:
        self._check_collection(name)
        return self.data_dir / self.FILE_NAMES[name]

    @property
    def config_path(self) -> Path:
        return self.data_dir / self.CONFIG_FILE_NAME

    def _read_json(self, path: Path) -> LoadResult:
        if not path.exists():
            return LoadResult(status=LoadStatus.MISSING, detail=f"{path} does not exist")
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            logger.warning(f"Could not read {path}, treating it as empty: {e}")
            return LoadResult(status=LoadStatus.CORRUPTED, detail=str(e))
        return LoadResult(records=[data])

    def load_collection(self, name: str) -> LoadResult:
        path = self.path_for(name)
        result = self._read_json(path)
        if not result.is_available:
            return result

        data = result.records[0]
        if not isinstance(data, list):
            logger.warning(f"{path} does not hold a JSON array, treating it as empty")
            return LoadResult(status=LoadStatus.CORRUPTED,
                              detail=f"expected a JSON array, found {type(data).__name__}")
        return LoadResult(records=data)

    def load_config(self) -> LoadResult:
        return self._read_json(self.config_path)

    def append(self, name: str, record: Dict[str, Any]) -> None:
        path = self.path_for(name)
        with self.locked(name):
            loaded = self.load_collection(name)
            if loaded.status is LoadStatus.CORRUPTED:
                logger.warning(f"Overwriting unreadable {path} ({loaded.detail})")
            records = loaded.records
            records.append(record)
            self._write(path, records)

    def _write(self, path: Path, records: List[Any]):
        """Write records to a temp file and move it over the target"""
        temp_file = path.with_suffix(path.suffix + '.tmp')
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(records, f, indent=4, ensure_ascii=False)
            temp_file.replace(path)
        except (IOError, OSError) as e:
            logger.error(f"I/O error while saving {path}: {e}", exc_info=True)
            raise DataSaveError(f"Failed to save {path.name}: {e}")
        finally:
            if temp_file.exists():
                try:
                    temp_file.unlink()
                except OSError as cleanup_e:
                    logger.error(f"Failed to clean up temporary file {temp_file}: {cleanup_e}")

    def corrupted_collections(self) -> List[str]:
        """Names of collections whose files exist but cannot be used"""
        return [name for name in COLLECTIONS
                if self.load_collection(name).status is LoadStatus.CORRUPTED]


class InMemoryRecordStore(RecordStore):
    """Record store kept entirely in memory, used by tests and dry runs"""

    def __init__(self, employees: Optional[List[Dict[str, Any]]] = None,
                 shifts: Optional[List[Dict[str, Any]]] = None,
                 assignments: Optional[List[Dict[str, Any]]] = None,
                 config: Optional[Dict[str, Any]] = None):
        super().__init__()
        self.collections: Dict[str, List[Any]] = {
            EMPLOYEES: deepcopy(employees or []),
            SHIFTS: deepcopy(shifts or []),
            ASSIGNMENTS: deepcopy(assignments or []),
        }
        self.config = deepcopy(config)
        self.write_count = 0

    def load_collection(self, name: str) -> LoadResult:
        self._check_collection(name)
        return LoadResult(records=deepcopy(self.collections[name]))

    def load_config(self) -> LoadResult:
        if self.config is None:
            return LoadResult(status=LoadStatus.MISSING, detail="no configuration")
        return LoadResult(records=[deepcopy(self.config)])

    def append(self, name: str, record: Dict[str, Any]) -> None:
        with self.locked(name):
            self.collections[name].append(deepcopy(record))
            self.write_count += 1
