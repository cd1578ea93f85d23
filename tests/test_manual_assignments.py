import pytest
from pathlib import Path
import sys
import json
import threading

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shift_roster.data_manager import JsonRecordStore, Employee, Shift, ASSIGNMENTS, EMPLOYEES
from shift_roster.scheduler_logic import ShiftRoster, ValidationMessage


@pytest.fixture
def record_store(tmp_path):
    """JSON-backed store in a temp directory with one employee and two shifts."""
    store = JsonRecordStore(tmp_path)
    store.add_employee(Employee("E001", "Alice", "555-0101"))
    store.add_shift(Shift("S1", "2025-01-01", "08:00", "16:00"))
    store.add_shift(Shift("S2", "2025-01-02", "08:00", "16:00"))
    return store


@pytest.fixture
def roster(record_store):
    """Fixture for a ShiftRoster instance."""
    return ShiftRoster(record_store)


def test_assignment_is_recorded_and_persisted(roster, record_store):
    result = roster.assign_employee_to_shift("E001", "S1")

    assert result.ok
    assert result.message == "Shift Recorded"

    saved = json.loads(record_store.path_for(ASSIGNMENTS).read_text(encoding="utf-8"))
    assert saved == [{"employeeId": "E001", "shiftId": "S1"}]


def test_assignment_trims_ids(roster, record_store):
    assert roster.assign_employee_to_shift("  E001 ", " S2 ").ok
    assert record_store.find_assignment("E001", "S2") is not None


@pytest.mark.parametrize(
    "employee_id, shift_id, expected",
    [
        ("", "S1", ValidationMessage.INVALID_INPUT),
        ("E001", "  ", ValidationMessage.INVALID_INPUT),
        (None, None, ValidationMessage.INVALID_INPUT),
        # Blank input wins even when the other ID is unknown
        ("", "NOPE", ValidationMessage.INVALID_INPUT),
        # Unknown employee is reported regardless of the shift
        ("E404", "S1", ValidationMessage.EMPLOYEE_NOT_FOUND),
        ("E404", "NOPE", ValidationMessage.EMPLOYEE_NOT_FOUND),
        ("E001", "NOPE", ValidationMessage.SHIFT_NOT_FOUND),
    ],
)
def test_assignment_error_precedence(roster, record_store, employee_id, shift_id, expected):
    """
    Why this is important: the checks run in a fixed order so the user always
    sees the same message for the same mistake. Each case must fail with the
    first applicable message and leave the assignments file untouched.
    """
    result = roster.assign_employee_to_shift(employee_id, shift_id)

    assert not result.ok
    assert result.message == expected
    assert not record_store.path_for(ASSIGNMENTS).exists()


def test_duplicate_assignment_rejected(roster, record_store):
    """
    Why this is important: the same employee must never be booked twice on
    one shift. The second attempt fails and the file keeps a single record.
    """
    first = roster.assign_employee_to_shift("E001", "S1")
    second = roster.assign_employee_to_shift("E001", "S1")

    assert first.ok and first.message == "Shift Recorded"
    assert not second.ok and second.message == "Employee already assigned to shift"

    pairs = [(a.employee_id, a.shift_id) for a in record_store.get_all_assignments()]
    assert pairs.count(("E001", "S1")) == 1


def test_duplicate_check_survives_reload(roster, record_store):
    roster.assign_employee_to_shift("E001", "S1")

    reloaded = ShiftRoster(JsonRecordStore(record_store.data_dir))
    result = reloaded.assign_employee_to_shift("E001", "S1")

    assert result.message == ValidationMessage.ALREADY_ASSIGNED


def test_same_shift_for_different_employees(roster, record_store):
    roster.add_employee("Bob", "555-0102")

    assert roster.assign_employee_to_shift("E001", "S1").ok
    assert roster.assign_employee_to_shift("E002", "S1").ok
    assert len(record_store.get_all_assignments()) == 2


def test_shift_added_after_start_is_visible(roster, record_store):
    """Each operation re-reads the files, so outside edits show up immediately."""
    assert roster.assign_employee_to_shift("E001", "S9").message == ValidationMessage.SHIFT_NOT_FOUND

    shifts = json.loads(record_store.path_for("shifts").read_text(encoding="utf-8"))
    shifts.append({"shiftId": "S9", "date": "2025-02-01", "startTime": "09:00", "endTime": "17:00"})
    record_store.path_for("shifts").write_text(json.dumps(shifts), encoding="utf-8")

    assert roster.assign_employee_to_shift("E001", "S9").ok


def test_corrupted_employee_file_means_no_employees(roster, record_store):
    record_store.path_for("employees").write_text("{{{", encoding="utf-8")

    result = roster.assign_employee_to_shift("E001", "S1")

    assert result.message == ValidationMessage.EMPLOYEE_NOT_FOUND


class RendezvousStore(JsonRecordStore):
    """
    Makes concurrent callers meet right after their duplicate or ID check.

    When nothing serializes the check and the append, both threads pass the
    barrier together and both append. When the check runs under the
    collection lock, the second thread cannot reach the barrier, the wait
    times out and the threads proceed one after the other.
    """

    def __init__(self, data_dir):
        super().__init__(data_dir)
        self.barrier = threading.Barrier(2)

    def _rendezvous(self):
        try:
            self.barrier.wait(timeout=0.5)
        except threading.BrokenBarrierError:
            pass

    def find_assignment(self, employee_id, shift_id):
        found = super().find_assignment(employee_id, shift_id)
        self._rendezvous()
        return found

    def get_all_employees(self):
        employees = super().get_all_employees()
        self._rendezvous()
        return employees


def _run_concurrently(func, *args):
    results = []
    threads = [threading.Thread(target=lambda: results.append(func(*args))) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)
    return results


def test_concurrent_duplicate_assignment_records_once(tmp_path):
    """
    Why this is important: the duplicate check and the append must act as
    one step. Two callers assigning the same pair at the same time may
    record it only once.
    """
    store = RendezvousStore(tmp_path)
    store.add_employee(Employee("E001", "Alice", "555-0101"))
    store.add_shift(Shift("S1", "2025-01-01", "08:00", "16:00"))
    roster = ShiftRoster(store)

    results = _run_concurrently(roster.assign_employee_to_shift, "E001", "S1")

    assert sorted(r.message for r in results) == sorted(
        [ValidationMessage.SHIFT_RECORDED, ValidationMessage.ALREADY_ASSIGNED]
    )
    saved = json.loads(store.path_for(ASSIGNMENTS).read_text(encoding="utf-8"))
    assert saved == [{"employeeId": "E001", "shiftId": "S1"}]


def test_concurrent_add_employee_gets_distinct_ids(tmp_path):
    """Two registrations racing on the same snapshot must not share an ID."""
    store = RendezvousStore(tmp_path)
    roster = ShiftRoster(store)

    results = _run_concurrently(roster.add_employee, "Dana", "555-0199")

    assert all(r.ok for r in results)
    saved = json.loads(store.path_for(EMPLOYEES).read_text(encoding="utf-8"))
    assert sorted(e["employeeId"] for e in saved) == ["E001", "E002"]


def test_locked_rejects_unknown_collection(record_store):
    from shift_roster.data_manager import DataValidationError

    with pytest.raises(DataValidationError):
        record_store.locked("rosters")
