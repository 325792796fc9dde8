"""
In-memory store implementations.

Used by the API process until a database-backed store is wired in, and by
the test-suite. Writes are serialised with a lock so create and delete are
atomic relative to the affected row.
"""
from __future__ import annotations

import itertools
import threading
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from mediflow.models.clinical import (
    Assignment,
    Department,
    Handover,
    IntakeOutputRecord,
    Medication,
    NursingNote,
    Patient,
    Shift,
    TestResult,
    User,
    VitalSign,
)


def _between(value: datetime, start: datetime, end: datetime) -> bool:
    return start <= value <= end


class InMemoryClinicalStore:
    """
    Simple in-memory clinical record store.

    Implements ``ClinicalDataStore``; the ``add_*`` helpers exist for seeding.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._shifts: Dict[int, Shift] = {}
        self._patients: Dict[int, Patient] = {}
        self._departments: Dict[int, Department] = {}
        self._users: Dict[int, User] = {}
        self._assignments: List[Assignment] = []
        self._notes: List[NursingNote] = []
        self._vitals: List[VitalSign] = []
        self._medications: List[Medication] = []
        self._intake_outputs: List[IntakeOutputRecord] = []
        self._test_results: List[TestResult] = []

    # ── Seeding ──────────────────────────────────────────────────────────

    def add_shift(self, shift: Shift) -> None:
        with self._lock:
            self._shifts[shift.id] = shift

    def add_patient(self, patient: Patient) -> None:
        with self._lock:
            self._patients[patient.id] = patient

    def add_department(self, department: Department) -> None:
        with self._lock:
            self._departments[department.id] = department

    def add_user(self, user: User) -> None:
        with self._lock:
            self._users[user.id] = user

    def add_assignment(self, assignment: Assignment) -> None:
        with self._lock:
            self._assignments.append(assignment)

    def add_records(self, records: Iterable[object]) -> None:
        """Add clinical records of any supported type."""
        with self._lock:
            for record in records:
                if isinstance(record, NursingNote):
                    self._notes.append(record)
                elif isinstance(record, VitalSign):
                    self._vitals.append(record)
                elif isinstance(record, Medication):
                    self._medications.append(record)
                elif isinstance(record, IntakeOutputRecord):
                    self._intake_outputs.append(record)
                elif isinstance(record, TestResult):
                    self._test_results.append(record)
                else:
                    raise TypeError(f"Unsupported record type: {type(record).__name__}")

    # ── Queries ──────────────────────────────────────────────────────────

    def find_assignments(self, nurse_id: int, shift_id: int) -> List[Assignment]:
        return [
            a for a in self._assignments
            if a.nurse_id == nurse_id and a.shift_id == shift_id
        ]

    def find_notes(self, patient_id: int) -> List[NursingNote]:
        notes = [n for n in self._notes if n.patient_id == patient_id]
        return sorted(notes, key=lambda n: n.created_at, reverse=True)

    def find_vitals(self, patient_id: int, start: datetime, end: datetime) -> List[VitalSign]:
        return [
            v for v in self._vitals
            if v.patient_id == patient_id and _between(v.measured_at, start, end)
        ]

    def find_medications(self, patient_id: int, start: datetime, end: datetime) -> List[Medication]:
        return [
            m for m in self._medications
            if m.patient_id == patient_id and _between(m.administered_at, start, end)
        ]

    def find_intake_outputs(
        self, patient_id: int, start: datetime, end: datetime
    ) -> List[IntakeOutputRecord]:
        return [
            r for r in self._intake_outputs
            if r.patient_id == patient_id and _between(r.recorded_at, start, end)
        ]

    def find_test_results(self, patient_id: int) -> List[TestResult]:
        results = [t for t in self._test_results if t.patient_id == patient_id]
        return sorted(results, key=lambda t: t.result_date, reverse=True)

    def find_shift(self, shift_id: int) -> Optional[Shift]:
        return self._shifts.get(shift_id)

    def find_patient(self, patient_id: int) -> Optional[Patient]:
        return self._patients.get(patient_id)

    def find_department(self, department_id: int) -> Optional[Department]:
        return self._departments.get(department_id)

    def find_user(self, user_id: int) -> Optional[User]:
        return self._users.get(user_id)


class InMemoryHandoverRepository:
    """Implements ``HandoverRepository`` over a dict keyed by handover id."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._store: Dict[int, Handover] = {}
        self._ids = itertools.count(1)

    def save(self, handover: Handover) -> Handover:
        with self._lock:
            stored = handover.model_copy(update={"id": next(self._ids)})
            self._store[stored.id] = stored
            return stored

    def get(self, handover_id: int) -> Optional[Handover]:
        return self._store.get(handover_id)

    def list_by_department(self, department_id: int) -> List[Handover]:
        with self._lock:
            matching = [h for h in self._store.values() if h.department.id == department_id]
        return sorted(
            matching,
            key=lambda h: (h.handover_date, h.created_at),
            reverse=True,
        )

    def delete(self, handover_id: int) -> bool:
        with self._lock:
            return self._store.pop(handover_id, None) is not None

    def __len__(self) -> int:
        return len(self._store)
