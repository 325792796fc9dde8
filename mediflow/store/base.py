"""
Store contracts.

The clinical record store and the handover repository are external
collaborators; the handover workflow only depends on these protocols.
Lookups by id return ``None`` for unknown ids instead of raising.
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Protocol

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


class ClinicalDataStore(Protocol):
    """Read-only query surface over clinical records."""

    def find_assignments(self, nurse_id: int, shift_id: int) -> List[Assignment]:
        """All assignments of the nurse to the shift, any date."""
        ...

    def find_notes(self, patient_id: int) -> List[NursingNote]:
        """Notes ordered by ``created_at`` descending."""
        ...

    def find_vitals(self, patient_id: int, start: datetime, end: datetime) -> List[VitalSign]:
        """Vitals with ``start <= measured_at <= end``."""
        ...

    def find_medications(self, patient_id: int, start: datetime, end: datetime) -> List[Medication]:
        """Medications with ``start <= administered_at <= end``."""
        ...

    def find_intake_outputs(
        self, patient_id: int, start: datetime, end: datetime
    ) -> List[IntakeOutputRecord]:
        """I/O records with ``start <= recorded_at <= end``."""
        ...

    def find_test_results(self, patient_id: int) -> List[TestResult]:
        """Test results ordered by ``result_date`` descending."""
        ...

    def find_shift(self, shift_id: int) -> Optional[Shift]: ...

    def find_patient(self, patient_id: int) -> Optional[Patient]: ...

    def find_department(self, department_id: int) -> Optional[Department]: ...

    def find_user(self, user_id: int) -> Optional[User]: ...


class HandoverRepository(Protocol):
    """Persistence for finished handovers."""

    def save(self, handover: Handover) -> Handover:
        """Persist atomically and return the stored copy with its id assigned."""
        ...

    def get(self, handover_id: int) -> Optional[Handover]: ...

    def list_by_department(self, department_id: int) -> List[Handover]:
        """Handovers ordered by handover date descending."""
        ...

    def delete(self, handover_id: int) -> bool:
        """Remove atomically; ``False`` when nothing was stored under the id."""
        ...
