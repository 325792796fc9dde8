"""
Clinical domain models.

Records read from the clinical data store plus the persisted Handover.
All timestamps are timezone-aware; naive datetimes are rejected at
construction time.
"""
from __future__ import annotations

from datetime import date, time
from enum import Enum
from typing import Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field


class ShiftType(str, Enum):
    DAY = "DAY"
    EVENING = "EVENING"
    NIGHT = "NIGHT"


class Gender(str, Enum):
    M = "M"
    F = "F"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class Department(_Record):
    id: int
    name: str


class User(_Record):
    id: int
    name: str


class Shift(_Record):
    """A daily work period. ``end_time < start_time`` means it crosses midnight."""
    id: int
    date: date
    type: ShiftType
    start_time: time
    end_time: time

    @property
    def crosses_midnight(self) -> bool:
        return self.end_time < self.start_time


class Patient(_Record):
    id: int
    name: str
    chart_number: str
    age: int = Field(ge=0, le=150)
    gender: Gender
    department_id: int


class Assignment(_Record):
    """Which nurse is responsible for which patient, on which shift and date."""
    id: int
    nurse_id: int
    patient_id: int
    shift_id: int
    assigned_date: date


# ── Clinical records ─────────────────────────────────────────────────────

class NursingNote(_Record):
    id: int
    patient_id: int
    created_at: AwareDatetime
    plain_text: str
    is_important: bool = False


class VitalSign(_Record):
    id: int
    patient_id: int
    measured_at: AwareDatetime
    systolic_bp: Optional[int] = None
    diastolic_bp: Optional[int] = None
    heart_rate: Optional[int] = None
    body_temp: Optional[float] = None
    spo2: Optional[int] = None


class Medication(_Record):
    id: int
    patient_id: int
    administered_at: AwareDatetime
    drug_name: str


class IntakeOutputRecord(_Record):
    """Fluid balance entry; totals are in mL."""
    id: int
    patient_id: int
    recorded_at: AwareDatetime
    intake_total: int = Field(ge=0)
    output_total: int = Field(ge=0)


class TestResult(_Record):
    __test__ = False  # not a pytest test class

    id: int
    patient_id: int
    result_date: AwareDatetime
    test_type: str
    test_name: str


# ── Persisted result ─────────────────────────────────────────────────────

class Handover(_Record):
    """
    A finished handover narrative.

    Related entities are embedded as resolved value objects so nothing
    returned from the repository needs further lookups.
    """
    id: Optional[int] = None
    department: Department
    from_shift: Shift
    to_shift: Shift
    handover_date: date
    ai_summary: str
    additional_notes: Optional[str] = None
    created_by: User
    created_at: AwareDatetime
