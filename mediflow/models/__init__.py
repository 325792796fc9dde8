"""
Domain and API models.
"""
from .clinical import (
    ShiftType,
    Gender,
    Department,
    User,
    Shift,
    Patient,
    Assignment,
    NursingNote,
    VitalSign,
    Medication,
    IntakeOutputRecord,
    TestResult,
    Handover,
)

__all__ = [
    "ShiftType",
    "Gender",
    "Department",
    "User",
    "Shift",
    "Patient",
    "Assignment",
    "NursingNote",
    "VitalSign",
    "Medication",
    "IntakeOutputRecord",
    "TestResult",
    "Handover",
]
