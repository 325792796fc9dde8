"""
Importance Classifier

Flags a patient as clinically notable for the handover when any nursing
note is marked important, any vital sign is outside its normal band, or
any intake/output record shows a fluid imbalance above 500 mL.

Normal bands:
    systolic_bp     90–140 mmHg
    diastolic_bp    60–90 mmHg
    heart_rate      60–100 bpm
    body_temp       36.0–37.5 °C
    spo2            >= 95 %

Absent vital fields never make a reading abnormal.
"""
from __future__ import annotations

from typing import Iterable, Optional

from mediflow.models.clinical import IntakeOutputRecord, NursingNote, VitalSign

# ── Thresholds ────────────────────────────────────────────────────────────────

SBP_HIGH = 140
SBP_LOW = 90
DBP_HIGH = 90
DBP_LOW = 60
HR_HIGH = 100
HR_LOW = 60
TEMP_HIGH = 37.5
TEMP_LOW = 36.0
SPO2_LOW = 95

IO_IMBALANCE_ML = 500


def _outside(value: Optional[float], low: float, high: float) -> bool:
    return value is not None and (value > high or value < low)


def is_abnormal_vital(vital: VitalSign) -> bool:
    return (
        _outside(vital.systolic_bp, SBP_LOW, SBP_HIGH)
        or _outside(vital.diastolic_bp, DBP_LOW, DBP_HIGH)
        or _outside(vital.heart_rate, HR_LOW, HR_HIGH)
        or _outside(vital.body_temp, TEMP_LOW, TEMP_HIGH)
        or (vital.spo2 is not None and vital.spo2 < SPO2_LOW)
    )


def has_io_imbalance(record: IntakeOutputRecord) -> bool:
    return abs(record.intake_total - record.output_total) > IO_IMBALANCE_ML


def is_important(
    notes: Iterable[NursingNote],
    vitals: Iterable[VitalSign],
    intake_outputs: Iterable[IntakeOutputRecord],
) -> bool:
    """True when any note, vital or I/O record qualifies."""
    return (
        any(note.is_important for note in notes)
        or any(is_abnormal_vital(v) for v in vitals)
        or any(has_io_imbalance(r) for r in intake_outputs)
    )
