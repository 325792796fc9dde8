"""
Shift Handover Pipeline

Resolve the shift window, collect each assigned patient's records, flag
important patients and render the Gemini briefing prompt.

Usage:
    from mediflow.core.handover import (
        resolve_shift_window, PatientDataCollector,
        order_by_importance, build_handover_prompt,
    )

    window = resolve_shift_window(shift, today, tz)
    bundles = await PatientDataCollector(store).collect_all(patients, window)
    prompt = build_handover_prompt(dept.name, shift.type, order_by_importance(bundles), tz)
"""
from .window import ShiftWindow, ShiftWindowResolver, resolve_shift_window
from .classifier import is_abnormal_vital, has_io_imbalance, is_important
from .collector import PatientDataCollector, PatientHandoverBundle
from .prompt import (
    NO_PATIENTS_MESSAGE,
    build_handover_prompt,
    order_by_importance,
    render_patient,
)

__all__ = [
    "ShiftWindow",
    "ShiftWindowResolver",
    "resolve_shift_window",
    "is_abnormal_vital",
    "has_io_imbalance",
    "is_important",
    "PatientDataCollector",
    "PatientHandoverBundle",
    "NO_PATIENTS_MESSAGE",
    "build_handover_prompt",
    "order_by_importance",
    "render_patient",
]
