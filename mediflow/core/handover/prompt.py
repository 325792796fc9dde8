"""
Handover Prompt Builder

Renders collected patient bundles into the single Korean briefing prompt
sent to Gemini. Rendering is a pure function of its inputs: identical
bundles always produce byte-identical text, so generated narratives can be
reproduced from stored records.

Layout per patient (sections only appear when the bundle has data):

    [환자 - 이름 (차트번호, 나이세/성별)]
    - 간호기록:
      * HH:MM 기록 내용
    - 바이탈: BP 150/95, HR 88, Temp 37.2, SpO2 97%
    - 검사결과: 혈액 CBC, 영상 Chest X-ray
    - 투약: Ceftriaxone (2x), Acetaminophen (1x)
    - I/O: 섭취 1200ml, 배설 600ml
"""
from __future__ import annotations

from datetime import tzinfo
from typing import Dict, List, Optional, Sequence

from mediflow.models.clinical import Gender, ShiftType, VitalSign

from .collector import PatientHandoverBundle

NO_PATIENTS_MESSAGE = "현재 근무조에 배정된 환자가 없습니다."

CLOSING_INSTRUCTIONS = (
    "각 환자별로 다음 형식으로 인수인계문을 작성해줘:\n"
    "\n"
    "[환자명 (차트번호, 나이/성별)]\n"
    "- 주요 변화: 특이사항 및 상태 변화\n"
    "- 수행한 처치: 투약, 검사 등\n"
    "- 지속 관찰 사항: 다음 근무조에서 주의할 점\n"
    "\n"
    "환자당 3-5문장, 중요한 환자는 더 자세히 작성. 간결하고 명확하게."
)


def order_by_importance(bundles: Sequence[PatientHandoverBundle]) -> List[PatientHandoverBundle]:
    """Important patients first; ties keep their original order (stable sort)."""
    return sorted(bundles, key=lambda b: not b.important)


def _gender_label(gender: Gender) -> str:
    return "남" if gender == Gender.M else "여"


def _format_vital(vital: VitalSign) -> str:
    parts: List[str] = []
    if vital.systolic_bp is not None or vital.diastolic_bp is not None:
        systolic = vital.systolic_bp if vital.systolic_bp is not None else "-"
        diastolic = vital.diastolic_bp if vital.diastolic_bp is not None else "-"
        parts.append(f"BP {systolic}/{diastolic}")
    if vital.heart_rate is not None:
        parts.append(f"HR {vital.heart_rate}")
    if vital.body_temp is not None:
        parts.append(f"Temp {vital.body_temp}")
    if vital.spo2 is not None:
        parts.append(f"SpO2 {vital.spo2}%")
    return ", ".join(parts)


def _medication_counts(bundle: PatientHandoverBundle) -> Dict[str, int]:
    # dict preserves first-seen order
    counts: Dict[str, int] = {}
    for med in bundle.medications:
        counts[med.drug_name] = counts.get(med.drug_name, 0) + 1
    return counts


def _single_line(text: str) -> str:
    """Collapse line breaks and runs of whitespace so a note stays on its bullet line."""
    return " ".join(text.split())


def render_patient(bundle: PatientHandoverBundle, tz: Optional[tzinfo] = None) -> str:
    """Render one patient block without the trailing blank line."""
    p = bundle.patient
    lines = [f"[환자 - {p.name} ({p.chart_number}, {p.age}세/{_gender_label(p.gender)})]"]

    if bundle.notes:
        lines.append("- 간호기록:")
        for note in bundle.notes:
            created = note.created_at.astimezone(tz) if tz is not None else note.created_at
            lines.append(f"  * {created.strftime('%H:%M')} {_single_line(note.plain_text)}")

    vital = bundle.representative_vital
    if vital is not None:
        rendered = _format_vital(vital)
        if rendered:
            lines.append(f"- 바이탈: {rendered}")

    if bundle.test_results:
        tests = ", ".join(f"{t.test_type} {t.test_name}" for t in bundle.test_results)
        lines.append(f"- 검사결과: {tests}")

    if bundle.medications:
        meds = ", ".join(
            f"{drug} ({count}x)" for drug, count in _medication_counts(bundle).items()
        )
        lines.append(f"- 투약: {meds}")

    if bundle.intake_outputs:
        intake = sum(r.intake_total for r in bundle.intake_outputs)
        output = sum(r.output_total for r in bundle.intake_outputs)
        lines.append(f"- I/O: 섭취 {intake}ml, 배설 {output}ml")

    return "\n".join(lines)


def build_handover_prompt(
    department_name: str,
    shift_type: ShiftType,
    bundles: Sequence[PatientHandoverBundle],
    tz: Optional[tzinfo] = None,
) -> str:
    """
    Build the handover prompt.

    Args:
        department_name: Department shown in the intro line
        shift_type: Outgoing shift
        bundles: Patients in render order (see ``order_by_importance``)
        tz: Zone for note timestamps; stored offsets are used when omitted

    Returns:
        Prompt text, or ``NO_PATIENTS_MESSAGE`` when there are no patients
    """
    if not bundles:
        return NO_PATIENTS_MESSAGE

    intro = f"다음은 [{department_name}] [근무조: {shift_type.value}]의 인수인계 정보입니다."
    blocks = [render_patient(b, tz) for b in bundles]
    return "\n\n".join([intro, *blocks, CLOSING_INSTRUCTIONS])
