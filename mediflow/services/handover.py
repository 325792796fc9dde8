"""
Handover Service

Orchestrates the handover workflow:
    (nurse, shift) → shift window → per-patient bundles → important-first
    ordering → prompt → Gemini narrative

and the create / list / delete operations on persisted handovers.
"""
from __future__ import annotations

from datetime import tzinfo
from typing import List, Optional, Protocol

from mediflow.config import DEFAULT_MAX_SUMMARY_CHARS, MAX_ADDITIONAL_NOTES_CHARS, NowFn
from mediflow.core.handover import (
    NO_PATIENTS_MESSAGE,
    PatientDataCollector,
    ShiftWindowResolver,
    build_handover_prompt,
    order_by_importance,
)
from mediflow.models.clinical import Department, Handover, Patient, Shift, User
from mediflow.store.base import ClinicalDataStore, HandoverRepository
from mediflow.utils import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
    get_logger,
)

logger = get_logger(__name__)


class SummarizationGateway(Protocol):
    async def generate_text(self, prompt: str) -> str: ...


def _require_id(value: Optional[int], field: str) -> int:
    if value is None:
        raise ValidationError("is required", field=field)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError("must be a positive integer", field=field)
    return value


class HandoverService:
    """
    Handover workflow over a clinical store, a handover repository and a
    summarization gateway. Holds no per-request state.
    """

    def __init__(
        self,
        store: ClinicalDataStore,
        repository: HandoverRepository,
        gateway: SummarizationGateway,
        tz: tzinfo,
        now_fn: NowFn,
        max_summary_chars: int = DEFAULT_MAX_SUMMARY_CHARS,
    ):
        self.store = store
        self.repository = repository
        self.gateway = gateway
        self.tz = tz
        self.now_fn = now_fn
        self.max_summary_chars = max_summary_chars
        self.resolver = ShiftWindowResolver(store, tz)
        self.collector = PatientDataCollector(store)

    # ── Lookups ──────────────────────────────────────────────────────────

    def _department(self, department_id: int) -> Department:
        department = self.store.find_department(department_id)
        if department is None:
            raise NotFoundError("department", department_id)
        return department

    def _shift(self, shift_id: int) -> Shift:
        shift = self.store.find_shift(shift_id)
        if shift is None:
            raise NotFoundError("shift", shift_id)
        return shift

    def _user(self, user_id: int) -> User:
        user = self.store.find_user(user_id)
        if user is None:
            raise NotFoundError("user", user_id)
        return user

    def _patient(self, patient_id: int) -> Patient:
        patient = self.store.find_patient(patient_id)
        if patient is None:
            raise NotFoundError("patient", patient_id)
        return patient

    # ── Summary generation ───────────────────────────────────────────────

    async def build_prompt(
        self,
        nurse_id: int,
        from_shift_id: int,
        department_id: Optional[int] = None,
    ) -> Optional[str]:
        """
        Render the handover prompt for the nurse's patients on today's shift.

        Returns ``None`` when no patient is assigned today.
        """
        nurse_id = _require_id(nurse_id, "nurseId")
        from_shift_id = _require_id(from_shift_id, "fromShiftId")
        if department_id is not None:
            department_id = _require_id(department_id, "departmentId")

        shift = self.resolver.get_shift(from_shift_id)
        today = self.now_fn().astimezone(self.tz).date()

        all_assignments = self.store.find_assignments(nurse_id, from_shift_id)
        assignments = [a for a in all_assignments if a.assigned_date == today]
        logger.info(
            f"Handover summary nurse={nurse_id} shift={from_shift_id}: "
            f"{len(all_assignments)} assignment(s), {len(assignments)} for {today}"
        )
        if not assignments:
            logger.warning(
                f"No patients assigned on {today} for nurse={nurse_id} shift={from_shift_id}"
            )
            return None

        patient_ids = list(dict.fromkeys(a.patient_id for a in assignments))
        patients = [self._patient(pid) for pid in patient_ids]

        department = self._department(
            department_id if department_id is not None else patients[0].department_id
        )

        window = self.resolver.resolve(shift.id, today)
        bundles = await self.collector.collect_all(patients, window)
        ordered = order_by_importance(bundles)
        important = sum(1 for b in ordered if b.important)

        prompt = build_handover_prompt(department.name, shift.type, ordered, self.tz)
        logger.info(
            f"Prompt built: {len(ordered)} patient(s), {important} important, {len(prompt)} chars"
        )
        logger.debug(f"Handover prompt:\n{prompt}")
        return prompt

    async def generate_ai_summary(
        self,
        nurse_id: int,
        from_shift_id: int,
        department_id: Optional[int] = None,
    ) -> str:
        """
        Generate the handover narrative for the nurse's patients on today's shift.

        Returns ``NO_PATIENTS_MESSAGE`` without calling the gateway when no
        patient is assigned today.

        Raises:
            ValidationError: malformed ids
            InvalidShiftError: unknown shift
            NotFoundError: unknown patient or department
            SummarizationError: the gateway failed
        """
        prompt = await self.build_prompt(nurse_id, from_shift_id, department_id)
        if prompt is None:
            return NO_PATIENTS_MESSAGE
        return await self.gateway.generate_text(prompt)

    # ── Persistence ──────────────────────────────────────────────────────

    def _validate_summary(self, ai_summary: Optional[str], additional_notes: Optional[str]) -> None:
        if ai_summary is None or not ai_summary.strip():
            raise ValidationError("must not be blank", field="aiSummary")
        if len(ai_summary) > self.max_summary_chars:
            raise ValidationError(
                f"must be at most {self.max_summary_chars} characters", field="aiSummary"
            )
        if additional_notes is not None and len(additional_notes) > MAX_ADDITIONAL_NOTES_CHARS:
            raise ValidationError(
                f"must be at most {MAX_ADDITIONAL_NOTES_CHARS} characters", field="additionalNotes"
            )

    def save_handover(
        self,
        department_id: int,
        from_shift_id: int,
        to_shift_id: int,
        ai_summary: str,
        author_id: int,
        additional_notes: Optional[str] = None,
    ) -> Handover:
        """Persist a finished narrative stamped with today's date and the current time."""
        department_id = _require_id(department_id, "departmentId")
        from_shift_id = _require_id(from_shift_id, "fromShiftId")
        to_shift_id = _require_id(to_shift_id, "toShiftId")
        author_id = _require_id(author_id, "userId")
        self._validate_summary(ai_summary, additional_notes)

        now = self.now_fn().astimezone(self.tz)
        handover = Handover(
            department=self._department(department_id),
            from_shift=self._shift(from_shift_id),
            to_shift=self._shift(to_shift_id),
            handover_date=now.date(),
            ai_summary=ai_summary,
            additional_notes=additional_notes,
            created_by=self._user(author_id),
            created_at=now,
        )
        saved = self.repository.save(handover)
        logger.info(
            f"Handover {saved.id} saved: department={department_id} "
            f"{saved.from_shift.type.value}->{saved.to_shift.type.value} by user={author_id}"
        )
        return saved

    def list_handovers_by_department(self, department_id: int) -> List[Handover]:
        """Handovers of the department, newest handover date first."""
        department_id = _require_id(department_id, "departmentId")
        self._department(department_id)
        return self.repository.list_by_department(department_id)

    def delete_handover(self, handover_id: int, user_id: int) -> None:
        """Delete a handover; only its author may do so."""
        handover_id = _require_id(handover_id, "handoverId")
        user_id = _require_id(user_id, "userId")

        handover = self.repository.get(handover_id)
        if handover is None:
            raise NotFoundError("handover", handover_id)
        if handover.created_by.id != user_id:
            logger.warning(
                f"User {user_id} attempted to delete handover {handover_id} "
                f"authored by {handover.created_by.id}"
            )
            raise AuthorizationError(details={"handover_id": handover_id})

        if not self.repository.delete(handover_id):
            raise NotFoundError("handover", handover_id)
        logger.info(f"Handover {handover_id} deleted by user={user_id}")
