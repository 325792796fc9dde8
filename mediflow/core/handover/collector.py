"""
Patient Data Collector

Gathers one patient's notes, vitals, medications, intake/output and test
results for a resolved shift window and computes the importance flag.
The five source reads are independent and run concurrently; nothing is
written back.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from starlette.concurrency import run_in_threadpool

from mediflow.models.clinical import (
    IntakeOutputRecord,
    Medication,
    NursingNote,
    Patient,
    TestResult,
    VitalSign,
)
from mediflow.store.base import ClinicalDataStore
from mediflow.utils import get_logger

from .classifier import is_important
from .window import ShiftWindow

logger = get_logger(__name__)


async def _gather_or_cancel(*aws):
    """
    Await all of ``aws`` and return their results in order.

    If one fails, the remaining tasks are cancelled and awaited before the
    error is re-raised, so no read outlives the call.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


@dataclass
class PatientHandoverBundle:
    """Everything the prompt needs about one patient for one shift."""
    patient: Patient
    notes: List[NursingNote] = field(default_factory=list)
    vitals: List[VitalSign] = field(default_factory=list)
    medications: List[Medication] = field(default_factory=list)
    intake_outputs: List[IntakeOutputRecord] = field(default_factory=list)
    test_results: List[TestResult] = field(default_factory=list)
    important: bool = False

    @property
    def has_data(self) -> bool:
        return bool(
            self.notes or self.vitals or self.medications
            or self.intake_outputs or self.test_results
        )

    @property
    def representative_vital(self) -> Optional[VitalSign]:
        """Latest reading; ``vitals`` is kept sorted by ``measured_at`` descending."""
        return self.vitals[0] if self.vitals else None


class PatientDataCollector:
    """
    Builds PatientHandoverBundles from a ClinicalDataStore.

    Stateless apart from the store reference.
    """

    def __init__(self, store: ClinicalDataStore):
        self.store = store

    async def collect(self, patient: Patient, window: ShiftWindow) -> PatientHandoverBundle:
        """
        Collect one patient's records inside ``window``.

        Notes are filtered here (the store returns all of them, newest first).
        Vitals, medications and I/O use the store's inclusive range queries.
        Test results are reported once a day, so they are matched on the
        window's reference date instead of the window itself.
        """
        pid = patient.id
        notes, vitals, medications, intake_outputs, test_results = await _gather_or_cancel(
            run_in_threadpool(self.store.find_notes, pid),
            run_in_threadpool(self.store.find_vitals, pid, window.start, window.end),
            run_in_threadpool(self.store.find_medications, pid, window.start, window.end),
            run_in_threadpool(self.store.find_intake_outputs, pid, window.start, window.end),
            run_in_threadpool(self.store.find_test_results, pid),
        )

        tz = window.start.tzinfo
        bundle = PatientHandoverBundle(
            patient=patient,
            notes=[n for n in notes if window.contains(n.created_at)],
            vitals=sorted(vitals, key=lambda v: v.measured_at, reverse=True),
            medications=list(medications),
            intake_outputs=list(intake_outputs),
            test_results=[
                t for t in test_results
                if t.result_date.astimezone(tz).date() == window.reference_date
            ],
        )
        bundle.important = is_important(bundle.notes, bundle.vitals, bundle.intake_outputs)

        logger.debug(
            f"Collected patient {pid}: notes={len(bundle.notes)} vitals={len(bundle.vitals)} "
            f"meds={len(bundle.medications)} io={len(bundle.intake_outputs)} "
            f"tests={len(bundle.test_results)} important={bundle.important}"
        )
        return bundle

    async def collect_all(
        self, patients: Sequence[Patient], window: ShiftWindow
    ) -> List[PatientHandoverBundle]:
        """
        Collect every patient concurrently; results keep the input order.

        If any read fails, the other patients' reads are cancelled before
        the error propagates.
        """
        return list(await _gather_or_cancel(*(self.collect(p, window) for p in patients)))
