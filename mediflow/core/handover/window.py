"""
Shift Window Resolver

Turns a shift's time-of-day bounds plus a reference date into an absolute,
timezone-aware interval. Shifts whose end time is earlier than their start
time (EVENING 16:00–00:00, or a 22:00–06:00 night) end on the next day.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo

from mediflow.models.clinical import Shift
from mediflow.store.base import ClinicalDataStore
from mediflow.utils import InvalidShiftError, get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ShiftWindow:
    """Resolved interval of one shift on one reference date."""
    shift: Shift
    reference_date: date
    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, moment: datetime) -> bool:
        """Inclusive on both ends."""
        return self.start <= moment <= self.end


def resolve_shift_window(shift: Shift, reference_date: date, tz: tzinfo) -> ShiftWindow:
    """
    Resolve ``shift`` on ``reference_date`` in zone ``tz``.

    Args:
        shift: Shift with start/end times of day
        reference_date: The handover date, normally today
        tz: Zone the shift times are expressed in

    Returns:
        ShiftWindow whose ``end`` is moved 24h forward when the shift crosses midnight
    """
    start = datetime.combine(reference_date, shift.start_time, tzinfo=tz)
    end = datetime.combine(reference_date, shift.end_time, tzinfo=tz)
    if shift.crosses_midnight:
        end += timedelta(days=1)
    return ShiftWindow(shift=shift, reference_date=reference_date, start=start, end=end)


class ShiftWindowResolver:
    """Looks shifts up by id and resolves their window."""

    def __init__(self, store: ClinicalDataStore, tz: tzinfo):
        self.store = store
        self.tz = tz

    def get_shift(self, shift_id: int) -> Shift:
        shift = self.store.find_shift(shift_id)
        if shift is None:
            raise InvalidShiftError(shift_id)
        return shift

    def resolve(self, shift_id: int, reference_date: date) -> ShiftWindow:
        window = resolve_shift_window(self.get_shift(shift_id), reference_date, self.tz)
        logger.debug(
            f"Shift {shift_id} ({window.shift.type.value}) on {reference_date}: "
            f"{window.start.isoformat()} -> {window.end.isoformat()}"
        )
        return window
