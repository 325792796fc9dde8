"""
Pytest Configuration and Fixtures

Shared fixtures for the shift handover tests: a seeded in-memory clinical
store, a fixed clock and a mocked summarization gateway.
"""
from datetime import date, datetime, time, timedelta
from unittest.mock import AsyncMock, Mock
from zoneinfo import ZoneInfo

import pytest

from mediflow.models.clinical import (
    Department,
    Gender,
    Patient,
    Shift,
    ShiftType,
    User,
)
from mediflow.services import HandoverService
from mediflow.store import InMemoryClinicalStore, InMemoryHandoverRepository

SEOUL = ZoneInfo("Asia/Seoul")
TODAY = date(2026, 3, 10)


@pytest.fixture
def tz() -> ZoneInfo:
    return SEOUL


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def at():
    """Build an aware datetime on TODAY (or ``day_offset`` days later)."""
    def _at(hour: int, minute: int = 0, day_offset: int = 0) -> datetime:
        day = TODAY + timedelta(days=day_offset)
        return datetime.combine(day, time(hour, minute), tzinfo=SEOUL)
    return _at


@pytest.fixture
def now_fn(at):
    return lambda: at(15, 30)


@pytest.fixture
def shifts() -> dict:
    """The three daily shifts on TODAY."""
    return {
        ShiftType.DAY: Shift(id=1, date=TODAY, type=ShiftType.DAY,
                             start_time=time(8, 0), end_time=time(16, 0)),
        ShiftType.EVENING: Shift(id=2, date=TODAY, type=ShiftType.EVENING,
                                 start_time=time(16, 0), end_time=time(0, 0)),
        ShiftType.NIGHT: Shift(id=3, date=TODAY, type=ShiftType.NIGHT,
                               start_time=time(0, 0), end_time=time(8, 0)),
    }


@pytest.fixture
def patients() -> list:
    return [
        Patient(id=100, name="홍길동", chart_number="C-100", age=65, gender=Gender.M, department_id=1),
        Patient(id=101, name="김영희", chart_number="C-101", age=42, gender=Gender.F, department_id=1),
        Patient(id=102, name="박철수", chart_number="C-102", age=78, gender=Gender.M, department_id=1),
        Patient(id=103, name="이민지", chart_number="C-103", age=30, gender=Gender.F, department_id=1),
    ]


@pytest.fixture
def store(shifts, patients) -> InMemoryClinicalStore:
    """Clinical store with departments, nurses, shifts and patients but no records."""
    s = InMemoryClinicalStore()
    s.add_department(Department(id=1, name="내과"))
    s.add_department(Department(id=2, name="외과"))
    s.add_user(User(id=10, name="김간호"))
    s.add_user(User(id=11, name="이간호"))
    for shift in shifts.values():
        s.add_shift(shift)
    for patient in patients:
        s.add_patient(patient)
    return s


@pytest.fixture
def repository() -> InMemoryHandoverRepository:
    return InMemoryHandoverRepository()


@pytest.fixture
def gateway() -> Mock:
    """Summarization gateway stub returning a fixed narrative."""
    gw = Mock()
    gw.generate_text = AsyncMock(return_value="[홍길동 (C-100, 65/남)]\n- 주요 변화: 혈압 상승")
    return gw


@pytest.fixture
def service(store, repository, gateway, tz, now_fn) -> HandoverService:
    return HandoverService(
        store=store,
        repository=repository,
        gateway=gateway,
        tz=tz,
        now_fn=now_fn,
    )
