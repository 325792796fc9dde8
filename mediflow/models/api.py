"""
API request/response schemas.

Every endpoint answers with the ``ApiResponse`` envelope
(``success``, ``data``, ``message``).
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from mediflow.models.clinical import Handover

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Uniform response envelope."""
    success: bool
    data: Optional[T] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None) -> "ApiResponse":
        return cls(success=True, data=data, message=message)

    @classmethod
    def error(cls, message: str) -> "ApiResponse":
        return cls(success=False, data=None, message=message)


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class HandoverCreateRequest(_CamelModel):
    """JSON body accepted by ``POST /api/handovers``."""
    ai_summary: str = Field(alias="aiSummary", min_length=1)
    additional_notes: Optional[str] = Field(default=None, alias="additionalNotes")


class HandoverResponse(_CamelModel):
    handover_id: int = Field(serialization_alias="handoverId")
    department_id: int = Field(serialization_alias="departmentId")
    department_name: str = Field(serialization_alias="departmentName")
    from_shift_id: int = Field(serialization_alias="fromShiftId")
    from_shift_type: str = Field(serialization_alias="fromShiftType")
    to_shift_id: int = Field(serialization_alias="toShiftId")
    to_shift_type: str = Field(serialization_alias="toShiftType")
    handover_date: date = Field(serialization_alias="handoverDate")
    ai_summary: str = Field(serialization_alias="aiSummary")
    additional_notes: Optional[str] = Field(default=None, serialization_alias="additionalNotes")
    created_by_id: int = Field(serialization_alias="createdById")
    created_by_name: str = Field(serialization_alias="createdByName")
    created_at: datetime = Field(serialization_alias="createdAt")

    @classmethod
    def from_handover(cls, handover: Handover) -> "HandoverResponse":
        return cls(
            handover_id=handover.id,
            department_id=handover.department.id,
            department_name=handover.department.name,
            from_shift_id=handover.from_shift.id,
            from_shift_type=handover.from_shift.type.value,
            to_shift_id=handover.to_shift.id,
            to_shift_type=handover.to_shift.type.value,
            handover_date=handover.handover_date,
            ai_summary=handover.ai_summary,
            additional_notes=handover.additional_notes,
            created_by_id=handover.created_by.id,
            created_by_name=handover.created_by.name,
            created_at=handover.created_at,
        )


class AiQuestionRequest(BaseModel):
    question: str = Field(min_length=1, max_length=20000)


class AiAnswerResponse(BaseModel):
    question: str
    answer: str


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: str
    uptime_seconds: float
