"""
Handover Error Taxonomy

Every failure surfaced by the handover workflow carries an ErrorCode and
the HTTP status the API boundary should answer with, so callers can branch
on ``error.code`` without inspecting the class hierarchy.
"""
from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Stable machine-readable error codes."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    SHIFT_NOT_FOUND = "SHIFT_NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    SUMMARIZATION_FAILED = "SUMMARIZATION_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class HandoverError(Exception):
    """Base exception for all handover workflow errors."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code.value,
            "message": self.message,
            "details": self.details
        }


class ValidationError(HandoverError):
    """Malformed input, rejected before any aggregation begins."""

    status_code = 400

    def __init__(
        self,
        message: str,
        field: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            details={"field": field, **(details or {})}
        )
        self.field = field

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class NotFoundError(HandoverError):
    """A referenced shift, department, patient, user or handover does not exist."""

    status_code = 404

    def __init__(
        self,
        entity: str,
        entity_id: Any,
        code: ErrorCode = ErrorCode.NOT_FOUND,
        message: Optional[str] = None
    ):
        super().__init__(
            message=message or f"{entity} {entity_id} not found",
            code=code,
            details={"entity": entity, "id": entity_id}
        )
        self.entity = entity
        self.entity_id = entity_id


class InvalidShiftError(NotFoundError):
    """The shift a window was requested for does not exist."""

    def __init__(self, shift_id: Any):
        super().__init__(
            entity="shift",
            entity_id=shift_id,
            code=ErrorCode.SHIFT_NOT_FOUND,
        )


class AuthorizationError(HandoverError):
    """The requesting user may not perform the operation."""

    status_code = 403

    def __init__(
        self,
        message: str = "Only the author may delete this handover",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message=message, code=ErrorCode.FORBIDDEN, details=details)


class AuthenticationError(HandoverError):
    """No caller identity was supplied by the upstream gateway."""

    status_code = 401

    def __init__(self, message: str = "Missing caller identity"):
        super().__init__(message=message, code=ErrorCode.UNAUTHENTICATED)


class SummarizationError(HandoverError):
    """The generative model call failed, timed out or returned no text."""

    status_code = 502
    public_message = "AI summary generation failed"

    def __init__(
        self,
        message: str,
        model: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code=ErrorCode.SUMMARIZATION_FAILED,
            details={"model": model, **(details or {})}
        )
        self.model = model
