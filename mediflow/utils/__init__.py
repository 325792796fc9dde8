"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging
from .exceptions import (
    ErrorCode,
    HandoverError,
    ValidationError,
    NotFoundError,
    InvalidShiftError,
    AuthorizationError,
    AuthenticationError,
    SummarizationError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "ErrorCode",
    "HandoverError",
    "ValidationError",
    "NotFoundError",
    "InvalidShiftError",
    "AuthorizationError",
    "AuthenticationError",
    "SummarizationError",
]
