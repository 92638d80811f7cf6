"""Validation module for checking schedule consistency."""

from capplanner.validation.validator import (
    ScheduleValidator,
    ValidationError,
    ValidationErrorType,
    ValidationResult,
)

__all__ = [
    "ScheduleValidator",
    "ValidationError",
    "ValidationErrorType",
    "ValidationResult",
]
