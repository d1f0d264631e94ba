"""
ERRORS.PY - Error codes and exceptions for the grading engine

Calculators never raise (they substitute defaults). Errors surface only at
the orchestration boundary:
- ConfigUnavailableError: no ScoringConfig snapshot could be loaded
- InvalidPropError: a record cannot be graded at all (e.g. ticket without legs)
- pydantic.ValidationError: a record failed schema validation

Batch processing converts any of these into a per-item ErrorDetail.

Usage:
    from core.errors import ErrorCode, error_detail_from_exception

    detail = error_detail_from_exception(exc)
    detail.to_dict()  # {"code": "VALIDATION_ERROR", "message": "..."}
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import ValidationError


@dataclass
class ErrorDetail:
    """Single error detail."""
    code: str
    message: str
    field: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict, excluding None fields."""
        result = {"code": self.code, "message": self.message}
        if self.field is not None:
            result["field"] = self.field
        return result


class ErrorCode:
    """Standard error codes."""

    # Validation
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_PROP = "INVALID_PROP"

    # Configuration
    CONFIG_UNAVAILABLE = "CONFIG_UNAVAILABLE"

    # Scoring
    SCORING_ERROR = "SCORING_ERROR"

    # Internal
    INTERNAL_ERROR = "INTERNAL_ERROR"


class GradingError(Exception):
    """Base class for grading engine errors."""
    code = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_detail(self) -> ErrorDetail:
        return ErrorDetail(code=self.code, message=self.message, field=self.field)


class ConfigUnavailableError(GradingError):
    """No scoring config snapshot is available; scoring must not start."""
    code = ErrorCode.CONFIG_UNAVAILABLE


class InvalidPropError(GradingError):
    """The record is structurally unusable for grading."""
    code = ErrorCode.INVALID_PROP


def error_detail_from_exception(exc: BaseException) -> ErrorDetail:
    """
    Map an exception to an ErrorDetail.

    Args:
        exc: Exception raised while grading one record

    Returns:
        ErrorDetail with a code from ErrorCode
    """
    if isinstance(exc, GradingError):
        return exc.to_detail()
    if isinstance(exc, ValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        loc = ".".join(str(p) for p in first.get("loc", ())) or None
        return ErrorDetail(
            code=ErrorCode.VALIDATION_ERROR,
            message=f"{exc.error_count()} validation error(s): {first.get('msg', str(exc))}",
            field=loc,
        )
    if isinstance(exc, (ValueError, TypeError, ArithmeticError)):
        return ErrorDetail(code=ErrorCode.SCORING_ERROR, message=f"{type(exc).__name__}: {exc}")
    return ErrorDetail(code=ErrorCode.INTERNAL_ERROR, message=f"{type(exc).__name__}: {exc}")


__all__ = [
    'ErrorDetail',
    'ErrorCode',
    'GradingError',
    'ConfigUnavailableError',
    'InvalidPropError',
    'error_detail_from_exception',
]
