"""Domain exceptions and structured error responses."""

from enum import Enum

from pydantic import BaseModel


class InvalidDateError(ValueError):
    """Raised when a value cannot be interpreted as a calendar date."""


class DatabaseError(Exception):
    """Raised when the document store rejects or fails an operation."""


class RecordNotFoundError(DatabaseError, KeyError):
    """Raised when a record id does not exist in a collection."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class PartialWriteError(DatabaseError):
    """Raised when a multi-step write failed and undoing its first steps failed too."""


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    # Input errors
    ERR_INVALID_DATE = "ERR_INVALID_DATE"

    # Lookup errors
    ERR_RECORD_NOT_FOUND = "ERR_RECORD_NOT_FOUND"

    # Store errors
    ERR_STORE_UNAVAILABLE = "ERR_STORE_UNAVAILABLE"
    ERR_PARTIAL_WRITE = "ERR_PARTIAL_WRITE"

    # Generic errors
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity


def classify_error_with_response(exception: Exception) -> ErrorResponse:
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised while serving an interactive action

    Returns:
        ErrorResponse with code, message, suggestion, and severity
    """
    if isinstance(exception, InvalidDateError):
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_DATE,
            message="That date could not be understood.",
            suggestion="Use the YYYY-MM-DD format, e.g. 2025-03-24.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, RecordNotFoundError):
        return ErrorResponse(
            code=ErrorCode.ERR_RECORD_NOT_FOUND,
            message="The requested item no longer exists.",
            suggestion="Reload the week to see its current objectives and tasks.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, PartialWriteError):
        return ErrorResponse(
            code=ErrorCode.ERR_PARTIAL_WRITE,
            message="Your change was only partly saved.",
            suggestion="Reload the week to see what was kept before trying again.",
            severity=ErrorSeverity.CRITICAL,
        )

    if isinstance(exception, DatabaseError):
        return ErrorResponse(
            code=ErrorCode.ERR_STORE_UNAVAILABLE,
            message="Your change could not be saved.",
            suggestion="Please try again in a moment.",
            severity=ErrorSeverity.HIGH,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again later. If the problem persists, contact support.",
        severity=ErrorSeverity.MEDIUM,
    )
