"""
Exam Portal Custom Exceptions

This module provides the exception hierarchy raised by the exam services
(access guard, attempt counter, submission, repositories). Every exception
carries the HTTP status code and a stable error code, so the API layer can
turn it into a response without knowing the individual failure cases.

Author: Exam Portal Development Team
Version: 1.0.0
"""

from typing import Optional, Dict, Any


class ExamPortalException(Exception):
    """
    Base exception class for all exam lifecycle errors.

    Attributes:
        message (str): Human-readable error message
        status_code (int): HTTP status code used by the API layer
        error_code (str): Stable machine-readable error identifier
        details (Dict[str, Any]): Additional error details
    """

    status_code: int = 400
    error_code: str = "ExamPortalError"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for serialization.

        Returns:
            Dictionary representation of the exception
        """
        return {
            'message': self.message,
            'error_code': self.error_code,
            'details': self.details,
        }


class ExamValidationError(ExamPortalException):
    """
    Raised for malformed or missing input: exam shape, question shape,
    or a submission whose answers are not an array.
    """

    status_code = 400
    error_code = "ValidationError"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        errors: Optional[Any] = None
    ) -> None:
        details: Dict[str, Any] = {}
        if field:
            details['field'] = field
        if errors is not None:
            details['errors'] = errors
        self.field = field
        super().__init__(message, details=details)


class AccessDenied(ExamPortalException):
    """Wrong role, or the caller neither owns nor is assigned to the exam."""

    status_code = 403
    error_code = "AccessDenied"

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)


class NotFound(ExamPortalException):
    status_code = 404
    error_code = "NotFound"

    def __init__(self, resource: str = "Exam", identifier: Optional[Any] = None) -> None:
        details = {'resource': resource}
        if identifier is not None:
            details['id'] = str(identifier)
        super().__init__(f"{resource} not found", details=details)


class ExamNotOpen(ExamPortalException):
    """Submission attempted before the exam window starts."""

    status_code = 400
    error_code = "ExamNotOpen"

    def __init__(self, start_date=None) -> None:
        details = {'startDate': start_date.isoformat()} if start_date else {}
        super().__init__("Exam has not started yet", details=details)


class ExamClosed(ExamPortalException):
    """Submission attempted after the exam window ended."""

    status_code = 400
    error_code = "ExamClosed"

    def __init__(self, end_date=None) -> None:
        details = {'endDate': end_date.isoformat()} if end_date else {}
        super().__init__("Exam has ended", details=details)


class AttemptLimitExceeded(ExamPortalException):
    status_code = 400
    error_code = "AttemptLimitExceeded"

    def __init__(self, attempts_made: int, attempts_allowed: int) -> None:
        self.attempts_made = attempts_made
        self.attempts_allowed = attempts_allowed
        super().__init__(
            "You have reached the maximum number of attempts for this exam",
            details={
                'attemptsMade': attempts_made,
                'attemptsAllowed': attempts_allowed,
            }
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        # Frontends read the counters at the top level of the error body
        data.update(self.details)
        return data


class AttemptConflict(ExamPortalException):
    """
    Raised when a concurrent submission already claimed the same attempt number.
    The caller may retry; the next try recomputes the attempt number.
    """

    status_code = 409
    error_code = "Conflict"

    def __init__(self, attempt_number: int) -> None:
        super().__init__(
            "Another submission for this attempt was recorded at the same time. Please retry.",
            details={'attemptNumber': attempt_number}
        )


class StorageFailure(ExamPortalException):
    """
    Wraps an underlying database error. The original error is logged where it
    is caught; clients only see an opaque message.
    """

    status_code = 500
    error_code = "InternalError"

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__("Internal server error")
