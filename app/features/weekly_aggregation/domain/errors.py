"""
Error taxonomy for the weekly aggregation pipeline.

ValidationError and FetchError are raised by the leaf components;
UserAggregationService wraps either into an AggregationError scoped to
one user so the batch layer can classify and isolate it.
"""

from .models import ErrorKind


class WeeklyAggregationError(Exception):
    """Base exception for weekly aggregation errors."""

    error_kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(WeeklyAggregationError):
    """Raised when the requested week window is malformed."""

    error_kind = ErrorKind.VALIDATION


class FetchError(WeeklyAggregationError):
    """Raised when the certification store cannot be read."""

    error_kind = ErrorKind.FETCH

    def __init__(self, message: str, operation: str = "unknown", recoverable: bool = True):
        super().__init__(message)
        self.operation = operation
        self.recoverable = recoverable


class AggregationError(WeeklyAggregationError):
    """A single user's aggregation failed; carries the underlying cause."""

    def __init__(self, user_id: str, cause: WeeklyAggregationError):
        super().__init__(f"Failed to aggregate user data: {cause.message}")
        self.user_id = user_id
        self.cause = cause
        self.error_kind = cause.error_kind
