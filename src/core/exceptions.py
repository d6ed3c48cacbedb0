"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API and the orchestrator."""

    # Not found errors (404)
    NOTIFICATION_NOT_FOUND = "NOTIFICATION_NOT_FOUND"

    # Validation errors (400/422)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNKNOWN_EVENT_KIND = "UNKNOWN_EVENT_KIND"
    NOTIFICATION_VALIDATION_ERROR = "NOTIFICATION_VALIDATION_ERROR"

    # Orchestrator errors
    UNMAPPED_EVENT_KIND = "UNMAPPED_EVENT_KIND"
    TEMPORAL_CHECK_FAILED = "TEMPORAL_CHECK_FAILED"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500/503)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class NotificationNotFoundError(AppException):
    """Notification not found."""

    def __init__(self, notification_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.NOTIFICATION_NOT_FOUND,
            message=f"Notification not found: {notification_id}",
            status_code=404,
            details={"notification_id": notification_id},
        )


class UnknownEventKindError(AppException):
    """An event kind name that is not part of the taxonomy."""

    def __init__(self, event_kind: str) -> None:
        super().__init__(
            error_code=ErrorCode.UNKNOWN_EVENT_KIND,
            message=f"Unknown event kind: {event_kind}",
            status_code=422,
            details={"event_kind": event_kind},
        )


class UnmappedEventKindError(AppException):
    """Event kind has no notification type in the loaded catalog."""

    def __init__(self, event_kind: str, type_code: str | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.UNMAPPED_EVENT_KIND,
            message=f"Event kind has no notification type: {event_kind}",
            status_code=500,
            details={"event_kind": event_kind, "type_code": type_code},
        )


class StoreTransportError(AppException):
    """The notification or entity store could not be reached."""

    def __init__(self, operation: str, reason: str = "") -> None:
        super().__init__(
            error_code=ErrorCode.STORE_UNAVAILABLE,
            message=f"Store operation failed: {operation}",
            status_code=503,
            details={"operation": operation, "reason": reason},
        )


class StoreValidationError(AppException):
    """A notification draft is malformed (e.g. a template variable is missing)."""

    def __init__(self, message: str, details: Any | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.NOTIFICATION_VALIDATION_ERROR,
            message=message,
            status_code=422,
            details=details,
        )


class TemporalCheckFailure(AppException):
    """A periodic time-based check failed for this tick."""

    def __init__(self, check: str, reason: str = "") -> None:
        super().__init__(
            error_code=ErrorCode.TEMPORAL_CHECK_FAILED,
            message=f"Temporal check failed: {check}",
            status_code=503,
            details={"check": check, "reason": reason},
        )
