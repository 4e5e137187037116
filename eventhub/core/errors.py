"""Domain error codes and exceptions.

Every error carries a machine-readable code and a user-safe message. The HTTP
layer maps codes to status codes through ``HTTP_STATUS_BY_CODE``.
"""

from enum import Enum
from typing import List, Optional, Sequence

PERMISSION_DENIED_SQLSTATE = "42501"
FOREIGN_KEY_VIOLATION_SQLSTATE = "23503"


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    TERMS_NOT_ACCEPTED = "TERMS_NOT_ACCEPTED"
    INVALID_PRICE = "INVALID_PRICE"
    CONFIRMATION_REQUIRED = "CONFIRMATION_REQUIRED"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    REGISTRATION_NOT_FOUND = "REGISTRATION_NOT_FOUND"
    REGISTRATION_CLOSED = "REGISTRATION_CLOSED"
    REGISTRATION_FAILED = "REGISTRATION_FAILED"
    NOTHING_TO_EXPORT = "NOTHING_TO_EXPORT"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    REFERENCED_RECORD = "REFERENCED_RECORD"
    STORE_ERROR = "STORE_ERROR"
    CONTACT_DELIVERY_FAILED = "CONTACT_DELIVERY_FAILED"


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class MissingFieldsError(DomainError):
    """Raised when required form fields are empty."""

    def __init__(self, fields: Sequence[str]) -> None:
        super().__init__(
            code=ErrorCode.VALIDATION_FAILED,
            message="Please fill in all required fields",
        )
        self.fields: List[str] = list(fields)


class TermsNotAcceptedError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.TERMS_NOT_ACCEPTED,
            message="Please agree to the terms and conditions",
        )


class InvalidPriceError(DomainError):
    def __init__(self, value: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_PRICE,
            message="Price must be 'Free' or a positive amount",
        )
        self.value = value


class ConfirmationRequiredError(DomainError):
    """Raised when a destructive action is requested without confirmation."""

    def __init__(self, action: str) -> None:
        super().__init__(
            code=ErrorCode.CONFIRMATION_REQUIRED,
            message=f"Confirm to {action}. This action cannot be undone.",
        )
        self.action = action


class EventNotFoundError(DomainError):
    def __init__(self, event_id: str) -> None:
        super().__init__(code=ErrorCode.EVENT_NOT_FOUND, message="Event not found")
        self.event_id = event_id


class RegistrationNotFoundError(DomainError):
    def __init__(self, registration_id: str) -> None:
        super().__init__(
            code=ErrorCode.REGISTRATION_NOT_FOUND, message="Registration not found"
        )
        self.registration_id = registration_id


class RegistrationClosedError(DomainError):
    """Raised when an event has no available spots left."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.REGISTRATION_CLOSED,
            message="Sold Out - registration is closed for this event",
        )
        self.event_id = event_id


class RegistrationFailedError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.REGISTRATION_FAILED,
            message="Something went wrong. Please try again.",
        )


class NothingToExportError(DomainError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.NOTHING_TO_EXPORT, message="No data to export")


class ContactDeliveryError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.CONTACT_DELIVERY_FAILED,
            message="Failed to send message. Please try again.",
        )


class StoreError(DomainError):
    """Raised when the persistence service rejects a request.

    ``sqlstate`` is the driver's machine-readable code when one is available.
    """

    def __init__(self, message: str, sqlstate: Optional[str] = None) -> None:
        if sqlstate == PERMISSION_DENIED_SQLSTATE:
            code = ErrorCode.PERMISSION_DENIED
        elif sqlstate == FOREIGN_KEY_VIOLATION_SQLSTATE:
            code = ErrorCode.REFERENCED_RECORD
        else:
            code = ErrorCode.STORE_ERROR
        super().__init__(code=code, message=message)
        self.sqlstate = sqlstate

    @property
    def is_permission_denied(self) -> bool:
        return self.code is ErrorCode.PERMISSION_DENIED

    @property
    def is_foreign_key_violation(self) -> bool:
        return self.code is ErrorCode.REFERENCED_RECORD

    def describe(self, prefix: str) -> str:
        """User-facing text, friendlier for the codes we recognise."""
        if self.is_permission_denied:
            return "Permission denied. Check access policies."
        if self.is_foreign_key_violation:
            return "Cannot delete: record is referenced by other data."
        return f"{prefix}: {self.message}"


# HTTP status per error code, used by the API exception handler and by admin
# results that carry a failure.
HTTP_STATUS_BY_CODE = {
    ErrorCode.VALIDATION_FAILED: 422,
    ErrorCode.TERMS_NOT_ACCEPTED: 422,
    ErrorCode.INVALID_PRICE: 422,
    ErrorCode.CONFIRMATION_REQUIRED: 400,
    ErrorCode.EVENT_NOT_FOUND: 404,
    ErrorCode.REGISTRATION_NOT_FOUND: 404,
    ErrorCode.NOTHING_TO_EXPORT: 404,
    ErrorCode.REGISTRATION_CLOSED: 409,
    ErrorCode.REFERENCED_RECORD: 409,
    ErrorCode.PERMISSION_DENIED: 403,
    ErrorCode.REGISTRATION_FAILED: 502,
    ErrorCode.STORE_ERROR: 502,
    ErrorCode.CONTACT_DELIVERY_FAILED: 503,
}


def http_status_for(code: ErrorCode) -> int:
    return HTTP_STATUS_BY_CODE.get(code, 500)
