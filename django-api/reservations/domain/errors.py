"""Domain error codes for the reservations module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    INVALID_ID = "INVALID_ID"
    INVALID_TIME = "INVALID_TIME"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    VENUE_NOT_FOUND = "VENUE_NOT_FOUND"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    QUOTATION_NOT_FOUND = "QUOTATION_NOT_FOUND"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    VENUE_UNAVAILABLE = "VENUE_UNAVAILABLE"
    DUPLICATE = "DUPLICATE"
    STORE_FAILURE = "STORE_FAILURE"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class BadRequestError(DomainError):
    """Malformed identifiers, invalid values or failed validation."""


class NotFoundError(DomainError):
    """A referenced venue, booking or quotation does not exist."""


class ConflictError(DomainError):
    """Illegal state transition, availability conflict or duplicate."""


class InternalError(DomainError):
    """Unexpected persistence failure."""


class InvalidIdError(BadRequestError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, kind: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message=f"Invalid {kind} ID format",
        )


class InvalidTimeError(BadRequestError):
    """Raised when a time string is not HH:MM or a window is empty."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_TIME, message=message)


class ValidationFailedError(BadRequestError):
    """Raised with every violation found in a request, not just the first."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__(
            code=ErrorCode.VALIDATION_FAILED,
            message=", ".join(errors),
        )
        self.errors = tuple(errors)


class VenueNotFoundError(NotFoundError):
    def __init__(self, venue_id: str) -> None:
        super().__init__(code=ErrorCode.VENUE_NOT_FOUND, message="Venue not found")
        self.venue_id = venue_id


class BookingNotFoundError(NotFoundError):
    def __init__(self, booking_id: str) -> None:
        super().__init__(
            code=ErrorCode.BOOKING_NOT_FOUND, message="Booking not found"
        )
        self.booking_id = booking_id


class QuotationNotFoundError(NotFoundError):
    def __init__(self, quotation_id: str) -> None:
        super().__init__(
            code=ErrorCode.QUOTATION_NOT_FOUND, message="Quotation not found"
        )
        self.quotation_id = quotation_id


class InvalidTransitionError(ConflictError):
    """Raised when a lifecycle transition is not allowed from the current state."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_TRANSITION, message=message)


class VenueUnavailableError(ConflictError):
    """Raised when the requested window collides with a booking or block."""

    def __init__(
        self, message: str = "Venue is not available for the selected date and time"
    ) -> None:
        super().__init__(code=ErrorCode.VENUE_UNAVAILABLE, message=message)


class DuplicateError(ConflictError):
    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.DUPLICATE, message=message)


class StoreFailureError(InternalError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.STORE_FAILURE,
            message="An unexpected storage error occurred",
        )
