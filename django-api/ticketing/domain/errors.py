"""Domain error codes for the ticketing module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    SOLD_OUT = "SOLD_OUT"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    TIER_NOT_FOUND = "TIER_NOT_FOUND"
    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"
    MALFORMED_CREDENTIAL = "MALFORMED_CREDENTIAL"
    EVENT_MISMATCH = "EVENT_MISMATCH"
    NOT_CURRENTLY_VALID = "NOT_CURRENTLY_VALID"
    LEDGER_UNAVAILABLE = "LEDGER_UNAVAILABLE"
    INVALID_EVENT_ID = "INVALID_EVENT_ID"
    EVENT_INACTIVE = "EVENT_INACTIVE"
    INVALID_EVENT = "INVALID_EVENT"
    INSUFFICIENT_LISTING_FEE = "INSUFFICIENT_LISTING_FEE"
    INVALID_ATTENDEE_COUNT = "INVALID_ATTENDEE_COUNT"
    INVALID_ADDRESS = "INVALID_ADDRESS"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str
    retryable: bool = False

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class UnauthorizedError(DomainError):
    """Raised when an actor did not authorize the requested action."""

    def __init__(self, message: str = "Signature does not match the claimed identity") -> None:
        super().__init__(code=ErrorCode.UNAUTHORIZED, message=message)


class InvalidSignatureError(DomainError):
    """Raised when no identity can be recovered from a signature."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_SIGNATURE,
            message="Signature could not be recovered",
        )


class SoldOutError(DomainError):
    """Raised when a tier has no room for the requested attendees."""

    def __init__(self, event_id: int, tier_index: int) -> None:
        super().__init__(
            code=ErrorCode.SOLD_OUT,
            message="Not enough capacity left in this tier",
        )
        self.event_id = event_id
        self.tier_index = tier_index


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: int) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        self.event_id = event_id


class TierNotFoundError(DomainError):
    """Raised when a tier is missing or inactive."""

    def __init__(self, event_id: int, tier_index: int) -> None:
        super().__init__(
            code=ErrorCode.TIER_NOT_FOUND,
            message="Ticket tier not found",
        )
        self.event_id = event_id
        self.tier_index = tier_index


class TicketNotFoundError(DomainError):
    """Raised when a ticket is not found."""

    def __init__(self, ticket_id: int) -> None:
        super().__init__(
            code=ErrorCode.TICKET_NOT_FOUND,
            message="Ticket not found",
        )
        self.ticket_id = ticket_id


class MalformedCredentialError(DomainError):
    """Raised when a credential payload cannot be decoded."""

    def __init__(self, reason: str = "Invalid QR code format") -> None:
        super().__init__(code=ErrorCode.MALFORMED_CREDENTIAL, message=reason)


class EventMismatchError(DomainError):
    """Raised when a staff scan presents a ticket for another event."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.EVENT_MISMATCH,
            message="Ticket does not belong to this event",
        )


class NotCurrentlyValidError(DomainError):
    """Raised when a ticket is no longer valid at the moment of entry."""

    def __init__(self, reason: str) -> None:
        super().__init__(code=ErrorCode.NOT_CURRENTLY_VALID, message=reason)


class LedgerUnavailableError(DomainError):
    """Raised when the ledger cannot be reached in time."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.LEDGER_UNAVAILABLE,
            message="Ledger temporarily unavailable",
            retryable=True,
        )


class InvalidEventIdError(DomainError):
    """Raised when an event ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_EVENT_ID,
            message="Invalid event ID format",
        )


class EventInactiveError(DomainError):
    """Raised when buying into a deactivated event."""

    def __init__(self, event_id: int) -> None:
        super().__init__(
            code=ErrorCode.EVENT_INACTIVE,
            message="Event is not active",
        )
        self.event_id = event_id


class InvalidEventError(DomainError):
    """Raised when an event or tier draft breaks a listing rule."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_EVENT, message=message)


class InsufficientListingFeeError(DomainError):
    """Raised when an organizer underpays the listing fee."""

    def __init__(self, required: int) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_LISTING_FEE,
            message=f"Listing fee of {required} is required",
        )
        self.required = required


class InvalidAttendeeCountError(DomainError):
    """Raised when a purchase asks for too few or too many attendees."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_ATTENDEE_COUNT, message=message)


class InvalidAddressError(DomainError):
    """Raised when a lookup names a malformed account address."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ADDRESS,
            message="Invalid account address",
        )
