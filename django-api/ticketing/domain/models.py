"""Domain models representing ledger state.

These are pure domain objects with no API input rules.
Django ORM records are in ticketing/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import datetime

from ticketing.domain.value_objects import (
    AttendeeCount,
    Capacity,
    EventId,
    EventStatus,
    Identity,
    Money,
    PaymentToken,
    TicketId,
    TierIndex,
)


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    organizer: Identity
    title: str
    description: str
    location: str
    starts_at: datetime
    ends_at: datetime
    metadata_uri: str
    active: bool
    tier_count: int

    def __post_init__(self) -> None:
        if self.ends_at <= self.starts_at:
            raise ValueError("Event must end after it starts")


@dataclass(frozen=True)
class TicketTier:
    """Domain representation of a purchasable tier within an Event."""

    event_id: EventId
    index: TierIndex
    name: str
    price: Money
    max_supply: Capacity
    current_supply: int
    token: PaymentToken
    active: bool

    def __post_init__(self) -> None:
        if not 0 <= self.current_supply <= self.max_supply.value:
            raise ValueError("Tier supply out of range")

    @property
    def available(self) -> int:
        """Remaining seats at read time. Display only; never decide a purchase on it."""
        return self.max_supply.value - self.current_supply


@dataclass(frozen=True)
class Ticket:
    """Domain representation of a minted Ticket."""

    id: TicketId
    event_id: EventId
    tier_index: TierIndex
    owner: Identity
    attendee_count: AttendeeCount
    total_amount_paid: Money
    token: PaymentToken
    purchased_at: datetime
    used: bool
    event_status_at_purchase: EventStatus


@dataclass(frozen=True)
class Reservation:
    """Everything the ledger needs to reserve capacity and mint in one step."""

    event_id: EventId
    tier_index: TierIndex
    attendee_count: AttendeeCount
    purchaser: Identity
    total_amount_paid: Money
    token: PaymentToken
    purchased_at: datetime
    event_status: EventStatus


@dataclass(frozen=True)
class TierSpec:
    """Organizer input for a new tier."""

    name: str
    price: Money
    max_supply: Capacity
    token: PaymentToken = PaymentToken.NATIVE


@dataclass(frozen=True)
class EventDraft:
    """Organizer input for a new event."""

    title: str
    description: str
    location: str
    starts_at: datetime
    ends_at: datetime
    metadata_uri: str = ""
    fee_token: PaymentToken = PaymentToken.NATIVE
    tiers: tuple[TierSpec, ...] = ()


@dataclass(frozen=True)
class Credential:
    """Portable, non-authoritative description of a ticket.

    Legacy and degraded payloads decode to a partial credential where only
    ``ticket_id`` is guaranteed.
    """

    ticket_id: TicketId
    version: str
    event_id: EventId | None = None
    attendee_count: int | None = None
    purchaser: str | None = None
    total_amount_paid: int | None = None
    token: PaymentToken | None = None
    purchase_timestamp: int | None = None
    event_status: EventStatus | None = None

    @property
    def is_complete(self) -> bool:
        return None not in (
            self.event_id,
            self.attendee_count,
            self.purchaser,
            self.total_amount_paid,
            self.token,
            self.purchase_timestamp,
            self.event_status,
        )


@dataclass(frozen=True)
class Validity:
    """Outcome of evaluating a ticket against live ledger facts."""

    valid: bool
    reason: str


@dataclass(frozen=True)
class PurchaseReceipt:
    ticket_id: TicketId
    total_price: Money
    credential: str
    ticket: Ticket


@dataclass(frozen=True)
class VerificationResult:
    ticket: Ticket
    event: Event
    tier: TicketTier
    valid: bool
    reason: str
    verified_at: datetime
    staff_verified: bool
    degraded_decode: bool = False


@dataclass(frozen=True)
class EntryReceipt:
    ticket_id: TicketId
    used_by: Identity
    used_at: datetime


@dataclass(frozen=True)
class OwnedTicket:
    """A holder's ticket with its validity as of the listing."""

    ticket: Ticket
    event: Event
    validity: Validity
    credential: str


@dataclass(frozen=True)
class ListedEvent:
    """An event in the catalogue with its schedule status at listing time."""

    event: Event
    status: EventStatus


@dataclass(frozen=True)
class TicketDetail:
    ticket: Ticket
    event: Event
    tier: TicketTier
    validity: Validity
    credential: str
