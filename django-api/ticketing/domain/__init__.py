from ticketing.domain.models import (
    Credential,
    EntryReceipt,
    Event,
    EventDraft,
    ListedEvent,
    OwnedTicket,
    PurchaseReceipt,
    Reservation,
    Ticket,
    TicketDetail,
    TicketTier,
    TierSpec,
    Validity,
    VerificationResult,
)
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

__all__ = [
    "Event",
    "TicketTier",
    "Ticket",
    "Reservation",
    "TierSpec",
    "EventDraft",
    "Credential",
    "Validity",
    "PurchaseReceipt",
    "VerificationResult",
    "EntryReceipt",
    "OwnedTicket",
    "ListedEvent",
    "TicketDetail",
    "EventId",
    "TicketId",
    "TierIndex",
    "Identity",
    "Money",
    "Capacity",
    "AttendeeCount",
    "EventStatus",
    "PaymentToken",
]
