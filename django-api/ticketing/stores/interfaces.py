"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. A store fronts the
authoritative ledger: every read goes to it, nothing is cached here.
"""

from abc import ABC, abstractmethod

from ticketing.domain import (
    Event,
    EventDraft,
    EventId,
    Identity,
    Reservation,
    Ticket,
    TicketId,
    TicketTier,
    TierIndex,
    TierSpec,
)


class LedgerStore(ABC):
    """Interface for ledger reads and the few atomic mutations the engine needs.

    Implementations raise ``LedgerUnavailableError`` when the ledger cannot
    answer within its configured timeout.
    """

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def list_events(self, organizer: Identity | None = None) -> list[Event]:
        """Return events newest first, optionally only those listed by ``organizer``."""
        ...

    @abstractmethod
    def get_tier(self, event_id: EventId, tier_index: TierIndex) -> TicketTier | None:
        """Return a tier by position, or None if not found."""
        ...

    @abstractmethod
    def list_tiers(self, event_id: EventId) -> list[TicketTier]:
        """Return the tiers of an event ordered by index."""
        ...

    @abstractmethod
    def reserve_capacity(self, reservation: Reservation) -> TicketId:
        """Atomically add the attendees to the tier's supply and mint a ticket.

        The capacity check and the increment are one step: there is no window
        in which another caller can observe the old supply and also succeed.

        Raises:
            SoldOutError: If ``current + attendees > max`` at commit time.
            TierNotFoundError: If the tier is missing or inactive.
        """
        ...

    @abstractmethod
    def get_ticket(self, ticket_id: TicketId) -> Ticket | None:
        """Return a ticket by ID, or None if not found."""
        ...

    @abstractmethod
    def list_tickets_for_owner(self, owner: Identity) -> list[Ticket]:
        """Return the tickets held by an identity, newest first."""
        ...

    @abstractmethod
    def mark_used(self, ticket_id: TicketId) -> bool:
        """Flip the ticket's used flag.

        Returns False, rather than raising, when the ticket was already used.

        Raises:
            TicketNotFoundError: If the ticket does not exist.
        """
        ...

    @abstractmethod
    def create_event(self, draft: EventDraft, organizer: Identity) -> EventId:
        """Record a new active event with the draft's tiers."""
        ...

    @abstractmethod
    def add_tier(self, event_id: EventId, spec: TierSpec) -> TierIndex:
        """Append a tier to an event.

        Raises:
            EventNotFoundError: If the event does not exist.
        """
        ...

    @abstractmethod
    def set_event_active(self, event_id: EventId, active: bool) -> None:
        """Raises EventNotFoundError if the event does not exist."""
        ...
