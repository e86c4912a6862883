"""In-process LedgerStore.

Every mutation runs under one lock, giving the same serialised, all-or-nothing
transitions the real ledger provides. Used for local development and for
exercising concurrent buyers in tests.
"""

import threading
from dataclasses import replace

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
from ticketing.domain.errors import (
    EventNotFoundError,
    SoldOutError,
    TicketNotFoundError,
    TierNotFoundError,
)
from ticketing.stores.interfaces import LedgerStore


class InMemoryLedgerStore(LedgerStore):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: dict[int, Event] = {}
        self._tiers: dict[tuple[int, int], TicketTier] = {}
        self._tickets: dict[int, Ticket] = {}
        self._next_event_id = 1
        self._next_ticket_id = 1

    def get_event(self, event_id: EventId) -> Event | None:
        return self._events.get(event_id.value)

    def list_events(self, organizer: Identity | None = None) -> list[Event]:
        events = [
            event
            for event in self._events.values()
            if organizer is None or event.organizer == organizer
        ]
        return sorted(events, key=lambda event: event.id.value, reverse=True)

    def get_tier(self, event_id: EventId, tier_index: TierIndex) -> TicketTier | None:
        return self._tiers.get((event_id.value, tier_index.value))

    def list_tiers(self, event_id: EventId) -> list[TicketTier]:
        event = self._events.get(event_id.value)
        if event is None:
            return []
        return [self._tiers[(event_id.value, index)] for index in range(event.tier_count)]

    def reserve_capacity(self, reservation: Reservation) -> TicketId:
        key = (reservation.event_id.value, reservation.tier_index.value)
        count = reservation.attendee_count.value
        with self._lock:
            tier = self._tiers.get(key)
            if tier is None or not tier.active:
                raise TierNotFoundError(*key)
            if tier.current_supply + count > tier.max_supply.value:
                raise SoldOutError(*key)

            self._tiers[key] = replace(tier, current_supply=tier.current_supply + count)
            ticket_id = TicketId(self._next_ticket_id)
            self._next_ticket_id += 1
            self._tickets[ticket_id.value] = Ticket(
                id=ticket_id,
                event_id=reservation.event_id,
                tier_index=reservation.tier_index,
                owner=reservation.purchaser,
                attendee_count=reservation.attendee_count,
                total_amount_paid=reservation.total_amount_paid,
                token=reservation.token,
                purchased_at=reservation.purchased_at,
                used=False,
                event_status_at_purchase=reservation.event_status,
            )
        return ticket_id

    def get_ticket(self, ticket_id: TicketId) -> Ticket | None:
        return self._tickets.get(ticket_id.value)

    def list_tickets_for_owner(self, owner: Identity) -> list[Ticket]:
        owned = [ticket for ticket in self._tickets.values() if ticket.owner == owner]
        return sorted(owned, key=lambda ticket: ticket.purchased_at, reverse=True)

    def mark_used(self, ticket_id: TicketId) -> bool:
        with self._lock:
            ticket = self._tickets.get(ticket_id.value)
            if ticket is None:
                raise TicketNotFoundError(ticket_id.value)
            if ticket.used:
                return False
            self._tickets[ticket_id.value] = replace(ticket, used=True)
        return True

    def create_event(self, draft: EventDraft, organizer: Identity) -> EventId:
        with self._lock:
            event_id = EventId(self._next_event_id)
            self._next_event_id += 1
            self._events[event_id.value] = Event(
                id=event_id,
                organizer=organizer,
                title=draft.title,
                description=draft.description,
                location=draft.location,
                starts_at=draft.starts_at,
                ends_at=draft.ends_at,
                metadata_uri=draft.metadata_uri,
                active=True,
                tier_count=0,
            )
            for spec in draft.tiers:
                self._append_tier(event_id, spec)
        return event_id

    def add_tier(self, event_id: EventId, spec: TierSpec) -> TierIndex:
        with self._lock:
            if event_id.value not in self._events:
                raise EventNotFoundError(event_id.value)
            return self._append_tier(event_id, spec)

    def set_event_active(self, event_id: EventId, active: bool) -> None:
        with self._lock:
            event = self._events.get(event_id.value)
            if event is None:
                raise EventNotFoundError(event_id.value)
            self._events[event_id.value] = replace(event, active=active)

    def _append_tier(self, event_id: EventId, spec: TierSpec) -> TierIndex:
        # Caller holds the lock.
        event = self._events[event_id.value]
        index = TierIndex(event.tier_count)
        self._tiers[(event_id.value, index.value)] = TicketTier(
            event_id=event_id,
            index=index,
            name=spec.name,
            price=spec.price,
            max_supply=spec.max_supply,
            current_supply=0,
            token=spec.token,
            active=True,
        )
        self._events[event_id.value] = replace(event, tier_count=event.tier_count + 1)
        return index
