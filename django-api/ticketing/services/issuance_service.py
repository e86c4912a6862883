"""Issuance service - purchases and organizer listing actions.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

A purchase is not idempotent. Once ``reserve_capacity`` has returned, the
ticket exists on the ledger; callers must not blindly retry on a transport
failure after that point.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from ticketing import credentials
from ticketing.domain import (
    AttendeeCount,
    Event,
    EventDraft,
    EventId,
    EventStatus,
    Identity,
    ListedEvent,
    Money,
    PurchaseReceipt,
    Reservation,
    TicketTier,
    TierIndex,
    TierSpec,
)
from ticketing.domain.errors import (
    EventInactiveError,
    EventNotFoundError,
    InsufficientListingFeeError,
    InvalidAddressError,
    InvalidAttendeeCountError,
    InvalidEventError,
    InvalidEventIdError,
    LedgerUnavailableError,
    SoldOutError,
    TierNotFoundError,
    UnauthorizedError,
)
from ticketing.domain.status import event_status, utc_now
from ticketing.signatures import authorize
from ticketing.stores.interfaces import LedgerStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class IssuanceService:
    """Service for buying tickets and listing events."""

    def __init__(
        self,
        store: LedgerStore,
        clock: Clock = utc_now,
        listing_fee: Money = Money(0),
    ) -> None:
        self._store = store
        self._clock = clock
        self._listing_fee = listing_fee

    def purchase(
        self,
        event_id: int,
        tier_index: int,
        attendee_count: int,
        buyer: str,
        signature: str,
        message: str,
    ) -> PurchaseReceipt:
        """Buy one ticket admitting ``attendee_count`` people.

        Raises:
            InvalidAttendeeCountError: If the count is outside 1-10.
            UnauthorizedError: If the buyer did not sign ``message``.
            EventNotFoundError: If the event does not exist.
            EventInactiveError: If the event has been deactivated.
            TierNotFoundError: If the tier is missing or inactive.
            SoldOutError: If the tier cannot fit the attendees.
            LedgerUnavailableError: If the ledger did not answer in time.
        """
        try:
            count = AttendeeCount(attendee_count)
        except ValueError as exc:
            raise InvalidAttendeeCountError(str(exc)) from exc
        buyer_identity = _identity(buyer)
        if not authorize(buyer_identity, message, signature):
            raise UnauthorizedError()

        event = self._require_event(event_id)
        if not event.active:
            raise EventInactiveError(event.id.value)
        index = _tier_index(event.id, tier_index)
        tier = self._store.get_tier(event.id, index)
        if tier is None or not tier.active:
            raise TierNotFoundError(event.id.value, tier_index)

        now = self._clock()
        total_price = tier.price.times(count.value)
        reservation = Reservation(
            event_id=event.id,
            tier_index=index,
            attendee_count=count,
            purchaser=buyer_identity,
            total_amount_paid=total_price,
            token=tier.token,
            purchased_at=now,
            event_status=event_status(event.starts_at, event.ends_at, now),
        )
        try:
            ticket_id = self._store.reserve_capacity(reservation)
        except SoldOutError:
            logger.warning(
                "sold out: event=%s tier=%s attendees=%s", event.id, index.value, count.value
            )
            raise
        logger.info(
            "purchase committed: ticket=%s event=%s tier=%s attendees=%s buyer=%s",
            ticket_id,
            event.id,
            index.value,
            count.value,
            buyer_identity,
        )

        ticket = self._store.get_ticket(ticket_id)
        if ticket is None:
            # The mint stands; only the read-back failed.
            logger.error("ticket %s committed but not readable", ticket_id)
            raise LedgerUnavailableError()
        return PurchaseReceipt(
            ticket_id=ticket_id,
            total_price=total_price,
            credential=credentials.encode_ticket(ticket),
            ticket=ticket,
        )

    def create_event(
        self,
        draft: EventDraft,
        organizer: str,
        signature: str,
        message: str,
        fee_paid: int,
    ) -> Event:
        """List a new event with its initial tiers.

        Raises:
            UnauthorizedError: If the organizer did not sign ``message``.
            InvalidEventError: If the draft breaks a listing rule.
            InsufficientListingFeeError: If ``fee_paid`` is below the listing fee.
        """
        organizer_identity = _identity(organizer)
        if not authorize(organizer_identity, message, signature):
            raise UnauthorizedError()
        self._validate_draft(draft)
        if fee_paid < self._listing_fee.amount:
            raise InsufficientListingFeeError(self._listing_fee.amount)

        event_id = self._store.create_event(draft, organizer_identity)
        logger.info(
            "event listed: event=%s organizer=%s tiers=%s",
            event_id,
            organizer_identity,
            len(draft.tiers),
        )
        return self._require_event(event_id.value)

    def add_tier(
        self,
        event_id: int,
        spec: TierSpec,
        organizer: str,
        signature: str,
        message: str,
    ) -> TierIndex:
        """Raises UnauthorizedError unless the event's organizer signed."""
        event = self._authorize_organizer(event_id, organizer, signature, message)
        _validate_tier(spec, "Tier")
        index = self._store.add_tier(event.id, spec)
        logger.info("tier added: event=%s tier=%s", event.id, index.value)
        return index

    def deactivate_event(
        self,
        event_id: int,
        organizer: str,
        signature: str,
        message: str,
    ) -> Event:
        """Stop sales and entry for an event. Events are never deleted."""
        event = self._authorize_organizer(event_id, organizer, signature, message)
        self._store.set_event_active(event.id, False)
        logger.info("event deactivated: event=%s", event.id)
        return self._require_event(event_id)

    def get_event(self, event_id: int | str) -> Event:
        """Return an event by ID.

        Raises:
            InvalidEventIdError: If the event_id is not a positive integer.
            EventNotFoundError: If the event does not exist.
        """
        return self._require_event(event_id)

    def list_tiers(self, event_id: int | str) -> list[TicketTier]:
        event = self._require_event(event_id)
        return self._store.list_tiers(event.id)

    def list_events(self, organizer: str | None = None) -> list[ListedEvent]:
        """The event catalogue, each event with its status right now.

        Raises:
            InvalidAddressError: If ``organizer`` is not an account address.
        """
        owner = None
        if organizer is not None:
            try:
                owner = Identity(organizer)
            except ValueError as exc:
                raise InvalidAddressError() from exc
        return [
            ListedEvent(event=event, status=self.status_of(event))
            for event in self._store.list_events(owner)
        ]

    def status_of(self, event: Event) -> EventStatus:
        return event_status(event.starts_at, event.ends_at, self._clock())

    def _authorize_organizer(
        self, event_id: int, organizer: str, signature: str, message: str
    ) -> Event:
        organizer_identity = _identity(organizer)
        if not authorize(organizer_identity, message, signature):
            raise UnauthorizedError()
        event = self._require_event(event_id)
        if event.organizer != organizer_identity:
            logger.warning("%s is not the organizer of event %s", organizer_identity, event.id)
            raise UnauthorizedError("Only the event organizer can change this event")
        return event

    def _require_event(self, event_id: int | str) -> Event:
        try:
            key = EventId.from_string(str(event_id))
        except ValueError as exc:
            raise InvalidEventIdError() from exc
        event = self._store.get_event(key)
        if event is None:
            raise EventNotFoundError(key.value)
        return event

    def _validate_draft(self, draft: EventDraft) -> None:
        for label, value in (
            ("title", draft.title),
            ("description", draft.description),
            ("location", draft.location),
        ):
            if not value or not value.strip():
                raise InvalidEventError(f"Missing required field: {label}")
        if draft.starts_at <= self._clock():
            raise InvalidEventError("Start date must be in the future")
        if draft.ends_at <= draft.starts_at:
            raise InvalidEventError("End date must be after start date")
        if not draft.tiers:
            raise InvalidEventError("At least one ticket tier is required")
        for position, spec in enumerate(draft.tiers):
            _validate_tier(spec, f"Tier {position}")


def _validate_tier(spec: TierSpec, label: str) -> None:
    if not spec.name or not spec.name.strip():
        raise InvalidEventError(f"{label}: missing name")
    if spec.price.amount <= 0:
        raise InvalidEventError(f"{label}: price must be greater than zero")


def _identity(address: str) -> Identity:
    try:
        return Identity(address)
    except ValueError as exc:
        raise UnauthorizedError("Invalid account address") from exc


def _tier_index(event_id: EventId, tier_index: int) -> TierIndex:
    try:
        return TierIndex(tier_index)
    except ValueError as exc:
        raise TierNotFoundError(event_id.value, tier_index) from exc
