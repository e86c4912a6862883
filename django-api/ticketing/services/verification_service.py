"""Verification service - entry checks at the venue.

Verification is read-only and safe to repeat (re-scans). Admitting a ticket
is a separate, signed mutation that re-checks validity immediately before
flipping the used flag.
"""

import hmac
import logging

from ticketing import credentials
from ticketing.credentials import DecodeResult
from ticketing.domain import (
    EntryReceipt,
    Event,
    EventId,
    Identity,
    OwnedTicket,
    Ticket,
    TicketDetail,
    TicketId,
    TicketTier,
    VerificationResult,
)
from ticketing.domain.errors import (
    EventMismatchError,
    EventNotFoundError,
    InvalidAddressError,
    InvalidEventIdError,
    NotCurrentlyValidError,
    TicketNotFoundError,
    TierNotFoundError,
    UnauthorizedError,
)
from ticketing.domain.status import REASON_USED, ticket_validity, utc_now
from ticketing.services.issuance_service import Clock
from ticketing.signatures import authorize, use_ticket_message
from ticketing.stores.interfaces import LedgerStore

logger = logging.getLogger(__name__)

STAFF_CODE_PREFIX = "STAFF-"


def staff_code_for(event_id: EventId) -> str:
    """The shared door code for an event.

    A fixed, guessable per-event secret kept for compatibility with existing
    scanner clients.
    """
    return f"{STAFF_CODE_PREFIX}{event_id.value}"


class VerificationService:
    """Service for ticket verification and entry."""

    def __init__(self, store: LedgerStore, clock: Clock = utc_now) -> None:
        self._store = store
        self._clock = clock

    def verify(self, payload: object, organizer: str | None = None) -> VerificationResult:
        """Self-service verification of a scanned credential.

        ``organizer`` is informational only.

        Raises:
            MalformedCredentialError: If no ticket id can be decoded.
            TicketNotFoundError: If the ticket does not exist.
            LedgerUnavailableError: If the ledger did not answer in time.
        """
        decoded = credentials.decode_or_raise(payload)
        ticket, event, tier = self._load(decoded.credential.ticket_id)
        if organizer:
            logger.info("ticket %s verified on behalf of %s", ticket.id, organizer)
        return self._result(decoded, ticket, event, tier, staff_verified=False)

    def staff_verify(
        self, payload: object, staff_code: str, event_id: int | str
    ) -> VerificationResult:
        """Door-staff verification bound to one event.

        Raises:
            InvalidEventIdError: If ``event_id`` is not a positive integer.
            MalformedCredentialError: If no ticket id can be decoded.
            EventMismatchError: If the ticket belongs to another event.
            UnauthorizedError: If ``staff_code`` is wrong for the event.
            TicketNotFoundError: If the ticket does not exist.
        """
        try:
            expected_event = EventId.from_string(str(event_id))
        except ValueError as exc:
            raise InvalidEventIdError() from exc
        decoded = credentials.decode_or_raise(payload)
        claimed_event = decoded.credential.event_id
        if claimed_event is not None and claimed_event != expected_event:
            logger.warning(
                "staff scan for event %s presented ticket for event %s",
                expected_event,
                claimed_event,
            )
            raise EventMismatchError()

        if not hmac.compare_digest(
            str(staff_code).encode(), staff_code_for(expected_event).encode()
        ):
            logger.warning("invalid staff code for event %s", expected_event)
            raise UnauthorizedError("Invalid staff code")

        ticket, event, tier = self._load(decoded.credential.ticket_id)
        if ticket.event_id != expected_event:
            raise EventMismatchError()
        return self._result(decoded, ticket, event, tier, staff_verified=True)

    def mark_entry_used(self, ticket_id: int, actor: str, signature: str) -> EntryReceipt:
        """Admit a ticket, consuming it.

        Validity is re-evaluated from the ledger right before the mutation so
        a stale "valid" screen cannot admit the same ticket twice.

        Raises:
            UnauthorizedError: If ``actor`` did not sign or is not the organizer.
            TicketNotFoundError: If the ticket does not exist.
            NotCurrentlyValidError: If the ticket is not valid right now.
        """
        key = _ticket_id(ticket_id)
        try:
            actor_identity = Identity(actor)
        except ValueError as exc:
            raise UnauthorizedError("Invalid account address") from exc
        if not authorize(actor_identity, use_ticket_message(key.value), signature):
            raise UnauthorizedError("Invalid organizer signature")

        ticket, event, _ = self._load(key)
        if event.organizer != actor_identity:
            logger.warning("%s tried to admit ticket %s for event %s", actor_identity, key, event.id)
            raise UnauthorizedError("Only the event organizer can admit tickets")

        now = self._clock()
        validity = ticket_validity(ticket, event, now)
        if not validity.valid:
            raise NotCurrentlyValidError(validity.reason)
        if not self._store.mark_used(key):
            raise NotCurrentlyValidError(REASON_USED)

        logger.info("ticket %s admitted by %s", key, actor_identity)
        return EntryReceipt(ticket_id=key, used_by=actor_identity, used_at=now)

    def tickets_for_owner(self, owner: str) -> list[OwnedTicket]:
        """A holder's tickets, each with its validity right now."""
        try:
            identity = Identity(owner)
        except ValueError as exc:
            raise InvalidAddressError() from exc

        now = self._clock()
        events: dict[EventId, Event] = {}
        owned = []
        for ticket in self._store.list_tickets_for_owner(identity):
            if ticket.event_id not in events:
                events[ticket.event_id] = self._require_event(ticket.event_id)
            event = events[ticket.event_id]
            owned.append(
                OwnedTicket(
                    ticket=ticket,
                    event=event,
                    validity=ticket_validity(ticket, event, now),
                    credential=credentials.encode_ticket(ticket),
                )
            )
        return owned

    def ticket_detail(self, ticket_id: int) -> TicketDetail:
        """One ticket with its tier, event and validity right now.

        Raises:
            TicketNotFoundError: If the ticket does not exist.
        """
        ticket, event, tier = self._load(_ticket_id(ticket_id))
        return TicketDetail(
            ticket=ticket,
            event=event,
            tier=tier,
            validity=ticket_validity(ticket, event, self._clock()),
            credential=credentials.encode_ticket(ticket),
        )

    def _load(self, ticket_id: TicketId) -> tuple[Ticket, Event, TicketTier]:
        ticket = self._store.get_ticket(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id.value)
        event = self._require_event(ticket.event_id)
        tier = self._store.get_tier(ticket.event_id, ticket.tier_index)
        if tier is None:
            raise TierNotFoundError(ticket.event_id.value, ticket.tier_index.value)
        return ticket, event, tier

    def _require_event(self, event_id: EventId) -> Event:
        event = self._store.get_event(event_id)
        if event is None:
            raise EventNotFoundError(event_id.value)
        return event

    def _result(
        self,
        decoded: DecodeResult,
        ticket: Ticket,
        event: Event,
        tier: TicketTier,
        staff_verified: bool,
    ) -> VerificationResult:
        now = self._clock()
        validity = ticket_validity(ticket, event, now)
        return VerificationResult(
            ticket=ticket,
            event=event,
            tier=tier,
            valid=validity.valid,
            reason=validity.reason,
            verified_at=now,
            staff_verified=staff_verified,
            degraded_decode=decoded.degraded,
        )


def _ticket_id(ticket_id: int) -> TicketId:
    try:
        return TicketId(ticket_id)
    except ValueError as exc:
        raise TicketNotFoundError(ticket_id) from exc
