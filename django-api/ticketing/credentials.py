"""QR credential codec.

A credential is the JSON text carried by a ticket's QR code. It is never
trusted on its own: verification re-reads every fact from the ledger.

Decoding accepts, in order:

1. the current shape (``version == "2"``, all nine fields);
2. the legacy shape ``{ticketId, platform, timestamp[, eventId, tierId]}``;
3. a degraded fallback that pulls a bare ticket id out of any text
   mentioning ``ticketId``.

Anything else is a malformed result. ``decode`` never raises.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Self

from ticketing.domain.errors import MalformedCredentialError
from ticketing.domain.models import Credential, Ticket
from ticketing.domain.value_objects import (
    MAX_ATTENDEES,
    MIN_ATTENDEES,
    EventId,
    EventStatus,
    Identity,
    PaymentToken,
    TicketId,
)

logger = logging.getLogger(__name__)

CURRENT_VERSION = "2"
LEGACY_VERSION = "1"
MAX_PAYLOAD_LENGTH = 4096

CURRENT_FIELDS = frozenset(
    {
        "ticketId",
        "eventId",
        "attendeeCount",
        "purchaser",
        "totalAmountPaid",
        "tokenType",
        "purchaseTimestamp",
        "eventStatus",
        "version",
    }
)

_FALLBACK_TICKET_ID = re.compile(r"ticketId[\s:\"']*(\d{1,18})", re.IGNORECASE | re.ASCII)


class _Invalid(Exception):
    """Internal: a structured field failed validation."""


@dataclass(frozen=True)
class DecodeResult:
    """Outcome of decoding a credential payload."""

    credential: Credential | None
    degraded: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.credential is not None

    @classmethod
    def malformed(cls, reason: str) -> Self:
        return cls(credential=None, error=reason)


def credential_for(ticket: Ticket) -> Credential:
    return Credential(
        ticket_id=ticket.id,
        version=CURRENT_VERSION,
        event_id=ticket.event_id,
        attendee_count=ticket.attendee_count.value,
        purchaser=ticket.owner.address,
        total_amount_paid=ticket.total_amount_paid.amount,
        token=ticket.token,
        purchase_timestamp=int(ticket.purchased_at.timestamp()),
        event_status=ticket.event_status_at_purchase,
    )


def encode(credential: Credential) -> str:
    """Deterministic JSON for a complete credential."""
    if not credential.is_complete:
        raise ValueError("Only complete credentials can be encoded")
    payload = {
        "ticketId": credential.ticket_id.value,
        "eventId": credential.event_id.value,
        "attendeeCount": credential.attendee_count,
        "purchaser": credential.purchaser,
        # Minor units overflow JavaScript's safe integer range.
        "totalAmountPaid": str(credential.total_amount_paid),
        "tokenType": credential.token.value,
        "purchaseTimestamp": credential.purchase_timestamp,
        "eventStatus": credential.event_status.value,
        "version": CURRENT_VERSION,
    }
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))


def encode_ticket(ticket: Ticket) -> str:
    return encode(credential_for(ticket))


def decode(payload: object) -> DecodeResult:
    if isinstance(payload, bytes):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError:
            return DecodeResult.malformed("Credential is not UTF-8 text")
    if not isinstance(payload, str) or not payload.strip():
        return DecodeResult.malformed("Credential is empty")
    if len(payload) > MAX_PAYLOAD_LENGTH:
        return DecodeResult.malformed("Credential is too long")

    data = _load_json(payload)
    if isinstance(data, dict):
        try:
            if "version" in data:
                return DecodeResult(credential=_decode_current(data))
            if "ticketId" in data:
                return DecodeResult(credential=_decode_legacy(data))
        except _Invalid as exc:
            logger.info("Structured credential rejected: %s", exc)

    return _decode_fallback(payload)


def decode_or_raise(payload: object) -> DecodeResult:
    """Like ``decode`` but raises for undecodable payloads.

    Raises:
        MalformedCredentialError: If no ticket id can be recovered.
    """
    result = decode(payload)
    if not result.ok:
        raise MalformedCredentialError(result.error or "Invalid QR code format")
    return result


def _load_json(payload: str) -> Any:
    try:
        return json.loads(payload)
    except (ValueError, RecursionError):
        return None


def _decode_current(data: dict) -> Credential:
    missing = CURRENT_FIELDS - data.keys()
    if missing:
        raise _Invalid(f"missing fields: {', '.join(sorted(missing))}")
    if str(data["version"]) != CURRENT_VERSION:
        raise _Invalid(f"unsupported version {data['version']!r}")

    attendee_count = _int_field(data, "attendeeCount")
    if not MIN_ATTENDEES <= attendee_count <= MAX_ATTENDEES:
        raise _Invalid("attendeeCount out of range")
    purchaser = data["purchaser"]
    try:
        Identity(purchaser)
        token = PaymentToken.parse(data["tokenType"])
        status = EventStatus(data["eventStatus"])
    except ValueError as exc:
        raise _Invalid(str(exc)) from exc

    return Credential(
        ticket_id=_ticket_id(data),
        version=CURRENT_VERSION,
        event_id=_event_id(data["eventId"]),
        attendee_count=attendee_count,
        purchaser=purchaser,
        total_amount_paid=_int_field(data, "totalAmountPaid"),
        token=token,
        purchase_timestamp=_int_field(data, "purchaseTimestamp"),
        event_status=status,
    )


def _decode_legacy(data: dict) -> Credential:
    event_id = data.get("eventId")
    return Credential(
        ticket_id=_ticket_id(data),
        version=LEGACY_VERSION,
        event_id=_event_id(event_id) if event_id is not None else None,
    )


def _decode_fallback(payload: str) -> DecodeResult:
    match = _FALLBACK_TICKET_ID.search(payload)
    if not match:
        return DecodeResult.malformed("Invalid QR code format")
    try:
        ticket_id = TicketId(int(match.group(1)))
    except ValueError:
        return DecodeResult.malformed("Invalid ticket id in QR code")
    logger.info("Credential decoded through ticket id fallback")
    return DecodeResult(
        credential=Credential(ticket_id=ticket_id, version=LEGACY_VERSION),
        degraded=True,
    )


def _int_field(data: dict, key: str) -> int:
    value = data[key]
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    raise _Invalid(f"{key} must be a non-negative integer")


def _ticket_id(data: dict) -> TicketId:
    try:
        return TicketId(_int_field(data, "ticketId"))
    except ValueError as exc:
        raise _Invalid(str(exc)) from exc


def _event_id(value: object) -> EventId:
    try:
        return EventId(_int_field({"eventId": value}, "eventId"))
    except ValueError as exc:
        raise _Invalid(str(exc)) from exc
