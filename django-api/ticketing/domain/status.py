"""Ticket state resolution.

Pure functions of ledger facts and wall-clock time. Verification must call
these with freshly read ledger state; the status snapshot carried by a
ticket or credential is history, not input.
"""

from datetime import datetime, timezone

from ticketing.domain.models import Event, Ticket, Validity
from ticketing.domain.value_objects import EventStatus

REASON_USED = "ticket already used"
REASON_INACTIVE = "event is not active"
REASON_NOT_STARTED = "event has not started"
REASON_ENDED = "event has ended"
REASON_VALID = "valid ticket"


def event_status(starts_at: datetime, ends_at: datetime, now: datetime) -> EventStatus:
    """Both ends of the live window are inclusive."""
    if now < starts_at:
        return EventStatus.UPCOMING
    if now <= ends_at:
        return EventStatus.LIVE
    return EventStatus.ENDED


def ticket_validity(ticket: Ticket, event: Event, now: datetime) -> Validity:
    if ticket.used:
        return Validity(valid=False, reason=REASON_USED)
    if not event.active:
        return Validity(valid=False, reason=REASON_INACTIVE)

    status = event_status(event.starts_at, event.ends_at, now)
    if status is EventStatus.UPCOMING:
        return Validity(valid=False, reason=REASON_NOT_STARTED)
    if status is EventStatus.ENDED:
        return Validity(valid=False, reason=REASON_ENDED)
    return Validity(valid=True, reason=REASON_VALID)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
