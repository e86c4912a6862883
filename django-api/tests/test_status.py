"""Unit tests for ticket state resolution.

Validity is a pure function of ledger facts and wall-clock time.
Run with: pytest tests/test_status.py -v
"""

from dataclasses import replace
from datetime import timedelta

import pytest

from tests.helpers import T0
from ticketing.domain import (
    AttendeeCount,
    Event,
    EventId,
    EventStatus,
    Identity,
    Money,
    PaymentToken,
    Ticket,
    TicketId,
    TierIndex,
)
from ticketing.domain.status import (
    REASON_ENDED,
    REASON_INACTIVE,
    REASON_NOT_STARTED,
    REASON_USED,
    REASON_VALID,
    event_status,
    ticket_validity,
)

ORGANIZER = Identity("0x52908400098527886E0F7030069857D2E4169EE7")
STARTS = T0 + timedelta(days=1)
ENDS = STARTS + timedelta(hours=4)


@pytest.fixture
def event() -> Event:
    return Event(
        id=EventId(7),
        organizer=ORGANIZER,
        title="Launch Night",
        description="Opening party",
        location="Lisbon",
        starts_at=STARTS,
        ends_at=ENDS,
        metadata_uri="",
        active=True,
        tier_count=1,
    )


@pytest.fixture
def ticket() -> Ticket:
    return Ticket(
        id=TicketId(1),
        event_id=EventId(7),
        tier_index=TierIndex(0),
        owner=ORGANIZER,
        attendee_count=AttendeeCount(1),
        total_amount_paid=Money(100),
        token=PaymentToken.NATIVE,
        purchased_at=T0,
        used=False,
        event_status_at_purchase=EventStatus.UPCOMING,
    )


class TestEventStatus:
    """Tests for event_status."""

    @pytest.mark.parametrize(
        "now, expected",
        [
            (STARTS - timedelta(seconds=1), EventStatus.UPCOMING),
            (STARTS, EventStatus.LIVE),
            (ENDS, EventStatus.LIVE),
            (ENDS + timedelta(seconds=1), EventStatus.ENDED),
        ],
    )
    def test_live_window_is_inclusive(self, now, expected):
        assert event_status(STARTS, ENDS, now) is expected


class TestTicketValidity:
    """Tests for ticket_validity."""

    def test_valid_during_event(self, ticket, event):
        validity = ticket_validity(ticket, event, STARTS + timedelta(minutes=30))
        assert validity.valid
        assert validity.reason == REASON_VALID

    def test_not_started_before_event(self, ticket, event):
        validity = ticket_validity(ticket, event, T0)
        assert not validity.valid
        assert validity.reason == REASON_NOT_STARTED

    def test_ended_after_event(self, ticket, event):
        validity = ticket_validity(ticket, event, ENDS + timedelta(minutes=1))
        assert validity.reason == REASON_ENDED

    def test_inactive_event_beats_schedule(self, ticket, event):
        inactive = replace(event, active=False)
        validity = ticket_validity(ticket, inactive, STARTS + timedelta(minutes=30))
        assert validity.reason == REASON_INACTIVE

    def test_used_beats_everything(self, ticket, event):
        used = replace(ticket, used=True)
        validity = ticket_validity(used, replace(event, active=False), T0)
        assert validity.reason == REASON_USED

    def test_status_snapshot_is_ignored(self, ticket, event):
        """A stale "live" snapshot must not make an ended event valid."""
        stale = replace(ticket, event_status_at_purchase=EventStatus.LIVE)
        validity = ticket_validity(stale, event, ENDS + timedelta(days=1))
        assert not validity.valid

    def test_same_inputs_same_answer(self, ticket, event):
        now = STARTS + timedelta(hours=1)
        assert ticket_validity(ticket, event, now) == ticket_validity(ticket, event, now)
