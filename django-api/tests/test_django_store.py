"""Tests for the Django ORM ledger store.

Run with: pytest tests/test_django_store.py -v
"""

import json
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest
from django.db import OperationalError, connection
from django.test.utils import CaptureQueriesContext

from tests.helpers import T0, FakeClock, make_draft, signed_purchase, wallet
from ticketing import models as orm
from ticketing.domain import (
    AttendeeCount,
    Capacity,
    EventId,
    EventStatus,
    Money,
    PaymentToken,
    Reservation,
    TicketId,
    TierIndex,
    TierSpec,
)
from ticketing.domain.errors import (
    EventNotFoundError,
    LedgerUnavailableError,
    SoldOutError,
    TicketNotFoundError,
    TierNotFoundError,
)
from ticketing.services import IssuanceService
from ticketing.stores.django_store import DjangoLedgerStore

ORGANIZER = wallet(0xA11CE)
BUYER = wallet(0xB0B)


@pytest.fixture
def ledger() -> DjangoLedgerStore:
    return DjangoLedgerStore()


@pytest.fixture
def event_id(ledger) -> EventId:
    return ledger.create_event(make_draft(T0 + timedelta(days=1)), ORGANIZER.identity)


def reservation(event_id, tier_index=1, attendees=1) -> Reservation:
    return Reservation(
        event_id=event_id,
        tier_index=TierIndex(tier_index),
        attendee_count=AttendeeCount(attendees),
        purchaser=BUYER.identity,
        total_amount_paid=Money(500 * attendees),
        token=PaymentToken.STABLE_A,
        purchased_at=T0,
        event_status=EventStatus.UPCOMING,
    )


@pytest.mark.django_db
class TestEvents:
    """Tests for event and tier records."""

    def test_create_event_with_tiers(self, ledger, event_id):
        event = ledger.get_event(event_id)
        tiers = ledger.list_tiers(event_id)

        assert event.organizer == ORGANIZER.identity
        assert event.tier_count == 2
        assert [tier.index.value for tier in tiers] == [0, 1]
        assert tiers[1].token is PaymentToken.STABLE_A
        assert tiers[1].max_supply == Capacity(5)

    def test_list_events_by_organizer(self, ledger, event_id):
        other = wallet(0xC0FFEE)
        other_id = ledger.create_event(make_draft(T0 + timedelta(days=2)), other.identity)

        assert [event.id for event in ledger.list_events()] == [other_id, event_id]
        lowered = ORGANIZER.identity.address.lower()
        orm.Event.objects.filter(pk=event_id.value).update(organizer=lowered)
        assert [event.id for event in ledger.list_events(ORGANIZER.identity)] == [event_id]

    def test_missing_event(self, ledger):
        assert ledger.get_event(EventId(404)) is None
        assert ledger.get_tier(EventId(404), TierIndex(0)) is None

    def test_add_tier_appends(self, ledger, event_id):
        spec = TierSpec(name="Backstage", price=Money(900), max_supply=Capacity(2))
        assert ledger.add_tier(event_id, spec) == TierIndex(2)
        assert ledger.get_event(event_id).tier_count == 3

    def test_add_tier_to_missing_event(self, ledger):
        spec = TierSpec(name="Backstage", price=Money(900), max_supply=Capacity(2))
        with pytest.raises(EventNotFoundError):
            ledger.add_tier(EventId(404), spec)

    def test_set_event_active(self, ledger, event_id):
        ledger.set_event_active(event_id, False)
        assert not ledger.get_event(event_id).active
        with pytest.raises(EventNotFoundError):
            ledger.set_event_active(EventId(404), False)


@pytest.mark.django_db
class TestReserveCapacity:
    """Tests for reserve_capacity."""

    def test_reserve_mints_ticket(self, ledger, event_id):
        ticket_id = ledger.reserve_capacity(reservation(event_id, attendees=2))

        ticket = ledger.get_ticket(ticket_id)
        assert ticket.owner == BUYER.identity
        assert ticket.attendee_count.value == 2
        assert ticket.total_amount_paid == Money(1000)
        assert ticket.tier_index == TierIndex(1)
        assert not ticket.used
        assert ledger.get_tier(event_id, TierIndex(1)).current_supply == 2

    def test_sequential_buyers_stop_at_capacity(self, ledger, event_id):
        minted = []
        sold_out = 0
        for _ in range(8):
            try:
                minted.append(ledger.reserve_capacity(reservation(event_id)))
            except SoldOutError:
                sold_out += 1

        assert len(minted) == 5
        assert sold_out == 3
        assert ledger.get_tier(event_id, TierIndex(1)).current_supply == 5
        assert orm.Ticket.objects.count() == 5

    def test_group_larger_than_remaining(self, ledger, event_id):
        ledger.reserve_capacity(reservation(event_id, attendees=4))
        with pytest.raises(SoldOutError):
            ledger.reserve_capacity(reservation(event_id, attendees=2))
        assert ledger.get_tier(event_id, TierIndex(1)).current_supply == 4

    def test_missing_tier(self, ledger, event_id):
        with pytest.raises(TierNotFoundError):
            ledger.reserve_capacity(reservation(event_id, tier_index=7))

    def test_inactive_tier(self, ledger, event_id):
        orm.TicketTier.objects.filter(event_id=event_id.value, index=1).update(active=False)
        with pytest.raises(TierNotFoundError):
            ledger.reserve_capacity(reservation(event_id))


@pytest.mark.django_db
class TestTickets:
    """Tests for ticket reads and mark_used."""

    def test_mark_used_once(self, ledger, event_id):
        ticket_id = ledger.reserve_capacity(reservation(event_id))

        assert ledger.mark_used(ticket_id) is True
        assert ledger.mark_used(ticket_id) is False
        assert ledger.get_ticket(ticket_id).used
        assert orm.Ticket.objects.get(pk=ticket_id.value).used_at is not None

    def test_mark_used_missing_ticket(self, ledger):
        with pytest.raises(TicketNotFoundError):
            ledger.mark_used(TicketId(404))

    def test_list_tickets_for_owner_ignores_case(self, ledger, event_id):
        ledger.reserve_capacity(reservation(event_id))
        ledger.reserve_capacity(reservation(event_id, tier_index=0))

        lowered = BUYER.identity.address.lower()
        orm.Ticket.objects.update(owner=lowered)

        assert len(ledger.list_tickets_for_owner(BUYER.identity)) == 2
        assert ledger.list_tickets_for_owner(ORGANIZER.identity) == []


@pytest.mark.django_db
class TestLedgerUnavailable:
    """Database failures map to LedgerUnavailableError."""

    def test_operational_error_is_retryable(self, ledger, monkeypatch):
        def unreachable(*args, **kwargs):
            raise OperationalError("timeout expired")

        monkeypatch.setattr(orm.Ticket.objects, "select_related", unreachable)
        with pytest.raises(LedgerUnavailableError) as exc_info:
            ledger.get_ticket(TicketId(1))
        assert exc_info.value.retryable


@pytest.mark.django_db
class TestExactAmounts:
    """Minor-unit amounts survive the database without rounding."""

    PRICE = Money(1234567890123456789)

    def _event(self, ledger, price: Money) -> EventId:
        tiers = (TierSpec(name="Whale", price=price, max_supply=Capacity(20)),)
        return ledger.create_event(
            make_draft(T0 + timedelta(days=1), tiers=tiers), ORGANIZER.identity
        )

    @pytest.mark.parametrize(
        "price", [Money(1234567890123456789), Money(10**18 + 1), Money(2**256 - 1)]
    )
    def test_price_round_trips(self, ledger, price):
        event_id = self._event(ledger, price)
        assert ledger.get_tier(event_id, TierIndex(0)).price == price
        assert ledger.list_tiers(event_id)[0].price == price

    def test_ten_attendee_total_is_exact(self, ledger):
        event_id = self._event(ledger, self.PRICE)
        clock = FakeClock(T0)
        issuance = IssuanceService(ledger, clock=clock)

        receipt = issuance.purchase(
            event_id=event_id.value,
            tier_index=0,
            attendee_count=10,
            **signed_purchase(BUYER, event_id.value, 0, clock.now),
        )

        expected = Money(12345678901234567890)
        assert receipt.total_price == expected
        assert ledger.get_ticket(receipt.ticket_id).total_amount_paid == expected
        assert json.loads(receipt.credential)["totalAmountPaid"] == "12345678901234567890"


@pytest.mark.django_db
class TestReserveCapacityStatement:
    """The capacity check and the increment are a single UPDATE."""

    def test_no_read_before_the_update(self, ledger, event_id):
        with CaptureQueriesContext(connection) as queries:
            ledger.reserve_capacity(reservation(event_id))

        tier_queries = [
            query["sql"]
            for query in queries.captured_queries
            if "ticketing_tickettier" in query["sql"]
        ]
        updates = [sql for sql in tier_queries if sql.startswith("UPDATE")]
        assert len(updates) == 1
        assert tier_queries[0].startswith("UPDATE")
        assert '"max_supply"' in updates[0]
        assert '"current_supply"' in updates[0]


@pytest.mark.django_db(transaction=True)
class TestConcurrentReservations:
    """Buyers on separate connections never push supply past capacity."""

    def test_threads_never_oversell(self):
        ledger = DjangoLedgerStore()
        tiers = (TierSpec(name="Floor", price=Money(10), max_supply=Capacity(5)),)
        event_id = ledger.create_event(
            make_draft(T0 + timedelta(days=1), tiers=tiers), ORGANIZER.identity
        )

        def attempt(_):
            try:
                ledger.reserve_capacity(reservation(event_id, tier_index=0))
            except SoldOutError:
                return "sold_out"
            except LedgerUnavailableError:
                # SQLite reports a locked table instead of waiting.
                return "busy"
            finally:
                connection.close()
            return "minted"

        with ThreadPoolExecutor(max_workers=4) as pool:
            outcomes = list(pool.map(attempt, range(12)))

        minted = outcomes.count("minted")
        assert 1 <= minted <= 5
        assert ledger.get_tier(event_id, TierIndex(0)).current_supply == minted
        assert orm.Ticket.objects.count() == minted
        if "busy" not in outcomes:
            assert minted == 5
