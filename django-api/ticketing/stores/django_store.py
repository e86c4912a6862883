"""Django ORM implementation of the LedgerStore."""

import logging
from functools import wraps

from django.db import InterfaceError, OperationalError, transaction
from django.db.models import F
from django.utils import timezone

from ticketing import models as orm
from ticketing.domain import (
    AttendeeCount,
    Capacity,
    Event,
    EventDraft,
    EventId,
    EventStatus,
    Identity,
    Money,
    PaymentToken,
    Reservation,
    Ticket,
    TicketId,
    TicketTier,
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
from ticketing.stores.interfaces import LedgerStore

logger = logging.getLogger(__name__)


def ledger_call(func):
    """Map connection failures and timeouts to LedgerUnavailableError."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (OperationalError, InterfaceError) as exc:
            logger.error("Ledger call %s failed: %s", func.__name__, exc)
            raise LedgerUnavailableError() from exc

    return wrapper


class DjangoLedgerStore(LedgerStore):
    """Relational ledger using the Django ORM.

    ``reserve_capacity`` relies on a single conditional UPDATE, which the
    database applies atomically per row, so no explicit locking is needed.
    """

    @ledger_call
    def get_event(self, event_id: EventId) -> Event | None:
        record = orm.Event.objects.filter(pk=event_id.value).first()
        return _to_event(record) if record else None

    @ledger_call
    def list_events(self, organizer: Identity | None = None) -> list[Event]:
        records = orm.Event.objects.order_by("-created_at", "-pk")
        if organizer is not None:
            records = records.filter(organizer__iexact=organizer.address)
        return [_to_event(record) for record in records]

    @ledger_call
    def get_tier(self, event_id: EventId, tier_index: TierIndex) -> TicketTier | None:
        record = orm.TicketTier.objects.filter(
            event_id=event_id.value, index=tier_index.value
        ).first()
        return _to_tier(record) if record else None

    @ledger_call
    def list_tiers(self, event_id: EventId) -> list[TicketTier]:
        records = orm.TicketTier.objects.filter(event_id=event_id.value).order_by("index")
        return [_to_tier(record) for record in records]

    @ledger_call
    def reserve_capacity(self, reservation: Reservation) -> TicketId:
        count = reservation.attendee_count.value
        tiers = orm.TicketTier.objects.filter(
            event_id=reservation.event_id.value,
            index=reservation.tier_index.value,
        )
        with transaction.atomic():
            updated = tiers.filter(
                active=True,
                current_supply__lte=F("max_supply") - count,
            ).update(current_supply=F("current_supply") + count)
            if not updated:
                tier = tiers.first()
                if tier is None or not tier.active:
                    raise TierNotFoundError(
                        reservation.event_id.value, reservation.tier_index.value
                    )
                raise SoldOutError(reservation.event_id.value, reservation.tier_index.value)

            ticket = orm.Ticket.objects.create(
                event_id=reservation.event_id.value,
                tier=tiers.get(),
                owner=reservation.purchaser.address,
                attendee_count=count,
                total_amount_paid=reservation.total_amount_paid.amount,
                token=reservation.token.ordinal,
                purchased_at=reservation.purchased_at,
                event_status_at_purchase=reservation.event_status.value,
            )
        return TicketId(ticket.pk)

    @ledger_call
    def get_ticket(self, ticket_id: TicketId) -> Ticket | None:
        record = orm.Ticket.objects.select_related("tier").filter(pk=ticket_id.value).first()
        return _to_ticket(record) if record else None

    @ledger_call
    def list_tickets_for_owner(self, owner: Identity) -> list[Ticket]:
        records = orm.Ticket.objects.select_related("tier").filter(
            owner__iexact=owner.address
        )
        return [_to_ticket(record) for record in records]

    @ledger_call
    def mark_used(self, ticket_id: TicketId) -> bool:
        updated = orm.Ticket.objects.filter(pk=ticket_id.value, used=False).update(
            used=True, used_at=timezone.now()
        )
        if updated:
            return True
        if not orm.Ticket.objects.filter(pk=ticket_id.value).exists():
            raise TicketNotFoundError(ticket_id.value)
        return False

    @ledger_call
    def create_event(self, draft: EventDraft, organizer: Identity) -> EventId:
        with transaction.atomic():
            record = orm.Event.objects.create(
                organizer=organizer.address,
                title=draft.title,
                description=draft.description,
                location=draft.location,
                starts_at=draft.starts_at,
                ends_at=draft.ends_at,
                metadata_uri=draft.metadata_uri,
                fee_token=draft.fee_token.ordinal,
                tier_count=len(draft.tiers),
            )
            orm.TicketTier.objects.bulk_create(
                _new_tier(record, index, spec) for index, spec in enumerate(draft.tiers)
            )
        return EventId(record.pk)

    @ledger_call
    def add_tier(self, event_id: EventId, spec: TierSpec) -> TierIndex:
        with transaction.atomic():
            record = orm.Event.objects.select_for_update().filter(pk=event_id.value).first()
            if record is None:
                raise EventNotFoundError(event_id.value)
            index = record.tier_count
            _new_tier(record, index, spec).save()
            record.tier_count = index + 1
            record.save(update_fields=["tier_count"])
        return TierIndex(index)

    @ledger_call
    def set_event_active(self, event_id: EventId, active: bool) -> None:
        if not orm.Event.objects.filter(pk=event_id.value).update(active=active):
            raise EventNotFoundError(event_id.value)


def _new_tier(event: orm.Event, index: int, spec: TierSpec) -> orm.TicketTier:
    return orm.TicketTier(
        event=event,
        index=index,
        name=spec.name,
        price=spec.price.amount,
        max_supply=spec.max_supply.value,
        token=spec.token.ordinal,
    )


def _to_event(record: orm.Event) -> Event:
    return Event(
        id=EventId(record.pk),
        organizer=Identity(record.organizer),
        title=record.title,
        description=record.description,
        location=record.location,
        starts_at=record.starts_at,
        ends_at=record.ends_at,
        metadata_uri=record.metadata_uri,
        active=record.active,
        tier_count=record.tier_count,
    )


def _to_tier(record: orm.TicketTier) -> TicketTier:
    return TicketTier(
        event_id=EventId(record.event_id),
        index=TierIndex(record.index),
        name=record.name,
        price=Money(record.price),
        max_supply=Capacity(record.max_supply),
        current_supply=record.current_supply,
        token=PaymentToken.parse(record.token),
        active=record.active,
    )


def _to_ticket(record: orm.Ticket) -> Ticket:
    return Ticket(
        id=TicketId(record.pk),
        event_id=EventId(record.event_id),
        tier_index=TierIndex(record.tier.index),
        owner=Identity(record.owner),
        attendee_count=AttendeeCount(record.attendee_count),
        total_amount_paid=Money(record.total_amount_paid),
        token=PaymentToken.parse(record.token),
        purchased_at=record.purchased_at,
        used=record.used,
        event_status_at_purchase=EventStatus(record.event_status_at_purchase),
    )
