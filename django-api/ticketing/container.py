"""Builds services from Django settings."""

from functools import cache

from django.conf import settings
from django.utils import timezone

from ticketing.domain import Money
from ticketing.services import IssuanceService, VerificationService
from ticketing.stores.django_store import DjangoLedgerStore
from ticketing.stores.interfaces import LedgerStore
from ticketing.stores.memory_store import InMemoryLedgerStore

LEDGER_BACKENDS = {
    "django": DjangoLedgerStore,
    "memory": InMemoryLedgerStore,
}


@cache
def ledger_store() -> LedgerStore:
    backend = settings.TICKETING_LEDGER_BACKEND
    try:
        return LEDGER_BACKENDS[backend]()
    except KeyError:
        raise ValueError(f"Unknown ledger backend: {backend!r}") from None


def issuance_service() -> IssuanceService:
    return IssuanceService(
        ledger_store(),
        clock=timezone.now,
        listing_fee=Money(settings.TICKETING_LISTING_FEE),
    )


def verification_service() -> VerificationService:
    return VerificationService(ledger_store(), clock=timezone.now)
