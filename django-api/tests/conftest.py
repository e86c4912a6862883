"""Pytest configuration and shared fixtures."""

from datetime import timedelta

import pytest
from rest_framework.test import APIClient

from tests.helpers import T0, FakeClock, Wallet, make_draft, wallet
from ticketing.services import IssuanceService, VerificationService
from ticketing.stores.memory_store import InMemoryLedgerStore


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def organizer() -> Wallet:
    return wallet(0xA11CE)


@pytest.fixture
def buyer() -> Wallet:
    return wallet(0xB0B)


@pytest.fixture
def stranger() -> Wallet:
    return wallet(0xC0FFEE)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(T0)


@pytest.fixture
def store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def issuance(store, clock) -> IssuanceService:
    return IssuanceService(store, clock=clock)


@pytest.fixture
def verification(store, clock) -> VerificationService:
    return VerificationService(store, clock=clock)


@pytest.fixture
def event(store, organizer, clock):
    """An active event starting one day from now with General and VIP tiers."""
    event_id = store.create_event(make_draft(clock.now + timedelta(days=1)), organizer.identity)
    return store.get_event(event_id)
