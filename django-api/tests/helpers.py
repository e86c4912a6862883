"""Test doubles and builders shared across test modules."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from eth_account import Account
from eth_account.messages import encode_defunct

from ticketing.domain import Capacity, EventDraft, Identity, Money, PaymentToken, TierSpec
from ticketing.signatures import purchase_message

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


@dataclass(frozen=True)
class Wallet:
    """A deterministic signing key."""

    private_key: str

    @property
    def address(self) -> str:
        return Account.from_key(self.private_key).address

    @property
    def identity(self) -> Identity:
        return Identity(self.address)

    def sign(self, message: str) -> str:
        signed = Account.sign_message(encode_defunct(text=message), private_key=self.private_key)
        return "0x" + bytes(signed.signature).hex()


def wallet(seed: int) -> Wallet:
    return Wallet(private_key="0x" + f"{seed:064x}")


class FakeClock:
    """A clock tests can move."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def make_draft(
    starts_at: datetime,
    hours: int = 4,
    tiers: tuple[TierSpec, ...] | None = None,
) -> EventDraft:
    if tiers is None:
        tiers = (
            TierSpec(name="General", price=Money(100), max_supply=Capacity(50)),
            TierSpec(
                name="VIP",
                price=Money(500),
                max_supply=Capacity(5),
                token=PaymentToken.STABLE_A,
            ),
        )
    return EventDraft(
        title="Launch Night",
        description="Opening party",
        location="Lisbon",
        starts_at=starts_at,
        ends_at=starts_at + timedelta(hours=hours),
        tiers=tiers,
    )


def signed_purchase(buyer: Wallet, event_id: int, tier_index: int, now: datetime) -> dict:
    """Buyer-side arguments for ``IssuanceService.purchase``."""
    message = purchase_message(event_id, tier_index, buyer.identity, int(now.timestamp() * 1000))
    return {"buyer": buyer.address, "signature": buyer.sign(message), "message": message}
