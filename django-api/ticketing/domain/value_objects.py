"""Domain primitives that enforce validity at creation time."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Self

MIN_ATTENDEES = 1
MAX_ATTENDEES = 10

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def _require_int(value: object, label: str) -> int:
    # bool is an int subclass; a True attendee count is a bug, not a 1.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{label} must be an integer")
    return value


@dataclass(frozen=True)
class EventId:
    """Ledger-assigned identifier for an Event."""

    value: int

    def __post_init__(self) -> None:
        if _require_int(self.value, "EventId") < 1:
            raise ValueError("EventId must be positive")

    @classmethod
    def from_string(cls, value: str) -> Self:
        if not (str(value).isascii() and str(value).strip().isdigit()):
            raise ValueError(f"Invalid event id: {value!r}")
        return cls(value=int(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class TicketId:
    """Ledger-assigned identifier for a Ticket."""

    value: int

    def __post_init__(self) -> None:
        if _require_int(self.value, "TicketId") < 1:
            raise ValueError("TicketId must be positive")

    @classmethod
    def from_string(cls, value: str) -> Self:
        if not (str(value).isascii() and str(value).strip().isdigit()):
            raise ValueError(f"Invalid ticket id: {value!r}")
        return cls(value=int(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class TierIndex:
    """Zero-based position of a tier within its event."""

    value: int

    def __post_init__(self) -> None:
        if _require_int(self.value, "TierIndex") < 0:
            raise ValueError("TierIndex cannot be negative")


@dataclass(frozen=True)
class Identity:
    """An account address. Comparison ignores hex case."""

    address: str

    def __post_init__(self) -> None:
        if not isinstance(self.address, str) or not _ADDRESS_RE.match(self.address):
            raise ValueError(f"Invalid account address: {self.address!r}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Identity):
            return NotImplemented
        return self.address.lower() == other.address.lower()

    def __hash__(self) -> int:
        return hash(self.address.lower())

    def __str__(self) -> str:
        return self.address


@dataclass(frozen=True)
class Money:
    """Fixed-point amount in the token's minor units."""

    amount: int

    def __post_init__(self) -> None:
        if _require_int(self.amount, "Money amount") < 0:
            raise ValueError("Money amount cannot be negative")

    def times(self, count: int) -> "Money":
        return Money(amount=self.amount * _require_int(count, "Multiplier"))

    def __str__(self) -> str:
        return str(self.amount)


@dataclass(frozen=True)
class Capacity:
    """Positive integer representing a tier's maximum supply."""

    value: int

    def __post_init__(self) -> None:
        if _require_int(self.value, "Capacity") < 1:
            raise ValueError("Capacity must be positive")


@dataclass(frozen=True)
class AttendeeCount:
    """Number of people admitted by one ticket."""

    value: int

    def __post_init__(self) -> None:
        value = _require_int(self.value, "Attendee count")
        if not MIN_ATTENDEES <= value <= MAX_ATTENDEES:
            raise ValueError(
                f"Attendee count must be between {MIN_ATTENDEES} and {MAX_ATTENDEES}"
            )


class EventStatus(Enum):
    """Where wall-clock time sits relative to an event's schedule."""

    UPCOMING = "upcoming"
    LIVE = "live"
    ENDED = "ended"


class PaymentToken(Enum):
    """Tokens a tier can be priced in. Ordinals match the ledger's encoding."""

    NATIVE = "XFI"
    STABLE_A = "XUSD"
    STABLE_B = "MPX"

    @property
    def ordinal(self) -> int:
        return list(PaymentToken).index(self)

    @classmethod
    def parse(cls, raw: object) -> "PaymentToken":
        """Accept a token value ("XFI"), member name ("NATIVE") or ordinal (0)."""
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, int) and not isinstance(raw, bool):
            members = list(cls)
            if 0 <= raw < len(members):
                return members[raw]
        if isinstance(raw, str):
            for member in cls:
                if raw.upper() in (member.value, member.name):
                    return member
        raise ValueError(f"Unknown payment token: {raw!r}")
