"""Django ORM models (persistence layer).

These records are the local system of record for the ledger. Domain logic
lives in domain/; stores convert between the two.
"""

from django.core.exceptions import ValidationError
from django.db import models

# A uint256 price is at most 78 digits; a ticket total multiplies it by up to 10.
AMOUNT_DIGITS = 80


class MinorUnitsField(models.Field):
    """Non-negative integer amount kept as its exact decimal digits.

    SQLite reads DecimalField values back through float, which drops digits
    past the fifteenth, so amounts are stored as text on every backend.
    Values are not numerically ordered in the database.
    """

    description = "Non-negative integer in token minor units"

    def __init__(self, *args, **kwargs):
        kwargs["max_length"] = AMOUNT_DIGITS
        super().__init__(*args, **kwargs)

    def deconstruct(self):
        name, path, args, kwargs = super().deconstruct()
        del kwargs["max_length"]
        return name, path, args, kwargs

    def get_internal_type(self) -> str:
        return "CharField"

    def from_db_value(self, value, expression, connection):
        return None if value is None else int(value)

    def to_python(self, value):
        if value is None or (isinstance(value, int) and not isinstance(value, bool)):
            return value
        text = str(value).strip()
        if not (text.isascii() and text.isdigit()) or len(text) > AMOUNT_DIGITS:
            raise ValidationError("Enter a non-negative whole number.", code="invalid")
        return int(text)

    def get_prep_value(self, value):
        value = super().get_prep_value(value)
        return None if value is None else str(self.to_python(value))


class PaymentTokenChoices(models.IntegerChoices):
    NATIVE = 0, "XFI"
    STABLE_A = 1, "XUSD"
    STABLE_B = 2, "MPX"


class EventStatusChoices(models.TextChoices):
    UPCOMING = "upcoming"
    LIVE = "live"
    ENDED = "ended"


class Event(models.Model):
    """Persistence model for events."""

    organizer = models.CharField(max_length=42, db_index=True)
    title = models.CharField(max_length=255)
    description = models.TextField()
    location = models.CharField(max_length=255)
    starts_at = models.DateTimeField()
    ends_at = models.DateTimeField()
    metadata_uri = models.TextField(blank=True, default="")
    fee_token = models.PositiveSmallIntegerField(
        choices=PaymentTokenChoices.choices, default=PaymentTokenChoices.NATIVE
    )
    active = models.BooleanField(default=True)
    tier_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(ends_at__gt=models.F("starts_at")),
                name="event_ends_after_start",
            ),
        ]

    def __str__(self) -> str:
        return self.title


class TicketTier(models.Model):
    """Persistence model for ticket tiers. ``current_supply`` only grows."""

    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="tiers")
    index = models.PositiveIntegerField()
    name = models.CharField(max_length=100)
    price = MinorUnitsField()
    max_supply = models.PositiveIntegerField()
    current_supply = models.PositiveIntegerField(default=0)
    token = models.PositiveSmallIntegerField(
        choices=PaymentTokenChoices.choices, default=PaymentTokenChoices.NATIVE
    )
    active = models.BooleanField(default=True)

    class Meta:
        ordering = ["event", "index"]
        constraints = [
            models.UniqueConstraint(fields=["event", "index"], name="tier_index_per_event"),
            models.CheckConstraint(
                condition=models.Q(current_supply__lte=models.F("max_supply")),
                name="tier_supply_within_max",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.event.title} - {self.name}"


class Ticket(models.Model):
    """Persistence model for minted tickets. Never deleted."""

    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="tickets")
    tier = models.ForeignKey(TicketTier, on_delete=models.PROTECT, related_name="tickets")
    owner = models.CharField(max_length=42, db_index=True)
    attendee_count = models.PositiveSmallIntegerField()
    total_amount_paid = MinorUnitsField()
    token = models.PositiveSmallIntegerField(choices=PaymentTokenChoices.choices)
    purchased_at = models.DateTimeField()
    event_status_at_purchase = models.CharField(
        max_length=16, choices=EventStatusChoices.choices
    )
    used = models.BooleanField(default=False)
    used_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        ordering = ["-purchased_at"]
        indexes = [
            models.Index(fields=["owner", "-purchased_at"], name="ticket_owner_recent_idx"),
        ]

    def __str__(self) -> str:
        return f"Ticket {self.pk} ({self.tier.name})"
