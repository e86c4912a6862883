"""Serializers for request parsing and for rendering domain models.

Field names follow the wire format the wallet and scanner clients already
speak (camelCase).
"""

from datetime import datetime, timezone

from rest_framework import serializers

from ticketing.domain import Capacity, EventDraft, Money, PaymentToken, TierSpec


# uint256 fits in 78 decimal digits.
MAX_AMOUNT_DIGITS = 78


class AmountField(serializers.Field):
    """Non-negative integer amount in minor units, rendered as a string."""

    default_error_messages = {
        "invalid": "Amount must be a non-negative integer in minor units.",
        "max_digits": "Amount must have at most {max_digits} digits.",
    }

    def to_internal_value(self, data):
        if isinstance(data, bool):
            self.fail("invalid")
        if isinstance(data, str) and data.isascii() and data.isdigit():
            digits = data.lstrip("0") or "0"
            if len(digits) > MAX_AMOUNT_DIGITS:
                self.fail("max_digits", max_digits=MAX_AMOUNT_DIGITS)
            data = int(digits)
        if not isinstance(data, int) or data < 0:
            self.fail("invalid")
        if data >= 10**MAX_AMOUNT_DIGITS:
            self.fail("max_digits", max_digits=MAX_AMOUNT_DIGITS)
        return data

    def to_representation(self, value):
        return str(value)


class TokenField(serializers.Field):
    default_error_messages = {
        "invalid": "Unknown payment token.",
    }

    def to_internal_value(self, data):
        try:
            return PaymentToken.parse(data)
        except ValueError:
            self.fail("invalid")

    def to_representation(self, value):
        return value.value


class UnixTimestampField(serializers.IntegerField):
    """Seconds since the epoch in, aware UTC datetime out."""

    def __init__(self, **kwargs):
        kwargs.setdefault("min_value", 0)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        seconds = super().to_internal_value(data)
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise serializers.ValidationError("Timestamp out of range.") from None

    def to_representation(self, value):
        return int(value.timestamp())


class SignedRequestSerializer(serializers.Serializer):
    organizerAddress = serializers.CharField(source="organizer")
    signature = serializers.CharField(trim_whitespace=False)
    message = serializers.CharField(trim_whitespace=False)


def tier_spec(data: dict) -> TierSpec:
    return TierSpec(
        name=data["name"],
        price=Money(data["price"]),
        max_supply=Capacity(data["max_supply"]),
        token=data["token"],
    )


# --- Requests -------------------------------------------------------------


class PurchaseRequestSerializer(serializers.Serializer):
    eventId = serializers.IntegerField(source="event_id", min_value=1)
    tierIndex = serializers.IntegerField(source="tier_index", min_value=0)
    attendeeCount = serializers.IntegerField(source="attendee_count", default=1)
    buyerAddress = serializers.CharField(source="buyer")
    signature = serializers.CharField(trim_whitespace=False)
    message = serializers.CharField(trim_whitespace=False)


class VerifyRequestSerializer(serializers.Serializer):
    qrData = serializers.CharField(source="payload", trim_whitespace=False)
    organizerAddress = serializers.CharField(source="organizer", required=False)


class StaffVerifyRequestSerializer(serializers.Serializer):
    qrData = serializers.CharField(source="payload", trim_whitespace=False)
    staffCode = serializers.CharField(source="staff_code")
    eventId = serializers.CharField(source="event_id")


class EventListQuerySerializer(serializers.Serializer):
    organizer = serializers.CharField(required=False)


class OrganizerEventsQuerySerializer(serializers.Serializer):
    address = serializers.CharField(source="organizer")


class UseTicketRequestSerializer(serializers.Serializer):
    organizerAddress = serializers.CharField(source="actor")
    signature = serializers.CharField(trim_whitespace=False)


class TierRequestSerializer(serializers.Serializer):
    name = serializers.CharField(allow_blank=True)
    price = AmountField()
    maxSupply = serializers.IntegerField(source="max_supply", min_value=1)
    tokenType = TokenField(source="token", default=PaymentToken.NATIVE)


class AddTierRequestSerializer(TierRequestSerializer, SignedRequestSerializer):
    pass


class CreateEventRequestSerializer(SignedRequestSerializer):
    title = serializers.CharField(allow_blank=True)
    description = serializers.CharField(allow_blank=True)
    location = serializers.CharField(allow_blank=True)
    startDate = UnixTimestampField(source="starts_at")
    endDate = UnixTimestampField(source="ends_at")
    metadataURI = serializers.CharField(source="metadata_uri", required=False, default="")
    feeTokenType = TokenField(source="fee_token", default=PaymentToken.NATIVE)
    feePaid = AmountField(source="fee_paid", default=0)
    tiers = TierRequestSerializer(many=True, allow_empty=True)

    def to_draft(self) -> EventDraft:
        data = self.validated_data
        return EventDraft(
            title=data["title"],
            description=data["description"],
            location=data["location"],
            starts_at=data["starts_at"],
            ends_at=data["ends_at"],
            metadata_uri=data["metadata_uri"],
            fee_token=data["fee_token"],
            tiers=tuple(tier_spec(tier) for tier in data["tiers"]),
        )


# --- Responses ------------------------------------------------------------


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model."""

    id = serializers.IntegerField(source="id.value")
    organizer = serializers.CharField(source="organizer.address")
    title = serializers.CharField()
    description = serializers.CharField()
    location = serializers.CharField()
    startDate = UnixTimestampField(source="starts_at")
    endDate = UnixTimestampField(source="ends_at")
    metadataURI = serializers.CharField(source="metadata_uri")
    active = serializers.BooleanField()
    tierCount = serializers.IntegerField(source="tier_count")


class ListedEventSerializer(serializers.Serializer):
    """Renders an event with its current schedule status."""

    def to_representation(self, instance):
        body = EventSerializer(instance.event).data
        body["status"] = instance.status.value
        return body


class TicketTierSerializer(serializers.Serializer):
    """Serializer for TicketTier domain model."""

    index = serializers.IntegerField(source="index.value")
    name = serializers.CharField()
    price = AmountField(source="price.amount")
    maxSupply = serializers.IntegerField(source="max_supply.value")
    currentSupply = serializers.IntegerField(source="current_supply")
    available = serializers.IntegerField()
    tokenType = TokenField(source="token")
    active = serializers.BooleanField()


class TicketSerializer(serializers.Serializer):
    """Serializer for Ticket domain model."""

    id = serializers.IntegerField(source="id.value")
    eventId = serializers.IntegerField(source="event_id.value")
    tierIndex = serializers.IntegerField(source="tier_index.value")
    owner = serializers.CharField(source="owner.address")
    attendeeCount = serializers.IntegerField(source="attendee_count.value")
    totalAmountPaid = AmountField(source="total_amount_paid.amount")
    tokenType = TokenField(source="token")
    purchaseTimestamp = UnixTimestampField(source="purchased_at")
    used = serializers.BooleanField()
    eventStatusAtPurchase = serializers.CharField(source="event_status_at_purchase.value")


class PurchaseReceiptSerializer(serializers.Serializer):
    ticketId = serializers.IntegerField(source="ticket_id.value")
    totalPrice = AmountField(source="total_price.amount")
    qrData = serializers.CharField(source="credential")
    ticket = TicketSerializer()


class VerificationResultSerializer(serializers.Serializer):
    ticketId = serializers.IntegerField(source="ticket.id.value")
    valid = serializers.BooleanField()
    reason = serializers.CharField()
    timestamp = serializers.DateTimeField(source="verified_at")
    staffVerified = serializers.BooleanField(source="staff_verified")
    degradedDecode = serializers.BooleanField(source="degraded_decode")
    ticket = TicketSerializer()
    event = EventSerializer()
    tier = TicketTierSerializer()


class EntryReceiptSerializer(serializers.Serializer):
    ticketId = serializers.IntegerField(source="ticket_id.value")
    usedBy = serializers.CharField(source="used_by.address")
    usedAt = serializers.DateTimeField(source="used_at")


class OwnedTicketSerializer(serializers.Serializer):
    ticket = TicketSerializer()
    event = EventSerializer()
    valid = serializers.BooleanField(source="validity.valid")
    reason = serializers.CharField(source="validity.reason")
    qrData = serializers.CharField(source="credential")


class TicketDetailSerializer(serializers.Serializer):
    ticket = TicketSerializer()
    event = EventSerializer()
    tier = TicketTierSerializer()
    valid = serializers.BooleanField(source="validity.valid")
    reason = serializers.CharField(source="validity.reason")
    qrData = serializers.CharField(source="credential")
