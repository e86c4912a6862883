"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Leave domain error mapping to handlers.errors.exception_handler
- Never contain business logic
- Never expose internal error details

An invalid ticket is a normal outcome: verification answers 200 with
``valid: false``. Only malformed input, missing entities and ledger
outages are errors.
"""

from datetime import datetime, timezone

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ticketing import container
from ticketing.handlers.serializers import (
    AddTierRequestSerializer,
    CreateEventRequestSerializer,
    EntryReceiptSerializer,
    EventListQuerySerializer,
    EventSerializer,
    ListedEventSerializer,
    OrganizerEventsQuerySerializer,
    OwnedTicketSerializer,
    PurchaseReceiptSerializer,
    PurchaseRequestSerializer,
    SignedRequestSerializer,
    StaffVerifyRequestSerializer,
    TicketDetailSerializer,
    TicketTierSerializer,
    UseTicketRequestSerializer,
    VerificationResultSerializer,
    VerifyRequestSerializer,
    tier_spec,
)


class HealthView(APIView):
    """Handler for GET /health"""

    def get(self, request: Request) -> Response:
        return Response(
            {
                "status": "healthy",
                "service": "ticketing",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )


class PurchaseView(APIView):
    """Handler for POST /api/tickets/purchase"""

    def post(self, request: Request) -> Response:
        serializer = PurchaseRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        receipt = container.issuance_service().purchase(**serializer.validated_data)
        return Response(PurchaseReceiptSerializer(receipt).data, status=status.HTTP_201_CREATED)


class VerifyView(APIView):
    """Handler for POST /api/tickets/verify"""

    def post(self, request: Request) -> Response:
        serializer = VerifyRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = container.verification_service().verify(
            data["payload"], organizer=data.get("organizer")
        )
        return Response(VerificationResultSerializer(result).data)


class StaffVerifyView(APIView):
    """Handler for POST /api/tickets/staff-verify"""

    def post(self, request: Request) -> Response:
        serializer = StaffVerifyRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = container.verification_service().staff_verify(**serializer.validated_data)
        return Response(VerificationResultSerializer(result).data)


class UseTicketView(APIView):
    """Handler for POST /api/tickets/{ticket_id}/use"""

    def post(self, request: Request, ticket_id: int) -> Response:
        serializer = UseTicketRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        receipt = container.verification_service().mark_entry_used(
            ticket_id, **serializer.validated_data
        )
        return Response(EntryReceiptSerializer(receipt).data)


class TicketDetailView(APIView):
    """Handler for GET /api/tickets/{ticket_id}"""

    def get(self, request: Request, ticket_id: int) -> Response:
        detail = container.verification_service().ticket_detail(ticket_id)
        return Response(TicketDetailSerializer(detail).data)


class OwnerTicketsView(APIView):
    """Handler for GET /api/tickets/user/{address}"""

    def get(self, request: Request, address: str) -> Response:
        owned = container.verification_service().tickets_for_owner(address)
        return Response(
            {
                "tickets": OwnedTicketSerializer(owned, many=True).data,
                "totalTickets": len(owned),
                "userAddress": address,
            }
        )


class EventListView(APIView):
    """Handler for GET and POST /api/events"""

    def get(self, request: Request) -> Response:
        serializer = EventListQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        listings = container.issuance_service().list_events(
            serializer.validated_data.get("organizer")
        )
        return Response(ListedEventSerializer(listings, many=True).data)

    def post(self, request: Request) -> Response:
        serializer = CreateEventRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        service = container.issuance_service()
        event = service.create_event(
            serializer.to_draft(),
            organizer=data["organizer"],
            signature=data["signature"],
            message=data["message"],
            fee_paid=data["fee_paid"],
        )
        return Response(_event_body(service, event), status=status.HTTP_201_CREATED)


class OrganizerEventsView(APIView):
    """Handler for GET /api/organizer/events?address={address}"""

    def get(self, request: Request) -> Response:
        serializer = OrganizerEventsQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        listings = container.issuance_service().list_events(
            serializer.validated_data["organizer"]
        )
        return Response(ListedEventSerializer(listings, many=True).data)


class EventDetailView(APIView):
    """Handler for GET /api/events/{event_id}"""

    def get(self, request: Request, event_id: str) -> Response:
        service = container.issuance_service()
        return Response(_event_body(service, service.get_event(event_id)))


class TierCreateView(APIView):
    """Handler for POST /api/events/{event_id}/tiers"""

    def post(self, request: Request, event_id: str) -> Response:
        serializer = AddTierRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        service = container.issuance_service()
        index = service.add_tier(
            event_id,
            tier_spec(data),
            organizer=data["organizer"],
            signature=data["signature"],
            message=data["message"],
        )
        tier = service.list_tiers(event_id)[index.value]
        return Response(TicketTierSerializer(tier).data, status=status.HTTP_201_CREATED)


class EventDeactivateView(APIView):
    """Handler for POST /api/events/{event_id}/deactivate"""

    def post(self, request: Request, event_id: str) -> Response:
        serializer = SignedRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        event = container.issuance_service().deactivate_event(
            event_id, **serializer.validated_data
        )
        return Response(EventSerializer(event).data)


def _event_body(service, event) -> dict:
    body = EventSerializer(event).data
    body["status"] = service.status_of(event).value
    body["tiers"] = TicketTierSerializer(service.list_tiers(event.id.value), many=True).data
    return body
