from django.urls import path

from ticketing.handlers import (
    EventDeactivateView,
    EventDetailView,
    EventListView,
    OrganizerEventsView,
    OwnerTicketsView,
    PurchaseView,
    StaffVerifyView,
    TicketDetailView,
    TierCreateView,
    UseTicketView,
    VerifyView,
)

urlpatterns = [
    path("tickets/purchase", PurchaseView.as_view(), name="ticket-purchase"),
    path("tickets/verify", VerifyView.as_view(), name="ticket-verify"),
    path("tickets/staff-verify", StaffVerifyView.as_view(), name="ticket-staff-verify"),
    path("tickets/<int:ticket_id>", TicketDetailView.as_view(), name="ticket-detail"),
    path("tickets/<int:ticket_id>/use", UseTicketView.as_view(), name="ticket-use"),
    path("tickets/user/<str:address>", OwnerTicketsView.as_view(), name="owner-tickets"),
    path("events", EventListView.as_view(), name="event-list"),
    path("events/<str:event_id>", EventDetailView.as_view(), name="event-detail"),
    path("events/<str:event_id>/tiers", TierCreateView.as_view(), name="tier-create"),
    path(
        "events/<str:event_id>/deactivate",
        EventDeactivateView.as_view(),
        name="event-deactivate",
    ),
    path("organizer/events", OrganizerEventsView.as_view(), name="organizer-events"),
]
