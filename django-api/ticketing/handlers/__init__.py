from ticketing.handlers.views import (
    EventDeactivateView,
    EventDetailView,
    EventListView,
    HealthView,
    OrganizerEventsView,
    OwnerTicketsView,
    PurchaseView,
    StaffVerifyView,
    TicketDetailView,
    TierCreateView,
    UseTicketView,
    VerifyView,
)

__all__ = [
    "EventDeactivateView",
    "EventDetailView",
    "EventListView",
    "HealthView",
    "OrganizerEventsView",
    "OwnerTicketsView",
    "PurchaseView",
    "StaffVerifyView",
    "TicketDetailView",
    "TierCreateView",
    "UseTicketView",
    "VerifyView",
]
