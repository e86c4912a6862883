from django.contrib import admin

from ticketing.models import Event, Ticket, TicketTier


class TicketTierInline(admin.TabularInline):
    model = TicketTier
    extra = 0
    readonly_fields = ["index", "current_supply"]


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["title", "organizer", "location", "starts_at", "active"]
    list_filter = ["active"]
    search_fields = ["title", "location", "organizer"]
    readonly_fields = ["organizer", "tier_count", "created_at"]
    inlines = [TicketTierInline]


@admin.register(TicketTier)
class TicketTierAdmin(admin.ModelAdmin):
    list_display = ["name", "event", "index", "price", "current_supply", "max_supply", "active"]
    list_filter = ["event", "active"]
    readonly_fields = ["event", "index", "current_supply"]


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ["id", "event", "tier", "owner", "attendee_count", "used", "purchased_at"]
    list_filter = ["used", "event"]
    search_fields = ["owner"]
    readonly_fields = [field.name for field in Ticket._meta.fields]
