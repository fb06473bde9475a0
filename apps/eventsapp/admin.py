# apps/eventsapp/admin.py
from django.contrib import admin

from apps.eventsapp.models import Event, EventHost, RoundRobinState


class EventHostInline(admin.TabularInline):
    """Inline admin for event participants"""

    model = EventHost
    extra = 0


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = [
        "name",
        "slug",
        "meeting_type",
        "host",
        "duration_minutes",
        "display_timezone",
        "is_active",
    ]
    list_filter = ["meeting_type", "is_active"]
    search_fields = ["name", "slug", "host__name"]
    prepopulated_fields = {"slug": ("name",)}
    inlines = [EventHostInline]


@admin.register(RoundRobinState)
class RoundRobinStateAdmin(admin.ModelAdmin):
    list_display = ["event", "last_assigned_host", "last_assigned_at", "assignment_count"]
    readonly_fields = ["last_assigned_host", "last_assigned_at", "assignment_count"]
