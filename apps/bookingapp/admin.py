# apps/bookingapp/admin.py
from django.contrib import admin

from apps.bookingapp.models import Booking, Slot


class BookingInline(admin.TabularInline):
    """Inline admin for bookings of a slot"""

    model = Booking
    extra = 0
    readonly_fields = ["created_at"]


@admin.register(Slot)
class SlotAdmin(admin.ModelAdmin):
    """Admin configuration for slots"""

    list_display = ["event", "start_time", "end_time", "assigned_host", "is_cancelled"]
    list_filter = ["is_cancelled", "event"]
    search_fields = ["event__name", "assigned_host__name"]
    readonly_fields = ["created_at", "updated_at"]
    date_hierarchy = "start_time"
    inlines = [BookingInline]


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ["attendee_name", "attendee_email", "slot", "assigned_host", "cancelled_at"]
    search_fields = ["attendee_name", "attendee_email"]
    readonly_fields = ["created_at"]
