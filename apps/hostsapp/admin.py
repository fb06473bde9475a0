# apps/hostsapp/admin.py
from django.contrib import admin

from apps.hostsapp.models import AvailabilityPattern, BusyBlock, CompanyHoliday, Host


class AvailabilityPatternInline(admin.TabularInline):
    """Inline admin for weekly availability"""

    model = AvailabilityPattern
    extra = 0


@admin.register(Host)
class HostAdmin(admin.ModelAdmin):
    list_display = ["name", "email", "timezone", "max_meetings_per_day", "max_meetings_per_week"]
    search_fields = ["name", "email"]
    readonly_fields = ["created_at", "updated_at"]
    inlines = [AvailabilityPatternInline]


@admin.register(AvailabilityPattern)
class AvailabilityPatternAdmin(admin.ModelAdmin):
    list_display = ["host", "day_of_week", "start_time", "end_time", "timezone", "is_active"]
    list_filter = ["day_of_week", "is_active"]
    search_fields = ["host__name", "host__email"]


@admin.register(BusyBlock)
class BusyBlockAdmin(admin.ModelAdmin):
    list_display = ["host", "start_time", "end_time", "source", "synced_at"]
    list_filter = ["source"]
    search_fields = ["host__name", "external_event_id"]
    date_hierarchy = "start_time"


@admin.register(CompanyHoliday)
class CompanyHolidayAdmin(admin.ModelAdmin):
    list_display = ["date", "name"]
