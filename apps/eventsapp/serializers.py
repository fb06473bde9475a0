# apps/eventsapp/serializers.py
from rest_framework import serializers

from apps.eventsapp.models import Event, EventHost


class EventHostSerializer(serializers.ModelSerializer):
    host_name = serializers.CharField(source="host.name", read_only=True)

    class Meta:
        model = EventHost
        fields = ["id", "host", "host_name", "role", "priority"]


class EventSerializer(serializers.ModelSerializer):
    event_hosts = EventHostSerializer(many=True, read_only=True)

    class Meta:
        model = Event
        fields = [
            "id",
            "slug",
            "name",
            "host",
            "meeting_type",
            "duration_minutes",
            "min_notice_hours",
            "booking_window_days",
            "buffer_before",
            "buffer_after",
            "start_time_increment",
            "max_daily_bookings",
            "max_weekly_bookings",
            "max_attendees",
            "display_timezone",
            "round_robin_strategy",
            "round_robin_period",
            "ignore_busy_blocks",
            "is_active",
            "event_hosts",
        ]
