# apps/hostsapp/serializers.py
import pytz
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from apps.hostsapp.models import AvailabilityPattern, Host


class HostSerializer(serializers.ModelSerializer):
    calendar_connected = serializers.BooleanField(read_only=True)

    class Meta:
        model = Host
        fields = [
            "id",
            "name",
            "email",
            "timezone",
            "calendar_connected",
            "max_meetings_per_day",
            "max_meetings_per_week",
        ]


class AvailabilityPatternSerializer(serializers.ModelSerializer):
    """Serializer for weekly availability patterns"""

    day_name = serializers.CharField(source="get_day_of_week_display", read_only=True)

    class Meta:
        model = AvailabilityPattern
        fields = [
            "id",
            "host",
            "day_of_week",
            "day_name",
            "start_time",
            "end_time",
            "timezone",
            "is_active",
        ]
        read_only_fields = ["id"]

    def validate_timezone(self, value):
        if value not in pytz.all_timezones_set:
            raise serializers.ValidationError(_("Unknown timezone"))
        return value

    def validate(self, data):
        start_time = data.get("start_time", getattr(self.instance, "start_time", None))
        end_time = data.get("end_time", getattr(self.instance, "end_time", None))
        if start_time and end_time and start_time >= end_time:
            raise serializers.ValidationError(_("End time must be after start time"))
        return data
