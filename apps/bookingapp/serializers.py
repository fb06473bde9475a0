# apps/bookingapp/serializers.py
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers


class TroubleshootQuerySerializer(serializers.Serializer):
    date = serializers.DateField()


class AvailableTimesQuerySerializer(serializers.Serializer):
    start = serializers.DateField()
    end = serializers.DateField(required=False)

    def validate(self, data):
        data.setdefault("end", data["start"])
        if data["end"] < data["start"]:
            raise serializers.ValidationError(_("End date must not be before start date"))
        return data


class WindowSerializer(serializers.Serializer):
    """An exact candidate window"""

    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField()

    def validate(self, data):
        if data["end_time"] <= data["start_time"]:
            raise serializers.ValidationError(_("End time must be after start time"))
        return data
