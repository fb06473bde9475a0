# apps/hostsapp/filters.py
from django_filters import rest_framework as filters

from apps.hostsapp.models import AvailabilityPattern


class AvailabilityPatternFilter(filters.FilterSet):
    """Filter patterns by host and weekday"""

    host = filters.UUIDFilter(field_name="host__id")
    day_of_week = filters.NumberFilter(field_name="day_of_week")
    is_active = filters.BooleanFilter(field_name="is_active")

    class Meta:
        model = AvailabilityPattern
        fields = ["host", "day_of_week", "is_active"]
