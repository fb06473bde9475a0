# apps/hostsapp/views.py
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import permissions, viewsets
from rest_framework.filters import OrderingFilter

from apps.hostsapp.filters import AvailabilityPatternFilter
from apps.hostsapp.models import AvailabilityPattern
from apps.hostsapp.serializers import AvailabilityPatternSerializer


class AvailabilityPatternViewSet(viewsets.ModelViewSet):
    """
    API endpoint for managing weekly availability patterns.

    Staff only. Patterns can be filtered by host and day of week.
    """

    queryset = AvailabilityPattern.objects.select_related("host")
    serializer_class = AvailabilityPatternSerializer
    permission_classes = [permissions.IsAdminUser]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = AvailabilityPatternFilter
    ordering_fields = ["day_of_week", "start_time"]
    ordering = ["day_of_week", "start_time"]
