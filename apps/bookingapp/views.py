# apps/bookingapp/views.py
import logging

from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.bookingapp.serializers import (
    AvailableTimesQuerySerializer,
    TroubleshootQuerySerializer,
    WindowSerializer,
)
from apps.bookingapp.services.availability_service import AvailabilityService
from apps.bookingapp.services.round_robin_service import RoundRobinService
from apps.eventsapp.serializers import EventSerializer

logger = logging.getLogger(__name__)


class TroubleshootView(APIView):
    """
    Explain why every candidate window of an event on a date is or isn't bookable.

    Staff only. Query parameters: ``date`` (YYYY-MM-DD, event-local).
    """

    permission_classes = [permissions.IsAdminUser]

    def get(self, request, event_id):
        query = TroubleshootQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        event = AvailabilityService.get_event(event_id)
        result = AvailabilityService.evaluate(event.id, query.validated_data["date"])

        data = result.to_dict()
        data["event"] = EventSerializer(event).data
        return Response(data)


class AvailableTimesView(APIView):
    """
    Public listing of bookable windows between two dates.

    Query parameters: ``start`` and optional ``end`` (YYYY-MM-DD, inclusive).
    """

    permission_classes = [permissions.AllowAny]

    def get(self, request, event_id):
        query = AvailableTimesQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        event = AvailabilityService.get_event(event_id)
        slots = AvailabilityService.list_available_slots(
            event.id,
            query.validated_data["start"],
            query.validated_data["end"],
        )
        return Response(
            {
                "event_id": str(event.id),
                "timezone": AvailabilityService.event_timezone(event),
                "slots": slots,
            }
        )


class RoundRobinStatsView(APIView):
    """Assignment distribution of a round-robin event (staff only)"""

    permission_classes = [permissions.IsAdminUser]

    def get(self, request, event_id):
        return Response(RoundRobinService.get_round_robin_stats(event_id))


class RoundRobinSelectView(APIView):
    """Pick the host for a window of a round-robin event (staff only)"""

    permission_classes = [permissions.IsAdminUser]

    def post(self, request, event_id):
        window = WindowSerializer(data=request.data)
        window.is_valid(raise_exception=True)

        host_id = RoundRobinService.select_round_robin_host(
            event_id,
            window.validated_data["start_time"],
            window.validated_data["end_time"],
        )
        return Response({"host_id": str(host_id)}, status=status.HTTP_200_OK)
