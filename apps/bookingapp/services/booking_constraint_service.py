# apps/bookingapp/services/booking_constraint_service.py
import logging
from datetime import datetime
from typing import List, Optional

from django.db import transaction

from algorithms.availability.constraint_evaluator import SlotClassification
from apps.bookingapp.services import availability_data
from apps.bookingapp.services.availability_service import AvailabilityService
from apps.eventsapp.models import Event
from apps.hostsapp.models import Host
from core.exceptions import SchedulingConflictException

logger = logging.getLogger(__name__)


class BookingConstraintService:
    """
    Write-time re-validation of a booking window.

    Two attendees can see the same window as available; callers run this
    inside the transaction that writes the booking, right before the write.
    """

    @classmethod
    def ensure_window_bookable(
        cls,
        event_id,
        start: datetime,
        end: datetime,
        now: Optional[datetime] = None,
    ) -> SlotClassification:
        """
        Re-classify a window and raise if it is no longer bookable.

        Inside a transaction the event row and the rows of its participating
        hosts stay locked until the caller commits, so concurrent bookings of
        the event (and of other events sharing a host's caps) are serialised.

        Returns:
            The AVAILABLE classification, with the hosts cleared for the window

        Raises:
            SchedulingConflictException: carrying the blocking reason code
        """
        event = AvailabilityService.get_event(event_id)

        if transaction.get_connection().in_atomic_block:
            cls._lock_inputs(event)

        classification = AvailabilityService.classify_window(event, start, end, now)
        if not classification.is_available:
            logger.info(
                f"Rejected booking window {start.isoformat()} for event {event.id}: "
                f"{classification.code.value}"
            )
            raise SchedulingConflictException(
                message=classification.reason,
                errors=classification.to_dict(),
            )
        return classification

    @staticmethod
    def _lock_inputs(event) -> List:
        """
        Lock the event and its participating hosts, hosts in id order.

        Returns:
            IDs of the locked hosts
        """
        list(Event.objects.select_for_update().filter(pk=event.pk).values_list("id", flat=True))

        host_ids = sorted(
            {p.host.pk for p in availability_data.get_participating_hosts(event.id)}
        )
        return list(
            Host.objects.select_for_update()
            .filter(id__in=host_ids)
            .order_by("id")
            .values_list("id", flat=True)
        )
