# apps/bookingapp/services/round_robin_service.py
import logging
from datetime import datetime
from typing import Dict, List, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Max, Q
from django.utils import timezone

from algorithms.availability.time_windows import TimeRange
from algorithms.optimization.round_robin import (
    RoundRobinCandidate,
    RoundRobinSelector,
    distribution_stats,
    period_start,
)
from apps.bookingapp.models import Slot
from apps.bookingapp.services import availability_data
from apps.bookingapp.services.availability_service import AvailabilityService
from apps.eventsapp.models import RoundRobinState
from apps.hostsapp.models import AvailabilityPattern
from core.exceptions import InvalidDataException, NoEligibleHostException

logger = logging.getLogger(__name__)


class RoundRobinService:
    """
    Chooses which participating host owns a booking of a multi-host event.

    Only hosts the availability engine clears for the exact window are
    offered to the distribution strategy.
    """

    @staticmethod
    def _priority_mode() -> str:
        return getattr(settings, "ROUND_ROBIN_PRIORITY_MODE", "balanced")

    @classmethod
    def build_candidates(cls, event, now: datetime) -> List[RoundRobinCandidate]:
        """Participants of an event with their assignment history in the current period."""
        tz = AvailabilityService.event_timezone(event)
        since = period_start(event.round_robin_period, now, tz)
        participants = availability_data.get_participating_hosts(event.id, include_backups=True)

        candidates = []
        for participant in participants:
            assigned = Slot.objects.active().filter(event=event).filter(
                Q(assigned_host=participant.host)
                | Q(assigned_host__isnull=True, event__host=participant.host)
            )
            last_assigned_at = assigned.aggregate(last=Max("created_at"))["last"]
            if since is not None:
                assigned = assigned.filter(start_time__gte=since)

            candidates.append(
                RoundRobinCandidate(
                    host_id=participant.host.id,
                    role=participant.role,
                    priority=participant.priority,
                    assignment_count=assigned.count(),
                    last_assigned_at=last_assigned_at,
                    available_hours=cls._weekly_pattern_hours(participant.host.id),
                )
            )
        return candidates

    @staticmethod
    def _weekly_pattern_hours(host_id) -> float:
        total = 0.0
        for start, end in AvailabilityPattern.objects.filter(
            host_id=host_id, is_active=True
        ).values_list("start_time", "end_time"):
            delta = datetime.combine(datetime.min, end) - datetime.combine(datetime.min, start)
            total += max(delta.total_seconds(), 0) / 3600
        return round(total, 2)

    @classmethod
    def select_round_robin_host(
        cls,
        event_id,
        window_start: datetime,
        window_end: datetime,
        now: Optional[datetime] = None,
        record: bool = True,
    ):
        """
        Select the host for a new booking of ``event_id`` in the given window.

        Args:
            event_id: ID of the event
            window_start: Start of the window (aware)
            window_end: End of the window (aware)
            now: Reference instant (defaults to the current time)
            record: Whether to store the choice in the event's round-robin state

        Returns:
            ID of the chosen host

        Raises:
            NoEligibleHostException: if no participating host is cleared for the window
        """
        if window_end <= window_start:
            raise InvalidDataException("End time must be after start time")

        now = now or timezone.now()
        event = AvailabilityService.get_event(event_id)
        if not event.is_round_robin:
            raise InvalidDataException("Event is not a round robin event")

        classification = AvailabilityService.classify_window(event, window_start, window_end, now)
        cleared = classification.eligible_hosts if classification.is_available else []

        selector = RoundRobinSelector(event.round_robin_strategy, cls._priority_mode())
        chosen = selector.select(cls.build_candidates(event, now), cleared)

        if chosen is None:
            logger.info(
                f"No eligible round-robin host for event {event.id} at "
                f"{TimeRange(window_start, window_end)}: {classification.code.value}"
            )
            raise NoEligibleHostException(
                errors={
                    "code": classification.code.value,
                    "reason": classification.reason,
                }
            )

        if record:
            cls.record_assignment(event, chosen.host_id, now)
        return chosen.host_id

    @staticmethod
    def record_assignment(event, host_id, now: datetime) -> RoundRobinState:
        with transaction.atomic():
            state, _ = RoundRobinState.objects.select_for_update().get_or_create(event=event)
            state.last_assigned_host_id = host_id
            state.last_assigned_at = now
            state.assignment_count += 1
            state.save()
        return state

    @classmethod
    def get_round_robin_stats(cls, event_id, now: Optional[datetime] = None) -> Dict:
        """Assignment distribution of an event in its current counting period."""
        now = now or timezone.now()
        event = AvailabilityService.get_event(event_id)
        tz = AvailabilityService.event_timezone(event)
        since = period_start(event.round_robin_period, now, tz)

        stats = distribution_stats(cls.build_candidates(event, now))
        state = RoundRobinState.objects.filter(event=event).first()
        stats.update(
            {
                "event_id": str(event.id),
                "strategy": event.round_robin_strategy,
                "period": event.round_robin_period,
                "period_start": since.isoformat() if since else None,
                "priority_mode": cls._priority_mode(),
                "last_assigned_host": (
                    str(state.last_assigned_host_id)
                    if state and state.last_assigned_host_id
                    else None
                ),
            }
        )
        return stats
