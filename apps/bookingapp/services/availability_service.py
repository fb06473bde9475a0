# apps/bookingapp/services/availability_service.py
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional

from django.conf import settings
from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.db import DatabaseError, connections, transaction
from django.utils import timezone

from algorithms.availability.constraint_evaluator import (
    ConstraintEvaluator,
    EvaluationResult,
    SlotClassification,
)
from algorithms.availability.snapshot import AvailabilitySnapshot, EventRules, HostSnapshot
from algorithms.availability.time_windows import (
    TimeRange,
    get_timezone,
    local_day_range,
    start_of_local_day,
    to_local,
    week_start,
)
from apps.bookingapp.services import availability_data
from apps.eventsapp.models import Event
from apps.hostsapp.models import CompanyHoliday
from core.exceptions import (
    AvailabilityEvaluationException,
    InvalidDataException,
    ResourceNotFoundException,
)

logger = logging.getLogger(__name__)

# Longest date range a single listing request may cover
MAX_LISTING_DAYS = 62


class AvailabilityService:
    """
    Service for evaluating and listing event availability.

    Loads every input of one evaluation (patterns, busy blocks, existing
    slots, meeting counts) into an ``AvailabilitySnapshot`` and hands it to
    the pure ``ConstraintEvaluator``.
    """

    CACHE_PREFIX = "availability"

    @staticmethod
    def get_event(event_id) -> Event:
        try:
            return Event.objects.select_related("host").get(id=event_id)
        except (Event.DoesNotExist, ValueError, ValidationError):
            raise ResourceNotFoundException(f"Event {event_id} not found")

    @staticmethod
    def event_timezone(event: Event) -> str:
        return event.display_timezone or getattr(
            settings, "DEFAULT_EVENT_TIMEZONE", "America/New_York"
        )

    # ------------------------------------------------------------------
    # Snapshot construction
    # ------------------------------------------------------------------

    @classmethod
    def build_snapshot(cls, event: Event, target_date: date, now: datetime) -> AvailabilitySnapshot:
        """Fetch everything needed to evaluate ``event`` on ``target_date``."""
        tz = cls.event_timezone(event)
        day = local_day_range(target_date, tz)
        first_day_of_week = week_start(target_date)
        week = TimeRange(
            start_of_local_day(first_day_of_week, tz),
            start_of_local_day(first_day_of_week + timedelta(days=7), tz),
        )
        # Windows near midnight and buffers can reach into neighbouring days
        fetch_range = TimeRange(day.start - timedelta(days=1), day.end + timedelta(days=1))

        participants = availability_data.get_participating_hosts(event.id)
        hosts = cls._load_hosts(participants, fetch_range, day, week)

        if hosts and all(host.fetch_failed for host in hosts):
            raise AvailabilityEvaluationException(
                errors={"event_id": str(event.id), "date": target_date.isoformat()}
            )

        existing = [
            TimeRange(slot["start_time"], slot["end_time"])
            for slot in availability_data.get_existing_slots(
                event.id, fetch_range.start, fetch_range.end
            )
        ]

        rules = EventRules(
            event_id=event.id,
            duration_minutes=event.duration_minutes,
            meeting_type=event.meeting_type,
            min_notice_hours=event.min_notice_hours,
            booking_window_days=event.booking_window_days,
            buffer_before=event.buffer_before,
            buffer_after=event.buffer_after,
            start_time_increment=event.start_time_increment,
            max_daily_bookings=event.max_daily_bookings,
            max_weekly_bookings=event.max_weekly_bookings,
            max_attendees=event.max_attendees,
            timezone=tz,
            ignore_busy_blocks=event.ignore_busy_blocks,
            daily_booking_count=cls._event_count(event, day),
            weekly_booking_count=cls._event_count(event, week),
        )

        return AvailabilitySnapshot(
            event=rules,
            target_date=target_date,
            hosts=hosts,
            existing_slots=existing,
            now=now,
            default_timezone=getattr(settings, "DEFAULT_EVENT_TIMEZONE", None),
        )

    @staticmethod
    def _event_count(event: Event, period: TimeRange) -> int:
        if event.max_daily_bookings is None and event.max_weekly_bookings is None:
            return 0
        return availability_data.get_meeting_counts(
            None, period.start, period.end, event_id=event.id
        )

    @classmethod
    def _load_hosts(cls, participants, fetch_range, day, week) -> List[HostSnapshot]:
        """
        Load host snapshots, in parallel when enabled.

        Inside a transaction the reads stay on the caller's connection so they
        see its locks and uncommitted writes.
        """
        parallel = getattr(settings, "AVAILABILITY_PARALLEL_FETCH", True)
        if (
            not parallel
            or len(participants) < 2
            or transaction.get_connection().in_atomic_block
        ):
            return [cls._load_host(p, fetch_range, day, week) for p in participants]

        workers = getattr(settings, "AVAILABILITY_FETCH_WORKERS", 4)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(cls._load_host_in_thread, p, fetch_range, day, week)
                for p in participants
            ]
            return [future.result() for future in futures]

    @classmethod
    def _load_host_in_thread(cls, participant, fetch_range, day, week) -> HostSnapshot:
        try:
            return cls._load_host(participant, fetch_range, day, week)
        finally:
            connections.close_all()

    @staticmethod
    def _load_host(participant, fetch_range, day, week) -> HostSnapshot:
        """Fetch one host's inputs; a failed read marks the host unavailable."""
        host = participant.host
        snapshot = HostSnapshot(
            host_id=host.id,
            calendar_connected=host.calendar_connected,
            max_meetings_per_day=host.max_meetings_per_day,
            max_meetings_per_week=host.max_meetings_per_week,
            priority=participant.priority,
            role=participant.role,
        )
        try:
            snapshot.patterns = availability_data.get_availability_patterns(host.id)
            snapshot.busy_blocks = availability_data.get_busy_blocks(
                host.id, fetch_range.start, fetch_range.end
            )
            if host.max_meetings_per_day is not None:
                snapshot.daily_count = availability_data.get_meeting_counts(
                    host.id, day.start, day.end
                )
            if host.max_meetings_per_week is not None:
                snapshot.weekly_count = availability_data.get_meeting_counts(
                    host.id, week.start, week.end
                )
        except DatabaseError as e:
            logger.warning(f"Could not load availability inputs for host {host.id}: {e}")
            snapshot.patterns = None
            snapshot.busy_blocks = None
        return snapshot

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    @classmethod
    def evaluate(cls, event_id, target_date: date, now: Optional[datetime] = None) -> EvaluationResult:
        """
        Classify every candidate window of an event on one date.

        Args:
            event_id: ID of the event
            target_date: Calendar date in the event's display timezone
            now: Reference instant (defaults to the current time)

        Returns:
            DayLevelResult or SlotEnumerationResult
        """
        if not isinstance(target_date, date):
            raise InvalidDataException("A valid date is required")
        event = cls.get_event(event_id)
        return cls.evaluate_event(event, target_date, now or timezone.now())

    @classmethod
    def evaluate_event(cls, event: Event, target_date: date, now: datetime) -> EvaluationResult:
        snapshot = cls.build_snapshot(event, target_date, now)
        return ConstraintEvaluator(snapshot).evaluate()

    @classmethod
    def classify_window(
        cls, event: Event, start: datetime, end: datetime, now: Optional[datetime] = None
    ) -> SlotClassification:
        """Classify one exact window, e.g. right before writing a booking."""
        if end <= start:
            raise InvalidDataException("End time must be after start time")
        target_date = to_local(start, cls.event_timezone(event)).date()
        snapshot = cls.build_snapshot(event, target_date, now or timezone.now())
        return ConstraintEvaluator(snapshot).classify(TimeRange(start, end))

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    @classmethod
    def list_available_slots(
        cls,
        event_id,
        start_date: date,
        end_date: date,
        now: Optional[datetime] = None,
    ) -> List[Dict]:
        """
        Bookable windows of an event between two dates (inclusive).

        Results are cached per event until any of its inputs change; a call
        with an explicit ``now`` bypasses the cache.
        """
        if start_date > end_date:
            raise InvalidDataException("Start date must not be after end date")
        if (end_date - start_date).days >= MAX_LISTING_DAYS:
            raise InvalidDataException(f"Date range cannot exceed {MAX_LISTING_DAYS} days")

        event = cls.get_event(event_id)
        use_cache = now is None
        now = now or timezone.now()

        cache_key = None
        if use_cache:
            cache_key = cls._listing_cache_key(event.id, start_date, end_date)
            cached = cache.get(cache_key)
            if cached is not None:
                return cached

        if event.meeting_type == "webinar":
            slots = cls._list_webinar_slots(event, start_date, end_date, now)
        else:
            slots = cls._list_computed_slots(event, start_date, end_date, now)

        if use_cache:
            cache.set(cache_key, slots, getattr(settings, "AVAILABILITY_CACHE_TTL", 300))
        return slots

    @classmethod
    def _list_computed_slots(cls, event, start_date, end_date, now) -> List[Dict]:
        holidays = set(
            CompanyHoliday.objects.filter(date__range=(start_date, end_date)).values_list(
                "date", flat=True
            )
        )
        tz = cls.event_timezone(event)
        slots = []
        day = start_date
        while day <= end_date:
            if day in holidays:
                logger.info(f"Skipping company holiday {day} for event {event.id}")
            else:
                result = cls.evaluate_event(event, day, now)
                for classification in result.available_slots():
                    slots.append(cls._slot_dict(classification.window, tz))
            day += timedelta(days=1)
        return slots

    @classmethod
    def _list_webinar_slots(cls, event, start_date, end_date, now) -> List[Dict]:
        """Webinars offer their pre-created slots that still have seats."""
        tz = cls.event_timezone(event)
        range_start = start_of_local_day(start_date, tz)
        range_end = start_of_local_day(end_date + timedelta(days=1), tz)
        earliest = now + timedelta(hours=event.min_notice_hours)
        latest = now + timedelta(days=event.booking_window_days)

        slots = []
        for slot in availability_data.get_existing_slots(event.id, range_start, range_end):
            if not (range_start <= slot["start_time"] < range_end):
                continue
            if slot["start_time"] < earliest or slot["start_time"] > latest:
                continue
            if slot["booking_count"] >= event.max_attendees:
                continue
            data = cls._slot_dict(TimeRange(slot["start_time"], slot["end_time"]), tz)
            data["slot_id"] = str(slot["id"])
            data["seats_left"] = event.max_attendees - slot["booking_count"]
            slots.append(data)
        return slots

    @staticmethod
    def _slot_dict(window: TimeRange, tz: str) -> Dict:
        local_start = to_local(window.start, get_timezone(tz))
        return {
            "start_time": window.start.isoformat(),
            "end_time": window.end.isoformat(),
            "date": local_start.date().isoformat(),
            "local_start_time": local_start.strftime("%H:%M"),
        }

    # ------------------------------------------------------------------
    # Cache versioning
    # ------------------------------------------------------------------

    @classmethod
    def _version_key(cls, event_id) -> str:
        return f"{cls.CACHE_PREFIX}:version:{event_id}"

    @classmethod
    def _listing_cache_key(cls, event_id, start_date, end_date) -> str:
        version = cache.get(cls._version_key(event_id)) or 1
        return f"{cls.CACHE_PREFIX}:slots:{event_id}:v{version}:{start_date}:{end_date}"

    @classmethod
    def invalidate_event(cls, event_id):
        """Drop every cached listing of an event by bumping its version."""
        key = cls._version_key(event_id)
        try:
            cache.incr(key)
        except ValueError:
            cache.set(key, 2, None)

    @classmethod
    def invalidate_host(cls, host_id):
        """Invalidate every event a host takes part in."""
        for event_id in Event.objects.filter(host_id=host_id).values_list("id", flat=True):
            cls.invalidate_event(event_id)
        for event_id in (
            Event.objects.filter(event_hosts__host_id=host_id).values_list("id", flat=True).distinct()
        ):
            cls.invalidate_event(event_id)
