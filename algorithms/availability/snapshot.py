"""
Pre-fetched inputs for the availability engine.

The service layer reads the database once per evaluation and hands these
plain objects to the evaluator, which then runs without any I/O.
"""

from datetime import date, datetime, time
from typing import Dict, List, Optional

from .time_windows import TimeRange

MEETING_TYPES = ("one_on_one", "group", "round_robin", "collective", "webinar")
MULTI_HOST_TYPES = ("round_robin", "collective")


class PatternRule:
    """A weekly recurring availability rule of one host."""

    __slots__ = ("day_of_week", "start_time", "end_time", "timezone")

    def __init__(self, day_of_week: int, start_time: time, end_time: time, timezone: str):
        if not 0 <= day_of_week <= 6:
            raise ValueError(f"day_of_week must be within 0..6, got {day_of_week}")
        self.day_of_week = day_of_week
        self.start_time = start_time
        self.end_time = end_time
        self.timezone = timezone

    def __repr__(self) -> str:
        return (
            f"PatternRule(day={self.day_of_week}, "
            f"{self.start_time:%H:%M}-{self.end_time:%H:%M} {self.timezone})"
        )


class HostSnapshot:
    """
    Everything the engine needs to know about one participating host.

    ``patterns`` or ``busy_blocks`` set to ``None`` means the data could not
    be fetched; such a host is never treated as available.
    """

    def __init__(
        self,
        host_id,
        patterns: Optional[List[PatternRule]] = None,
        busy_blocks: Optional[List[TimeRange]] = None,
        calendar_connected: bool = False,
        max_meetings_per_day: Optional[int] = None,
        max_meetings_per_week: Optional[int] = None,
        daily_count: int = 0,
        weekly_count: int = 0,
        priority: int = 3,
        role: str = "owner",
    ):
        self.host_id = host_id
        self.patterns = patterns
        self.busy_blocks = busy_blocks
        self.calendar_connected = calendar_connected
        self.max_meetings_per_day = max_meetings_per_day
        self.max_meetings_per_week = max_meetings_per_week
        self.daily_count = daily_count
        self.weekly_count = weekly_count
        self.priority = priority
        self.role = role

    @property
    def fetch_failed(self) -> bool:
        return self.patterns is None or self.busy_blocks is None

    @property
    def has_any_pattern(self) -> bool:
        return bool(self.patterns)

    def __repr__(self) -> str:
        return f"HostSnapshot({self.host_id})"


class EventRules:
    """Booking rules of an event, detached from the ORM."""

    def __init__(
        self,
        event_id,
        duration_minutes: int,
        meeting_type: str = "one_on_one",
        min_notice_hours: int = 24,
        booking_window_days: int = 60,
        buffer_before: int = 0,
        buffer_after: int = 0,
        start_time_increment: int = 30,
        max_daily_bookings: Optional[int] = None,
        max_weekly_bookings: Optional[int] = None,
        max_attendees: int = 1,
        timezone: Optional[str] = None,
        ignore_busy_blocks: bool = False,
        daily_booking_count: int = 0,
        weekly_booking_count: int = 0,
    ):
        if meeting_type not in MEETING_TYPES:
            raise ValueError(f"Unknown meeting type: {meeting_type}")
        self.event_id = event_id
        self.duration_minutes = duration_minutes
        self.meeting_type = meeting_type
        self.min_notice_hours = min_notice_hours
        self.booking_window_days = booking_window_days
        self.buffer_before = buffer_before or 0
        self.buffer_after = buffer_after or 0
        self.start_time_increment = start_time_increment or 30
        self.max_daily_bookings = max_daily_bookings
        self.max_weekly_bookings = max_weekly_bookings
        self.max_attendees = max_attendees
        self.timezone = timezone
        self.ignore_busy_blocks = ignore_busy_blocks
        self.daily_booking_count = daily_booking_count
        self.weekly_booking_count = weekly_booking_count

    @property
    def is_collective(self) -> bool:
        return self.meeting_type == "collective"

    @property
    def is_multi_host(self) -> bool:
        return self.meeting_type in MULTI_HOST_TYPES


class AvailabilitySnapshot:
    """All inputs of one evaluation: one event, one local calendar date."""

    def __init__(
        self,
        event: EventRules,
        target_date: date,
        hosts: List[HostSnapshot],
        existing_slots: List[TimeRange],
        now: datetime,
        default_timezone: Optional[str] = None,
    ):
        if now.tzinfo is None:
            raise ValueError("now must be timezone aware")
        self.event = event
        self.target_date = target_date
        self.hosts = hosts
        self.existing_slots = sorted(existing_slots, key=lambda r: r.start)
        self.now = now
        self.default_timezone = default_timezone or "UTC"

    @property
    def timezone(self) -> str:
        return self.event.timezone or self.default_timezone

    def hosts_by_id(self) -> Dict[object, HostSnapshot]:
        return {host.host_id: host for host in self.hosts}
