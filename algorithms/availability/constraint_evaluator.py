"""
Constraint evaluator / availability troubleshoot engine.

Classifies every candidate window of an event on one calendar date with a
single reason code. Checks run in a fixed order and the first failing check
wins:

1. PAST          - window starts before now
2. TOOSOON       - window starts inside the minimum notice period
3. TOOLATE       - window starts after the booking horizon
4. OUTSIDEHOURS  - no participating host's own pattern contains the window
5. NOCAL/CALENDAR - no covering host is calendar-connected and free
6. DAILYMAX/WEEKLYMAX - host or event volume caps are exhausted
7. BOOKED/BUFFER - overlaps an existing slot directly / only via buffers
8. AVAILABLE

The evaluator works on an ``AvailabilitySnapshot`` and performs no I/O, so
the same snapshot always yields the same result.
"""

import logging
from collections import Counter
from datetime import time, timedelta
from typing import Dict, List, Optional, Union

from .busy_blocks import BusyBlockAggregator
from .pattern_resolver import (
    DAY_NO_PATTERNS_AT_ALL,
    DAY_NO_PATTERNS_TODAY,
    PatternResolver,
)
from .reason_codes import ReasonCode, reason_message
from .snapshot import AvailabilitySnapshot, HostSnapshot
from .time_windows import (
    TimeRange,
    WindowSequence,
    ceil_to_hour,
    day_of_week,
    floor_to_hour,
    localize,
    to_local,
)

logger = logging.getLogger(__name__)

# Hours used for events that ignore patterns and calendars
OPEN_DAY_START = time(6, 0)
OPEN_DAY_END = time(22, 0)

TIME_DISPLAY_FORMAT = "%I:%M %p"


class SlotClassification:
    """Outcome of evaluating one candidate window."""

    __slots__ = ("window", "code", "reason", "details", "eligible_hosts")

    def __init__(
        self,
        window: TimeRange,
        code: ReasonCode,
        reason: str,
        details: Optional[str] = None,
        eligible_hosts: Optional[List] = None,
    ):
        self.window = window
        self.code = code
        self.reason = reason
        self.details = details
        self.eligible_hosts = eligible_hosts or []

    @property
    def start_time(self):
        return self.window.start

    @property
    def end_time(self):
        return self.window.end

    @property
    def is_available(self) -> bool:
        return self.code == ReasonCode.AVAILABLE

    def to_dict(self) -> Dict:
        data = {
            "start_time": self.window.start.isoformat(),
            "end_time": self.window.end.isoformat(),
            "code": self.code.value,
            "reason": self.reason,
        }
        if self.details:
            data["details"] = self.details
        return data

    def __repr__(self) -> str:
        return f"SlotClassification({self.window}, {self.code.value})"


class DayLevelResult:
    """A whole day is unavailable for one reason; no windows were enumerated."""

    is_day_level = True

    def __init__(self, target_date, code: ReasonCode, reason: str):
        self.target_date = target_date
        self.code = code
        self.reason = reason

    @property
    def slots(self) -> List[SlotClassification]:
        return []

    def available_slots(self) -> List[SlotClassification]:
        return []

    def to_dict(self) -> Dict:
        return {
            "date": self.target_date.isoformat(),
            "day_of_week": day_of_week(self.target_date),
            "day_name": self.target_date.strftime("%A"),
            "slots": [],
            "code": self.code.value,
            "reason": self.reason,
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, DayLevelResult):
            return NotImplemented
        return self.to_dict() == other.to_dict()


class SlotEnumerationResult:
    """Every candidate window of the day with its classification."""

    is_day_level = False

    def __init__(self, target_date, slots: List[SlotClassification], timezone: str):
        self.target_date = target_date
        self.slots = slots
        self.timezone = timezone
        self.summary = summarize(slots)

    def available_slots(self) -> List[SlotClassification]:
        return [slot for slot in self.slots if slot.is_available]

    def to_dict(self) -> Dict:
        return {
            "date": self.target_date.isoformat(),
            "day_of_week": day_of_week(self.target_date),
            "day_name": self.target_date.strftime("%A"),
            "timezone": self.timezone,
            "slots": [slot.to_dict() for slot in self.slots],
            "summary": self.summary,
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, SlotEnumerationResult):
            return NotImplemented
        return self.to_dict() == other.to_dict()


EvaluationResult = Union[DayLevelResult, SlotEnumerationResult]


def summarize(slots: List[SlotClassification]) -> Dict:
    """
    Summary statistics of an enumeration.

    The top blocking reason is the most frequent non-available code; ties
    keep the order in which codes were first seen.
    """
    blocked = Counter(
        slot.code.value for slot in slots if slot.code != ReasonCode.AVAILABLE
    )
    available = len(slots) - sum(blocked.values())
    top = blocked.most_common(1)
    return {
        "total": len(slots),
        "available": available,
        "blocked": len(slots) - available,
        "by_code": dict(blocked),
        "top_blocking_reason": (
            {"code": top[0][0], "count": top[0][1]} if top else None
        ),
    }


class ConstraintEvaluator:
    """
    Ordered rule pipeline over a pre-fetched availability snapshot.

    Usage:
        evaluator = ConstraintEvaluator(snapshot)
        result = evaluator.evaluate()
        classification = evaluator.classify(window)
    """

    def __init__(self, snapshot: AvailabilitySnapshot):
        self.snapshot = snapshot
        self.event = snapshot.event
        self.timezone = snapshot.timezone
        self.now = snapshot.now
        self.hosts: List[HostSnapshot] = list(snapshot.hosts)
        self._hosts_by_id = snapshot.hosts_by_id()

        self.earliest_bookable = self.now + timedelta(hours=self.event.min_notice_hours or 0)
        self.latest_bookable = self.now + timedelta(days=self.event.booking_window_days or 0)

        self.resolver = PatternResolver(self.hosts, snapshot.target_date, self.timezone)
        self.busy = BusyBlockAggregator(self.hosts)

    # ------------------------------------------------------------------
    # Day level
    # ------------------------------------------------------------------

    def day_level_result(self) -> Optional[DayLevelResult]:
        """Return a day-level short circuit, or ``None`` when windows must be enumerated."""
        target_date = self.snapshot.target_date

        if not self.hosts:
            return DayLevelResult(
                target_date, ReasonCode.NOHOST, reason_message(ReasonCode.NOHOST)
            )

        if self.event.ignore_busy_blocks:
            return None

        status = self.resolver.day_status()
        if status == DAY_NO_PATTERNS_AT_ALL:
            return DayLevelResult(
                target_date,
                ReasonCode.NOAVAILABILITY,
                reason_message(ReasonCode.NOAVAILABILITY),
            )
        if status == DAY_NO_PATTERNS_TODAY or (
            self.event.is_collective
            and len(self.resolver.hosts_with_ranges()) < len(self.hosts)
        ):
            return DayLevelResult(
                target_date,
                ReasonCode.OUTSIDEHOURS,
                f"No availability configured for {target_date.strftime('%A')}s",
            )
        return None

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def candidate_windows(self) -> WindowSequence:
        """
        Candidate windows of the day.

        Windows step by the event's start time increment from the earliest
        pattern start (rounded down to the hour) to the latest pattern end
        (rounded up to the hour), in the event's timezone.
        """
        target_date = self.snapshot.target_date
        if self.event.ignore_busy_blocks:
            first = localize(target_date, OPEN_DAY_START, self.timezone)
            last = localize(target_date, OPEN_DAY_END, self.timezone)
        else:
            bounds = self.resolver.enumeration_bounds()
            if bounds is None:
                first = last = localize(target_date, time(0, 0), self.timezone)
            else:
                first = floor_to_hour(bounds.start, self.timezone)
                last = min(
                    ceil_to_hour(bounds.end, self.timezone), self.resolver.day_range.end
                )
        return WindowSequence(
            first, last, self.event.duration_minutes, self.event.start_time_increment
        )

    def evaluate(self) -> EvaluationResult:
        """Classify the whole day."""
        day_level = self.day_level_result()
        if day_level is not None:
            logger.info(
                f"Event {self.event.event_id} on {self.snapshot.target_date}: "
                f"day-level {day_level.code.value}"
            )
            return day_level

        slots = [self.classify(window) for window in self.candidate_windows()]
        return SlotEnumerationResult(self.snapshot.target_date, slots, self.timezone)

    # ------------------------------------------------------------------
    # Per-window pipeline
    # ------------------------------------------------------------------

    def classify(self, window: TimeRange) -> SlotClassification:
        """Run the ordered checks for one window."""
        if not self.hosts:
            return self._result(window, ReasonCode.NOHOST)

        # 1-3: time constraints relative to now
        if window.start < self.now:
            return self._result(window, ReasonCode.PAST)
        if window.start < self.earliest_bookable:
            return self._result(
                window,
                ReasonCode.TOOSOON,
                details=f"Earliest bookable: {self._format_time(self.earliest_bookable)}",
            )
        if window.start > self.latest_bookable:
            return self._result(window, ReasonCode.TOOLATE)

        # 4-5: pattern membership and calendar state
        cleared, failure = self._clear_hosts(window)
        if failure is not None:
            return failure

        # 6: volume caps
        capped, remaining = self._apply_caps(window, cleared)
        if capped is not None:
            return capped

        # 7: existing slots of this event
        conflict = self._slot_conflict(window)
        if conflict is not None:
            return conflict

        return self._result(window, ReasonCode.AVAILABLE, eligible_hosts=remaining)

    def eligible_hosts(self, window: TimeRange) -> List:
        """Hosts that could take a booking for exactly this window."""
        return self.classify(window).eligible_hosts

    def _clear_hosts(self, window: TimeRange):
        """
        Steps 4 and 5.

        Returns ``(cleared_host_ids, None)`` or ``(None, SlotClassification)``.
        """
        usable = [host.host_id for host in self.hosts if not host.fetch_failed]

        if self.event.ignore_busy_blocks:
            if not usable or (self.event.is_collective and len(usable) < len(self.hosts)):
                return None, self._result(window, ReasonCode.OUTSIDEHOURS)
            return usable, None

        covering = self.resolver.covering_hosts(window)
        if not covering or (self.event.is_collective and len(covering) < len(self.hosts)):
            return None, self._result(window, ReasonCode.OUTSIDEHOURS)

        cleared = []
        blocking = None
        any_connected = False
        for host_id in covering:
            if not self.busy.is_connected(host_id):
                continue
            any_connected = True
            interval = self.busy.blocking_interval(host_id, window)
            if interval is None:
                cleared.append(host_id)
            elif blocking is None:
                blocking = interval

        if not cleared or (self.event.is_collective and len(cleared) < len(covering)):
            if not any_connected:
                return None, self._result(
                    window,
                    ReasonCode.NOCAL,
                    details="Connect your calendar in Settings to sync busy times",
                )
            details = None
            if blocking is not None:
                details = (
                    f"Busy: {self._format_time(blocking.start)} - "
                    f"{self._format_time(blocking.end)}"
                )
            elif self.event.is_collective:
                details = "Not every host has a calendar connected"
            return None, self._result(window, ReasonCode.CALENDAR, details=details)

        return cleared, None

    def _apply_caps(self, window: TimeRange, cleared: List):
        """
        Step 6: host-level then event-level daily and weekly caps.

        Returns ``(None, remaining_host_ids)`` or ``(SlotClassification, None)``.
        """
        hosts = [self._hosts_by_id[host_id] for host_id in cleared]

        under_daily = [host for host in hosts if not _at_limit(host.daily_count, host.max_meetings_per_day)]
        if not under_daily or (self.event.is_collective and len(under_daily) < len(hosts)):
            limit = next(
                host.max_meetings_per_day for host in hosts if host not in under_daily
            )
            return self._result(window, ReasonCode.DAILYMAX, limit=limit), None
        if _at_limit(self.event.daily_booking_count, self.event.max_daily_bookings):
            return (
                self._result(window, ReasonCode.DAILYMAX, limit=self.event.max_daily_bookings),
                None,
            )

        under_weekly = [
            host for host in under_daily
            if not _at_limit(host.weekly_count, host.max_meetings_per_week)
        ]
        if not under_weekly or (self.event.is_collective and len(under_weekly) < len(under_daily)):
            limit = next(
                host.max_meetings_per_week for host in under_daily if host not in under_weekly
            )
            return self._result(window, ReasonCode.WEEKLYMAX, limit=limit), None
        if _at_limit(self.event.weekly_booking_count, self.event.max_weekly_bookings):
            return (
                self._result(window, ReasonCode.WEEKLYMAX, limit=self.event.max_weekly_bookings),
                None,
            )

        return None, [host.host_id for host in under_weekly]

    def _slot_conflict(self, window: TimeRange) -> Optional[SlotClassification]:
        """Step 7: direct overlap wins over a buffer-only overlap."""
        before = self.event.buffer_before
        after = self.event.buffer_after
        buffered_hit = False

        for existing in self.snapshot.existing_slots:
            if existing.overlaps(window):
                return self._result(window, ReasonCode.BOOKED)
            if (before or after) and existing.expand(before, after).overlaps(window):
                buffered_hit = True

        if buffered_hit:
            return self._result(
                window,
                ReasonCode.BUFFER,
                details=f"{before}min before / {after}min after",
            )
        return None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _result(
        self,
        window: TimeRange,
        code: ReasonCode,
        details: Optional[str] = None,
        eligible_hosts: Optional[List] = None,
        **context,
    ) -> SlotClassification:
        context.setdefault("min_notice_hours", self.event.min_notice_hours)
        context.setdefault("booking_window_days", self.event.booking_window_days)
        return SlotClassification(
            window,
            code,
            reason_message(code, **context),
            details=details,
            eligible_hosts=eligible_hosts,
        )

    def _format_time(self, instant) -> str:
        return to_local(instant, self.timezone).strftime(TIME_DISPLAY_FORMAT).lstrip("0")


def _at_limit(count: int, limit: Optional[int]) -> bool:
    """A ``None`` limit means unlimited."""
    return limit is not None and count >= limit
