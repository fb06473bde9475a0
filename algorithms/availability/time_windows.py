"""
Time-window arithmetic for availability calculations.

Pure helpers over explicit, timezone-aware instants: half-open interval
overlap, buffer expansion, local-clock conversion and lazy generation of
candidate booking windows. Nothing in this module reads the clock or the
database.
"""

import math
from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional, Union

import pytz

TzInfo = Union[str, pytz.BaseTzInfo]


class TimeRange:
    """Represents a half-open time range ``[start, end)``."""

    __slots__ = ("start", "end")

    def __init__(self, start: datetime, end: datetime):
        """
        Initialize a time range.

        Args:
            start: Start of the range (inclusive)
            end: End of the range (exclusive)
        """
        if end < start:
            raise ValueError(f"Range end {end} is before its start {start}")
        self.start = start
        self.end = end

    def __repr__(self) -> str:
        return f"TimeRange({self.start.isoformat()}, {self.end.isoformat()})"

    def __str__(self) -> str:
        return f"{self.start.strftime('%Y-%m-%d %H:%M')} - {self.end.strftime('%H:%M')}"

    def __eq__(self, other) -> bool:
        if not isinstance(other, TimeRange):
            return NotImplemented
        return self.start == other.start and self.end == other.end

    def __hash__(self) -> int:
        return hash((self.start, self.end))

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: "TimeRange") -> bool:
        """
        Check if this time range overlaps with another.

        Touching ranges (one ends exactly where the other starts) do not
        overlap.
        """
        return (self.start < other.end) and (other.start < self.end)

    def contains(self, point: datetime) -> bool:
        """Check if this time range contains a specific instant."""
        return self.start <= point < self.end

    def contains_range(self, other: "TimeRange") -> bool:
        """Check if this time range fully contains another range."""
        return (self.start <= other.start) and (self.end >= other.end)

    def expand(self, before_minutes: int = 0, after_minutes: int = 0) -> "TimeRange":
        """
        Return a copy of this range padded by a buffer on each side.

        Args:
            before_minutes: Minutes added before the start
            after_minutes: Minutes added after the end
        """
        return expand_interval(self.start, self.end, before_minutes, after_minutes)

    @staticmethod
    def from_record(record, start_key: str = "start_time", end_key: str = "end_time"):
        """
        Create a TimeRange from a dictionary or object holding start/end.

        Args:
            record: Mapping or object with start/end attributes
            start_key: Name of the start field
            end_key: Name of the end field
        """
        if isinstance(record, dict):
            return TimeRange(record[start_key], record[end_key])
        return TimeRange(getattr(record, start_key), getattr(record, end_key))


def intervals_overlap(
    start1: datetime, end1: datetime, start2: datetime, end2: datetime
) -> bool:
    """Half-open overlap test for ``[start1, end1)`` and ``[start2, end2)``."""
    return start1 < end2 and start2 < end1


def expand_interval(
    start: datetime, end: datetime, before_minutes: int = 0, after_minutes: int = 0
) -> TimeRange:
    """Pad ``[start, end)`` by the given buffer minutes."""
    return TimeRange(
        start - timedelta(minutes=before_minutes or 0),
        end + timedelta(minutes=after_minutes or 0),
    )


def get_timezone(tz: Optional[TzInfo], default: Optional[TzInfo] = None):
    """
    Resolve a timezone name or object to a pytz timezone.

    Falls back to ``default`` (and finally UTC) when ``tz`` is empty.
    """
    tz = tz or default
    if not tz:
        return pytz.UTC
    if isinstance(tz, str):
        return pytz.timezone(tz)
    return tz


def localize(day: date, clock: time, tz: TzInfo) -> datetime:
    """
    Combine a calendar date and a local clock time in ``tz``.

    Returns an aware datetime normalised to UTC. Non-existent or ambiguous
    local times (DST transitions) resolve to standard time.
    """
    zone = get_timezone(tz)
    local = zone.localize(datetime.combine(day, clock.replace(tzinfo=None)), is_dst=False)
    return local.astimezone(pytz.UTC)


def start_of_local_day(day: date, tz: TzInfo) -> datetime:
    """UTC instant of local midnight of ``day`` in ``tz``."""
    return localize(day, time(0, 0), tz)


def local_day_range(day: date, tz: TzInfo) -> TimeRange:
    """The ``[midnight, next midnight)`` range of a local calendar date."""
    return TimeRange(
        start_of_local_day(day, tz), start_of_local_day(day + timedelta(days=1), tz)
    )


def to_local(instant: datetime, tz: TzInfo) -> datetime:
    """Convert an aware instant to the local wall clock of ``tz``."""
    if instant.tzinfo is None:
        instant = pytz.UTC.localize(instant)
    return instant.astimezone(get_timezone(tz))


def day_of_week(day: Union[date, datetime]) -> int:
    """
    Day of week with Sunday = 0 ... Saturday = 6.

    Python's ``weekday()`` is Monday = 0, so it is shifted by one.
    """
    return (day.weekday() + 1) % 7


def week_start(day: date) -> date:
    """The Sunday on or before ``day``."""
    return day - timedelta(days=day_of_week(day))


def floor_to_hour(instant: datetime, tz: TzInfo) -> datetime:
    """Round an instant down to the full local hour in ``tz``."""
    local = to_local(instant, tz)
    return localize(local.date(), time(local.hour, 0), tz)


def ceil_to_hour(instant: datetime, tz: TzInfo) -> datetime:
    """Round an instant up to the full local hour in ``tz``."""
    local = to_local(instant, tz)
    if local.minute == 0 and local.second == 0 and local.microsecond == 0:
        return instant
    floored = localize(local.date(), time(local.hour, 0), tz)
    return floored + timedelta(hours=1)


class WindowSequence:
    """
    Lazy, finite and restartable sequence of candidate booking windows.

    Yields ``[start, start + duration)`` ranges, stepping ``start`` by the
    increment from ``first_start`` while ``start < last_end``. Iterating the
    sequence twice produces the same windows.
    """

    def __init__(
        self,
        first_start: datetime,
        last_end: datetime,
        duration_minutes: int,
        increment_minutes: int,
    ):
        if duration_minutes <= 0:
            raise ValueError("Window duration must be positive")
        if increment_minutes <= 0:
            raise ValueError("Window increment must be positive")
        self.first_start = first_start
        self.last_end = last_end
        self.duration = timedelta(minutes=duration_minutes)
        self.increment = timedelta(minutes=increment_minutes)

    def __iter__(self) -> Iterator[TimeRange]:
        start = self.first_start
        while start < self.last_end:
            yield TimeRange(start, start + self.duration)
            start += self.increment

    def __len__(self) -> int:
        if self.last_end <= self.first_start:
            return 0
        span = (self.last_end - self.first_start) / self.increment
        return int(math.ceil(span))
