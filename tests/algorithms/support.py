"""Builders for availability engine tests."""

from datetime import date, datetime, time, timedelta

import pytz

from algorithms.availability.snapshot import (
    AvailabilitySnapshot,
    EventRules,
    HostSnapshot,
    PatternRule,
)
from algorithms.availability.time_windows import TimeRange

NEW_YORK = "America/New_York"

# 2030-01-07 is a Monday; New York is on UTC-5 in January
MONDAY = date(2030, 1, 7)
PREVIOUS_FRIDAY_NOON = pytz.timezone(NEW_YORK).localize(datetime(2030, 1, 4, 12, 0))


def local(day, hour, minute=0, tz=NEW_YORK):
    """Aware UTC instant for a local wall-clock time."""
    return pytz.timezone(tz).localize(datetime.combine(day, time(hour, minute))).astimezone(pytz.UTC)


def window(day, hour, minute=0, duration=30, tz=NEW_YORK):
    start = local(day, hour, minute, tz)
    return TimeRange(start, start + timedelta(minutes=duration))


def monday_pattern(start=time(9, 0), end=time(17, 0), tz=NEW_YORK, day_of_week=1):
    return PatternRule(day_of_week, start, end, tz)


def host(host_id="host-a", patterns=None, connected=True, **kwargs):
    if patterns is None:
        patterns = [monday_pattern()]
    kwargs.setdefault("busy_blocks", [])
    return HostSnapshot(host_id, patterns=patterns, calendar_connected=connected, **kwargs)


def snapshot(hosts, existing=None, now=PREVIOUS_FRIDAY_NOON, target_date=MONDAY, **event_kwargs):
    event_kwargs.setdefault("duration_minutes", 30)
    event_kwargs.setdefault("timezone", NEW_YORK)
    rules = EventRules("event-1", **event_kwargs)
    return AvailabilitySnapshot(rules, target_date, hosts, existing or [], now)
