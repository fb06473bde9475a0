"""
Availability pattern resolution.

Turns weekly recurring patterns into concrete instants for one calendar date
and answers which hosts cover a given window. Ranges of different hosts are
never merged: containment is decided per host and OR-ed (or AND-ed for
collective events) so the caller keeps host attribution.
"""

import logging
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from .snapshot import HostSnapshot, PatternRule
from .time_windows import TimeRange, day_of_week, local_day_range, localize

logger = logging.getLogger(__name__)

# Day-level outcomes of the resolver
DAY_HAS_PATTERNS = "has_patterns"
DAY_NO_PATTERNS_AT_ALL = "no_patterns_at_all"
DAY_NO_PATTERNS_TODAY = "no_patterns_today"


def pattern_instances(
    pattern: PatternRule, target_date: date, event_timezone: str
) -> List[TimeRange]:
    """
    Materialise a weekly pattern as instants touching an event-local date.

    The pattern's clock times are interpreted in the pattern's own timezone.
    Neighbouring dates are checked too, because a pattern defined in another
    zone can fall on the event-local date even though its own local date is
    the day before or after.
    """
    day = local_day_range(target_date, event_timezone)
    instances = []
    for offset in (-1, 0, 1):
        candidate = target_date + timedelta(days=offset)
        if day_of_week(candidate) != pattern.day_of_week:
            continue
        start = localize(candidate, pattern.start_time, pattern.timezone)
        end = localize(candidate, pattern.end_time, pattern.timezone)
        if end <= start:
            logger.debug(f"Skipping empty pattern instance {pattern!r} on {candidate}")
            continue
        instance = TimeRange(start, end)
        if instance.overlaps(day):
            instances.append(instance)
    return instances


class PatternResolver:
    """
    Resolves which hosts' weekly patterns apply to a date and a window.

    Hosts whose inputs failed to load are kept out of every answer so a
    missing pattern list never reads as "available".
    """

    def __init__(
        self,
        hosts: Iterable[HostSnapshot],
        target_date: date,
        event_timezone: str,
    ):
        self.target_date = target_date
        self.event_timezone = event_timezone
        self.hosts = list(hosts)
        self.day_range = local_day_range(target_date, event_timezone)
        self._instances: Dict[object, List[TimeRange]] = {}

        for host in self.hosts:
            if host.fetch_failed:
                logger.warning(
                    f"Host {host.host_id} inputs unavailable; treating as unavailable"
                )
                continue
            ranges = []
            for pattern in host.patterns:
                ranges.extend(
                    pattern_instances(pattern, target_date, event_timezone)
                )
            if ranges:
                self._instances[host.host_id] = sorted(ranges, key=lambda r: r.start)

    def day_status(self) -> str:
        """
        Classify the day before any window is looked at.

        Returns one of the ``DAY_*`` constants.
        """
        if self._instances:
            return DAY_HAS_PATTERNS
        if any(host.has_any_pattern for host in self.hosts):
            return DAY_NO_PATTERNS_TODAY
        return DAY_NO_PATTERNS_AT_ALL

    def ranges_for(self, host_id) -> List[TimeRange]:
        """Concrete pattern ranges of one host on this date."""
        return list(self._instances.get(host_id, []))

    def hosts_with_ranges(self) -> List[object]:
        """Host ids that have at least one pattern range on this date."""
        return [host.host_id for host in self.hosts if host.host_id in self._instances]

    def host_covers(self, host_id, window: TimeRange) -> bool:
        """True if one single pattern range of the host contains the window."""
        return any(r.contains_range(window) for r in self._instances.get(host_id, []))

    def covering_hosts(self, window: TimeRange) -> List[object]:
        """Host ids (in participation order) whose own pattern contains the window."""
        return [
            host.host_id for host in self.hosts if self.host_covers(host.host_id, window)
        ]

    def enumeration_bounds(self) -> Optional[TimeRange]:
        """
        Earliest start and latest end of all pattern ranges on this date,
        clipped to the event-local day.
        """
        all_ranges = [r for ranges in self._instances.values() for r in ranges]
        if not all_ranges:
            return None
        start = max(min(r.start for r in all_ranges), self.day_range.start)
        end = min(max(r.end for r in all_ranges), self.day_range.end)
        if end <= start:
            return None
        return TimeRange(start, end)
