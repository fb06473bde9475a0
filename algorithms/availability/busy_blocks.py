"""
Calendar busy-block aggregation.

Busy blocks are synced from external calendars into the store by a separate
job; this module only orders, merges and intersects them per host.
"""

import bisect
import logging
from typing import Dict, Iterable, List, Optional

from .snapshot import HostSnapshot
from .time_windows import TimeRange

logger = logging.getLogger(__name__)


def merge_intervals(intervals: Iterable[TimeRange]) -> List[TimeRange]:
    """
    Sort intervals and merge the ones that overlap or touch.

    Args:
        intervals: Busy intervals of a single host

    Returns:
        Ordered, non-overlapping list of intervals
    """
    ordered = sorted(intervals, key=lambda r: (r.start, r.end))
    merged: List[TimeRange] = []
    for interval in ordered:
        if merged and interval.start <= merged[-1].end:
            if interval.end > merged[-1].end:
                merged[-1] = TimeRange(merged[-1].start, interval.end)
            continue
        merged.append(TimeRange(interval.start, interval.end))
    return merged


class BusyBlockAggregator:
    """Per-host busy timelines with window intersection queries."""

    def __init__(self, hosts: Iterable[HostSnapshot]):
        self._timelines: Dict[object, List[TimeRange]] = {}
        self._starts: Dict[object, List] = {}
        self._connected: Dict[object, bool] = {}

        for host in hosts:
            self._connected[host.host_id] = bool(host.calendar_connected)
            if host.busy_blocks is None:
                continue
            timeline = merge_intervals(host.busy_blocks)
            self._timelines[host.host_id] = timeline
            self._starts[host.host_id] = [block.start for block in timeline]

    def busy_intervals(self, host_id, window: Optional[TimeRange] = None) -> List[TimeRange]:
        """Ordered busy intervals of a host, optionally limited to a range."""
        timeline = self._timelines.get(host_id, [])
        if window is None:
            return list(timeline)
        return [block for block in timeline if block.overlaps(window)]

    def blocking_interval(self, host_id, window: TimeRange) -> Optional[TimeRange]:
        """First busy interval of the host overlapping the window, if any."""
        timeline = self._timelines.get(host_id)
        if not timeline:
            return None
        # The timeline is merged and ordered, so overlapping intervals form a
        # contiguous run ending right before the first start >= window.end.
        index = bisect.bisect_left(self._starts[host_id], window.end)
        earliest = None
        for candidate in reversed(timeline[:index]):
            if not candidate.overlaps(window):
                break
            earliest = candidate
        return earliest

    def is_blocked(self, host_id, window: TimeRange) -> bool:
        return self.blocking_interval(host_id, window) is not None

    def is_connected(self, host_id) -> bool:
        return self._connected.get(host_id, False)

    def has_data(self, host_id) -> bool:
        return host_id in self._timelines
