import logging
from datetime import datetime, time
from typing import Dict, Iterable, List, Optional

from algorithms.availability.time_windows import localize, to_local, week_start

logger = logging.getLogger(__name__)

STRATEGY_CYCLE = "cycle"
STRATEGY_LEAST_BOOKINGS = "least_bookings"
STRATEGY_AVAILABILITY_WEIGHTED = "availability_weighted"
STRATEGY_PRIORITY = "priority"

STRATEGIES = (
    STRATEGY_CYCLE,
    STRATEGY_LEAST_BOOKINGS,
    STRATEGY_AVAILABILITY_WEIGHTED,
    STRATEGY_PRIORITY,
)

PERIOD_DAY = "day"
PERIOD_WEEK = "week"
PERIOD_MONTH = "month"
PERIOD_ALL_TIME = "all_time"

PERIODS = (PERIOD_DAY, PERIOD_WEEK, PERIOD_MONTH, PERIOD_ALL_TIME)

PRIORITY_MODE_BALANCED = "balanced"
PRIORITY_MODE_STRICT = "strict"

# Roles that take part in the rotation; backups never do
ROTATING_ROLES = ("owner", "host")


def period_start(period: str, now: datetime, tz) -> Optional[datetime]:
    """
    First instant of the counting period containing ``now``.

    Returns ``None`` for ``all_time``. Weeks start on Sunday; all boundaries
    are local midnights in ``tz``.
    """
    if period == PERIOD_ALL_TIME:
        return None

    today = to_local(now, tz).date()
    if period == PERIOD_DAY:
        first_day = today
    elif period == PERIOD_WEEK:
        first_day = week_start(today)
    elif period == PERIOD_MONTH:
        first_day = today.replace(day=1)
    else:
        raise ValueError(f"Unknown round-robin period: {period}")
    return localize(first_day, time(0, 0), tz)


class RoundRobinCandidate:
    """A participating host together with its assignment history."""

    def __init__(
        self,
        host_id,
        role: str = "host",
        priority: int = 3,
        assignment_count: int = 0,
        last_assigned_at: Optional[datetime] = None,
        available_hours: float = 0.0,
    ):
        self.host_id = host_id
        self.role = role
        self.priority = priority
        self.assignment_count = assignment_count
        self.last_assigned_at = last_assigned_at
        self.available_hours = available_hours

    @property
    def rotates(self) -> bool:
        return self.role in ROTATING_ROLES

    def to_dict(self) -> Dict:
        return {
            "host_id": str(self.host_id),
            "role": self.role,
            "priority": self.priority,
            "assignment_count": self.assignment_count,
            "last_assigned_at": (
                self.last_assigned_at.isoformat() if self.last_assigned_at else None
            ),
            "available_hours": self.available_hours,
        }

    def __repr__(self) -> str:
        return f"RoundRobinCandidate({self.host_id}, {self.role}, count={self.assignment_count})"


class RoundRobinSelector:
    """
    Chooses the host that owns a new booking of a multi-host event.

    The candidate pool is narrowed to rotating hosts that are cleared for the
    window before any distribution logic runs:

    - cycle: fewest assignments, then longest since last assignment (never
      assigned first), then participation order
    - least_bookings: fewest assignments, then participation order
    - availability_weighted: fewest assignments per available pattern hour
    - priority: fewest assignments then highest priority ("balanced"), or
      highest priority then fewest assignments ("strict")
    """

    def __init__(self, strategy: str = STRATEGY_CYCLE, priority_mode: str = PRIORITY_MODE_BALANCED):
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown round-robin strategy: {strategy}")
        if priority_mode not in (PRIORITY_MODE_BALANCED, PRIORITY_MODE_STRICT):
            raise ValueError(f"Unknown priority mode: {priority_mode}")
        self.strategy = strategy
        self.priority_mode = priority_mode

    def eligible(
        self, candidates: Iterable[RoundRobinCandidate], cleared_host_ids: Iterable
    ) -> List[RoundRobinCandidate]:
        """Rotating candidates that the evaluator cleared for the window, in order."""
        cleared = set(cleared_host_ids)
        return [c for c in candidates if c.rotates and c.host_id in cleared]

    def rank(self, candidates: List[RoundRobinCandidate]) -> List[RoundRobinCandidate]:
        """Order candidates from most to least preferred."""
        indexed = list(enumerate(candidates))
        key = getattr(self, f"_{self.strategy}_key")
        return [candidate for _, candidate in sorted(indexed, key=lambda item: key(*item))]

    def select(
        self, candidates: Iterable[RoundRobinCandidate], cleared_host_ids: Iterable
    ) -> Optional[RoundRobinCandidate]:
        """
        Select the next host.

        Args:
            candidates: Participating hosts in participation order
            cleared_host_ids: Host ids cleared for the exact window

        Returns:
            The chosen candidate, or None when nobody is eligible
        """
        pool = self.eligible(candidates, cleared_host_ids)
        if not pool:
            return None

        chosen = self.rank(pool)[0]
        logger.debug(
            f"Round-robin ({self.strategy}) picked {chosen.host_id} from {len(pool)} hosts"
        )
        return chosen

    # Sort keys; ``index`` is the participation order used as final tie-break

    def _cycle_key(self, index: int, candidate: RoundRobinCandidate):
        never_assigned = candidate.last_assigned_at is None
        return (
            candidate.assignment_count,
            not never_assigned,
            candidate.last_assigned_at.timestamp() if not never_assigned else 0,
            index,
        )

    def _least_bookings_key(self, index: int, candidate: RoundRobinCandidate):
        return (candidate.assignment_count, index)

    def _availability_weighted_key(self, index: int, candidate: RoundRobinCandidate):
        if candidate.available_hours > 0:
            load = candidate.assignment_count / candidate.available_hours
        else:
            load = float("inf")
        return (load, candidate.assignment_count, index)

    def _priority_key(self, index: int, candidate: RoundRobinCandidate):
        if self.priority_mode == PRIORITY_MODE_STRICT:
            return (-candidate.priority, candidate.assignment_count, index)
        return (candidate.assignment_count, -candidate.priority, index)


def distribution_stats(candidates: Iterable[RoundRobinCandidate]) -> Dict:
    """Assignment distribution across the rotating hosts of an event."""
    rotating = [c for c in candidates if c.rotates]
    counts = [c.assignment_count for c in rotating]
    total = sum(counts)
    return {
        "hosts": [
            dict(
                c.to_dict(),
                share=round(c.assignment_count / total, 4) if total else 0.0,
            )
            for c in rotating
        ],
        "total_assignments": total,
        "spread": (max(counts) - min(counts)) if counts else 0,
    }
