"""
Host distribution for multi-host events.
"""

from .round_robin import (
    PERIODS,
    STRATEGIES,
    RoundRobinCandidate,
    RoundRobinSelector,
    distribution_stats,
    period_start,
)

__all__ = [
    "PERIODS",
    "STRATEGIES",
    "RoundRobinCandidate",
    "RoundRobinSelector",
    "distribution_stats",
    "period_start",
]
