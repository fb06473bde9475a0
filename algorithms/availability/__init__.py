"""
Availability calculation algorithms.

This package contains the pure availability engine: it resolves weekly
patterns into concrete ranges, aggregates calendar busy blocks and classifies
every candidate booking window with a single reason code.

Key components:
- ConstraintEvaluator: Ordered rule pipeline producing troubleshoot results
- PatternResolver: Weekly patterns to concrete per-host ranges
- BusyBlockAggregator: Merged per-host busy timelines
- WindowSequence: Lazy candidate window generation
"""

from .busy_blocks import BusyBlockAggregator
from .constraint_evaluator import (
    ConstraintEvaluator,
    DayLevelResult,
    SlotClassification,
    SlotEnumerationResult,
)
from .pattern_resolver import PatternResolver
from .reason_codes import ReasonCode
from .snapshot import AvailabilitySnapshot, EventRules, HostSnapshot, PatternRule
from .time_windows import TimeRange, WindowSequence

__all__ = [
    "AvailabilitySnapshot",
    "BusyBlockAggregator",
    "ConstraintEvaluator",
    "DayLevelResult",
    "EventRules",
    "HostSnapshot",
    "PatternResolver",
    "PatternRule",
    "ReasonCode",
    "SlotClassification",
    "SlotEnumerationResult",
    "TimeRange",
    "WindowSequence",
]
