"""
Office Hours – centralised custom exceptions.

Import these from `core.exceptions` across the project instead of redefining
ad-hoc `Exception` subclasses in each app.
"""

from .custom_exceptions import (
    APIException,
    AvailabilityEvaluationException,
    InvalidDataException,
    NoEligibleHostException,
    ResourceNotFoundException,
    SchedulingConflictException,
)

__all__ = [
    "APIException",
    "AvailabilityEvaluationException",
    "InvalidDataException",
    "NoEligibleHostException",
    "ResourceNotFoundException",
    "SchedulingConflictException",
]
