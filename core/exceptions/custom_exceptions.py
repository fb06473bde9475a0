"""
Custom exceptions for the Office Hours platform.

This module defines a hierarchy of custom exceptions used across the platform
to provide consistent error handling and reporting.
"""

from django.utils.translation import gettext_lazy as _
from rest_framework import status


class APIException(Exception):
    """Base exception for all API-related exceptions."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = _("An unexpected error occurred.")

    def __init__(self, message=None, status_code=None, errors=None):
        self.message = message or self.default_message
        if status_code:
            self.status_code = status_code
        self.errors = errors
        super().__init__(self.message)

    @property
    def error_code(self):
        return self.__class__.__name__

    def to_dict(self):
        """Convert exception to dictionary representation."""
        error_dict = {
            "message": str(self.message),
            "status_code": self.status_code,
            "code": self.error_code,
        }

        if self.errors:
            error_dict["errors"] = self.errors

        return error_dict


class InvalidDataException(APIException):
    """Exception raised when request data is invalid."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = _("Invalid data provided.")


class ResourceNotFoundException(APIException):
    """Exception raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = _("The requested resource was not found.")


class SchedulingConflictException(APIException):
    """Exception raised when there's a scheduling conflict."""

    status_code = status.HTTP_409_CONFLICT
    default_message = _("A scheduling conflict was detected.")


class NoEligibleHostException(APIException):
    """Exception raised when no round-robin host can take a window."""

    status_code = status.HTTP_409_CONFLICT
    default_message = _("No eligible host is available for the requested time.")


class AvailabilityEvaluationException(APIException):
    """Exception raised when availability inputs could not be loaded."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = _("Availability cannot be evaluated right now.")
