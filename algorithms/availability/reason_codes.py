"""Reason codes produced by the availability troubleshoot engine."""

from enum import Enum


class ReasonCode(str, Enum):
    """Closed set of classifications for a candidate booking window."""

    AVAILABLE = "AVAILABLE"
    PAST = "PAST"
    TOOSOON = "TOOSOON"
    TOOLATE = "TOOLATE"
    OUTSIDEHOURS = "OUTSIDEHOURS"
    NOAVAILABILITY = "NOAVAILABILITY"
    NOCAL = "NOCAL"
    CALENDAR = "CALENDAR"
    DAILYMAX = "DAILYMAX"
    WEEKLYMAX = "WEEKLYMAX"
    BOOKED = "BOOKED"
    BUFFER = "BUFFER"
    NOHOST = "NOHOST"

    def __str__(self):
        return self.value


# Codes that describe a whole day rather than a single window
DAY_LEVEL_CODES = frozenset(
    {ReasonCode.NOHOST, ReasonCode.NOAVAILABILITY, ReasonCode.OUTSIDEHOURS}
)

REASON_MESSAGES = {
    ReasonCode.AVAILABLE: "Available for booking",
    ReasonCode.PAST: "This time has already passed",
    ReasonCode.TOOSOON: "Within {min_notice_hours}-hour minimum notice period",
    ReasonCode.TOOLATE: "Outside {booking_window_days}-day booking window",
    ReasonCode.OUTSIDEHOURS: "Outside configured availability hours",
    ReasonCode.NOAVAILABILITY: (
        "No weekly availability configured. "
        "Go to Settings to add your available hours."
    ),
    ReasonCode.NOCAL: "Google Calendar not connected",
    ReasonCode.CALENDAR: "Blocked by calendar event",
    ReasonCode.DAILYMAX: "Daily meeting limit reached ({limit})",
    ReasonCode.WEEKLYMAX: "Weekly meeting limit reached ({limit})",
    ReasonCode.BOOKED: "Already has a booking at this time",
    ReasonCode.BUFFER: "Within buffer time of another meeting",
    ReasonCode.NOHOST: "No host configured for this event",
}


def reason_message(code: ReasonCode, **context) -> str:
    """Render the human readable reason for a code."""
    template = REASON_MESSAGES[code]
    try:
        return template.format(**context)
    except KeyError:
        return template
