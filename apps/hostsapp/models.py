# apps/hostsapp/models.py
import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _
from model_utils import FieldTracker


def default_timezone():
    return getattr(settings, "DEFAULT_EVENT_TIMEZONE", "America/New_York")


class Host(models.Model):
    """A person who owns availability and can take meetings"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(_("Name"), max_length=255)
    email = models.EmailField(_("Email"), unique=True)
    timezone = models.CharField(_("Timezone"), max_length=64, default=default_timezone)
    google_access_token = models.TextField(_("Google Access Token"), blank=True, default="")
    google_refresh_token = models.TextField(_("Google Refresh Token"), blank=True, default="")
    max_meetings_per_day = models.PositiveIntegerField(
        _("Max Meetings Per Day"),
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        help_text=_("Leave empty for unlimited"),
    )
    max_meetings_per_week = models.PositiveIntegerField(
        _("Max Meetings Per Week"),
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        help_text=_("Leave empty for unlimited"),
    )
    created_at = models.DateTimeField(_("Created At"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated At"), auto_now=True)

    # Fields the availability engine reads
    tracker = FieldTracker(
        fields=[
            "google_access_token",
            "google_refresh_token",
            "max_meetings_per_day",
            "max_meetings_per_week",
        ]
    )

    class Meta:
        verbose_name = _("Host")
        verbose_name_plural = _("Hosts")
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} <{self.email}>"

    @property
    def calendar_connected(self):
        """Both OAuth tokens are required to read the calendar"""
        return bool(self.google_access_token and self.google_refresh_token)


class AvailabilityPattern(models.Model):
    """Weekly recurring availability of a host"""

    WEEKDAY_CHOICES = (
        (0, _("Sunday")),
        (1, _("Monday")),
        (2, _("Tuesday")),
        (3, _("Wednesday")),
        (4, _("Thursday")),
        (5, _("Friday")),
        (6, _("Saturday")),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    host = models.ForeignKey(
        Host,
        on_delete=models.CASCADE,
        related_name="availability_patterns",
        verbose_name=_("Host"),
    )
    day_of_week = models.IntegerField(_("Day of Week"), choices=WEEKDAY_CHOICES)
    start_time = models.TimeField(_("Start Time"))
    end_time = models.TimeField(_("End Time"))
    timezone = models.CharField(_("Timezone"), max_length=64, default=default_timezone)
    is_active = models.BooleanField(_("Active"), default=True)
    created_at = models.DateTimeField(_("Created At"), auto_now_add=True)

    class Meta:
        verbose_name = _("Availability Pattern")
        verbose_name_plural = _("Availability Patterns")
        ordering = ["day_of_week", "start_time"]
        indexes = [
            models.Index(fields=["host", "day_of_week"]),
        ]

    def __str__(self):
        return (
            f"{self.host.name} - {self.get_day_of_week_display()}: "
            f"{self.start_time.strftime('%I:%M %p')} - {self.end_time.strftime('%I:%M %p')}"
        )

    def clean(self):
        if self.start_time and self.end_time and self.start_time >= self.end_time:
            raise ValidationError(_("End time must be after start time"))


class BusyBlock(models.Model):
    """A busy interval of a host, synced from an external calendar or entered manually"""

    SOURCE_CHOICES = (
        ("google_calendar", _("Google Calendar")),
        ("manual", _("Manual")),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    host = models.ForeignKey(
        Host,
        on_delete=models.CASCADE,
        related_name="busy_blocks",
        verbose_name=_("Host"),
    )
    start_time = models.DateTimeField(_("Start Time"), db_index=True)
    end_time = models.DateTimeField(_("End Time"), db_index=True)
    source = models.CharField(
        _("Source"), max_length=20, choices=SOURCE_CHOICES, default="google_calendar"
    )
    external_event_id = models.CharField(
        _("External Event ID"), max_length=255, blank=True, default=""
    )
    synced_at = models.DateTimeField(_("Synced At"), auto_now=True)

    class Meta:
        verbose_name = _("Busy Block")
        verbose_name_plural = _("Busy Blocks")
        ordering = ["start_time"]
        indexes = [
            models.Index(fields=["host", "start_time", "end_time"]),
        ]

    def __str__(self):
        return f"{self.host.name} busy {self.start_time:%Y-%m-%d %H:%M} - {self.end_time:%H:%M}"

    def clean(self):
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValidationError(_("End time must be after start time"))


class CompanyHoliday(models.Model):
    """A date on which nothing is bookable"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    date = models.DateField(_("Date"), unique=True)
    name = models.CharField(_("Name"), max_length=255)

    class Meta:
        verbose_name = _("Company Holiday")
        verbose_name_plural = _("Company Holidays")
        ordering = ["date"]

    def __str__(self):
        return f"{self.name} ({self.date})"
