# apps/eventsapp/models.py
import uuid

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from algorithms.optimization.round_robin import PERIODS, STRATEGIES
from apps.hostsapp.models import Host, default_timezone


class Event(models.Model):
    """A bookable session type and its booking rules"""

    MEETING_TYPE_CHOICES = (
        ("one_on_one", _("One on One")),
        ("group", _("Group")),
        ("round_robin", _("Round Robin")),
        ("collective", _("Collective")),
        ("webinar", _("Webinar")),
    )

    INCREMENT_CHOICES = (
        (15, _("15 minutes")),
        (30, _("30 minutes")),
        (45, _("45 minutes")),
        (60, _("60 minutes")),
    )

    ROUND_ROBIN_STRATEGY_CHOICES = tuple((s, s.replace("_", " ").title()) for s in STRATEGIES)
    ROUND_ROBIN_PERIOD_CHOICES = tuple((p, p.replace("_", " ").title()) for p in PERIODS)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    slug = models.SlugField(_("Slug"), max_length=100, unique=True)
    name = models.CharField(_("Name"), max_length=255)
    description = models.TextField(_("Description"), blank=True)
    host = models.ForeignKey(
        Host,
        on_delete=models.SET_NULL,
        related_name="owned_events",
        verbose_name=_("Primary Host"),
        null=True,
        blank=True,
    )
    meeting_type = models.CharField(
        _("Meeting Type"), max_length=20, choices=MEETING_TYPE_CHOICES, default="one_on_one"
    )
    duration_minutes = models.PositiveIntegerField(
        _("Duration (minutes)"), default=30, validators=[MinValueValidator(1)]
    )
    min_notice_hours = models.PositiveIntegerField(_("Minimum Notice (hours)"), default=24)
    booking_window_days = models.PositiveIntegerField(_("Booking Window (days)"), default=60)
    buffer_before = models.PositiveIntegerField(_("Buffer Before (minutes)"), default=0)
    buffer_after = models.PositiveIntegerField(_("Buffer After (minutes)"), default=0)
    start_time_increment = models.PositiveIntegerField(
        _("Start Time Increment (minutes)"), choices=INCREMENT_CHOICES, default=30
    )
    max_daily_bookings = models.PositiveIntegerField(
        _("Max Daily Bookings"), null=True, blank=True, validators=[MinValueValidator(1)]
    )
    max_weekly_bookings = models.PositiveIntegerField(
        _("Max Weekly Bookings"), null=True, blank=True, validators=[MinValueValidator(1)]
    )
    max_attendees = models.PositiveIntegerField(
        _("Max Attendees"), default=1, validators=[MinValueValidator(1)]
    )
    display_timezone = models.CharField(
        _("Display Timezone"), max_length=64, default=default_timezone
    )
    round_robin_strategy = models.CharField(
        _("Round Robin Strategy"),
        max_length=30,
        choices=ROUND_ROBIN_STRATEGY_CHOICES,
        default="cycle",
    )
    round_robin_period = models.CharField(
        _("Round Robin Period"),
        max_length=20,
        choices=ROUND_ROBIN_PERIOD_CHOICES,
        default="all_time",
    )
    ignore_busy_blocks = models.BooleanField(
        _("Ignore Availability And Calendar"),
        default=False,
        help_text=_("Offer every window between 06:00 and 22:00"),
    )
    is_active = models.BooleanField(_("Active"), default=True)
    created_at = models.DateTimeField(_("Created At"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated At"), auto_now=True)

    class Meta:
        verbose_name = _("Event")
        verbose_name_plural = _("Events")
        ordering = ["name"]
        indexes = [
            models.Index(fields=["meeting_type", "is_active"]),
        ]

    def __str__(self):
        return self.name

    @property
    def is_round_robin(self):
        return self.meeting_type == "round_robin"

    @property
    def is_multi_host(self):
        return self.meeting_type in ("round_robin", "collective")

    def clean(self):
        if self.buffer_before < 0 or self.buffer_after < 0:
            raise ValidationError(_("Buffers cannot be negative"))

        # Hosts can only be attached after the first save
        if self.pk and self.is_round_robin and not self._state.adding:
            participants = self.event_hosts.filter(role__in=("owner", "host")).count()
            if participants < 2:
                raise ValidationError(
                    _("Round robin events need at least two participating hosts")
                )


class EventHost(models.Model):
    """Participation of a host in an event"""

    ROLE_CHOICES = (
        ("owner", _("Owner")),
        ("host", _("Host")),
        ("backup", _("Backup")),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(
        Event,
        on_delete=models.CASCADE,
        related_name="event_hosts",
        verbose_name=_("Event"),
    )
    host = models.ForeignKey(
        Host,
        on_delete=models.CASCADE,
        related_name="event_memberships",
        verbose_name=_("Host"),
    )
    role = models.CharField(_("Role"), max_length=10, choices=ROLE_CHOICES, default="host")
    priority = models.PositiveSmallIntegerField(
        _("Priority"),
        default=3,
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    created_at = models.DateTimeField(_("Created At"), auto_now_add=True)

    class Meta:
        verbose_name = _("Event Host")
        verbose_name_plural = _("Event Hosts")
        unique_together = ("event", "host")
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.host.name} ({self.role}) - {self.event.name}"


class RoundRobinState(models.Model):
    """Last round-robin assignment of an event"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.OneToOneField(
        Event,
        on_delete=models.CASCADE,
        related_name="round_robin_state",
        verbose_name=_("Event"),
    )
    last_assigned_host = models.ForeignKey(
        Host,
        on_delete=models.SET_NULL,
        related_name="+",
        verbose_name=_("Last Assigned Host"),
        null=True,
        blank=True,
    )
    last_assigned_at = models.DateTimeField(_("Last Assigned At"), null=True, blank=True)
    assignment_count = models.PositiveIntegerField(_("Assignment Count"), default=0)

    class Meta:
        verbose_name = _("Round Robin State")
        verbose_name_plural = _("Round Robin States")

    def __str__(self):
        return f"{self.event.name}: {self.assignment_count} assignments"
