# apps/bookingapp/models.py
import uuid

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from model_utils import FieldTracker

from apps.eventsapp.models import Event
from apps.hostsapp.models import Host


class SlotQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_cancelled=False)

    def overlapping(self, start, end):
        """Half-open overlap with ``[start, end)``"""
        return self.filter(start_time__lt=end, end_time__gt=start)


class Slot(models.Model):
    """A concrete bookable time window of an event"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(
        Event,
        on_delete=models.CASCADE,
        related_name="slots",
        verbose_name=_("Event"),
    )
    start_time = models.DateTimeField(_("Start Time"), db_index=True)
    end_time = models.DateTimeField(_("End Time"), db_index=True)
    is_cancelled = models.BooleanField(_("Cancelled"), default=False, db_index=True)
    assigned_host = models.ForeignKey(
        Host,
        on_delete=models.SET_NULL,
        related_name="assigned_slots",
        verbose_name=_("Assigned Host"),
        null=True,
        blank=True,
    )
    created_at = models.DateTimeField(_("Created At"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated At"), auto_now=True)

    # Track field changes for cache invalidation
    tracker = FieldTracker(fields=["start_time", "end_time", "is_cancelled", "assigned_host_id"])

    objects = SlotQuerySet.as_manager()

    class Meta:
        verbose_name = _("Slot")
        verbose_name_plural = _("Slots")
        ordering = ["start_time"]
        indexes = [
            models.Index(fields=["event", "start_time", "is_cancelled"]),
            models.Index(fields=["assigned_host", "start_time", "is_cancelled"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["event", "start_time"],
                condition=models.Q(is_cancelled=False),
                name="unique_active_slot_start_per_event",
            ),
        ]

    def __str__(self):
        return f"{self.event.name} - {self.start_time.strftime('%Y-%m-%d %H:%M')}"

    def clean(self):
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValidationError(_("End time must be after start time"))

    @property
    def owner(self):
        """The host whose calendar this slot occupies"""
        return self.assigned_host or self.event.host


class Booking(models.Model):
    """An attendee's reservation of a slot"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    slot = models.ForeignKey(
        Slot,
        on_delete=models.CASCADE,
        related_name="bookings",
        verbose_name=_("Slot"),
    )
    attendee_name = models.CharField(_("Attendee Name"), max_length=255)
    attendee_email = models.EmailField(_("Attendee Email"))
    assigned_host = models.ForeignKey(
        Host,
        on_delete=models.SET_NULL,
        related_name="bookings",
        verbose_name=_("Assigned Host"),
        null=True,
        blank=True,
    )
    cancelled_at = models.DateTimeField(_("Cancelled At"), null=True, blank=True)
    cancellation_reason = models.TextField(_("Cancellation Reason"), blank=True)
    created_at = models.DateTimeField(_("Created At"), auto_now_add=True, db_index=True)

    tracker = FieldTracker(fields=["cancelled_at"])

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["slot", "cancelled_at"]),
            models.Index(fields=["attendee_email"]),
        ]

    def __str__(self):
        return f"{self.attendee_name} - {self.slot}"

    @property
    def is_cancelled(self):
        return self.cancelled_at is not None

    def cancel(self, reason=""):
        """Cancel the booking"""
        self.cancelled_at = timezone.now()
        self.cancellation_reason = reason
        self.save(update_fields=["cancelled_at", "cancellation_reason"])
