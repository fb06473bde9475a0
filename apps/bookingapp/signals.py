# apps/bookingapp/signals.py
import logging

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from apps.bookingapp.models import Booking, Slot
from apps.bookingapp.services.availability_service import AvailabilityService
from apps.eventsapp.models import Event, EventHost
from apps.hostsapp.models import AvailabilityPattern, BusyBlock, CompanyHoliday, Host

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Slot)
def slot_post_save(sender, instance, created, **kwargs):
    """
    Invalidate cached availability when a slot appears, moves or is cancelled.
    """
    tracked = ("start_time", "end_time", "is_cancelled", "assigned_host_id")
    if created or any(instance.tracker.has_changed(field) for field in tracked):
        AvailabilityService.invalidate_event(instance.event_id)
        # The owner's caps affect every event the owner hosts
        owner_id = instance.assigned_host_id or instance.event.host_id
        if owner_id:
            AvailabilityService.invalidate_host(owner_id)
        previous_owner = instance.tracker.previous("assigned_host_id")
        if previous_owner and previous_owner != owner_id:
            AvailabilityService.invalidate_host(previous_owner)


@receiver(post_delete, sender=Slot)
def slot_post_delete(sender, instance, **kwargs):
    AvailabilityService.invalidate_event(instance.event_id)


@receiver(post_save, sender=Booking)
def booking_post_save(sender, instance, created, **kwargs):
    """Bookings feed the event caps and webinar seat counts."""
    if created or instance.tracker.has_changed("cancelled_at"):
        AvailabilityService.invalidate_event(instance.slot.event_id)


@receiver(post_delete, sender=Booking)
def booking_post_delete(sender, instance, **kwargs):
    AvailabilityService.invalidate_event(instance.slot.event_id)


@receiver([post_save, post_delete], sender=BusyBlock)
@receiver([post_save, post_delete], sender=AvailabilityPattern)
def host_input_changed(sender, instance, **kwargs):
    AvailabilityService.invalidate_host(instance.host_id)


@receiver(post_save, sender=Host)
def host_post_save(sender, instance, created, **kwargs):
    """Calendar connection and meeting caps change what a host can take."""
    tracked = (
        "google_access_token",
        "google_refresh_token",
        "max_meetings_per_day",
        "max_meetings_per_week",
    )
    if not created and any(instance.tracker.has_changed(field) for field in tracked):
        AvailabilityService.invalidate_host(instance.id)


@receiver([post_save, post_delete], sender=EventHost)
def event_host_changed(sender, instance, **kwargs):
    AvailabilityService.invalidate_event(instance.event_id)


@receiver(post_save, sender=Event)
def event_post_save(sender, instance, created, **kwargs):
    if not created:
        AvailabilityService.invalidate_event(instance.id)


@receiver([post_save, post_delete], sender=CompanyHoliday)
def company_holiday_changed(sender, instance, **kwargs):
    for event_id in Event.objects.values_list("id", flat=True):
        AvailabilityService.invalidate_event(event_id)
    logger.info(f"Company holiday {instance.date} changed; invalidated all listings")
