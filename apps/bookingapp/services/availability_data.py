# apps/bookingapp/services/availability_data.py
"""
Read-side queries feeding the availability engine.

Every function returns plain values (``PatternRule``, ``TimeRange``, dicts,
ints) so the engine never touches the ORM.
"""

import logging
from collections import namedtuple
from datetime import datetime
from typing import Dict, List, Optional

from django.conf import settings
from django.db.models import Count, Q

from algorithms.availability.snapshot import PatternRule
from algorithms.availability.time_windows import TimeRange
from apps.bookingapp.models import Booking, Slot
from apps.eventsapp.models import Event
from apps.hostsapp.models import AvailabilityPattern, BusyBlock

logger = logging.getLogger(__name__)

Participant = namedtuple("Participant", ["host", "role", "priority"])


def get_availability_patterns(host_id) -> List[PatternRule]:
    """Active weekly patterns of a host"""
    default_tz = getattr(settings, "DEFAULT_EVENT_TIMEZONE", "America/New_York")
    patterns = AvailabilityPattern.objects.filter(host_id=host_id, is_active=True).order_by(
        "day_of_week", "start_time"
    )
    return [
        PatternRule(
            pattern.day_of_week,
            pattern.start_time,
            pattern.end_time,
            pattern.timezone or default_tz,
        )
        for pattern in patterns
    ]


def get_busy_blocks(host_id, range_start: datetime, range_end: datetime) -> List[TimeRange]:
    """Busy intervals of a host overlapping ``[range_start, range_end)``"""
    blocks = (
        BusyBlock.objects.filter(
            host_id=host_id, start_time__lt=range_end, end_time__gt=range_start
        )
        .order_by("start_time")
        .values_list("start_time", "end_time")
    )
    return [TimeRange(start, end) for start, end in blocks]


def get_participating_hosts(event_id, include_backups: bool = False) -> List[Participant]:
    """
    Hosts taking part in an event, in participation order.

    Multi-host events use their owner/host memberships (backups only when
    asked for) and fall back to the primary host. Single-host events use the
    primary host, falling back to the first owner membership.
    """
    event = Event.objects.select_related("host").get(id=event_id)
    roles = ("owner", "host", "backup") if include_backups else ("owner", "host")
    memberships = [
        Participant(m.host, m.role, m.priority)
        for m in event.event_hosts.select_related("host").filter(role__in=roles)
    ]

    if event.is_multi_host:
        if any(p.role in ("owner", "host") for p in memberships):
            return memberships
        if event.host is not None:
            return [Participant(event.host, "owner", 3)] + [
                p for p in memberships if p.host.pk != event.host.pk
            ]
        return memberships

    if event.host is not None:
        return [Participant(event.host, "owner", 3)]
    owners = [p for p in memberships if p.role == "owner"]
    return owners[:1]


def get_existing_slots(event_id, range_start: datetime, range_end: datetime) -> List[Dict]:
    """Non-cancelled slots of an event overlapping the range, with booking counts"""
    slots = (
        Slot.objects.active()
        .filter(event_id=event_id)
        .overlapping(range_start, range_end)
        .annotate(
            booking_count=Count("bookings", filter=Q(bookings__cancelled_at__isnull=True))
        )
        .order_by("start_time")
    )
    return [
        {
            "id": slot.id,
            "start_time": slot.start_time,
            "end_time": slot.end_time,
            "booking_count": slot.booking_count,
        }
        for slot in slots
    ]


def get_meeting_counts(
    host_id,
    range_start: datetime,
    range_end: datetime,
    event_id: Optional[object] = None,
) -> int:
    """
    Count meetings starting within ``[range_start, range_end)``.

    With a host: non-cancelled slots the host owns across all events (the
    slot's assigned host, or the event's primary host when unassigned).
    Without a host: active bookings of ``event_id``.
    """
    if host_id is not None:
        return (
            Slot.objects.active()
            .filter(start_time__gte=range_start, start_time__lt=range_end)
            .filter(
                Q(assigned_host_id=host_id)
                | Q(assigned_host__isnull=True, event__host_id=host_id)
            )
            .count()
        )

    if event_id is None:
        raise ValueError("Either host_id or event_id is required")

    return Booking.objects.filter(
        slot__event_id=event_id,
        slot__is_cancelled=False,
        cancelled_at__isnull=True,
        slot__start_time__gte=range_start,
        slot__start_time__lt=range_end,
    ).count()
