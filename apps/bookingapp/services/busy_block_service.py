# apps/bookingapp/services/busy_block_service.py
import logging
from datetime import datetime
from typing import Callable, Iterable, Optional, Tuple

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.utils.module_loading import import_string

from algorithms.availability.busy_blocks import merge_intervals
from algorithms.availability.time_windows import TimeRange
from apps.bookingapp.services.availability_service import AvailabilityService
from apps.hostsapp.models import BusyBlock, Host

logger = logging.getLogger(__name__)

Interval = Tuple[datetime, datetime]


class BusyBlockService:
    """Maintains the local busy-block table the availability engine reads."""

    @staticmethod
    def get_provider() -> Optional[Callable]:
        """Calendar provider configured by ``BUSY_BLOCK_PROVIDER``, if any."""
        path = getattr(settings, "BUSY_BLOCK_PROVIDER", "")
        if not path:
            return None
        return import_string(path)

    @staticmethod
    @transaction.atomic
    def replace_busy_blocks(
        host: Host,
        range_start: datetime,
        range_end: datetime,
        intervals: Iterable[Interval],
        source: str = "google_calendar",
    ) -> int:
        """
        Replace a host's busy blocks of one source inside a range.

        Intervals are clipped to the range and merged before they are stored.
        Stored blocks crossing a range edge are trimmed to the part outside.

        Returns:
            Number of busy blocks written
        """
        window = TimeRange(range_start, range_end)
        clipped = []
        for start, end in intervals:
            if end <= start:
                logger.debug(f"Ignoring empty busy interval {start} - {end} for host {host.id}")
                continue
            interval = TimeRange(max(start, range_start), min(end, range_end))
            if interval.overlaps(window):
                clipped.append(interval)

        stored = BusyBlock.objects.filter(host=host, source=source)

        # Blocks reaching past either edge keep their part outside the range
        straddling = stored.filter(start_time__lt=range_end, end_time__gt=range_start).filter(
            Q(start_time__lt=range_start) | Q(end_time__gt=range_end)
        )
        for block in straddling:
            if block.start_time < range_start and block.end_time > range_end:
                BusyBlock.objects.create(
                    host=host,
                    start_time=range_end,
                    end_time=block.end_time,
                    source=source,
                    external_event_id=block.external_event_id,
                )
            if block.start_time < range_start:
                block.end_time = range_start
            else:
                block.start_time = range_end
            block.save(update_fields=["start_time", "end_time", "synced_at"])

        stored.filter(start_time__gte=range_start, end_time__lte=range_end).delete()

        blocks = BusyBlock.objects.bulk_create(
            [
                BusyBlock(host=host, start_time=i.start, end_time=i.end, source=source)
                for i in merge_intervals(clipped)
            ]
        )
        # bulk_create sends no post_save signals
        AvailabilityService.invalidate_host(host.id)
        logger.info(f"Stored {len(blocks)} {source} busy blocks for host {host.id}")
        return len(blocks)
