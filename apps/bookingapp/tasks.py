# apps/bookingapp/tasks.py
import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.utils import timezone

from apps.bookingapp.services.busy_block_service import BusyBlockService
from apps.hostsapp.models import Host

logger = logging.getLogger(__name__)


@shared_task
def sync_host_busy_blocks(host_id):
    """Refresh one host's calendar busy blocks over the sync horizon"""
    provider = BusyBlockService.get_provider()
    if provider is None:
        return "No busy block provider configured"

    try:
        host = Host.objects.get(id=host_id)
    except Host.DoesNotExist:
        logger.warning(f"Busy block sync skipped: host {host_id} not found")
        return f"Host {host_id} not found"

    if not host.calendar_connected:
        return f"Host {host_id} has no calendar connected"

    range_start = timezone.now()
    range_end = range_start + timedelta(days=getattr(settings, "BUSY_BLOCK_SYNC_DAYS", 60))
    intervals = provider(host, range_start, range_end)
    count = BusyBlockService.replace_busy_blocks(host, range_start, range_end, intervals)
    return f"Synced {count} busy blocks for host {host_id}"


@shared_task
def sync_all_busy_blocks():
    """Fan out busy block sync to every calendar-connected host"""
    hosts = Host.objects.exclude(google_access_token="").exclude(google_refresh_token="")

    count = 0
    for host_id in hosts.values_list("id", flat=True):
        sync_host_busy_blocks.delay(str(host_id))
        count += 1

    return f"Scheduled busy block sync for {count} hosts"
