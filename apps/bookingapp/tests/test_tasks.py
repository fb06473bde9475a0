# apps/bookingapp/tests/test_tasks.py
from datetime import timedelta

from django.test import TestCase, override_settings

from apps.bookingapp.tasks import sync_all_busy_blocks, sync_host_busy_blocks
from apps.hostsapp.models import BusyBlock
from apps.hostsapp.tests.factories import HostFactory


def fake_provider(host, range_start, range_end):
    """Calendar provider returning one busy hour a day into the range"""
    start = range_start + timedelta(days=1)
    return [(start, start + timedelta(hours=1))]


@override_settings(BUSY_BLOCK_PROVIDER="apps.bookingapp.tests.test_tasks.fake_provider")
class BusyBlockSyncTaskTest(TestCase):
    """Test cases for the busy block sync tasks"""

    def test_sync_connected_host(self):
        host = HostFactory(connected=True)

        message = sync_host_busy_blocks(str(host.id))

        self.assertEqual(message, f"Synced 1 busy blocks for host {host.id}")
        self.assertEqual(BusyBlock.objects.filter(host=host).count(), 1)

    def test_disconnected_host_is_skipped(self):
        host = HostFactory()
        self.assertIn("no calendar connected", sync_host_busy_blocks(str(host.id)))
        self.assertFalse(BusyBlock.objects.exists())

    def test_unknown_host(self):
        self.assertIn("not found", sync_host_busy_blocks("7a3f9d52-2b7e-4c62-9c3e-0d5f2c1b8e41"))

    def test_sync_all_only_connected_hosts(self):
        HostFactory.create_batch(2, connected=True)
        HostFactory()

        message = sync_all_busy_blocks()

        self.assertEqual(message, "Scheduled busy block sync for 2 hosts")
        self.assertEqual(BusyBlock.objects.count(), 2)

    @override_settings(BUSY_BLOCK_PROVIDER="")
    def test_without_provider(self):
        host = HostFactory(connected=True)
        self.assertEqual(sync_host_busy_blocks(str(host.id)), "No busy block provider configured")
