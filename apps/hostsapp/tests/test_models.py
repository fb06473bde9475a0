# apps/hostsapp/tests/test_models.py
from datetime import time

from django.core.exceptions import ValidationError
from django.test import TestCase

from apps.hostsapp.tests.factories import AvailabilityPatternFactory, HostFactory


class HostModelTest(TestCase):
    """Test cases for the Host model"""

    def test_calendar_connected_needs_both_tokens(self):
        self.assertTrue(HostFactory(connected=True).calendar_connected)
        self.assertFalse(HostFactory().calendar_connected)
        self.assertFalse(HostFactory(google_access_token="token").calendar_connected)

    def test_string_representation(self):
        host = HostFactory(name="Ada", email="ada@example.com")
        self.assertEqual(str(host), "Ada <ada@example.com>")


class AvailabilityPatternModelTest(TestCase):
    """Test cases for the AvailabilityPattern model"""

    def test_end_must_follow_start(self):
        pattern = AvailabilityPatternFactory.build(
            host=HostFactory(), start_time=time(17, 0), end_time=time(9, 0)
        )
        with self.assertRaises(ValidationError):
            pattern.clean()

    def test_weekday_display_starts_on_sunday(self):
        self.assertEqual(AvailabilityPatternFactory(day_of_week=0).get_day_of_week_display(), "Sunday")
        self.assertEqual(AvailabilityPatternFactory(day_of_week=1).get_day_of_week_display(), "Monday")
