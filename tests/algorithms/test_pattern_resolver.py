from datetime import date, time

from django.test import SimpleTestCase

from algorithms.availability.pattern_resolver import (
    DAY_HAS_PATTERNS,
    DAY_NO_PATTERNS_AT_ALL,
    DAY_NO_PATTERNS_TODAY,
    PatternResolver,
    pattern_instances,
)
from algorithms.availability.snapshot import HostSnapshot, PatternRule

from .support import MONDAY, NEW_YORK, host, local, monday_pattern, window

TOKYO = "Asia/Tokyo"


class PatternInstancesTest(SimpleTestCase):
    def test_pattern_on_matching_day(self):
        instances = pattern_instances(monday_pattern(), MONDAY, NEW_YORK)
        self.assertEqual(len(instances), 1)
        self.assertEqual(instances[0].start, local(MONDAY, 9))
        self.assertEqual(instances[0].end, local(MONDAY, 17))

    def test_pattern_on_other_day(self):
        self.assertEqual(pattern_instances(monday_pattern(), date(2030, 1, 8), NEW_YORK), [])

    def test_pattern_in_other_timezone_lands_on_next_local_day(self):
        # Monday 20:00-22:00 New York is Tuesday 10:00-12:00 in Tokyo
        pattern = monday_pattern(time(20, 0), time(22, 0))
        tuesday = date(2030, 1, 8)
        self.assertEqual(pattern_instances(pattern, MONDAY, TOKYO), [])
        instances = pattern_instances(pattern, tuesday, TOKYO)
        self.assertEqual(len(instances), 1)
        self.assertEqual(instances[0].start, local(tuesday, 10, tz=TOKYO))


class PatternResolverTest(SimpleTestCase):
    def test_day_status(self):
        resolver = PatternResolver([host()], MONDAY, NEW_YORK)
        self.assertEqual(resolver.day_status(), DAY_HAS_PATTERNS)

        resolver = PatternResolver([host()], date(2030, 1, 8), NEW_YORK)
        self.assertEqual(resolver.day_status(), DAY_NO_PATTERNS_TODAY)

        resolver = PatternResolver([host(patterns=[])], MONDAY, NEW_YORK)
        self.assertEqual(resolver.day_status(), DAY_NO_PATTERNS_AT_ALL)

    def test_adjacent_patterns_are_not_merged(self):
        patterns = [
            monday_pattern(time(9, 0), time(10, 0)),
            monday_pattern(time(10, 0), time(11, 0)),
        ]
        resolver = PatternResolver([host(patterns=patterns)], MONDAY, NEW_YORK)
        self.assertTrue(resolver.host_covers("host-a", window(MONDAY, 9, 30)))
        self.assertFalse(resolver.host_covers("host-a", window(MONDAY, 9, 45)))

    def test_covering_hosts_keep_attribution(self):
        morning = host("host-a", patterns=[monday_pattern(time(9, 0), time(12, 0))])
        afternoon = host("host-b", patterns=[monday_pattern(time(12, 0), time(17, 0))])
        resolver = PatternResolver([morning, afternoon], MONDAY, NEW_YORK)
        self.assertEqual(resolver.covering_hosts(window(MONDAY, 10)), ["host-a"])
        self.assertEqual(resolver.covering_hosts(window(MONDAY, 13)), ["host-b"])
        self.assertEqual(resolver.covering_hosts(window(MONDAY, 11, 45)), [])

    def test_failed_host_never_covers(self):
        failed = HostSnapshot("host-a", patterns=None, busy_blocks=None)
        resolver = PatternResolver([failed], MONDAY, NEW_YORK)
        self.assertEqual(resolver.covering_hosts(window(MONDAY, 10)), [])

    def test_enumeration_bounds(self):
        hosts = [
            host("host-a", patterns=[monday_pattern(time(9, 30), time(12, 0))]),
            host("host-b", patterns=[monday_pattern(time(13, 0), time(16, 15))]),
        ]
        bounds = PatternResolver(hosts, MONDAY, NEW_YORK).enumeration_bounds()
        self.assertEqual(bounds.start, local(MONDAY, 9, 30))
        self.assertEqual(bounds.end, local(MONDAY, 16, 15))

    def test_rejects_invalid_day_of_week(self):
        with self.assertRaises(ValueError):
            PatternRule(7, time(9, 0), time(10, 0), NEW_YORK)
