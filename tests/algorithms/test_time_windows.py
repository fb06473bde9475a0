from datetime import date, datetime, time, timedelta

import pytz
from django.test import SimpleTestCase

from algorithms.availability.time_windows import (
    TimeRange,
    WindowSequence,
    ceil_to_hour,
    day_of_week,
    floor_to_hour,
    intervals_overlap,
    local_day_range,
    localize,
    week_start,
)

from .support import NEW_YORK, local

UTC = pytz.UTC


def utc(hour, minute=0, day=7):
    return UTC.localize(datetime(2030, 1, day, hour, minute))


class TimeRangeTest(SimpleTestCase):
    def test_touching_ranges_do_not_overlap(self):
        first = TimeRange(utc(9), utc(10))
        second = TimeRange(utc(10), utc(11))
        self.assertFalse(first.overlaps(second))
        self.assertFalse(intervals_overlap(utc(9), utc(10), utc(10), utc(11)))

    def test_partial_overlap(self):
        self.assertTrue(TimeRange(utc(9), utc(10, 30)).overlaps(TimeRange(utc(10), utc(11))))

    def test_contains_range(self):
        outer = TimeRange(utc(9), utc(17))
        self.assertTrue(outer.contains_range(TimeRange(utc(9), utc(9, 30))))
        self.assertTrue(outer.contains_range(TimeRange(utc(16, 30), utc(17))))
        self.assertFalse(outer.contains_range(TimeRange(utc(16, 45), utc(17, 15))))

    def test_expand_adds_buffers(self):
        expanded = TimeRange(utc(14), utc(15)).expand(15, 10)
        self.assertEqual(expanded, TimeRange(utc(13, 45), utc(15, 10)))

    def test_rejects_inverted_range(self):
        with self.assertRaises(ValueError):
            TimeRange(utc(10), utc(9))

    def test_from_record(self):
        record = {"start_time": utc(9), "end_time": utc(10)}
        self.assertEqual(TimeRange.from_record(record), TimeRange(utc(9), utc(10)))


class CalendarHelpersTest(SimpleTestCase):
    def test_day_of_week_starts_on_sunday(self):
        self.assertEqual(day_of_week(date(2030, 1, 6)), 0)  # Sunday
        self.assertEqual(day_of_week(date(2030, 1, 7)), 1)  # Monday
        self.assertEqual(day_of_week(date(2030, 1, 12)), 6)  # Saturday

    def test_week_start_is_previous_sunday(self):
        self.assertEqual(week_start(date(2030, 1, 9)), date(2030, 1, 6))
        self.assertEqual(week_start(date(2030, 1, 6)), date(2030, 1, 6))

    def test_localize_returns_utc(self):
        instant = localize(date(2030, 1, 7), time(9, 0), NEW_YORK)
        self.assertEqual(instant, utc(14))

    def test_local_day_range_across_dst_change(self):
        # 2030-03-10 is the spring-forward Sunday in New York
        day = local_day_range(date(2030, 3, 10), NEW_YORK)
        self.assertEqual(day.duration, timedelta(hours=23))

    def test_floor_and_ceil_to_hour(self):
        instant = local(date(2030, 1, 7), 9, 20)
        self.assertEqual(floor_to_hour(instant, NEW_YORK), local(date(2030, 1, 7), 9))
        self.assertEqual(ceil_to_hour(instant, NEW_YORK), local(date(2030, 1, 7), 10))
        on_the_hour = local(date(2030, 1, 7), 9)
        self.assertEqual(ceil_to_hour(on_the_hour, NEW_YORK), on_the_hour)


class WindowSequenceTest(SimpleTestCase):
    def test_steps_by_increment_until_last_end(self):
        windows = list(WindowSequence(utc(9), utc(11), 30, 30))
        self.assertEqual([w.start for w in windows], [utc(9), utc(9, 30), utc(10), utc(10, 30)])
        self.assertTrue(all(w.duration == timedelta(minutes=30) for w in windows))

    def test_longer_duration_than_increment(self):
        windows = list(WindowSequence(utc(9), utc(10), 60, 15))
        self.assertEqual(len(windows), 4)
        self.assertEqual(windows[-1], TimeRange(utc(9, 45), utc(10, 45)))

    def test_restartable(self):
        sequence = WindowSequence(utc(9), utc(12), 30, 45)
        self.assertEqual(list(sequence), list(sequence))
        self.assertEqual(len(sequence), len(list(sequence)))

    def test_empty_when_bounds_collapse(self):
        self.assertEqual(list(WindowSequence(utc(9), utc(9), 30, 30)), [])

    def test_rejects_non_positive_increment(self):
        with self.assertRaises(ValueError):
            WindowSequence(utc(9), utc(10), 30, 0)
