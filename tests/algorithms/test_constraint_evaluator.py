from datetime import date, datetime, time

import pytz
from django.test import SimpleTestCase

from algorithms.availability import ConstraintEvaluator, ReasonCode
from algorithms.availability.constraint_evaluator import (
    DayLevelResult,
    SlotClassification,
    SlotEnumerationResult,
    summarize,
)
from algorithms.availability.snapshot import HostSnapshot

from .support import (
    MONDAY,
    NEW_YORK,
    host,
    local,
    monday_pattern,
    snapshot,
    window,
)


def evaluate(*args, **kwargs):
    return ConstraintEvaluator(snapshot(*args, **kwargs)).evaluate()


def codes(result):
    return {slot.code for slot in result.slots}


def slot_at(result, hour, minute=0):
    start = local(MONDAY, hour, minute)
    return next(slot for slot in result.slots if slot.start_time == start)


class DayLevelTest(SimpleTestCase):
    def test_no_patterns_at_all(self):
        result = evaluate([host(patterns=[])], min_notice_hours=24)

        self.assertIsInstance(result, DayLevelResult)
        self.assertEqual(result.code, ReasonCode.NOAVAILABILITY)
        self.assertEqual(result.slots, [])
        self.assertIn("Settings", result.reason)

    def test_no_host(self):
        result = evaluate([])
        self.assertIsInstance(result, DayLevelResult)
        self.assertEqual(result.code, ReasonCode.NOHOST)

    def test_no_patterns_on_this_weekday(self):
        result = evaluate([host()], target_date=date(2030, 1, 8))

        self.assertEqual(result.code, ReasonCode.OUTSIDEHOURS)
        self.assertEqual(result.reason, "No availability configured for Tuesdays")
        data = result.to_dict()
        self.assertEqual(data["day_name"], "Tuesday")
        self.assertEqual(data["day_of_week"], 2)
        self.assertEqual(data["slots"], [])

    def test_collective_host_without_ranges_fails_whole_day(self):
        hosts = [
            host("host-a"),
            host("host-b", patterns=[monday_pattern(day_of_week=2)]),
        ]
        result = evaluate(hosts, meeting_type="collective")
        self.assertIsInstance(result, DayLevelResult)
        self.assertEqual(result.code, ReasonCode.OUTSIDEHOURS)


class EnumerationTest(SimpleTestCase):
    def test_open_day_is_available(self):
        result = evaluate([host()])

        self.assertIsInstance(result, SlotEnumerationResult)
        self.assertEqual(len(result.slots), 16)
        self.assertEqual(result.slots[0].start_time, local(MONDAY, 9))
        self.assertEqual(result.slots[0].code, ReasonCode.AVAILABLE)
        self.assertEqual(result.slots[-1].end_time, local(MONDAY, 17))
        self.assertEqual(result.summary["available"], 16)
        self.assertIsNone(result.summary["top_blocking_reason"])

    def test_window_before_pattern_is_outside_hours(self):
        evaluator = ConstraintEvaluator(snapshot([host()]))
        classification = evaluator.classify(window(MONDAY, 8, 30))
        self.assertEqual(classification.code, ReasonCode.OUTSIDEHOURS)

    def test_unaligned_pattern_start_is_enumerated_from_full_hour(self):
        result = evaluate([host(patterns=[monday_pattern(time(9, 15), time(11, 0))])])

        self.assertEqual(result.slots[0].start_time, local(MONDAY, 9))
        self.assertEqual(result.slots[0].code, ReasonCode.OUTSIDEHOURS)
        self.assertEqual(slot_at(result, 10).code, ReasonCode.AVAILABLE)

    def test_calendar_block(self):
        busy = [window(MONDAY, 10)]
        result = evaluate([host(busy_blocks=busy)])

        blocked = slot_at(result, 10)
        self.assertEqual(blocked.code, ReasonCode.CALENDAR)
        self.assertEqual(blocked.details, "Busy: 10:00 AM - 10:30 AM")
        self.assertEqual(slot_at(result, 9, 30).code, ReasonCode.AVAILABLE)
        self.assertEqual(slot_at(result, 10, 30).code, ReasonCode.AVAILABLE)

    def test_disconnected_calendar(self):
        result = evaluate([host(connected=False)])

        self.assertEqual(codes(result), {ReasonCode.NOCAL})
        self.assertIn("Connect your calendar", result.slots[0].details)

    def test_buffer_and_direct_overlap(self):
        existing = [window(MONDAY, 14, duration=60)]
        result = evaluate([host()], existing=existing, buffer_before=15, buffer_after=15)

        adjacent = slot_at(result, 15)
        self.assertEqual(adjacent.code, ReasonCode.BUFFER)
        self.assertEqual(adjacent.details, "15min before / 15min after")
        self.assertEqual(slot_at(result, 14, 30).code, ReasonCode.BOOKED)
        self.assertEqual(slot_at(result, 13, 30).code, ReasonCode.BUFFER)
        self.assertEqual(slot_at(result, 15, 30).code, ReasonCode.AVAILABLE)

    def test_adjacent_slot_without_buffers_is_available(self):
        existing = [window(MONDAY, 14, duration=60)]
        result = evaluate([host()], existing=existing)

        self.assertEqual(slot_at(result, 15).code, ReasonCode.AVAILABLE)
        self.assertEqual(slot_at(result, 13, 30).code, ReasonCode.AVAILABLE)

    def test_host_daily_limit(self):
        result = evaluate([host(max_meetings_per_day=2, daily_count=2)])

        self.assertEqual(codes(result), {ReasonCode.DAILYMAX})
        self.assertEqual(result.slots[0].reason, "Daily meeting limit reached (2)")

    def test_host_weekly_limit(self):
        result = evaluate([host(max_meetings_per_week=5, weekly_count=5)])

        self.assertEqual(codes(result), {ReasonCode.WEEKLYMAX})
        self.assertEqual(result.slots[0].reason, "Weekly meeting limit reached (5)")

    def test_event_daily_limit(self):
        result = evaluate([host()], max_daily_bookings=3, daily_booking_count=3)
        self.assertEqual(codes(result), {ReasonCode.DAILYMAX})

    def test_event_weekly_limit_below_cap_is_available(self):
        result = evaluate([host()], max_weekly_bookings=3, weekly_booking_count=2)
        self.assertEqual(codes(result), {ReasonCode.AVAILABLE})

    def test_too_soon_with_earliest_time(self):
        now = pytz.timezone(NEW_YORK).localize(datetime(2030, 1, 6, 12, 0))
        result = evaluate([host()], now=now)

        early = slot_at(result, 9)
        self.assertEqual(early.code, ReasonCode.TOOSOON)
        self.assertEqual(early.details, "Earliest bookable: 12:00 PM")
        self.assertEqual(early.reason, "Within 24-hour minimum notice period")
        self.assertEqual(slot_at(result, 12).code, ReasonCode.AVAILABLE)

    def test_too_late(self):
        result = evaluate([host()], booking_window_days=1)

        self.assertEqual(codes(result), {ReasonCode.TOOLATE})
        self.assertEqual(result.slots[0].reason, "Outside 1-day booking window")

    def test_past_windows(self):
        now = local(MONDAY, 12)
        result = evaluate([host()], now=now, min_notice_hours=0)

        self.assertEqual(slot_at(result, 11, 30).code, ReasonCode.PAST)
        self.assertEqual(slot_at(result, 12).code, ReasonCode.AVAILABLE)

    def test_ignore_busy_blocks_opens_fixed_day(self):
        hosts = [host(patterns=[], connected=False)]
        result = evaluate(hosts, ignore_busy_blocks=True)

        self.assertEqual(len(result.slots), 32)
        self.assertEqual(result.slots[0].start_time, local(MONDAY, 6))
        self.assertEqual(result.slots[-1].end_time, local(MONDAY, 22))
        self.assertEqual(codes(result), {ReasonCode.AVAILABLE})

    def test_pattern_from_other_timezone(self):
        tokyo = "Asia/Tokyo"
        tuesday = date(2030, 1, 8)
        hosts = [host(patterns=[monday_pattern(time(20, 0), time(22, 0))])]

        monday = evaluate(hosts, timezone=tokyo)
        self.assertEqual(monday.code, ReasonCode.OUTSIDEHOURS)

        result = evaluate(hosts, timezone=tokyo, target_date=tuesday)
        self.assertEqual(len(result.slots), 4)
        self.assertEqual(result.slots[0].start_time, local(tuesday, 10, tz=tokyo))
        self.assertEqual(codes(result), {ReasonCode.AVAILABLE})


class CheckOrderTest(SimpleTestCase):
    def test_past_wins_over_everything(self):
        now = local(MONDAY, 20)
        evaluator = ConstraintEvaluator(
            snapshot([host(patterns=[], connected=False)], now=now, booking_window_days=0)
        )
        self.assertEqual(evaluator.classify(window(MONDAY, 7)).code, ReasonCode.PAST)

    def test_too_soon_wins_over_outside_hours(self):
        now = local(MONDAY, 6)
        evaluator = ConstraintEvaluator(snapshot([host()], now=now))
        self.assertEqual(evaluator.classify(window(MONDAY, 7)).code, ReasonCode.TOOSOON)

    def test_outside_hours_wins_over_calendar(self):
        evaluator = ConstraintEvaluator(snapshot([host(busy_blocks=[window(MONDAY, 18)])]))
        self.assertEqual(evaluator.classify(window(MONDAY, 18)).code, ReasonCode.OUTSIDEHOURS)

    def test_calendar_wins_over_limits_and_bookings(self):
        busy = [window(MONDAY, 10)]
        evaluator = ConstraintEvaluator(
            snapshot(
                [host(busy_blocks=busy, max_meetings_per_day=1, daily_count=1)],
                existing=[window(MONDAY, 10)],
            )
        )
        self.assertEqual(evaluator.classify(window(MONDAY, 10)).code, ReasonCode.CALENDAR)

    def test_limits_win_over_bookings(self):
        evaluator = ConstraintEvaluator(
            snapshot(
                [host(max_meetings_per_day=1, daily_count=1)],
                existing=[window(MONDAY, 10)],
            )
        )
        self.assertEqual(evaluator.classify(window(MONDAY, 10)).code, ReasonCode.DAILYMAX)


class PropertiesTest(SimpleTestCase):
    def test_repeated_evaluation_is_identical(self):
        data = snapshot(
            [host(busy_blocks=[window(MONDAY, 11)])],
            existing=[window(MONDAY, 14)],
            buffer_after=10,
        )
        first = ConstraintEvaluator(data).evaluate()
        second = ConstraintEvaluator(data).evaluate()
        self.assertEqual(first.to_dict(), second.to_dict())

    def test_larger_buffers_only_block_more(self):
        existing = [window(MONDAY, 11), window(MONDAY, 14, duration=45)]
        blocked_codes = {ReasonCode.BUFFER, ReasonCode.BOOKED}
        previous = set()
        for buffer in (0, 10, 15, 30, 60):
            result = evaluate(
                [host()], existing=existing, buffer_before=buffer, buffer_after=buffer
            )
            blocked = {slot.start_time for slot in result.slots if slot.code in blocked_codes}
            self.assertTrue(previous <= blocked, f"buffer {buffer} unblocked a window")
            previous = blocked


class MultiHostTest(SimpleTestCase):
    def test_round_robin_union_keeps_attribution(self):
        hosts = [
            host("host-a", patterns=[monday_pattern(time(9, 0), time(12, 0))]),
            host("host-b", patterns=[monday_pattern(time(11, 0), time(17, 0))]),
        ]
        evaluator = ConstraintEvaluator(snapshot(hosts, meeting_type="round_robin"))

        self.assertEqual(evaluator.eligible_hosts(window(MONDAY, 9)), ["host-a"])
        self.assertEqual(evaluator.eligible_hosts(window(MONDAY, 11)), ["host-a", "host-b"])
        self.assertEqual(evaluator.eligible_hosts(window(MONDAY, 15)), ["host-b"])

    def test_round_robin_busy_host_dropped_from_eligible(self):
        hosts = [
            host("host-a", busy_blocks=[window(MONDAY, 10)]),
            host("host-b"),
        ]
        evaluator = ConstraintEvaluator(snapshot(hosts, meeting_type="round_robin"))

        classification = evaluator.classify(window(MONDAY, 10))
        self.assertEqual(classification.code, ReasonCode.AVAILABLE)
        self.assertEqual(classification.eligible_hosts, ["host-b"])

    def test_round_robin_capped_host_dropped_from_eligible(self):
        hosts = [
            host("host-a", max_meetings_per_day=1, daily_count=1),
            host("host-b"),
        ]
        evaluator = ConstraintEvaluator(snapshot(hosts, meeting_type="round_robin"))
        self.assertEqual(evaluator.eligible_hosts(window(MONDAY, 10)), ["host-b"])

    def test_calendar_reported_when_one_connected_host_is_busy(self):
        hosts = [
            host("host-a", connected=False),
            host("host-b", busy_blocks=[window(MONDAY, 10)]),
        ]
        evaluator = ConstraintEvaluator(snapshot(hosts, meeting_type="round_robin"))
        self.assertEqual(evaluator.classify(window(MONDAY, 10)).code, ReasonCode.CALENDAR)

    def test_collective_requires_every_host(self):
        hosts = [
            host("host-a"),
            host("host-b", patterns=[monday_pattern(time(12, 0), time(17, 0))]),
        ]
        result = evaluate(hosts, meeting_type="collective")

        self.assertEqual(slot_at(result, 10).code, ReasonCode.OUTSIDEHOURS)
        self.assertEqual(slot_at(result, 13).code, ReasonCode.AVAILABLE)
        self.assertEqual(slot_at(result, 13).eligible_hosts, ["host-a", "host-b"])

    def test_collective_blocked_by_any_busy_host(self):
        hosts = [host("host-a"), host("host-b", busy_blocks=[window(MONDAY, 13)])]
        result = evaluate(hosts, meeting_type="collective")
        self.assertEqual(slot_at(result, 13).code, ReasonCode.CALENDAR)

    def test_failed_host_is_never_available(self):
        failed = HostSnapshot("host-a", patterns=None, busy_blocks=None, calendar_connected=True)
        hosts = [failed, host("host-b")]
        evaluator = ConstraintEvaluator(snapshot(hosts, meeting_type="round_robin"))

        classification = evaluator.classify(window(MONDAY, 10))
        self.assertEqual(classification.code, ReasonCode.AVAILABLE)
        self.assertEqual(classification.eligible_hosts, ["host-b"])


class SummaryTest(SimpleTestCase):
    def _slot(self, hour, code):
        return SlotClassification(window(MONDAY, hour), code, code.value)

    def test_counts_by_code(self):
        slots = [
            self._slot(9, ReasonCode.AVAILABLE),
            self._slot(10, ReasonCode.CALENDAR),
            self._slot(11, ReasonCode.BOOKED),
            self._slot(12, ReasonCode.BOOKED),
        ]
        summary = summarize(slots)

        self.assertEqual(summary["total"], 4)
        self.assertEqual(summary["available"], 1)
        self.assertEqual(summary["blocked"], 3)
        self.assertEqual(summary["by_code"], {"CALENDAR": 1, "BOOKED": 2})
        self.assertEqual(summary["top_blocking_reason"], {"code": "BOOKED", "count": 2})

    def test_tie_keeps_first_seen_code(self):
        slots = [
            self._slot(9, ReasonCode.CALENDAR),
            self._slot(10, ReasonCode.BOOKED),
            self._slot(11, ReasonCode.BOOKED),
            self._slot(12, ReasonCode.CALENDAR),
        ]
        self.assertEqual(summarize(slots)["top_blocking_reason"]["code"], "CALENDAR")

    def test_to_dict_serialises_windows(self):
        result = evaluate([host()])
        data = result.to_dict()

        self.assertEqual(data["timezone"], NEW_YORK)
        self.assertEqual(data["day_name"], "Monday")
        self.assertEqual(data["slots"][0]["code"], "AVAILABLE")
        self.assertEqual(data["slots"][0]["start_time"], local(MONDAY, 9).isoformat())
        self.assertNotIn("details", data["slots"][0])
