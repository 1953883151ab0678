"""
Tests for the pure streak rules.
"""

import datetime
import unittest

from lingotrack.common.clock import ManualClock
from lingotrack.streaks.calculator import (
    analyze_streak_status, coerce_activity_date, compute_next_streak
)
from lingotrack.streaks.models import StreakRecord

TODAY = datetime.date(2024, 3, 10)


def record(current, longest, last):
    return StreakRecord(
        user_id="u1", language="german",
        current_streak=current, longest_streak=longest, last_activity_date=last
    )


class TestComputeNextStreak(unittest.TestCase):
    """Test the recordActivity recurrence."""

    def test_first_activity_starts_at_one(self):
        self.assertEqual(compute_next_streak(None, TODAY), (1, 1))

    def test_record_without_date_starts_at_one(self):
        self.assertEqual(compute_next_streak(record(0, 4, None), TODAY), (1, 4))

    def test_continuation_from_yesterday(self):
        last = TODAY - datetime.timedelta(days=1)
        self.assertEqual(compute_next_streak(record(4, 4, last), TODAY), (5, 5))
        self.assertEqual(compute_next_streak(record(4, 10, last), TODAY), (5, 10))

    def test_same_day_is_idempotent(self):
        self.assertEqual(compute_next_streak(record(4, 6, TODAY), TODAY), (4, 6))

    def test_gap_resets_to_one(self):
        last = TODAY - datetime.timedelta(days=3)
        self.assertEqual(compute_next_streak(record(8, 8, last), TODAY), (1, 8))

    def test_future_date_resets_to_one(self):
        last = TODAY + datetime.timedelta(days=2)
        self.assertEqual(compute_next_streak(record(3, 5, last), TODAY), (1, 5))

    def test_garbage_date_resets_to_one(self):
        self.assertEqual(compute_next_streak(record(3, 5, "yesterday-ish"), TODAY), (1, 5))

    def test_iso_string_date_is_understood(self):
        self.assertEqual(compute_next_streak(record(2, 2, "2024-03-09"), TODAY), (3, 3))


class TestCoerceActivityDate(unittest.TestCase):

    def test_accepted_forms(self):
        self.assertEqual(coerce_activity_date(TODAY), TODAY)
        self.assertEqual(coerce_activity_date(datetime.datetime(2024, 3, 10, 23, 59)), TODAY)
        self.assertEqual(coerce_activity_date("2024-03-10T08:00:00+00:00"), TODAY)

    def test_rejected_forms(self):
        self.assertIsNone(coerce_activity_date(None))
        self.assertIsNone(coerce_activity_date("n/a"))
        self.assertIsNone(coerce_activity_date(20240310))


class TestAnalyzeStreakStatus(unittest.TestCase):

    def setUp(self):
        self.clock = ManualClock(datetime.datetime(2024, 3, 10, 18, 0, tzinfo=datetime.timezone.utc))

    def test_today_is_active_and_safe(self):
        status = analyze_streak_status(TODAY, self.clock)
        self.assertTrue(status.is_active)
        self.assertFalse(status.is_at_risk)
        self.assertIsNone(status.hours_remaining)

    def test_yesterday_is_at_risk_with_hours_left(self):
        status = analyze_streak_status(TODAY - datetime.timedelta(days=1), self.clock)
        self.assertTrue(status.is_active)
        self.assertTrue(status.is_at_risk)
        self.assertEqual(status.hours_remaining, 6)

    def test_hours_round_up(self):
        self.clock.set(datetime.datetime(2024, 3, 10, 22, 30, tzinfo=datetime.timezone.utc))
        status = analyze_streak_status(TODAY - datetime.timedelta(days=1), self.clock)
        self.assertEqual(status.hours_remaining, 2)

    def test_older_dates_are_inactive(self):
        self.assertFalse(analyze_streak_status(TODAY - datetime.timedelta(days=2), self.clock).is_active)
        self.assertFalse(analyze_streak_status(None, self.clock).is_active)
        self.assertFalse(analyze_streak_status(TODAY + datetime.timedelta(days=1), self.clock).is_active)

    def test_day_boundary_follows_clock_timezone(self):
        # 03:00 UTC on the 11th is still the evening of the 10th in New York
        clock = ManualClock(
            datetime.datetime(2024, 3, 11, 3, 0, tzinfo=datetime.timezone.utc),
            timezone="America/New_York"
        )
        self.assertEqual(clock.today(), TODAY)
        self.assertFalse(analyze_streak_status(TODAY, clock).is_at_risk)


if __name__ == '__main__':
    unittest.main()
