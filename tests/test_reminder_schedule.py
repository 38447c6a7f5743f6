import unittest
from datetime import datetime, time

from reminder_schedule import (
    compute_schedule,
    count_per_day,
    resolve_window,
    InvalidScheduleError,
)

NOW = datetime(2026, 10, 19, 9, 30)
HOUR = 3600


class DaytimeWindowTests(unittest.TestCase):
    def test_two_hour_interval_between_eight_and_ten_pm(self):
        schedule = compute_schedule(2 * HOUR, time(8, 0), time(22, 0), NOW)

        self.assertEqual(len(schedule), 14)
        today = [r.fire_at for r in schedule if r.day_offset == 0]
        tomorrow = [r.fire_at for r in schedule if r.day_offset == 1]
        self.assertEqual([t.hour for t in today], [8, 10, 12, 14, 16, 18, 20])
        self.assertTrue(all(t.date() == NOW.date() for t in today))
        self.assertEqual(tomorrow, [datetime(2026, 10, 20, h, 0) for h in (8, 10, 12, 14, 16, 18, 20)])

    def test_window_end_is_excluded(self):
        schedule = compute_schedule(2 * HOUR, time(8, 0), time(22, 0), NOW)
        self.assertNotIn(22, {r.fire_at.hour for r in schedule})

    def test_identifiers_follow_day_and_slot(self):
        schedule = compute_schedule(2 * HOUR, time(8, 0), time(22, 0), NOW)

        self.assertEqual(schedule[0].identifier, "reminder-0-0")
        self.assertEqual(schedule[6].identifier, "reminder-0-6")
        self.assertEqual(schedule[7].identifier, "reminder-1-0")
        self.assertEqual(len({r.identifier for r in schedule}), len(schedule))

    def test_past_slots_are_kept(self):
        late = datetime(2026, 10, 19, 21, 0)
        schedule = compute_schedule(2 * HOUR, time(8, 0), time(22, 0), late)

        self.assertEqual(schedule[0].fire_at, datetime(2026, 10, 19, 8, 0))

    def test_seconds_are_zeroed_and_minutes_kept(self):
        now = datetime(2026, 10, 19, 9, 30, 45)
        schedule = compute_schedule(90 * 60, time(8, 15), time(12, 15), now)

        self.assertEqual([r.fire_at for r in schedule if r.day_offset == 0],
                         [datetime(2026, 10, 19, 8, 15), datetime(2026, 10, 19, 9, 45)])

    def test_same_inputs_same_schedule(self):
        first = compute_schedule(HOUR, time(7, 30), time(21, 0), NOW)
        second = compute_schedule(HOUR, time(7, 30), time(21, 0), NOW)
        self.assertEqual(first, second)


class MidnightWrapTests(unittest.TestCase):
    def test_late_night_window(self):
        schedule = compute_schedule(HOUR, time(22, 0), time(2, 0), NOW)

        self.assertEqual(count_per_day(HOUR, time(22, 0), time(2, 0), NOW), 4)
        self.assertEqual(len(schedule), 8)
        for day_offset in (0, 1):
            hours = [r.fire_at.hour for r in schedule if r.day_offset == day_offset]
            self.assertEqual(hours, [22, 23, 0, 1])

    def test_wrapped_window_is_resolved_to_next_day(self):
        start, end = resolve_window(time(22, 0), time(2, 0), NOW)

        self.assertEqual(start, datetime(2026, 10, 19, 22, 0))
        self.assertEqual(end, datetime(2026, 10, 20, 2, 0))

    def test_slots_are_anchored_to_the_target_day(self):
        schedule = compute_schedule(HOUR, time(22, 0), time(2, 0), NOW)
        day_one = [r.fire_at for r in schedule if r.day_offset == 1]

        self.assertTrue(all(t.date() == datetime(2026, 10, 20).date() for t in day_one))


class DegenerateWindowTests(unittest.TestCase):
    def test_interval_equal_to_window_gives_one_per_day(self):
        schedule = compute_schedule(4 * HOUR, time(8, 0), time(12, 0), NOW)

        self.assertEqual(len(schedule), 2)
        self.assertTrue(all(r.fire_at.hour == 8 for r in schedule))

    def test_interval_longer_than_window_gives_nothing(self):
        self.assertEqual(compute_schedule(6 * HOUR, time(8, 0), time(12, 0), NOW), [])

    def test_empty_window_gives_nothing(self):
        self.assertEqual(compute_schedule(HOUR, time(9, 0), time(9, 0), NOW), [])

    def test_non_positive_interval_is_rejected(self):
        for interval in (0, -HOUR, float("nan"), float("inf")):
            with self.assertRaises(InvalidScheduleError):
                compute_schedule(interval, time(8, 0), time(22, 0), NOW)

    def test_invalid_interval_is_a_value_error(self):
        with self.assertRaises(ValueError):
            count_per_day(0, time(8, 0), time(22, 0), NOW)


if __name__ == "__main__":
    unittest.main()
