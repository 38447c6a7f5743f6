import os
import json
import tempfile
import unittest
from datetime import datetime, time

from notification_center import NotificationCenter
from persistent_storage import PersistentStorage, InMemoryStorage, create_storage
from reminder_manager import ReminderManager
from reminder_status import build_report, format_duration
from time_service import FixedClock


class PersistentStorageTests(unittest.TestCase):
    def test_set_and_get(self):
        with tempfile.TemporaryDirectory() as tmp:
            storage = PersistentStorage(os.path.join(tmp, "nested"))
            self.assertTrue(storage.set("dailyHydrationGoal", 80.0))
            self.assertTrue(storage.set("hydrationRemindersEnabled", True))

            reopened = PersistentStorage(os.path.join(tmp, "nested"))
            self.assertEqual(reopened.get("dailyHydrationGoal"), 80.0)
            self.assertIs(reopened.get("hydrationRemindersEnabled"), True)
            self.assertEqual(reopened.get("missing", "fallback"), "fallback")

    def test_file_holds_every_key(self):
        with tempfile.TemporaryDirectory() as tmp:
            storage = PersistentStorage(tmp)
            storage.set("a", 1)
            storage.set("b", [1, 2])
            storage.remove("a")

            with open(os.path.join(tmp, "hydration_store.json")) as f:
                self.assertEqual(json.load(f), {"b": [1, 2]})
            self.assertEqual(storage.snapshot(), {"b": [1, 2]})

    def test_unreadable_file_returns_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            with open(os.path.join(tmp, "hydration_store.json"), "w") as f:
                f.write("[1, 2")
            storage = PersistentStorage(tmp)

            self.assertIsNone(storage.get("hydrationEntries"))
            self.assertEqual(storage.snapshot(), {})
            # A write replaces the corrupt file
            self.assertTrue(storage.set("dailyHydrationGoal", 64.0))
            self.assertEqual(storage.get("dailyHydrationGoal"), 64.0)

    def test_create_storage_uses_environment(self):
        previous = os.environ.get("HYDRATION_DATA_DIR")
        os.environ["HYDRATION_DATA_DIR"] = "/tmp/hydration-test"
        try:
            self.assertEqual(str(create_storage().data_dir), "/tmp/hydration-test")
            self.assertEqual(str(create_storage("elsewhere").data_dir), "elsewhere")
        finally:
            if previous is None:
                del os.environ["HYDRATION_DATA_DIR"]
            else:
                os.environ["HYDRATION_DATA_DIR"] = previous

    def test_in_memory_storage_can_fail_writes(self):
        storage = InMemoryStorage()
        storage.fail_writes = True

        self.assertFalse(storage.set("dailyHydrationGoal", 64.0))
        self.assertIsNone(storage.get("dailyHydrationGoal"))


class ReminderStatusTests(unittest.TestCase):
    def test_report_lists_schedule(self):
        clock = FixedClock(datetime(2026, 10, 19, 9, 30))
        manager = ReminderManager(InMemoryStorage(), NotificationCenter(clock=clock), clock=clock)
        manager.update_reminder_interval(4 * 3600)
        manager.update_reminder_start_time(time(10, 0))

        report = build_report(manager, clock.now())

        self.assertIn("DISABLED", report)
        self.assertIn("reminder-0-0", report)
        self.assertIn("reminder-1-2", report)
        self.assertIn("30m", report)

    def test_format_duration(self):
        now = datetime(2026, 10, 19, 9, 30)
        self.assertEqual(format_duration(datetime(2026, 10, 19, 11, 45), now), "2h 15m")
        self.assertIn("past", format_duration(datetime(2026, 10, 19, 8, 0), now))


if __name__ == "__main__":
    unittest.main()
