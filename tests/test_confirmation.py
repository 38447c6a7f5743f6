import unittest
from argparse import Namespace
from datetime import datetime

from confirmation import ConfirmationGate
from hydration_store import HydrationStore
from persistent_storage import InMemoryStorage
import reset_data
from time_service import FixedClock


def make_store():
    clock = FixedClock(datetime(2026, 10, 19, 9, 30))
    store = HydrationStore(InMemoryStorage(), clock=clock)
    store.update_daily_goal(96.0)
    store.add_entry(8.0)
    store.add_entry(16.0)
    return store, clock


class ConfirmationGateTests(unittest.TestCase):
    def test_reset_does_not_run_without_confirmation(self):
        store, _ = make_store()
        gate = ConfirmationGate()
        gate.request("reset_all", store.reset_all_data)

        self.assertTrue(gate.is_pending("reset_all"))
        self.assertEqual(len(store.entries), 2)
        self.assertEqual(store.daily_goal, 96.0)

    def test_cancel_drops_the_action(self):
        store, _ = make_store()
        gate = ConfirmationGate()
        gate.request("reset_today", store.clear_today)
        gate.cancel("reset_today")

        self.assertIsNone(gate.confirm("reset_today"))
        self.assertEqual(len(store.entries), 2)

    def test_confirm_runs_exactly_once(self):
        calls = []
        gate = ConfirmationGate()
        gate.request("reset_all", lambda: calls.append("ran") or len(calls))

        self.assertEqual(gate.confirm("reset_all"), 1)
        self.assertIsNone(gate.confirm("reset_all"))
        self.assertEqual(calls, ["ran"])
        self.assertFalse(gate.is_pending("reset_all"))

    def test_confirmed_reset_all(self):
        store, _ = make_store()
        gate = ConfirmationGate()
        gate.request("reset_all", store.reset_all_data)
        gate.confirm("reset_all")

        self.assertEqual(store.entries, [])
        self.assertEqual(store.daily_goal, 64.0)


class ResetDataScriptTests(unittest.TestCase):
    def test_declined_prompt_keeps_data(self):
        store, _ = make_store()
        args = Namespace(today=False, confirm=False)

        self.assertFalse(reset_data.run(args, store, prompt=lambda _: "n"))
        self.assertEqual(len(store.entries), 2)

    def test_accepted_prompt_resets_everything(self):
        store, _ = make_store()
        args = Namespace(today=False, confirm=False)

        self.assertTrue(reset_data.run(args, store, prompt=lambda _: "Y "))
        self.assertEqual(store.entries, [])
        self.assertEqual(store.daily_goal, 64.0)

    def test_today_only(self):
        store, clock = make_store()
        clock.advance(days=1)
        store.add_entry(4.0)
        args = Namespace(today=True, confirm=True)

        def never_called(_):
            raise AssertionError("prompt should be skipped with --confirm")

        self.assertTrue(reset_data.run(args, store, prompt=never_called))
        self.assertEqual([entry.amount for entry in store.entries], [8.0, 16.0])
        self.assertEqual(store.daily_goal, 96.0)

    def test_parser_flags(self):
        args = reset_data.create_parser().parse_args(["--today", "--confirm"])
        self.assertTrue(args.today)
        self.assertTrue(args.confirm)
        self.assertIsNone(args.data_dir)


if __name__ == "__main__":
    unittest.main()
