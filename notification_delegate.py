from typing import Callable
from notification_center import PresentationOptions

REMINDER_CATEGORY = "HYDRATION_REMINDER"
DRINK_ACTION = "DRINK_ACTION"
SKIP_ACTION = "SKIP_ACTION"
QUICK_ADD_OUNCES = 8.0


class NotificationDelegate:
    """Turns reminder action taps into hydration entries"""

    def __init__(self, store):
        self.store = store

    def did_receive(self, action_identifier: str, completion_handler: Callable[[], None]):
        """Handle a tapped reminder action; always acknowledges"""
        try:
            if action_identifier == DRINK_ACTION:
                self.store.add_entry(QUICK_ADD_OUNCES)
                print(f"🔔 Quick-add from reminder: {QUICK_ADD_OUNCES:g}oz")
            elif action_identifier == SKIP_ACTION:
                print("🔔 Reminder skipped")
        except Exception as e:
            print(f"❌ Error handling reminder action {action_identifier}: {e}")
        finally:
            completion_handler()

    def will_present(self, notification) -> PresentationOptions:
        # Show banner and play sound even while the app is open
        return PresentationOptions(banner=True, sound=True)
