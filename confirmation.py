from typing import Callable, Dict, Any, Optional


class ConfirmationGate:
    """Holds destructive actions until the user explicitly confirms them"""

    def __init__(self):
        self._pending: Dict[str, Callable[[], Any]] = {}

    def request(self, key: str, action: Callable[[], Any]):
        """Park an action; replaces an earlier unconfirmed request with the same key"""
        self._pending[key] = action

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    def confirm(self, key: str) -> Optional[Any]:
        """Run the parked action once; unknown keys do nothing"""
        action = self._pending.pop(key, None)
        if action is None:
            print(f"⚠️ Nothing to confirm for '{key}'")
            return None
        return action()

    def cancel(self, key: str):
        self._pending.pop(key, None)
