import uuid
from datetime import datetime
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field
from persistent_storage import ENTRIES_KEY, DAILY_GOAL_KEY
from time_service import time_service

DEFAULT_DAILY_GOAL = 64.0  # ounces, about 8 cups


@dataclass
class HydrationEntry:
    amount: float  # ounces
    date: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def time_string(self) -> str:
        """Short time of day for the entry list"""
        return self.date.strftime("%I:%M %p").lstrip("0")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.date.isoformat(),
            "amount": self.amount,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HydrationEntry":
        amount = float(data["amount"])
        if amount <= 0:
            raise ValueError(f"stored amount must be positive, got {amount}")
        return cls(
            amount=amount,
            date=datetime.fromisoformat(data["timestamp"]),
            id=str(data["id"]),
        )


class HydrationStore:
    """Entry log and daily goal, persisted on every mutation"""

    # Common drink sizes in ounces
    COMMON_SIZES = [8.0, 12.0, 16.0]
    ADD_AMOUNTS = [4.0, 8.0, 12.0, 16.0, 20.0, 24.0, 32.0]
    GOAL_OPTIONS = [32.0, 48.0, 64.0, 80.0, 96.0, 128.0]

    def __init__(self, storage, clock=None):
        self.storage = storage
        self.clock = clock or time_service
        self.entries: List[HydrationEntry] = []
        self.daily_goal = DEFAULT_DAILY_GOAL

        self._load_entries()
        self._load_settings()

    # Derived values, recomputed on every read

    @property
    def today_entries(self) -> List[HydrationEntry]:
        today = self.clock.today()
        return [entry for entry in self.entries if entry.date.date() == today]

    @property
    def today_amount(self) -> float:
        return sum(entry.amount for entry in self.today_entries)

    @property
    def today_progress(self) -> float:
        """Fraction of the daily goal reached today, capped at 1.0"""
        return min(self.today_amount / self.daily_goal, 1.0)

    @property
    def remaining_amount(self) -> float:
        return max(self.daily_goal - self.today_amount, 0.0)

    # Mutations

    def add_entry(self, amount: float) -> str:
        """Log a drink at the current time and return its id"""
        amount = float(amount)
        if amount <= 0:
            raise ValueError(f"Amount must be positive, got {amount}")

        entry = HydrationEntry(amount=amount, date=self.clock.now())
        self.entries.append(entry)
        self._save_entries()
        print(f"💧 Added {amount:g}oz (today: {self.today_amount:g}/{self.daily_goal:g}oz)")
        return entry.id

    def remove_entry(self, entry_id: str):
        """Remove an entry by id; unknown ids are ignored"""
        self.entries = [entry for entry in self.entries if entry.id != entry_id]
        self._save_entries()

    def get_entry(self, entry_id: str) -> Optional[HydrationEntry]:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None

    def clear_today(self) -> int:
        """Remove all of today's entries and return how many were removed"""
        today_ids = {entry.id for entry in self.today_entries}
        self.entries = [entry for entry in self.entries if entry.id not in today_ids]
        self._save_entries()
        print(f"🧹 Cleared {len(today_ids)} entries from today")
        return len(today_ids)

    def update_daily_goal(self, goal: float):
        try:
            goal = float(goal)
        except (TypeError, ValueError):
            raise ValueError(f"Daily goal must be a number, got {goal!r}")
        if goal <= 0:
            raise ValueError(f"Daily goal must be positive, got {goal}")
        self.daily_goal = goal
        self._save_settings()
        print(f"🎯 Daily goal set to {goal:g}oz")

    def reset_all_data(self):
        """Clear every entry and restore the default goal"""
        self.entries = []
        self.daily_goal = DEFAULT_DAILY_GOAL
        self._save_entries()
        self._save_settings()
        print("🔄 All hydration data reset")

    # Persistence

    def _save_entries(self) -> bool:
        try:
            return self.storage.set(ENTRIES_KEY, [entry.to_dict() for entry in self.entries])
        except Exception as e:
            print(f"❌ Failed to save entries: {e}")
            return False

    def _load_entries(self):
        try:
            data = self.storage.get(ENTRIES_KEY)
            if data is None:
                return
            self.entries = [HydrationEntry.from_dict(item) for item in data]
            print(f"💧 Loaded {len(self.entries)} hydration entries")
        except Exception as e:
            print(f"❌ Failed to load entries: {e}")
            self.entries = []

    def _save_settings(self) -> bool:
        try:
            return self.storage.set(DAILY_GOAL_KEY, self.daily_goal)
        except Exception as e:
            print(f"❌ Failed to save daily goal: {e}")
            return False

    def _load_settings(self):
        try:
            goal = self.storage.get(DAILY_GOAL_KEY)
            if goal is None:
                return
            goal = float(goal)
            if goal <= 0:
                raise ValueError(f"stored goal must be positive, got {goal}")
            self.daily_goal = goal
        except Exception as e:
            print(f"❌ Failed to load daily goal: {e}")
            self.daily_goal = DEFAULT_DAILY_GOAL
