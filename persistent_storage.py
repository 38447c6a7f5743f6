import json
import os
from typing import Dict, Any, Optional
from pathlib import Path

# Keys shared by the hydration store and the reminder manager
ENTRIES_KEY = "hydrationEntries"
DAILY_GOAL_KEY = "dailyHydrationGoal"
REMINDERS_ENABLED_KEY = "hydrationRemindersEnabled"
REMINDER_INTERVAL_KEY = "hydrationReminderInterval"
REMINDER_START_TIME_KEY = "hydrationReminderStartTime"
REMINDER_END_TIME_KEY = "hydrationReminderEndTime"


class PersistentStorage:
    """Key-value store backed by a single JSON file"""

    def __init__(self, data_dir: str = "data"):
        self.data_dir = Path(data_dir)
        self.store_file = self.data_dir / "hydration_store.json"

    def _read_json(self, file_path: Path, default=None):
        """Safely read JSON file"""
        if not file_path.exists():
            return default if default is not None else {}
        try:
            with open(file_path, 'r') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            print(f"❌ Error reading {file_path}: {e}")
            return default if default is not None else {}

    def _write_json(self, file_path: Path, data) -> bool:
        """Safely write JSON file"""
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            # Write to temp file first, then rename for atomic operation
            temp_file = file_path.with_suffix('.tmp')
            with open(temp_file, 'w') as f:
                json.dump(data, f, indent=2, default=str)
            os.replace(temp_file, file_path)
            return True
        except Exception as e:
            print(f"❌ Error writing {file_path}: {e}")
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value for key, or default when missing"""
        data = self._read_json(self.store_file, {})
        if not isinstance(data, dict):
            print(f"⚠️ Ignoring malformed store file {self.store_file}")
            return default
        return data.get(key, default)

    def set(self, key: str, value: Any) -> bool:
        """Store value under key, preserving every other key"""
        data = self._read_json(self.store_file, {})
        if not isinstance(data, dict):
            data = {}
        data[key] = value
        return self._write_json(self.store_file, data)

    def remove(self, key: str) -> bool:
        data = self._read_json(self.store_file, {})
        if not isinstance(data, dict) or key not in data:
            return True
        del data[key]
        return self._write_json(self.store_file, data)

    def snapshot(self) -> Dict[str, Any]:
        """Return every stored key (used by the status utilities)"""
        data = self._read_json(self.store_file, {})
        return data if isinstance(data, dict) else {}


class InMemoryStorage:
    """Dictionary-backed store with the same interface, for tests and previews"""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self.data: Dict[str, Any] = dict(initial or {})
        self.fail_writes = False

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def set(self, key: str, value: Any) -> bool:
        if self.fail_writes:
            print(f"❌ Error writing {key}: storage unavailable")
            return False
        # Round-trip through JSON so tests see what the file store would hold
        self.data[key] = json.loads(json.dumps(value, default=str))
        return True

    def remove(self, key: str) -> bool:
        self.data.pop(key, None)
        return True

    def snapshot(self) -> Dict[str, Any]:
        return dict(self.data)


def create_storage(data_dir: Optional[str] = None) -> PersistentStorage:
    """Build the file store from HYDRATION_DATA_DIR (load .env first)"""
    return PersistentStorage(data_dir or os.getenv('HYDRATION_DATA_DIR', 'data'))
