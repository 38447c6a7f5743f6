from datetime import datetime, time
from enum import Enum
from typing import List, Optional, Set, Union
from dataclasses import dataclass, field
from persistent_storage import (
    REMINDERS_ENABLED_KEY,
    REMINDER_INTERVAL_KEY,
    REMINDER_START_TIME_KEY,
    REMINDER_END_TIME_KEY,
)
from notification_center import (
    NotificationAction,
    NotificationCategory,
    NotificationContent,
    NotificationRequest,
)
from notification_delegate import REMINDER_CATEGORY, DRINK_ACTION, SKIP_ACTION, QUICK_ADD_OUNCES
from reminder_schedule import compute_schedule, count_per_day, InvalidScheduleError
from time_service import time_service

DEFAULT_INTERVAL_SECONDS = 2 * 60 * 60
DEFAULT_START_TIME = time(8, 0)
DEFAULT_END_TIME = time(22, 0)
INTERVAL_HOUR_OPTIONS = [1, 2, 3, 4, 5, 6]

REMINDER_TITLE = "Hydration Reminder"
REMINDER_BODY = "Time to drink some water! Stay hydrated throughout the day."


class ReminderState(Enum):
    DISABLED = "disabled"
    PENDING_PERMISSION = "pending_permission"
    ENABLED = "enabled"


@dataclass
class ReminderConfig:
    enabled: bool = False
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS
    start_time: time = field(default_factory=lambda: DEFAULT_START_TIME)
    end_time: time = field(default_factory=lambda: DEFAULT_END_TIME)


def _time_of_day(value: Union[time, datetime]) -> time:
    """Keep only hour and minute"""
    return time(value.hour, value.minute)


class ReminderManager:
    """Keeps the scheduled reminders in step with the reminder settings"""

    def __init__(self, storage, notification_center, clock=None):
        self.storage = storage
        self.center = notification_center
        self.clock = clock or time_service

        self.config = ReminderConfig()
        self.state = ReminderState.DISABLED
        self.scheduled_ids: Set[str] = set()

        self._load_settings()

    @property
    def is_reminders_enabled(self) -> bool:
        return self.config.enabled

    # Public methods

    async def toggle_reminders(self, enabled: bool):
        """Turn reminders on (asking for permission first) or off"""
        if enabled:
            self.config.enabled = True
            await self._enable_with_permission()
        else:
            self._cancel_all_reminders()
            self.config.enabled = False
            self.state = ReminderState.DISABLED
            self._save_settings()
            print("🔕 Reminders disabled")

    async def restore(self):
        """Reschedule after a restart if reminders were left on"""
        if not self.config.enabled:
            return
        print("⏰ Restoring reminders from saved settings")
        await self._enable_with_permission()

    def update_reminder_interval(self, interval_seconds: float):
        interval_seconds = float(interval_seconds)
        if interval_seconds <= 0:
            raise ValueError(f"Reminder interval must be positive, got {interval_seconds}")

        self.config.interval_seconds = interval_seconds
        if self.state == ReminderState.ENABLED:
            self._reschedule_reminders()
        self._save_settings()

    def update_reminder_start_time(self, value: Union[time, datetime]):
        self.config.start_time = _time_of_day(value)
        if self.state == ReminderState.ENABLED:
            self._reschedule_reminders()
        self._save_settings()

    def update_reminder_end_time(self, value: Union[time, datetime]):
        self.config.end_time = _time_of_day(value)
        if self.state == ReminderState.ENABLED:
            self._reschedule_reminders()
        self._save_settings()

    def reminders_per_day(self) -> int:
        try:
            return count_per_day(self.config.interval_seconds, self.config.start_time,
                                 self.config.end_time, self.clock.now())
        except InvalidScheduleError:
            return 0

    def upcoming_reminders(self, limit: Optional[int] = None) -> List[NotificationRequest]:
        """Pending reminders that have not fired yet, soonest first"""
        now = self.clock.now()
        upcoming = [request for request in self.center.pending_requests()
                    if request.identifier in self.scheduled_ids and request.fire_at > now]
        return upcoming[:limit] if limit is not None else upcoming

    # Private methods

    async def _enable_with_permission(self):
        self.state = ReminderState.PENDING_PERMISSION
        granted = await self.center.request_authorization()

        if self.state != ReminderState.PENDING_PERMISSION:
            # Turned off again while we were waiting for the answer
            return

        if granted:
            self._schedule_reminders()
            self.state = ReminderState.ENABLED
            print(f"🔔 Reminders enabled: {len(self.scheduled_ids)} scheduled")
        else:
            # Permission denied, the toggle reverts
            self._cancel_all_reminders()
            self.config.enabled = False
            self.state = ReminderState.DISABLED
            print("⚠️ Notification permission denied, reminders stay off")
        self._save_settings()

    def _schedule_reminders(self):
        self._cancel_all_reminders()

        try:
            schedule = compute_schedule(
                self.config.interval_seconds,
                self.config.start_time,
                self.config.end_time,
                self.clock.now(),
            )
        except InvalidScheduleError as e:
            print(f"❌ Cannot schedule reminders: {e}")
            return

        for reminder in schedule:
            content = NotificationContent(
                title=REMINDER_TITLE,
                body=REMINDER_BODY,
                sound=True,
                category_identifier=REMINDER_CATEGORY,
            )
            request = NotificationRequest(identifier=reminder.identifier, content=content,
                                          fire_at=reminder.fire_at)
            self.center.add(request, completion=self._registration_completion(reminder.identifier))
            self.scheduled_ids.add(reminder.identifier)

        # Register categories for actions
        self.center.set_categories([
            NotificationCategory(
                identifier=REMINDER_CATEGORY,
                actions=[
                    NotificationAction(DRINK_ACTION, f"Add {QUICK_ADD_OUNCES:g}oz"),
                    NotificationAction(SKIP_ACTION, "Skip", destructive=True),
                ],
            )
        ])

    def _registration_completion(self, identifier: str):
        def completion(error):
            if error is not None:
                print(f"❌ Error scheduling notification {identifier}: {error}")
        return completion

    def _reschedule_reminders(self):
        self._schedule_reminders()
        print(f"🔄 Reminders rescheduled: {len(self.scheduled_ids)} pending")

    def _cancel_all_reminders(self):
        self.center.remove_all_pending()
        self.scheduled_ids.clear()

    # Persistence

    def _to_timestamp(self, value: time) -> float:
        # Stored as an instant on today's date; only the time of day is used on load
        return datetime.combine(self.clock.now().date(), value).timestamp()

    def _save_settings(self):
        try:
            self.storage.set(REMINDERS_ENABLED_KEY, self.config.enabled)
            self.storage.set(REMINDER_INTERVAL_KEY, self.config.interval_seconds)
            self.storage.set(REMINDER_START_TIME_KEY, self._to_timestamp(self.config.start_time))
            self.storage.set(REMINDER_END_TIME_KEY, self._to_timestamp(self.config.end_time))
        except Exception as e:
            print(f"❌ Failed to save reminder settings: {e}")

    def _load_settings(self):
        try:
            self.config.enabled = bool(self.storage.get(REMINDERS_ENABLED_KEY, False))

            interval = self.storage.get(REMINDER_INTERVAL_KEY)
            if interval is not None and float(interval) > 0:
                self.config.interval_seconds = float(interval)

            start = self.storage.get(REMINDER_START_TIME_KEY)
            if start is not None:
                self.config.start_time = _time_of_day(datetime.fromtimestamp(float(start)))

            end = self.storage.get(REMINDER_END_TIME_KEY)
            if end is not None:
                self.config.end_time = _time_of_day(datetime.fromtimestamp(float(end)))
        except Exception as e:
            print(f"❌ Failed to load reminder settings: {e}")
            self.config = ReminderConfig()
