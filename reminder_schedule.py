"""
Reminder schedule calculation.

Turns an interval and an active-hours window into the concrete firing times
for today and tomorrow. The window is anchored to the reference day; an end
time earlier than the start time means the window runs past midnight.
"""

import math
from datetime import datetime, time, timedelta
from typing import List, Tuple
from dataclasses import dataclass

SCHEDULE_DAYS = 2  # today and tomorrow


class InvalidScheduleError(ValueError):
    """Raised when the reminder interval cannot produce a schedule"""


@dataclass(frozen=True)
class ScheduledReminder:
    identifier: str
    fire_at: datetime
    day_offset: int
    index: int


def reminder_identifier(day_offset: int, index: int) -> str:
    return f"reminder-{day_offset}-{index}"


def _validate_interval(interval_seconds: float) -> float:
    try:
        interval = float(interval_seconds)
    except (TypeError, ValueError):
        raise InvalidScheduleError(f"Reminder interval must be a number, got {interval_seconds!r}")
    if not math.isfinite(interval) or interval <= 0:
        raise InvalidScheduleError(f"Reminder interval must be positive, got {interval_seconds!r}")
    return interval


def resolve_window(start_time: time, end_time: time, reference_now: datetime) -> Tuple[datetime, datetime]:
    """Anchor the active window to the reference day, wrapping past midnight if needed"""
    day = reference_now.date()
    start = datetime.combine(day, time(start_time.hour, start_time.minute))
    end = datetime.combine(day, time(end_time.hour, end_time.minute))

    # If end time is before start time, it belongs to the next day
    if end < start:
        end += timedelta(days=1)

    return start, end


def count_per_day(interval_seconds: float, start_time: time, end_time: time, reference_now: datetime) -> int:
    """How many reminders fit in the active window (half-open, so the end is excluded)"""
    interval = _validate_interval(interval_seconds)
    start, end = resolve_window(start_time, end_time, reference_now)
    window_seconds = (end - start).total_seconds()
    return max(int(window_seconds // interval), 0)


def compute_schedule(interval_seconds: float, start_time: time, end_time: time,
                     reference_now: datetime) -> List[ScheduledReminder]:
    """Firing times for today and tomorrow, ordered by day then by slot.

    Past instants are kept; whoever delivers the reminders drops the ones
    that are already due. Identical inputs always give the identical list.
    """
    interval = _validate_interval(interval_seconds)
    start, _ = resolve_window(start_time, end_time, reference_now)
    count = count_per_day(interval, start_time, end_time, reference_now)

    schedule = []
    if count <= 0:
        return schedule

    for day_offset in range(SCHEDULE_DAYS):
        target_day = reference_now.date() + timedelta(days=day_offset)
        for index in range(count):
            slot_time = start + timedelta(seconds=index * interval)
            # Keep only the time of day; the date comes from the target day
            fire_at = datetime.combine(target_day, time(slot_time.hour, slot_time.minute))
            schedule.append(ScheduledReminder(
                identifier=reminder_identifier(day_offset, index),
                fire_at=fire_at,
                day_offset=day_offset,
                index=index,
            ))

    return schedule
