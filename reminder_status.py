#!/usr/bin/env python3
"""
Reminder Status Utility - Show saved reminder settings and the schedule they produce
"""

import argparse
from datetime import datetime
from dotenv import load_dotenv
from persistent_storage import create_storage
from reminder_manager import ReminderManager
from notification_center import NotificationCenter
from reminder_schedule import compute_schedule, InvalidScheduleError


def format_duration(target: datetime, now: datetime) -> str:
    """Format time until a reminder fires"""
    diff = target - now
    if diff.total_seconds() < 0:
        return "⏪ past (will not fire)"

    total_seconds = int(diff.total_seconds())
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60

    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def build_report(manager: ReminderManager, now: datetime) -> str:
    config = manager.config
    lines = [
        "💧 HYDRATION TRACKER - REMINDER STATUS",
        "=" * 40,
        f"📅 Local Time: {now.strftime('%Y-%m-%d %H:%M')}",
        f"Status: {'🟢 ENABLED' if config.enabled else '🔴 DISABLED'}",
        f"Interval: {config.interval_seconds / 3600:g} hours",
        f"Active hours: {config.start_time.strftime('%H:%M')} - {config.end_time.strftime('%H:%M')}",
        "",
        "⏰ SCHEDULE:",
        "-" * 40,
    ]

    try:
        schedule = compute_schedule(config.interval_seconds, config.start_time, config.end_time, now)
    except InvalidScheduleError as e:
        lines.append(f"❌ {e}")
        return "\n".join(lines)

    if not schedule:
        lines.append("No reminders fit in the active window.")
    for reminder in schedule:
        lines.append(f"{reminder.identifier:<14} {reminder.fire_at.strftime('%a %H:%M')}  "
                     f"{format_duration(reminder.fire_at, now)}")
    return "\n".join(lines)


def main():
    load_dotenv()
    parser = argparse.ArgumentParser(description='Show Hydration Tracker reminder status')
    parser.add_argument('--data-dir', default=None,
                        help='Data directory (default: HYDRATION_DATA_DIR or ./data)')
    args = parser.parse_args()

    storage = create_storage(args.data_dir)
    # Read-only: the manager only loads settings here, nothing is scheduled
    manager = ReminderManager(storage, NotificationCenter())
    print(build_report(manager, datetime.now().replace(second=0, microsecond=0)))


if __name__ == "__main__":
    main()
