#!/usr/bin/env python3
"""
Hydration Tracker Data Reset Utility

Clears logged drinks from the command line. By default every entry is removed
and the daily goal returns to 64 oz; with --today only today's entries go.
"""

import sys
import argparse
from dotenv import load_dotenv
from hydration_store import HydrationStore
from persistent_storage import create_storage


def create_parser():
    parser = argparse.ArgumentParser(description='Reset Hydration Tracker data')
    parser.add_argument('--today', action='store_true',
                        help="Only clear today's entries (default: all entries and the goal)")
    parser.add_argument('--confirm', action='store_true',
                        help='Skip confirmation prompt')
    parser.add_argument('--data-dir', default=None,
                        help='Data directory (default: HYDRATION_DATA_DIR or ./data)')
    return parser


def run(args, store: HydrationStore, prompt=input) -> bool:
    """Show current data, ask for confirmation and reset; returns True if data was reset"""
    print("📊 Current Data:")
    print(f"   Entries: {len(store.entries)} ({len(store.today_entries)} today)")
    print(f"   Today: {store.today_amount:g}oz of {store.daily_goal:g}oz")

    if not args.confirm:
        reset_type = "today's entries" if args.today else "all data"
        answer = prompt(f"\n🔄 Reset {reset_type}? (y/N): ").lower().strip()
        if answer != 'y':
            print("Reset cancelled.")
            return False

    if args.today:
        removed = store.clear_today()
        print(f"✅ Removed {removed} entries from today.")
    else:
        store.reset_all_data()
        print("✅ Complete data reset successful!")
    return True


def main():
    load_dotenv()
    args = create_parser().parse_args()

    try:
        store = HydrationStore(create_storage(args.data_dir))
        run(args, store)
    except Exception as e:
        print(f"❌ Error during reset: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
