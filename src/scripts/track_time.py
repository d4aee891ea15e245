#!/usr/bin/env python3
"""
Clock in, clock out, add manual time, or show the status of a project.

Usage:
    uv run python src/scripts/track_time.py <user_id> <project_id> start
    uv run python src/scripts/track_time.py <user_id> <project_id> stop
    uv run python src/scripts/track_time.py <user_id> <project_id> manual --date 2025-11-07 --hours 2.5
    uv run python src/scripts/track_time.py <user_id> <project_id> status
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DB_PATH
from core.database import get_connection
from core.exceptions import PermissionDeniedError, ProjectNotFoundError, TimeTrackingError
from core.timeutils import start_of_day
from models.users import UserContext
from services.hours import format_duration, live_elapsed_ms, total_duration_ms
from services.ledger import TimeEntryLedger
from services.projects import get_project_for_user
from services.tracking import add_manual_hours, clock_in, clock_out


def print_status(conn, project_id: str, user: UserContext):
    project = get_project_for_user(conn, project_id, user)
    ledger = TimeEntryLedger(project["time_entries"])
    total_ms = total_duration_ms(project["time_entries"])

    print(f"{project['name']} ({project['category']}, {project['progress']})")
    print(f"  Total recorded: {format_duration(total_ms)}")
    if ledger.active_entry:
        running = live_elapsed_ms(project["time_entries"])
        print(f"  Running since {ledger.active_entry['start_time']} ({format_duration(running)})")

    for entry in ledger.newest_first()[:10]:
        end = entry["end_time"] or "running"
        kind = " (manual)" if entry["manual"] else ""
        print(f"  - {entry['start_time']} -> {end}{kind}")


def main():
    parser = argparse.ArgumentParser(description="Track time on a CAS project")
    parser.add_argument("user_id", help="Acting student's user id")
    parser.add_argument("project_id", help="Project id")
    parser.add_argument("action", choices=["start", "stop", "manual", "status"])
    parser.add_argument("--date", help="Work date for manual entries (YYYY-MM-DD)")
    parser.add_argument("--hours", type=float, help="Hours worked for manual entries")

    args = parser.parse_args()
    user = UserContext(user_id=args.user_id)

    conn = get_connection(DB_PATH)
    try:
        if args.action == "start":
            entry = clock_in(conn, args.project_id, user)
            print(f"Clocked in at {entry['start_time']}")
        elif args.action == "stop":
            entry = clock_out(conn, args.project_id, user)
            print(f"Clocked out at {entry['end_time']}")
        elif args.action == "manual":
            if not args.date or args.hours is None:
                parser.error("manual requires --date and --hours")
            day = datetime.strptime(args.date, "%Y-%m-%d").date()
            add_manual_hours(conn, args.project_id, user, start_of_day(day), args.hours)
            print(f"Added {args.hours} hours on {args.date}")
        print_status(conn, args.project_id, user)
    except (TimeTrackingError, ProjectNotFoundError, PermissionDeniedError) as e:
        print(f"\nError: {e}")
        sys.exit(1)
    finally:
        conn.close()


if __name__ == "__main__":
    main()
