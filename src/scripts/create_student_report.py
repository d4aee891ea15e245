#!/usr/bin/env python3
"""
Generate a student's CAS progress report from the HourVest database.

Reads every project owned by the student, computes hours and progress toward
the goal, and writes an Excel workbook with a summary sheet and one sheet
per project.

Usage:
    uv run python src/scripts/create_student_report.py <student_id> --name "Jane Doe"

Example:
    uv run python src/scripts/create_student_report.py u123 --name "Jane Doe" --school "IB World School"
"""

import argparse
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DB_PATH
from core.database import get_connection, list_projects_for_user
from services.reports import generate_student_report


def main():
    parser = argparse.ArgumentParser(description="Generate a student CAS progress report")
    parser.add_argument("student_id", help="User id of the student")
    parser.add_argument("--name", help="Student name shown on the report (defaults to the id)")
    parser.add_argument("--school", help="School name shown on the report")
    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Directory for the report (defaults to output/reports)",
    )

    args = parser.parse_args()

    try:
        conn = get_connection(DB_PATH)
        try:
            projects = list_projects_for_user(conn, args.student_id)
        finally:
            conn.close()

        if not projects:
            print(f"No projects found for student '{args.student_id}'")
            sys.exit(1)

        print(f"Found {len(projects)} projects for {args.student_id}")
        output_path = generate_student_report(
            args.name or args.student_id, projects, args.school, args.output_dir
        )
        print(f"\nReport generated: {output_path}")
    except Exception as e:
        print(f"\nError: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
