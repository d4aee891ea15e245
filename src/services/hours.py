"""
Hours aggregation across projects.

Pure functions over entry lists and project records. Durations are integer
milliseconds throughout; conversion to hours happens only for display.
"""

import math
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime

from core.config import (
    CAS_CATEGORIES,
    COMPLETED_PROGRESS,
    GOAL_HOURS,
    MONTHLY_SUMMARY_MONTHS,
    MS_PER_HOUR,
)
from core.timeutils import parse_timestamp
from models.projects import Project, TimeEntry
from services.ledger import compute_elapsed


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class HoursSummary:
    """Dashboard and report figures for a set of projects."""

    total_ms: int
    total_hours: int
    goal_hours: int
    progress_percentage: float
    hours_remaining: int
    active_projects: int
    per_category_ms: dict[str, int] = field(default_factory=dict)
    live_elapsed_ms: int = 0


# =============================================================================
# DURATIONS
# =============================================================================


def entry_duration_ms(entry: TimeEntry) -> int:
    """Duration of a closed entry, 0 for an open one."""
    if entry["end_time"] is None:
        return 0
    return compute_elapsed(entry)


def total_duration_ms(entries: Iterable[TimeEntry]) -> int:
    """Sum of closed entry durations. Open entries contribute nothing."""
    return sum(entry_duration_ms(e) for e in entries)


def duration_by_category(projects: Iterable[Project]) -> dict[str, int]:
    """
    Closed-entry milliseconds per CAS category.

    Categories with a zero total are left out. Keys follow CAS_CATEGORIES order.
    """
    totals: dict[str, int] = defaultdict(int)
    for project in projects:
        totals[project["category"]] += total_duration_ms(project["time_entries"])

    ordered = [c for c in CAS_CATEGORIES if c in totals]
    ordered += sorted(c for c in totals if c not in CAS_CATEGORIES)
    return {c: totals[c] for c in ordered if totals[c] > 0}


def live_elapsed_ms(entries: Iterable[TimeEntry], now: datetime | None = None) -> int:
    """Time since the open entry started, for a running clock display."""
    return sum(compute_elapsed(e, now) for e in entries if e["end_time"] is None)


# =============================================================================
# HOURS & PROGRESS
# =============================================================================


def ms_to_hours(ms: int) -> float:
    return ms / MS_PER_HOUR


def round_hours(hours: float) -> int:
    """Round half up to a whole hour count (6.5 -> 7)."""
    return math.floor(hours + 0.5)


def progress_percentage(total_hours: float, goal_hours: float = GOAL_HOURS) -> float:
    """
    Percent of the goal reached, clamped to [0, 100].

    Raises:
        ValueError: If goal_hours is not positive
    """
    if goal_hours <= 0:
        raise ValueError(f"Goal hours must be positive, got {goal_hours}")
    return max(min(total_hours / goal_hours * 100, 100.0), 0.0)


def hours_remaining(total_hours: float, goal_hours: float = GOAL_HOURS) -> float:
    return max(goal_hours - total_hours, 0)


def count_active_projects(projects: Iterable[Project]) -> int:
    """Projects still in planning or in progress."""
    return sum(1 for p in projects if p["progress"] != COMPLETED_PROGRESS)


# =============================================================================
# FORMATTING
# =============================================================================


def format_duration(ms: int) -> str:
    """Format milliseconds as HH:MM:SS. Hours may exceed 24; negatives show as zero."""
    total_seconds = max(ms, 0) // 1000
    hours, rem = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rem, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_percentage(percentage: float) -> str:
    return f"{percentage:.1f}%"


# =============================================================================
# SUMMARIES
# =============================================================================


def _month_keys(today: date, months: int) -> list[tuple[int, int]]:
    """(year, month) pairs for the last `months` months ending at today, oldest first."""
    keys = []
    year, month = today.year, today.month
    for _ in range(months):
        keys.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(keys))


def monthly_hours(
    projects: Iterable[Project],
    today: date | None = None,
    months: int = MONTHLY_SUMMARY_MONTHS,
) -> list[dict]:
    """
    Closed-entry hours per month for the trailing months window.

    Entries are bucketed by the month their start time falls in (UTC).
    Entries outside the window are ignored.

    Returns:
        List of {"month": "YYYY-MM", "label": "Mon", "hours": int}, oldest first
    """
    today = today or date.today()
    keys = _month_keys(today, months)
    bucket_ms: dict[tuple[int, int], int] = {key: 0 for key in keys}

    for project in projects:
        for entry in project["time_entries"]:
            if entry["end_time"] is None:
                continue
            started = parse_timestamp(entry["start_time"])
            key = (started.year, started.month)
            if key in bucket_ms:
                bucket_ms[key] += entry_duration_ms(entry)

    return [
        {
            "month": f"{year}-{month:02d}",
            "label": date(year, month, 1).strftime("%b"),
            "hours": round_hours(ms_to_hours(bucket_ms[(year, month)])),
        }
        for year, month in keys
    ]


def summarize_projects(
    projects: list[Project],
    goal_hours: int = GOAL_HOURS,
    now: datetime | None = None,
) -> HoursSummary:
    """
    Compute the dashboard figures for a student's projects.

    Progress and remaining hours are derived from the rounded hour count,
    the same number shown on the total hours counter.
    """
    all_entries = [e for p in projects for e in p["time_entries"]]
    total_ms = total_duration_ms(all_entries)
    total_hours = round_hours(ms_to_hours(total_ms))

    return HoursSummary(
        total_ms=total_ms,
        total_hours=total_hours,
        goal_hours=goal_hours,
        progress_percentage=progress_percentage(total_hours, goal_hours),
        hours_remaining=hours_remaining(total_hours, goal_hours),
        active_projects=count_active_projects(projects),
        per_category_ms=duration_by_category(projects),
        live_elapsed_ms=live_elapsed_ms(all_entries, now),
    )


def summarize_students(
    projects_by_student: dict[str, list[Project]],
    goal_hours: int = GOAL_HOURS,
    now: datetime | None = None,
) -> dict[str, HoursSummary]:
    """Per-student summaries for a roster, in the order given."""
    return {
        student_id: summarize_projects(projects, goal_hours, now)
        for student_id, projects in projects_by_student.items()
    }
