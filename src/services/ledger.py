"""
Time entry ledger for a single project.

The ledger owns the ordered entry list and enforces that at most one entry
is open at a time. Every operation validates first and mutates last, so a
failed call leaves the ledger exactly as it was.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta

from core.config import MAX_MANUAL_HOURS, MS_PER_HOUR
from core.exceptions import ConflictError, MalformedEntryError, NoActiveEntryError
from core.timeutils import (
    ensure_utc,
    format_timestamp,
    millis_between,
    parse_timestamp,
    utc_now,
)
from models.projects import TimeEntry


def compute_elapsed(entry: TimeEntry, now: datetime | None = None) -> int:
    """
    Milliseconds covered by an entry.

    Closed entries give end - start. Open entries give now - start, which is
    only meant for live display. Negative spans are floored at zero.
    """
    start = parse_timestamp(entry["start_time"])
    if entry["end_time"] is not None:
        end = parse_timestamp(entry["end_time"])
    else:
        end = ensure_utc(now) if now else utc_now()
    return max(millis_between(start, end), 0)


def normalize_entry(entry: dict) -> TimeEntry:
    """Entry with both bounds rewritten in the stored timestamp format."""
    end = entry.get("end_time")
    return {
        "start_time": format_timestamp(parse_timestamp(entry.get("start_time"))),
        "end_time": format_timestamp(parse_timestamp(end)) if end is not None else None,
        "manual": bool(entry.get("manual", False)),
    }


class TimeEntryLedger:
    """Ordered time entries for one project."""

    def __init__(self, entries: Iterable[TimeEntry] = ()):
        self._entries: list[TimeEntry] = [
            {
                "start_time": e["start_time"],
                "end_time": e["end_time"],
                "manual": bool(e.get("manual", False)),
            }
            for e in entries
        ]
        open_count = sum(1 for e in self._entries if e["end_time"] is None)
        if open_count > 1:
            raise MalformedEntryError(
                f"Ledger has {open_count} open entries, at most one is allowed"
            )

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[TimeEntry]:
        """Copy of the entries in insertion order."""
        return [dict(e) for e in self._entries]

    @property
    def active_entry(self) -> TimeEntry | None:
        for entry in self._entries:
            if entry["end_time"] is None:
                return dict(entry)
        return None

    def start_entry(self, now: datetime | None = None) -> TimeEntry:
        """
        Clock in: append an open entry starting now.

        Raises:
            ConflictError: If an entry is already open
        """
        if self.active_entry is not None:
            raise ConflictError("A time entry is already running for this project")

        entry: TimeEntry = {
            "start_time": format_timestamp(now or utc_now()),
            "end_time": None,
            "manual": False,
        }
        self._entries.append(entry)
        return dict(entry)

    def stop_entry(self, now: datetime | None = None) -> TimeEntry:
        """
        Clock out: close the open entry at now.

        Raises:
            NoActiveEntryError: If no entry is open
            MalformedEntryError: If now is before the open entry's start
        """
        index = next(
            (i for i, e in enumerate(self._entries) if e["end_time"] is None), None
        )
        if index is None:
            raise NoActiveEntryError("No time entry is running for this project")

        end = ensure_utc(now) if now else utc_now()
        start = parse_timestamp(self._entries[index]["start_time"])
        if end < start:
            raise MalformedEntryError("Clock-out time is before the entry's start time")

        self._entries[index] = {**self._entries[index], "end_time": format_timestamp(end)}
        return dict(self._entries[index])

    def add_manual_entry(self, start: datetime | str | None, end: datetime | str | None) -> TimeEntry:
        """
        Record a closed entry with explicit bounds. Overlaps are allowed.

        Raises:
            MalformedEntryError: If a bound is missing or end is before start
        """
        if start is None or end is None:
            raise MalformedEntryError("Manual entries need both a start and an end time")

        start_dt = parse_timestamp(start)
        end_dt = parse_timestamp(end)
        if end_dt < start_dt:
            raise MalformedEntryError("End time is before start time")

        entry: TimeEntry = {
            "start_time": format_timestamp(start_dt),
            "end_time": format_timestamp(end_dt),
            "manual": True,
        }
        self._entries.append(entry)
        return dict(entry)

    def add_manual_hours(self, day: datetime, hours: float) -> TimeEntry:
        """
        Record a number of hours worked starting at the given moment.

        Raises:
            MalformedEntryError: If hours is not in (0, MAX_MANUAL_HOURS]
        """
        if not 0 < hours <= MAX_MANUAL_HOURS:
            raise MalformedEntryError(
                f"Hours must be greater than 0 and at most {MAX_MANUAL_HOURS}, got {hours}"
            )

        start = ensure_utc(day)
        end = start + timedelta(milliseconds=round(hours * MS_PER_HOUR))
        return self.add_manual_entry(start, end)

    def newest_first(self) -> list[TimeEntry]:
        """Entries sorted by start time, most recent first (display order)."""
        return sorted(
            self.entries,
            key=lambda e: parse_timestamp(e["start_time"]),
            reverse=True,
        )
