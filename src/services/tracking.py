"""
Clock-in, clock-out and manual entry against stored projects.

Each operation reads the project, applies one ledger change in memory and
writes the whole entry list back with a compare-and-set on the row version.
Validation happens before the write; a lost race raises ConflictError and
nothing is written.
"""

import sqlite3
from collections.abc import Callable
from datetime import datetime

from core.database import replace_time_entries
from core.exceptions import ConflictError, MalformedEntryError
from core.validation import validate_entry_history, validate_time_entries
from models.projects import TimeEntry
from models.users import UserContext
from services.ledger import TimeEntryLedger, normalize_entry
from services.projects import get_project_for_user


def _commit(
    conn: sqlite3.Connection,
    project_id: str,
    user: UserContext,
    change: Callable[[TimeEntryLedger], TimeEntry],
) -> TimeEntry:
    project = get_project_for_user(conn, project_id, user, write=True)
    ledger = TimeEntryLedger(project["time_entries"])

    entry = change(ledger)

    if not replace_time_entries(conn, project_id, ledger.entries, project["version"]):
        raise ConflictError("Time entries were changed by another session, reload and retry")
    return entry


def clock_in(
    conn: sqlite3.Connection, project_id: str, user: UserContext, now: datetime | None = None
) -> TimeEntry:
    """Start a time entry. Raises ConflictError if one is already running."""
    return _commit(conn, project_id, user, lambda ledger: ledger.start_entry(now))


def clock_out(
    conn: sqlite3.Connection, project_id: str, user: UserContext, now: datetime | None = None
) -> TimeEntry:
    """Stop the running entry. Raises NoActiveEntryError if none is running."""
    return _commit(conn, project_id, user, lambda ledger: ledger.stop_entry(now))


def add_manual_entry(
    conn: sqlite3.Connection,
    project_id: str,
    user: UserContext,
    start: datetime | str | None,
    end: datetime | str | None,
) -> TimeEntry:
    """Record a closed entry. Raises MalformedEntryError on missing or reversed bounds."""
    return _commit(
        conn, project_id, user, lambda ledger: ledger.add_manual_entry(start, end)
    )


def add_manual_hours(
    conn: sqlite3.Connection,
    project_id: str,
    user: UserContext,
    day: datetime,
    hours: float,
) -> TimeEntry:
    """Record hours worked from day. Raises MalformedEntryError if hours is out of range."""
    return _commit(
        conn, project_id, user, lambda ledger: ledger.add_manual_hours(day, hours)
    )


def replace_entries(
    conn: sqlite3.Connection,
    project_id: str,
    user: UserContext,
    entries: list[dict],
) -> list[TimeEntry]:
    """
    Replace a project's entries with a client-supplied list.

    The list may only extend what is stored: close the running entry and
    append new ones. Closed entries are never edited or removed. Timestamps
    are stored in one format whatever offset or precision the client sent.

    Raises:
        MalformedEntryError: Validation errors, one per line
        ConflictError: Concurrent write
    """
    errors = validate_time_entries(entries)
    if errors:
        raise MalformedEntryError("\n".join(errors))

    submitted = [normalize_entry(e) for e in entries]
    project = get_project_for_user(conn, project_id, user, write=True)
    stored = [normalize_entry(e) for e in project["time_entries"]]

    errors = validate_entry_history(stored, submitted)
    if errors:
        raise MalformedEntryError("\n".join(errors))

    ledger = TimeEntryLedger(submitted)
    if not replace_time_entries(conn, project_id, ledger.entries, project["version"]):
        raise ConflictError("Time entries were changed by another session, reload and retry")
    return ledger.entries
