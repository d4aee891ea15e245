"""
Data models for projects and time entries.

Using TypedDict for type hints on the record dictionaries that flow between
the database layer, services and reports.
"""

from typing import TypedDict


class TimeEntry(TypedDict):
    """One clock session or manual entry. end_time None means still open."""
    start_time: str
    end_time: str | None
    manual: bool


class Project(TypedDict):
    """CAS project with its time entry ledger."""
    id: str
    user_id: str
    name: str
    description: str
    category: str
    progress: str
    start_date: str
    end_date: str | None
    learning_outcomes: list[str]
    personal_goals: str
    reflections: str
    time_entries: list[TimeEntry]
    version: int
