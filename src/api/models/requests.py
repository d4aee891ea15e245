"""Pydantic request models for API endpoints."""

from datetime import date, datetime
from typing import Literal

from pydantic import Field

from .responses import CamelModel, TimeEntryModel


class ProjectCreateRequest(CamelModel):
    name: str = Field(min_length=3)
    description: str = Field(min_length=10)
    category: Literal["Creativity", "Activity", "Service"]
    start_date: date
    end_date: date | None = None
    learning_outcomes: list[str] = []
    personal_goals: str = ""


class ProjectUpdateRequest(CamelModel):
    progress: Literal["Planning", "In progress", "Completed"] | None = None
    reflections: str | None = None


class ManualEntryRequest(CamelModel):
    """
    Manual time entry.

    Either startTime and endTime, or workDate and hours (hours worked
    starting at the beginning of that day, UTC).
    """

    start_time: datetime | None = None
    end_time: datetime | None = None
    work_date: date | None = None
    hours: float | None = None


class ReplaceEntriesRequest(CamelModel):
    time_entries: list[TimeEntryModel]
