"""Pydantic response models for API endpoints."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serialize with camelCase keys, accept either form on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(CamelModel):
    """Health check response."""

    status: str  # "healthy" or "unhealthy"
    version: str
    database_available: bool
    timestamp: str  # ISO 8601 UTC
    error: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    details: list[str] = []


class ErrorCodes:
    """Error code constants."""

    INVALID_REQUEST = "INVALID_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    NO_ACTIVE_ENTRY = "NO_ACTIVE_ENTRY"
    MALFORMED_ENTRY = "MALFORMED_ENTRY"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class TimeEntryModel(CamelModel):
    """Time entry in its wire form: startTime, endTime, manual."""

    start_time: str
    end_time: str | None = None
    manual: bool = False


class ProjectResponse(CamelModel):
    """Project with its entries (most recent first) and time totals."""

    id: str
    user_id: str
    name: str
    description: str
    category: str
    progress: str
    start_date: str
    end_date: str | None = None
    learning_outcomes: list[str]
    personal_goals: str
    reflections: str
    time_entries: list[TimeEntryModel]
    active_entry: TimeEntryModel | None = None
    total_duration_ms: int
    total_duration: str  # HH:MM:SS
    live_elapsed_ms: int = 0


class TimeEntryResponse(CamelModel):
    """Result of a clock-in, clock-out or manual entry."""

    project_id: str
    entry: TimeEntryModel
    active_entry: TimeEntryModel | None = None
    total_duration_ms: int
    total_duration: str


class TimeEntriesResponse(CamelModel):
    project_id: str
    time_entries: list[TimeEntryModel]
    total_duration_ms: int
    total_duration: str


class CategoryHours(CamelModel):
    category: str
    hours: float
    duration: str


class MonthlyHours(CamelModel):
    month: str  # YYYY-MM
    label: str
    hours: int


class SummaryResponse(CamelModel):
    """Dashboard figures for one student."""

    student_id: str
    total_hours: int
    total_duration: str
    goal_hours: int
    progress_percentage: float
    hours_remaining: int
    active_projects: int
    categories: list[CategoryHours]
    monthly: list[MonthlyHours]
    live_elapsed_ms: int = 0


class StudentHours(CamelModel):
    """One roster row: a student's hours toward the goal."""

    student_id: str
    total_hours: int
    goal_hours: int
    progress_percentage: float
    hours_remaining: int
    active_projects: int


class StudentsResponse(CamelModel):
    students: list[StudentHours]
