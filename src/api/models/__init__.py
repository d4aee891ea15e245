"""API Pydantic models."""

from .requests import (
    ManualEntryRequest,
    ProjectCreateRequest,
    ProjectUpdateRequest,
    ReplaceEntriesRequest,
)
from .responses import (
    CategoryHours,
    ErrorCodes,
    ErrorResponse,
    HealthResponse,
    MonthlyHours,
    ProjectResponse,
    StudentHours,
    StudentsResponse,
    SummaryResponse,
    TimeEntriesResponse,
    TimeEntryModel,
    TimeEntryResponse,
)

__all__ = [
    "HealthResponse",
    "ErrorResponse",
    "ErrorCodes",
    "TimeEntryModel",
    "ProjectResponse",
    "TimeEntryResponse",
    "TimeEntriesResponse",
    "CategoryHours",
    "MonthlyHours",
    "SummaryResponse",
    "StudentHours",
    "StudentsResponse",
    "ProjectCreateRequest",
    "ProjectUpdateRequest",
    "ManualEntryRequest",
    "ReplaceEntriesRequest",
]
