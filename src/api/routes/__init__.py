"""API route modules."""

from .health import router as health_router
from .projects import router as projects_router
from .reports import router as reports_router
from .time_entries import router as time_entries_router

__all__ = ["health_router", "projects_router", "time_entries_router", "reports_router"]
