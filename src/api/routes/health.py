"""Health check endpoint."""

import sqlite3
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from api.models.responses import HealthResponse
from core.config import API_VERSION, DB_PATH

router = APIRouter()


def database_available() -> bool:
    """True if the projects table can be queried."""
    if not DB_PATH.exists():
        return False
    try:
        conn = sqlite3.connect(DB_PATH)
        try:
            conn.execute("SELECT 1 FROM projects LIMIT 1")
        finally:
            conn.close()
    except sqlite3.Error:
        return False
    return True


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint for monitoring.

    Returns 200 if healthy, 503 if unhealthy.
    """
    available = database_available()
    timestamp = datetime.now(timezone.utc).isoformat()

    if available:
        return HealthResponse(
            status="healthy",
            version=API_VERSION,
            database_available=True,
            timestamp=timestamp,
        )
    else:
        return JSONResponse(
            status_code=503,
            content=HealthResponse(
                status="unhealthy",
                version=API_VERSION,
                database_available=False,
                timestamp=timestamp,
                error="Database not initialized",
            ).model_dump(by_alias=True),
        )
