"""SQLite request logging for API."""

import sqlite3
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone

from fastapi import HTTPException

from core.config import DB_PATH


@dataclass
class RequestLog:
    """Captured request/response data for logging."""

    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    endpoint: str = ""
    method: str = ""
    client_ip: str | None = None
    user_id: str | None = None
    project_id: str | None = None
    status_code: int = 0
    error_code: str | None = None
    error_message: str | None = None
    processing_time_ms: int = 0
    entry_count: int | None = None
    total_hours: float | None = None
    details: list[tuple[str, str]] = field(default_factory=list)  # (type, message)


def log_request(log: RequestLog) -> None:
    """Write request log to SQLite database."""
    conn = sqlite3.connect(DB_PATH)
    try:
        cursor = conn.cursor()

        cursor.execute(
            """
            INSERT INTO api_requests (
                request_id, timestamp, endpoint, method, client_ip,
                user_id, project_id, status_code, error_code, error_message,
                processing_time_ms, entry_count, total_hours
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
            (
                log.request_id,
                log.timestamp,
                log.endpoint,
                log.method,
                log.client_ip,
                log.user_id,
                log.project_id,
                log.status_code,
                log.error_code,
                log.error_message,
                log.processing_time_ms,
                log.entry_count,
                log.total_hours,
            ),
        )

        for detail_type, message in log.details:
            cursor.execute(
                """
                INSERT INTO api_request_details (request_id, detail_type, message)
                VALUES (?, ?, ?)
            """,
                (log.request_id, detail_type, message),
            )

        conn.commit()
    finally:
        conn.close()


@contextmanager
def logged_request(log: RequestLog):
    """
    Time the wrapped block and record its outcome in the request log.

    HTTPExceptions raised inside are recorded with their status and detail,
    anything else as a 500. The exception is always re-raised.
    """
    start_time = time.time()
    try:
        yield log
        if not log.status_code:
            log.status_code = 200

    except HTTPException as e:
        log.status_code = e.status_code
        if isinstance(e.detail, dict):
            log.error_code = e.detail.get("code")
            log.error_message = e.detail.get("error")
            for detail in e.detail.get("details", []):
                log.details.append(("validation_error", detail))
        else:
            log.error_message = str(e.detail)
        raise

    except Exception as e:
        log.status_code = 500
        log.error_code = "INTERNAL_ERROR"
        log.error_message = str(e)
        raise

    finally:
        log.processing_time_ms = int((time.time() - start_time) * 1000)
        try:
            log_request(log)
        except sqlite3.Error as e:
            # Don't fail the request if logging fails
            print(f"Request log write failed for {log.request_id}: {e}")
