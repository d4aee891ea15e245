"""
SQLite database operations for projects and their time entry ledgers.

Time entries are stored as a JSON document list on the project row and are
always written as a whole. Writes are conditional on the row version so two
clients racing on the same ledger cannot both succeed.
"""

import json
import sqlite3
import uuid
from pathlib import Path

from core.config import DB_PATH
from models.projects import Project, TimeEntry


def get_connection(db_path: Path | None = None) -> sqlite3.Connection:
    """Get a database connection."""
    conn = sqlite3.connect(db_path or DB_PATH, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def create_tables(conn: sqlite3.Connection):
    """Create tables and indexes if they don't exist."""
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS projects (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            name TEXT NOT NULL,
            description TEXT NOT NULL,
            category TEXT NOT NULL CHECK(category IN ('Creativity', 'Activity', 'Service')),
            progress TEXT NOT NULL CHECK(progress IN ('Planning', 'In progress', 'Completed')),
            start_date TEXT NOT NULL,
            end_date TEXT,
            learning_outcomes TEXT NOT NULL DEFAULT '[]',
            personal_goals TEXT NOT NULL DEFAULT '',
            reflections TEXT NOT NULL DEFAULT '',
            time_entries TEXT NOT NULL DEFAULT '[]',
            version INTEGER NOT NULL DEFAULT 0,
            create_date TEXT DEFAULT CURRENT_TIMESTAMP
        )
    """)

    # API request logging table
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS api_requests (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            request_id TEXT UNIQUE NOT NULL,
            timestamp TEXT NOT NULL,
            endpoint TEXT NOT NULL,
            method TEXT NOT NULL,
            client_ip TEXT,
            user_id TEXT,
            project_id TEXT,
            status_code INTEGER NOT NULL,
            error_code TEXT,
            error_message TEXT,
            processing_time_ms INTEGER NOT NULL,
            entry_count INTEGER,
            total_hours REAL
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS api_request_details (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            request_id TEXT NOT NULL,
            detail_type TEXT NOT NULL CHECK(detail_type IN ('validation_error', 'warning')),
            message TEXT NOT NULL,
            FOREIGN KEY (request_id) REFERENCES api_requests(request_id)
        )
    """)

    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_projects_user ON projects(user_id, start_date)"
    )
    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_api_requests_timestamp ON api_requests(timestamp)"
    )
    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_api_request_details_request ON api_request_details(request_id)"
    )

    conn.commit()


# =============================================================================
# DOCUMENT CONVERSION
# =============================================================================


def entry_to_document(entry: TimeEntry) -> dict:
    """Convert an entry to its stored camelCase form."""
    return {
        "startTime": entry["start_time"],
        "endTime": entry["end_time"],
        "manual": bool(entry.get("manual", False)),
    }


def entry_from_document(doc: dict) -> TimeEntry:
    """Convert a stored entry document. A missing 'manual' key reads as False."""
    return {
        "start_time": doc["startTime"],
        "end_time": doc.get("endTime"),
        "manual": bool(doc.get("manual", False)),
    }


def _row_to_project(row: sqlite3.Row) -> Project:
    return {
        "id": row["id"],
        "user_id": row["user_id"],
        "name": row["name"],
        "description": row["description"],
        "category": row["category"],
        "progress": row["progress"],
        "start_date": row["start_date"],
        "end_date": row["end_date"],
        "learning_outcomes": json.loads(row["learning_outcomes"]),
        "personal_goals": row["personal_goals"],
        "reflections": row["reflections"],
        "time_entries": [entry_from_document(d) for d in json.loads(row["time_entries"])],
        "version": row["version"],
    }


# =============================================================================
# PROJECTS
# =============================================================================


def insert_project(conn: sqlite3.Connection, project: dict) -> str:
    """Insert a project record and return its generated id."""
    project_id = project.get("id") or uuid.uuid4().hex
    entries = project.get("time_entries") or []
    cursor = conn.cursor()
    cursor.execute(
        """
        INSERT INTO projects (
            id, user_id, name, description, category, progress,
            start_date, end_date, learning_outcomes, personal_goals,
            reflections, time_entries
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            project_id,
            project["user_id"],
            project["name"],
            project["description"],
            project["category"],
            project["progress"],
            project["start_date"],
            project.get("end_date"),
            json.dumps(list(project.get("learning_outcomes") or [])),
            project.get("personal_goals") or "",
            project.get("reflections") or "",
            json.dumps([entry_to_document(e) for e in entries]),
        ),
    )
    conn.commit()
    return project_id


def get_project(conn: sqlite3.Connection, project_id: str) -> Project | None:
    """Fetch a single project by id."""
    cursor = conn.cursor()
    cursor.execute("SELECT * FROM projects WHERE id = ?", (project_id,))
    row = cursor.fetchone()
    return _row_to_project(row) if row else None


def list_projects_for_user(conn: sqlite3.Connection, user_id: str) -> list[Project]:
    """All projects owned by a user, most recent start date first."""
    cursor = conn.cursor()
    cursor.execute(
        "SELECT * FROM projects WHERE user_id = ? ORDER BY start_date DESC, create_date DESC",
        (user_id,),
    )
    return [_row_to_project(row) for row in cursor.fetchall()]


def list_student_ids(conn: sqlite3.Connection) -> list[str]:
    """Ids of every user who owns at least one project, sorted."""
    cursor = conn.cursor()
    cursor.execute("SELECT DISTINCT user_id FROM projects ORDER BY user_id")
    return [row[0] for row in cursor.fetchall()]


def update_project_fields(conn: sqlite3.Connection, project_id: str, fields: dict) -> bool:
    """
    Update progress and/or reflections on a project.

    Only 'progress' and 'reflections' may be changed here; time entries go
    through replace_time_entries.
    """
    allowed = {k: v for k, v in fields.items() if k in ("progress", "reflections")}
    if not allowed:
        return False

    assignments = ", ".join(f"{column} = ?" for column in allowed)
    cursor = conn.cursor()
    cursor.execute(
        f"UPDATE projects SET {assignments} WHERE id = ?",
        (*allowed.values(), project_id),
    )
    conn.commit()
    return cursor.rowcount == 1


def replace_time_entries(
    conn: sqlite3.Connection,
    project_id: str,
    entries: list[TimeEntry],
    expected_version: int,
) -> bool:
    """
    Replace a project's whole entry list if nobody wrote it since it was read.

    Returns:
        True if the write happened, False if the stored version moved on
    """
    payload = json.dumps([entry_to_document(e) for e in entries])
    cursor = conn.cursor()
    cursor.execute(
        """
        UPDATE projects
        SET time_entries = ?, version = version + 1
        WHERE id = ? AND version = ?
        """,
        (payload, project_id, expected_version),
    )
    conn.commit()
    return cursor.rowcount == 1
