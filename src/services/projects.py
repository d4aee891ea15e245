"""
Project creation, lookup and status updates with ownership checks.
"""

import sqlite3
from datetime import date

from core.config import INITIAL_PROGRESS, PROJECT_PROGRESS
from core.database import (
    get_project,
    insert_project,
    list_projects_for_user,
    list_student_ids,
    update_project_fields,
)
from core.exceptions import PermissionDeniedError, ProjectNotFoundError
from core.validation import validate_project_fields
from models.projects import Project
from models.users import UserContext


def _as_iso_date(value) -> str | None:
    if isinstance(value, date):
        return value.isoformat()
    return value or None


def create_project(conn: sqlite3.Connection, user: UserContext, fields: dict) -> Project:
    """
    Create a project owned by the acting user. New projects start in Planning
    with no time entries.

    Raises:
        ValueError: Field validation errors, one per line
    """
    record = {
        "user_id": user.user_id,
        "name": (fields.get("name") or "").strip(),
        "description": (fields.get("description") or "").strip(),
        "category": fields.get("category"),
        "progress": INITIAL_PROGRESS,
        "start_date": _as_iso_date(fields.get("start_date")),
        "end_date": _as_iso_date(fields.get("end_date")),
        "learning_outcomes": list(fields.get("learning_outcomes") or []),
        "personal_goals": fields.get("personal_goals") or "",
        "reflections": "",
        "time_entries": [],
    }

    errors = validate_project_fields(record)
    if errors:
        raise ValueError("\n".join(errors))

    project_id = insert_project(conn, record)
    return get_project(conn, project_id)


def get_project_for_user(
    conn: sqlite3.Connection, project_id: str, user: UserContext, write: bool = False
) -> Project:
    """
    Load a project the acting user may access.

    Owners may read and write. Teachers may read any project.

    Raises:
        ProjectNotFoundError: No such project
        PermissionDeniedError: The user may not access it
    """
    project = get_project(conn, project_id)
    if project is None:
        raise ProjectNotFoundError(f"Project '{project_id}' not found")

    if project["user_id"] == user.user_id:
        return project
    if user.is_teacher and not write:
        return project
    raise PermissionDeniedError("You do not have access to this project")


def resolve_student_id(user: UserContext, student_id: str | None) -> str:
    """Students only see their own data; teachers may name a student."""
    if not student_id or student_id == user.user_id:
        return user.user_id
    if not user.is_teacher:
        raise PermissionDeniedError("Only teachers can view other students")
    return student_id


def list_projects(
    conn: sqlite3.Connection, user: UserContext, student_id: str | None = None
) -> list[Project]:
    return list_projects_for_user(conn, resolve_student_id(user, student_id))


def list_students(conn: sqlite3.Connection, user: UserContext) -> dict[str, list[Project]]:
    """
    Every student with projects, mapped to their projects. Teachers only.

    Raises:
        PermissionDeniedError: The user is not a teacher
    """
    if not user.is_teacher:
        raise PermissionDeniedError("Only teachers can list students")
    return {
        student_id: list_projects_for_user(conn, student_id)
        for student_id in list_student_ids(conn)
    }


def update_project(
    conn: sqlite3.Connection,
    project_id: str,
    user: UserContext,
    progress: str | None = None,
    reflections: str | None = None,
) -> Project:
    """Update progress status and/or reflections. Owner only."""
    get_project_for_user(conn, project_id, user, write=True)

    fields = {}
    if progress is not None:
        if progress not in PROJECT_PROGRESS:
            raise ValueError(f"Invalid progress '{progress}'")
        fields["progress"] = progress
    if reflections is not None:
        fields["reflections"] = reflections

    if fields:
        update_project_fields(conn, project_id, fields)
    return get_project(conn, project_id)
