"""Project endpoints."""

from datetime import datetime
from sqlite3 import Connection

from fastapi import APIRouter, Depends, Request, status

from api.dependencies import get_current_user, get_db, verify_api_key
from api.errors import to_http_exception
from api.logging import RequestLog, logged_request
from api.models import (
    ProjectCreateRequest,
    ProjectResponse,
    ProjectUpdateRequest,
    TimeEntryModel,
)
from core.exceptions import PermissionDeniedError, ProjectNotFoundError
from models.projects import Project, TimeEntry
from models.users import UserContext
from services.hours import format_duration, live_elapsed_ms, total_duration_ms
from services.ledger import TimeEntryLedger
from services.projects import (
    create_project,
    get_project_for_user,
    list_projects,
    update_project,
)

router = APIRouter(prefix="/v1", dependencies=[Depends(verify_api_key)])


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def entry_model(entry: TimeEntry | None) -> TimeEntryModel | None:
    if entry is None:
        return None
    return TimeEntryModel(**entry)


def build_project_response(project: Project, now: datetime | None = None) -> ProjectResponse:
    """Project record plus display totals, entries most recent first."""
    ledger = TimeEntryLedger(project["time_entries"])
    total_ms = total_duration_ms(project["time_entries"])
    return ProjectResponse(
        id=project["id"],
        user_id=project["user_id"],
        name=project["name"],
        description=project["description"],
        category=project["category"],
        progress=project["progress"],
        start_date=project["start_date"],
        end_date=project["end_date"],
        learning_outcomes=project["learning_outcomes"],
        personal_goals=project["personal_goals"],
        reflections=project["reflections"],
        time_entries=[entry_model(e) for e in ledger.newest_first()],
        active_entry=entry_model(ledger.active_entry),
        total_duration_ms=total_ms,
        total_duration=format_duration(total_ms),
        live_elapsed_ms=live_elapsed_ms(project["time_entries"], now),
    )


@router.post(
    "/projects", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED
)
def create_project_endpoint(
    request: Request,
    body: ProjectCreateRequest,
    user: UserContext = Depends(get_current_user),
    conn: Connection = Depends(get_db),
):
    """Create a CAS project for the acting student."""
    request_log = RequestLog(
        endpoint="/v1/projects",
        method="POST",
        client_ip=get_client_ip(request),
        user_id=user.user_id,
    )
    with logged_request(request_log):
        try:
            project = create_project(conn, user, body.model_dump())
        except ValueError as e:
            raise to_http_exception(e) from e
        request_log.project_id = project["id"]
        return build_project_response(project)


@router.get("/projects", response_model=list[ProjectResponse])
def list_projects_endpoint(
    student_id: str | None = None,
    user: UserContext = Depends(get_current_user),
    conn: Connection = Depends(get_db),
):
    """List the acting student's projects, or a student's projects for teachers."""
    try:
        projects = list_projects(conn, user, student_id)
    except PermissionDeniedError as e:
        raise to_http_exception(e) from e
    return [build_project_response(p) for p in projects]


@router.get("/projects/{project_id}", response_model=ProjectResponse)
def get_project_endpoint(
    project_id: str,
    user: UserContext = Depends(get_current_user),
    conn: Connection = Depends(get_db),
):
    try:
        project = get_project_for_user(conn, project_id, user)
    except (ProjectNotFoundError, PermissionDeniedError) as e:
        raise to_http_exception(e) from e
    return build_project_response(project)


@router.patch("/projects/{project_id}", response_model=ProjectResponse)
def update_project_endpoint(
    request: Request,
    project_id: str,
    body: ProjectUpdateRequest,
    user: UserContext = Depends(get_current_user),
    conn: Connection = Depends(get_db),
):
    """Update a project's progress status or reflections."""
    request_log = RequestLog(
        endpoint="/v1/projects/{project_id}",
        method="PATCH",
        client_ip=get_client_ip(request),
        user_id=user.user_id,
        project_id=project_id,
    )
    with logged_request(request_log):
        try:
            project = update_project(
                conn,
                project_id,
                user,
                progress=body.progress,
                reflections=body.reflections,
            )
        except (ValueError, ProjectNotFoundError, PermissionDeniedError) as e:
            raise to_http_exception(e) from e
        return build_project_response(project)
