"""Dashboard summary, teacher roster and student report endpoints."""

import asyncio
from sqlite3 import Connection

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from api.dependencies import get_current_user, get_db, verify_api_key
from api.errors import to_http_exception
from api.logging import RequestLog, logged_request
from api.models import (
    CategoryHours,
    MonthlyHours,
    StudentHours,
    StudentsResponse,
    SummaryResponse,
)
from api.routes.projects import get_client_ip
from core.exceptions import PermissionDeniedError
from models.users import UserContext
from services.hours import (
    format_duration,
    monthly_hours,
    ms_to_hours,
    summarize_projects,
    summarize_students,
)
from services.projects import list_projects, list_students, resolve_student_id
from services.reports import generate_student_report_to_bytes

router = APIRouter(prefix="/v1", dependencies=[Depends(verify_api_key)])


@router.get("/summary", response_model=SummaryResponse)
def summary_endpoint(
    student_id: str | None = None,
    user: UserContext = Depends(get_current_user),
    conn: Connection = Depends(get_db),
):
    """Total hours, progress toward the goal, category and monthly breakdowns."""
    try:
        target = resolve_student_id(user, student_id)
        projects = list_projects(conn, user, target)
    except PermissionDeniedError as e:
        raise to_http_exception(e) from e

    summary = summarize_projects(projects)
    return SummaryResponse(
        student_id=target,
        total_hours=summary.total_hours,
        total_duration=format_duration(summary.total_ms),
        goal_hours=summary.goal_hours,
        progress_percentage=round(summary.progress_percentage, 1),
        hours_remaining=summary.hours_remaining,
        active_projects=summary.active_projects,
        categories=[
            CategoryHours(
                category=category,
                hours=round(ms_to_hours(ms), 1),
                duration=format_duration(ms),
            )
            for category, ms in summary.per_category_ms.items()
        ],
        monthly=[MonthlyHours(**bucket) for bucket in monthly_hours(projects)],
        live_elapsed_ms=summary.live_elapsed_ms,
    )


@router.get("/students", response_model=StudentsResponse)
def students_endpoint(
    user: UserContext = Depends(get_current_user),
    conn: Connection = Depends(get_db),
):
    """Teacher roster: every student's hours and progress toward the goal."""
    try:
        roster = list_students(conn, user)
    except PermissionDeniedError as e:
        raise to_http_exception(e) from e

    return StudentsResponse(
        students=[
            StudentHours(
                student_id=student_id,
                total_hours=summary.total_hours,
                goal_hours=summary.goal_hours,
                progress_percentage=round(summary.progress_percentage, 1),
                hours_remaining=summary.hours_remaining,
                active_projects=summary.active_projects,
            )
            for student_id, summary in summarize_students(roster).items()
        ]
    )


@router.get("/reports/student")
async def student_report_endpoint(
    request: Request,
    student_id: str | None = None,
    student_name: str | None = None,
    school_name: str | None = None,
    user: UserContext = Depends(get_current_user),
    conn: Connection = Depends(get_db),
):
    """Download the student's CAS progress report as an Excel workbook."""
    request_log = RequestLog(
        endpoint="/v1/reports/student",
        method="GET",
        client_ip=get_client_ip(request),
        user_id=user.user_id,
    )
    with logged_request(request_log):
        try:
            target = resolve_student_id(user, student_id)
            projects = list_projects(conn, user, target)
        except PermissionDeniedError as e:
            raise to_http_exception(e) from e

        # Workbook building is CPU bound; keep it off the event loop
        excel_bytes, filename, project_count, total_hours = await asyncio.to_thread(
            generate_student_report_to_bytes,
            student_name or target,
            projects,
            school_name,
        )

        request_log.entry_count = sum(len(p["time_entries"]) for p in projects)
        request_log.total_hours = total_hours

        return Response(
            content=excel_bytes,
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
