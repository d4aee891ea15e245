"""Clock-in, clock-out and manual time entry endpoints."""

from sqlite3 import Connection

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_current_user, get_db, verify_api_key
from api.errors import to_http_exception
from api.logging import RequestLog, logged_request
from api.models import (
    ManualEntryRequest,
    ReplaceEntriesRequest,
    TimeEntriesResponse,
    TimeEntryResponse,
)
from api.routes.projects import entry_model, get_client_ip
from core.database import get_project
from core.exceptions import PermissionDeniedError, ProjectNotFoundError
from core.timeutils import start_of_day
from models.projects import TimeEntry
from models.users import UserContext
from services.hours import format_duration, ms_to_hours, total_duration_ms
from services.ledger import TimeEntryLedger
from services.tracking import (
    add_manual_entry,
    add_manual_hours,
    clock_in,
    clock_out,
    replace_entries,
)

router = APIRouter(prefix="/v1/projects/{project_id}/time", dependencies=[Depends(verify_api_key)])

HANDLED_ERRORS = (ValueError, ProjectNotFoundError, PermissionDeniedError)


def _entry_response(
    conn: Connection, project_id: str, entry: TimeEntry, request_log: RequestLog
) -> TimeEntryResponse:
    project = get_project(conn, project_id)
    entries = project["time_entries"]
    total_ms = total_duration_ms(entries)

    request_log.entry_count = len(entries)
    request_log.total_hours = round(ms_to_hours(total_ms), 2)

    return TimeEntryResponse(
        project_id=project_id,
        entry=entry_model(entry),
        active_entry=entry_model(TimeEntryLedger(entries).active_entry),
        total_duration_ms=total_ms,
        total_duration=format_duration(total_ms),
    )


def _request_log(request: Request, user: UserContext, project_id: str, action: str) -> RequestLog:
    return RequestLog(
        endpoint=f"/v1/projects/{{project_id}}/time{action}",
        method=request.method,
        client_ip=get_client_ip(request),
        user_id=user.user_id,
        project_id=project_id,
    )


@router.post("/start", response_model=TimeEntryResponse)
def clock_in_endpoint(
    request: Request,
    project_id: str,
    user: UserContext = Depends(get_current_user),
    conn: Connection = Depends(get_db),
):
    """Start the clock on a project. 409 if a clock is already running."""
    request_log = _request_log(request, user, project_id, "/start")
    with logged_request(request_log):
        try:
            entry = clock_in(conn, project_id, user)
        except HANDLED_ERRORS as e:
            raise to_http_exception(e) from e
        return _entry_response(conn, project_id, entry, request_log)


@router.post("/stop", response_model=TimeEntryResponse)
def clock_out_endpoint(
    request: Request,
    project_id: str,
    user: UserContext = Depends(get_current_user),
    conn: Connection = Depends(get_db),
):
    """Stop the running clock. 409 if no clock is running."""
    request_log = _request_log(request, user, project_id, "/stop")
    with logged_request(request_log):
        try:
            entry = clock_out(conn, project_id, user)
        except HANDLED_ERRORS as e:
            raise to_http_exception(e) from e
        return _entry_response(conn, project_id, entry, request_log)


@router.post("/manual", response_model=TimeEntryResponse)
def manual_entry_endpoint(
    request: Request,
    project_id: str,
    body: ManualEntryRequest,
    user: UserContext = Depends(get_current_user),
    conn: Connection = Depends(get_db),
):
    """
    Record time that was not clocked live.

    Accepts explicit startTime/endTime, or workDate plus hours.
    """
    request_log = _request_log(request, user, project_id, "/manual")
    with logged_request(request_log):
        try:
            if body.work_date is not None and body.hours is not None:
                entry = add_manual_hours(
                    conn, project_id, user, start_of_day(body.work_date), body.hours
                )
            else:
                entry = add_manual_entry(
                    conn, project_id, user, body.start_time, body.end_time
                )
        except HANDLED_ERRORS as e:
            raise to_http_exception(e) from e
        return _entry_response(conn, project_id, entry, request_log)


@router.put("", response_model=TimeEntriesResponse)
def replace_entries_endpoint(
    request: Request,
    project_id: str,
    body: ReplaceEntriesRequest,
    user: UserContext = Depends(get_current_user),
    conn: Connection = Depends(get_db),
):
    """Replace the project's whole entry list after validating it."""
    request_log = _request_log(request, user, project_id, "")
    with logged_request(request_log):
        try:
            entries = replace_entries(
                conn, project_id, user, [e.model_dump() for e in body.time_entries]
            )
        except HANDLED_ERRORS as e:
            raise to_http_exception(e) from e

        total_ms = total_duration_ms(entries)
        request_log.entry_count = len(entries)
        request_log.total_hours = round(ms_to_hours(total_ms), 2)
        return TimeEntriesResponse(
            project_id=project_id,
            time_entries=[entry_model(e) for e in entries],
            total_duration_ms=total_ms,
            total_duration=format_duration(total_ms),
        )
