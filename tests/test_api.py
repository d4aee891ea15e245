"""Tests for the HTTP API."""

import sqlite3
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook

from api.main import app

API_KEY = "test-key"
STUDENT = {"X-API-Key": API_KEY, "X-User-Id": "student-1"}
OTHER_STUDENT = {"X-API-Key": API_KEY, "X-User-Id": "student-2"}
TEACHER = {"X-API-Key": API_KEY, "X-User-Id": "teacher-1", "X-User-Role": "teacher"}

PROJECT_BODY = {
    "name": "Beach clean-up campaign",
    "description": "Monthly beach clean-ups with the environment club.",
    "category": "Service",
    "startDate": "2025-09-01",
    "learningOutcomes": ["Demonstrate engagement with issues of global significance"],
    "personalGoals": "Organise three clean-ups.",
}


@pytest.fixture
def client(db_path, monkeypatch):
    monkeypatch.setattr("api.dependencies.DB_PATH", db_path)
    monkeypatch.setattr("api.dependencies.HOURVEST_API_KEY", API_KEY)
    monkeypatch.setattr("api.logging.DB_PATH", db_path)
    monkeypatch.setattr("api.routes.health.DB_PATH", db_path)
    return TestClient(app)


@pytest.fixture
def project_id(client):
    response = client.post("/v1/projects", json=PROJECT_BODY, headers=STUDENT)
    assert response.status_code == 201
    return response.json()["id"]


def logged_requests(db_path) -> list[tuple]:
    conn = sqlite3.connect(db_path)
    try:
        return conn.execute(
            "SELECT endpoint, status_code, error_code FROM api_requests ORDER BY id"
        ).fetchall()
    finally:
        conn.close()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["databaseAvailable"] is True


def test_health_without_database(client, monkeypatch, tmp_path):
    monkeypatch.setattr("api.routes.health.DB_PATH", tmp_path / "missing.db")

    response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "unhealthy"


def test_requires_api_key(client):
    response = client.get("/v1/projects", headers={"X-API-Key": "wrong", "X-User-Id": "student-1"})

    assert response.status_code == 401
    assert response.json()["detail"]["code"] == "UNAUTHORIZED"


def test_rejects_unknown_role(client):
    response = client.get("/v1/projects", headers={**STUDENT, "X-User-Role": "admin"})

    assert response.status_code == 401


def test_create_and_get_project(client, project_id):
    response = client.get(f"/v1/projects/{project_id}", headers=STUDENT)

    body = response.json()
    assert response.status_code == 200
    assert body["progress"] == "Planning"
    assert body["timeEntries"] == []
    assert body["totalDuration"] == "00:00:00"
    assert body["activeEntry"] is None


def test_create_project_validation(client):
    response = client.post("/v1/projects", json={**PROJECT_BODY, "category": "Chess"}, headers=STUDENT)

    assert response.status_code == 422


def test_clock_in_and_out(client, project_id):
    started = client.post(f"/v1/projects/{project_id}/time/start", headers=STUDENT)

    assert started.status_code == 200
    assert started.json()["activeEntry"]["endTime"] is None

    stopped = client.post(f"/v1/projects/{project_id}/time/stop", headers=STUDENT)

    assert stopped.status_code == 200
    assert stopped.json()["activeEntry"] is None
    assert stopped.json()["entry"]["endTime"] is not None


def test_double_clock_in_is_conflict(client, project_id, db_path):
    client.post(f"/v1/projects/{project_id}/time/start", headers=STUDENT)

    response = client.post(f"/v1/projects/{project_id}/time/start", headers=STUDENT)

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "CONFLICT"
    project = client.get(f"/v1/projects/{project_id}", headers=STUDENT).json()
    assert len(project["timeEntries"]) == 1
    assert ("/v1/projects/{project_id}/time/start", 409, "CONFLICT") in logged_requests(db_path)


def test_clock_out_without_running_clock(client, project_id):
    response = client.post(f"/v1/projects/{project_id}/time/stop", headers=STUDENT)

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "NO_ACTIVE_ENTRY"


def test_other_student_cannot_clock_in(client, project_id):
    response = client.post(f"/v1/projects/{project_id}/time/start", headers=OTHER_STUDENT)

    assert response.status_code == 403


def test_unknown_project(client):
    response = client.post("/v1/projects/missing/time/start", headers=STUDENT)

    assert response.status_code == 404


def test_manual_entry_with_bounds(client, project_id):
    response = client.post(
        f"/v1/projects/{project_id}/time/manual",
        json={"startTime": "2025-11-01T10:00:00Z", "endTime": "2025-11-01T11:30:00Z"},
        headers=STUDENT,
    )

    assert response.status_code == 200
    assert response.json()["entry"]["manual"] is True
    assert response.json()["totalDuration"] == "01:30:00"


def test_manual_entry_with_hours(client, project_id):
    response = client.post(
        f"/v1/projects/{project_id}/time/manual",
        json={"workDate": "2025-11-01", "hours": 2.5},
        headers=STUDENT,
    )

    assert response.status_code == 200
    assert response.json()["entry"]["startTime"] == "2025-11-01T00:00:00.000Z"
    assert response.json()["totalDurationMs"] == 9_000_000


@pytest.mark.parametrize(
    "body",
    [
        {"startTime": "2025-11-01T12:00:00Z", "endTime": "2025-11-01T10:00:00Z"},
        {"startTime": "2025-11-01T12:00:00Z"},
        {"workDate": "2025-11-01", "hours": 30},
    ],
)
def test_malformed_manual_entry(client, project_id, body):
    response = client.post(f"/v1/projects/{project_id}/time/manual", json=body, headers=STUDENT)

    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "MALFORMED_ENTRY"


def test_replace_entries(client, project_id):
    entries = [
        {"startTime": "2025-11-01T09:00:00.000Z", "endTime": "2025-11-01T10:30:00.000Z", "manual": False},
        {"startTime": "2025-11-02T09:00:00.000Z", "endTime": None},
    ]

    response = client.put(f"/v1/projects/{project_id}/time", json={"timeEntries": entries}, headers=STUDENT)

    assert response.status_code == 200
    assert response.json()["totalDuration"] == "01:30:00"
    assert response.json()["timeEntries"][1]["manual"] is False


def test_replace_entries_rejects_two_open(client, project_id):
    entries = [
        {"startTime": "2025-11-01T09:00:00.000Z", "endTime": None},
        {"startTime": "2025-11-02T09:00:00.000Z", "endTime": None},
    ]

    response = client.put(f"/v1/projects/{project_id}/time", json={"timeEntries": entries}, headers=STUDENT)

    assert response.status_code == 422
    assert response.json()["detail"]["details"] == ["Only one entry may be open, found 2"]


def test_replace_entries_cannot_reopen_closed_entry(client, project_id):
    closed = {"startTime": "2025-11-01T09:00:00.000Z", "endTime": "2025-11-01T10:30:00.000Z"}
    client.put(f"/v1/projects/{project_id}/time", json={"timeEntries": [closed]}, headers=STUDENT)

    response = client.put(
        f"/v1/projects/{project_id}/time",
        json={"timeEntries": [{**closed, "endTime": None}]},
        headers=STUDENT,
    )

    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "MALFORMED_ENTRY"
    project = client.get(f"/v1/projects/{project_id}", headers=STUDENT).json()
    assert project["timeEntries"][0]["endTime"] == "2025-11-01T10:30:00.000Z"


def test_update_project(client, project_id):
    response = client.patch(
        f"/v1/projects/{project_id}", json={"progress": "Completed"}, headers=STUDENT
    )

    assert response.status_code == 200
    assert response.json()["progress"] == "Completed"


def test_summary(client, project_id):
    client.post(
        f"/v1/projects/{project_id}/time/manual",
        json={"workDate": "2025-11-01", "hours": 6.5},
        headers=STUDENT,
    )

    body = client.get("/v1/summary", headers=STUDENT).json()

    assert body["totalHours"] == 7
    assert body["goalHours"] == 300
    assert body["hoursRemaining"] == 293
    assert body["progressPercentage"] == 2.3
    assert body["activeProjects"] == 1
    assert body["categories"] == [{"category": "Service", "hours": 6.5, "duration": "06:30:00"}]
    assert len(body["monthly"]) == 6


def test_teacher_can_view_student_summary(client, project_id):
    assert client.get("/v1/summary?student_id=student-1", headers=TEACHER).status_code == 200
    assert client.get("/v1/summary?student_id=student-1", headers=OTHER_STUDENT).status_code == 403


def test_student_report_download(client, project_id):
    response = client.get("/v1/reports/student?student_name=Jane%20Doe", headers=STUDENT)

    assert response.status_code == 200
    assert "cas_report_jane_doe_" in response.headers["content-disposition"]
    wb = load_workbook(BytesIO(response.content))
    assert wb.sheetnames == ["Summary", "Beach clean-up campaign"]


def test_teacher_roster(client, project_id):
    client.post(
        f"/v1/projects/{project_id}/time/manual",
        json={"workDate": "2025-11-01", "hours": 6.5},
        headers=STUDENT,
    )

    response = client.get("/v1/students", headers=TEACHER)

    assert response.status_code == 200
    assert response.json()["students"] == [
        {
            "studentId": "student-1",
            "totalHours": 7,
            "goalHours": 300,
            "progressPercentage": 2.3,
            "hoursRemaining": 293,
            "activeProjects": 1,
        }
    ]


def test_students_cannot_list_roster(client, project_id):
    response = client.get("/v1/students", headers=STUDENT)

    assert response.status_code == 403
