"""
Pytest configuration and shared fixtures.
"""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.database import create_tables, get_connection  # noqa: E402
from models.users import UserContext  # noqa: E402


@pytest.fixture
def closed_entry():
    """A 90 minute clocked entry."""
    return {
        "start_time": "2025-11-01T09:00:00.000Z",
        "end_time": "2025-11-01T10:30:00.000Z",
        "manual": False,
    }


@pytest.fixture
def open_entry():
    return {
        "start_time": "2025-11-02T15:00:00.000Z",
        "end_time": None,
        "manual": False,
    }


@pytest.fixture
def sample_project(closed_entry):
    """Project record as returned by the database layer."""
    return {
        "id": "p1",
        "user_id": "student-1",
        "name": "Food bank volunteering",
        "description": "Weekly shifts sorting donations at the local food bank.",
        "category": "Service",
        "progress": "In progress",
        "start_date": "2025-10-01",
        "end_date": None,
        "learning_outcomes": ["Show commitment to and perseverance in CAS experiences"],
        "personal_goals": "Volunteer every Saturday this term.",
        "reflections": "",
        "time_entries": [closed_entry],
        "version": 0,
    }


@pytest.fixture
def project_fields():
    """Valid fields for creating a project."""
    return {
        "name": "Marathon training",
        "description": "Train for the city half marathon in spring.",
        "category": "Activity",
        "start_date": "2025-09-01",
        "learning_outcomes": ["Identify own strengths and develop areas for growth"],
        "personal_goals": "Run 21km under two hours.",
    }


@pytest.fixture
def student():
    return UserContext(user_id="student-1")


@pytest.fixture
def other_student():
    return UserContext(user_id="student-2")


@pytest.fixture
def teacher():
    return UserContext(user_id="teacher-1", role="teacher")


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "hourvest-test.db"
    conn = get_connection(path)
    create_tables(conn)
    conn.close()
    return path


@pytest.fixture
def db_conn(db_path):
    """Connection to a fresh database with all tables created."""
    conn = get_connection(db_path)
    yield conn
    conn.close()
