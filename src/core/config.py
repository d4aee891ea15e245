"""
Configuration constants and environment setup.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
DB_PATH = Path(
    os.environ.get("HOURVEST_DB_PATH", PROJECT_ROOT / "data" / "db" / "hourvest.db")
)
OUTPUT_DIR = PROJECT_ROOT / "output"

# =============================================================================
# HOURS CONFIGURATION
# =============================================================================

GOAL_HOURS = 300
MS_PER_HOUR = 3_600_000
MAX_MANUAL_HOURS = 24
MONTHLY_SUMMARY_MONTHS = 6

# =============================================================================
# CAS PROJECT CODES
# =============================================================================

# Order matters: category breakdowns are listed in this order
CAS_CATEGORIES = ("Creativity", "Activity", "Service")

PROJECT_PROGRESS = ("Planning", "In progress", "Completed")
INITIAL_PROGRESS = "Planning"
COMPLETED_PROGRESS = "Completed"

LEARNING_OUTCOMES = (
    "Identify own strengths and develop areas for growth",
    "Demonstrate that challenges have been undertaken, developing new skills in the process",
    "Demonstrate how to initiate and plan a CAS experience",
    "Show commitment to and perseverance in CAS experiences",
    "Demonstrate the skills and recognize the benefits of working collaboratively",
    "Demonstrate engagement with issues of global significance",
    "Recognize and consider the ethics of choices and actions",
)

ROLE_STUDENT = "student"
ROLE_TEACHER = "teacher"
USER_ROLES = {ROLE_STUDENT, ROLE_TEACHER}

# =============================================================================
# REPORT CONFIGURATION
# =============================================================================

REPORT_TITLE = "CAS Progress Report"
TIME_LOG_HEADERS = ["Date", "Detail", "Duration (HH:MM:SS)"]
SUMMARY_ROW_LABELS = [
    "Total hours",
    "Overall progress",
    "Hours remaining",
    "Active projects",
]
MANUAL_ENTRY_LABEL = "Manual entry"

# =============================================================================
# API CONFIGURATION
# =============================================================================

HOURVEST_API_KEY = os.environ.get("HOURVEST_API_KEY", "")
API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8000"))
API_DEBUG = os.environ.get("API_DEBUG", "false").lower() == "true"
API_VERSION = "1.0.0"
