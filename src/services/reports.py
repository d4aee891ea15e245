"""
Student CAS progress report generation (Excel).

Builds a workbook with a Summary sheet and one sheet per project, each with
the project's closed time entries listed most recent first.
"""

from dataclasses import dataclass
from datetime import date
from io import BytesIO
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Alignment, Color, Font, PatternFill

from core.config import (
    MANUAL_ENTRY_LABEL,
    OUTPUT_DIR,
    REPORT_TITLE,
    SUMMARY_ROW_LABELS,
    TIME_LOG_HEADERS,
)
from core.timeutils import parse_timestamp
from models.projects import Project, TimeEntry
from services.hours import (
    HoursSummary,
    entry_duration_ms,
    format_duration,
    format_percentage,
    monthly_hours,
    ms_to_hours,
    summarize_projects,
    total_duration_ms,
)
from services.ledger import TimeEntryLedger


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class ReportResult:
    """Result of report generation."""

    workbook: Workbook
    project_count: int
    total_hours: int
    summary: HoursSummary


# =============================================================================
# CONSTANTS
# =============================================================================

MAX_SHEET_NAME_LENGTH = 31
HEADER_FONT = Font(bold=True, color=Color(rgb="FFFFFFFF"))
HEADER_FILL = PatternFill(patternType="solid", fgColor=Color(rgb="FF262626"))
WRAP = Alignment(wrap_text=True, vertical="top")


# =============================================================================
# FORMATTING
# =============================================================================


def format_date_display(d: date) -> str:
    """Format date as DD/MM/YYYY."""
    return d.strftime("%d/%m/%Y")


def format_entry_row(entry: TimeEntry) -> list[str]:
    """Date, detail and duration cells for one closed entry."""
    start = parse_timestamp(entry["start_time"])
    end = parse_timestamp(entry["end_time"])
    if entry["manual"]:
        detail = MANUAL_ENTRY_LABEL
    else:
        detail = f"{start.strftime('%H:%M')} - {end.strftime('%H:%M')}"
    return [
        start.strftime("%d/%m/%y"),
        detail,
        format_duration(entry_duration_ms(entry)),
    ]


def make_sheet_name(name: str, used: set[str]) -> str:
    """Create a unique valid Excel sheet name (31 chars max)."""
    sanitized = name.replace(":", " -")
    for char in ["\\", "/", "?", "*", "[", "]"]:
        sanitized = sanitized.replace(char, "-")
    sanitized = sanitized.strip() or "Project"

    candidate = sanitized[:MAX_SHEET_NAME_LENGTH].rstrip()
    counter = 2
    while candidate.lower() in used:
        suffix = f" ({counter})"
        candidate = sanitized[: MAX_SHEET_NAME_LENGTH - len(suffix)].rstrip() + suffix
        counter += 1

    used.add(candidate.lower())
    return candidate


def _write_header_row(ws, row: int, headers: list[str]):
    for col_idx, header in enumerate(headers, start=1):
        cell = ws.cell(row=row, column=col_idx, value=header)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL


def _write_labeled_text(ws, row: int, label: str, text: str) -> int:
    """Write a bold label with wrapped text below it. Returns the next free row."""
    ws.cell(row=row, column=1, value=label).font = Font(bold=True)
    cell = ws.cell(row=row + 1, column=1, value=text or "-")
    cell.alignment = WRAP
    ws.merge_cells(start_row=row + 1, start_column=1, end_row=row + 1, end_column=3)
    return row + 3


def _setup_print(ws, title_rows: str | None = None):
    """Portrait A4, fit to page width, optional repeated title rows."""
    ws.page_setup.orientation = "portrait"
    ws.page_setup.paperSize = ws.PAPERSIZE_A4
    ws.page_setup.fitToWidth = 1
    ws.page_setup.fitToHeight = 0
    ws.sheet_properties.pageSetUpPr.fitToPage = True
    if title_rows:
        ws.print_title_rows = title_rows


# =============================================================================
# SHEETS
# =============================================================================


def write_summary_sheet(
    ws,
    student_name: str,
    school_name: str,
    projects: list[Project],
    summary: HoursSummary,
    generated_on: date,
):
    """
    Write the Summary sheet.

    Structure:
    Rows 1-4: Title, student, school, generated date
    Rows 6-9: Total hours, progress, hours remaining, active projects
    Then: Hours by category table, then hours by month table
    """
    ws.sheet_view.showGridLines = False

    ws.cell(row=1, column=1, value=REPORT_TITLE).font = Font(bold=True, size=20)
    ws.cell(row=2, column=1, value=student_name).font = Font(bold=True, size=14)
    ws.cell(row=3, column=1, value=school_name)
    ws.cell(row=4, column=1, value=f"Generated: {format_date_display(generated_on)}")

    values = [
        f"{summary.total_hours}h",
        format_percentage(summary.progress_percentage),
        f"{summary.hours_remaining}h of {summary.goal_hours}h goal",
        summary.active_projects,
    ]
    for offset, (label, value) in enumerate(zip(SUMMARY_ROW_LABELS, values)):
        ws.cell(row=6 + offset, column=1, value=label).font = Font(bold=True)
        ws.cell(row=6 + offset, column=2, value=value)

    row = 6 + len(SUMMARY_ROW_LABELS) + 1
    _write_header_row(ws, row, ["Category", "Hours", "Duration (HH:MM:SS)"])
    row += 1
    for category, ms in summary.per_category_ms.items():
        ws.cell(row=row, column=1, value=category)
        ws.cell(row=row, column=2, value=round(ms_to_hours(ms), 1))
        ws.cell(row=row, column=3, value=format_duration(ms))
        row += 1
    if not summary.per_category_ms:
        ws.cell(row=row, column=1, value="No time recorded yet")
        row += 1

    row += 1
    _write_header_row(ws, row, ["Month", "Hours"])
    row += 1
    for bucket in monthly_hours(projects, today=generated_on):
        ws.cell(row=row, column=1, value=f"{bucket['label']} {bucket['month'][:4]}")
        ws.cell(row=row, column=2, value=bucket["hours"])
        row += 1

    ws.column_dimensions["A"].width = 28
    ws.column_dimensions["B"].width = 24
    ws.column_dimensions["C"].width = 22
    _setup_print(ws)


def write_project_sheet(ws, project: Project):
    """Write one project's details, time log and reflections."""
    ws.sheet_view.showGridLines = False

    ws.cell(row=1, column=1, value=project["name"]).font = Font(bold=True, size=16)
    ws.cell(
        row=2,
        column=1,
        value=f"Category: {project['category']} | Progress: {project['progress']}",
    )

    row = _write_labeled_text(ws, 4, "Description:", project["description"])
    row = _write_labeled_text(ws, row, "Personal goals:", project["personal_goals"])

    ws.cell(row=row, column=1, value="Learning outcomes:").font = Font(bold=True)
    row += 1
    for outcome in project["learning_outcomes"]:
        ws.cell(row=row, column=1, value=f"- {outcome}")
        row += 1
    row += 1

    closed = [
        e for e in TimeEntryLedger(project["time_entries"]).newest_first()
        if e["end_time"] is not None
    ]
    if closed:
        ws.cell(row=row, column=1, value="Time log:").font = Font(bold=True)
        row += 1
        header_row = row
        _write_header_row(ws, row, TIME_LOG_HEADERS)
        row += 1
        for entry in closed:
            for col_idx, value in enumerate(format_entry_row(entry), start=1):
                ws.cell(row=row, column=col_idx, value=value)
            row += 1

        total = total_duration_ms(project["time_entries"])
        ws.cell(row=row, column=1, value="Total time").font = Font(bold=True)
        ws.cell(row=row, column=3, value=format_duration(total)).font = Font(bold=True)
        row += 2
        _setup_print(ws, title_rows=f"{header_row}:{header_row}")
    else:
        _setup_print(ws)

    _write_labeled_text(ws, row, "Reflections:", project["reflections"])

    ws.column_dimensions["A"].width = 30
    ws.column_dimensions["B"].width = 22
    ws.column_dimensions["C"].width = 22


# =============================================================================
# WORKBOOK
# =============================================================================


def create_student_report_workbook(
    student_name: str,
    projects: list[Project],
    school_name: str | None = None,
    generated_on: date | None = None,
) -> ReportResult:
    """Build the report workbook for one student's projects."""
    generated_on = generated_on or date.today()
    summary = summarize_projects(projects)

    wb = Workbook()
    ws_summary = wb.active
    ws_summary.title = "Summary"
    write_summary_sheet(
        ws_summary,
        student_name,
        school_name or "School not specified",
        projects,
        summary,
        generated_on,
    )

    used_names = {"summary"}
    for project in projects:
        ws = wb.create_sheet(title=make_sheet_name(project["name"], used_names))
        write_project_sheet(ws, project)

    return ReportResult(
        workbook=wb,
        project_count=len(projects),
        total_hours=summary.total_hours,
        summary=summary,
    )


def generate_report_filename(student_name: str, generated_on: date) -> str:
    """e.g. cas_report_jane_doe_2025_11_07.xlsx"""
    slug = "_".join(student_name.lower().split()) or "student"
    slug = "".join(ch for ch in slug if ch.isalnum() or ch == "_")
    return f"cas_report_{slug}_{generated_on.strftime('%Y_%m_%d')}.xlsx"


def generate_student_report_to_bytes(
    student_name: str,
    projects: list[Project],
    school_name: str | None = None,
    generated_on: date | None = None,
) -> tuple[bytes, str, int, int]:
    """
    Generate the report and return it as bytes (for API usage).

    Returns:
        Tuple of (excel_bytes, filename, project_count, total_hours)
    """
    generated_on = generated_on or date.today()
    result = create_student_report_workbook(student_name, projects, school_name, generated_on)

    buffer = BytesIO()
    result.workbook.save(buffer)
    buffer.seek(0)

    return (
        buffer.getvalue(),
        generate_report_filename(student_name, generated_on),
        result.project_count,
        result.total_hours,
    )


def generate_student_report(
    student_name: str,
    projects: list[Project],
    school_name: str | None = None,
    output_dir: Path | None = None,
) -> Path:
    """Generate the report to disk (file output). Returns the written path."""
    generated_on = date.today()
    result = create_student_report_workbook(student_name, projects, school_name, generated_on)

    output_dir = output_dir or OUTPUT_DIR / "reports"
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / generate_report_filename(student_name, generated_on)

    result.workbook.save(str(output_path))
    print(
        f"Saved report for {result.project_count} projects "
        f"({result.total_hours} total hours) to: {output_path}"
    )
    return output_path
