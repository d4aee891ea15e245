"""Tests for the Excel student report."""

from datetime import date
from io import BytesIO

from openpyxl import load_workbook

from services.reports import (
    create_student_report_workbook,
    format_entry_row,
    generate_report_filename,
    generate_student_report,
    generate_student_report_to_bytes,
    make_sheet_name,
)


def column_values(ws, column: int) -> list:
    return [ws.cell(row=r, column=column).value for r in range(1, ws.max_row + 1)]


def test_format_entry_row_clocked(closed_entry):
    assert format_entry_row(closed_entry) == ["01/11/25", "09:00 - 10:30", "01:30:00"]


def test_format_entry_row_manual(closed_entry):
    assert format_entry_row({**closed_entry, "manual": True})[1] == "Manual entry"


def test_make_sheet_name_sanitizes_and_dedupes():
    used = {"summary"}

    first = make_sheet_name("Art: Painting / Drawing [2025]", used)
    second = make_sheet_name("Art: Painting / Drawing [2025]", used)
    long_name = make_sheet_name("A" * 40, used)

    assert first == "Art - Painting - Drawing -2025-"
    assert second == "Art - Painting - Drawing -2 (2)"
    assert len(long_name) == 31
    assert make_sheet_name("Summary", used) == "Summary (2)"


def test_generate_report_filename():
    assert generate_report_filename("Jane  Doe", date(2025, 11, 7)) == "cas_report_jane_doe_2025_11_07.xlsx"


def test_workbook_structure(sample_project, open_entry):
    later = {
        "start_time": "2025-11-05T09:00:00.000Z",
        "end_time": "2025-11-05T11:00:00.000Z",
        "manual": True,
    }
    sample_project["time_entries"] = [sample_project["time_entries"][0], open_entry, later]

    result = create_student_report_workbook(
        "Jane Doe", [sample_project], "IB World School", generated_on=date(2025, 11, 10)
    )
    wb = result.workbook

    assert wb.sheetnames == ["Summary", "Food bank volunteering"]
    assert result.project_count == 1
    assert result.total_hours == 4  # 3.5h rounds half up

    summary = wb["Summary"]
    assert summary["A1"].value == "CAS Progress Report"
    assert summary["A2"].value == "Jane Doe"
    assert summary["A3"].value == "IB World School"
    assert summary["A4"].value == "Generated: 10/11/2025"
    assert summary["B6"].value == "4h"
    assert summary["B7"].value == "1.3%"
    assert summary["B8"].value == "296h of 300h goal"
    assert summary["B9"].value == 1
    assert "Service" in column_values(summary, 1)

    sheet = wb["Food bank volunteering"]
    dates = column_values(sheet, 1)
    header_row = dates.index("Date") + 1
    # Closed entries only, most recent first
    assert dates[header_row : header_row + 2] == ["05/11/25", "01/11/25"]
    assert sheet.cell(row=header_row + 1, column=2).value == "Manual entry"
    assert sheet.cell(row=header_row + 3, column=1).value == "Total time"
    assert sheet.cell(row=header_row + 3, column=3).value == "03:30:00"


def test_project_without_entries_has_no_time_log(sample_project):
    sample_project["time_entries"] = []

    wb = create_student_report_workbook("Jane Doe", [sample_project]).workbook

    assert "Date" not in column_values(wb["Food bank volunteering"], 1)
    assert "No time recorded yet" in column_values(wb["Summary"], 1)


def test_generate_to_bytes_round_trips(sample_project):
    content, filename, project_count, total_hours = generate_student_report_to_bytes(
        "Jane Doe", [sample_project], generated_on=date(2025, 11, 10)
    )

    wb = load_workbook(BytesIO(content))
    assert filename == "cas_report_jane_doe_2025_11_10.xlsx"
    assert project_count == 1
    assert total_hours == 2  # 1.5h rounds half up
    assert wb["Summary"]["A3"].value == "School not specified"


def test_generate_to_disk(sample_project, tmp_path):
    path = generate_student_report("Jane Doe", [sample_project], output_dir=tmp_path / "reports")

    assert path.exists()
    assert path.parent == tmp_path / "reports"
