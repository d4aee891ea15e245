"""Tests for timestamp helpers and entry/project validation."""

from datetime import datetime, timedelta, timezone

import pytest

from core.exceptions import MalformedEntryError
from core.timeutils import format_timestamp, millis_between, parse_timestamp
from core.validation import (
    validate_entry_history,
    validate_project_fields,
    validate_time_entries,
)


class TestTimestamps:
    def test_parse_z_suffix(self):
        parsed = parse_timestamp("2025-11-01T09:00:00.000Z")

        assert parsed == datetime(2025, 11, 1, 9, tzinfo=timezone.utc)

    def test_parse_offset_converts_to_utc(self):
        parsed = parse_timestamp("2025-11-01T10:00:00+01:00")

        assert parsed == datetime(2025, 11, 1, 9, tzinfo=timezone.utc)
        assert parsed.utcoffset() == timedelta(0)

    def test_naive_treated_as_utc(self):
        assert parse_timestamp("2025-11-01T09:00:00").tzinfo == timezone.utc

    @pytest.mark.parametrize("value", ["", None, "not a date", 42])
    def test_invalid(self, value):
        with pytest.raises(MalformedEntryError):
            parse_timestamp(value)

    def test_format_matches_browser_iso_strings(self):
        value = datetime(2025, 11, 1, 9, 5, 7, 123456, tzinfo=timezone.utc)

        assert format_timestamp(value) == "2025-11-01T09:05:07.123Z"

    def test_millis_between(self):
        start = datetime(2025, 11, 1, 9, tzinfo=timezone.utc)

        assert millis_between(start, start + timedelta(minutes=90)) == 5_400_000
        assert millis_between(start + timedelta(seconds=1), start) == -1000


class TestValidateTimeEntries:
    def test_valid_list(self, closed_entry, open_entry):
        assert validate_time_entries([closed_entry, open_entry]) == []

    def test_empty_list(self):
        assert validate_time_entries([]) == []

    def test_end_before_start(self):
        errors = validate_time_entries(
            [{"start_time": "2025-11-01T10:00:00Z", "end_time": "2025-11-01T09:00:00Z", "manual": False}]
        )

        assert errors == ["Entry 1: end time is before start time"]

    def test_two_open_entries(self, open_entry):
        errors = validate_time_entries([open_entry, dict(open_entry)])

        assert errors == ["Only one entry may be open, found 2"]

    def test_manual_entry_without_end(self):
        errors = validate_time_entries(
            [{"start_time": "2025-11-01T10:00:00Z", "end_time": None, "manual": True}]
        )

        assert errors == ["Entry 1: manual entry must have an end time"]

    def test_bad_timestamps_are_reported_per_entry(self, closed_entry):
        errors = validate_time_entries(
            [
                closed_entry,
                {"start_time": "", "end_time": None, "manual": False},
                {"start_time": "2025-11-01T10:00:00Z", "end_time": "soon", "manual": False},
            ]
        )

        assert errors == [
            "Entry 2: invalid or missing start time",
            "Entry 3: invalid end time",
        ]


class TestValidateProjectFields:
    def test_valid(self, project_fields):
        assert validate_project_fields(project_fields) == []

    def test_collects_all_errors(self):
        errors = validate_project_fields(
            {
                "name": "ab",
                "description": "short",
                "category": "Sports",
                "learning_outcomes": ["Be awesome"],
            }
        )

        assert errors == [
            "Project name must be at least 3 characters",
            "Description must be at least 10 characters",
            "Invalid category 'Sports'",
            "Unknown learning outcome 'Be awesome'",
            "Start date is required",
        ]

    def test_end_date_before_start(self, project_fields):
        errors = validate_project_fields({**project_fields, "end_date": "2025-08-01"})

        assert errors == ["End date is before start date"]


class TestValidateEntryHistory:
    def test_appending_is_allowed(self, closed_entry, open_entry):
        assert validate_entry_history([closed_entry], [closed_entry, open_entry]) == []

    def test_closing_running_entry_is_allowed(self, open_entry):
        closed = {**open_entry, "end_time": "2025-11-02T16:00:00.000Z"}

        assert validate_entry_history([open_entry], [closed]) == []

    def test_deletion_and_edits_are_reported(self, closed_entry, open_entry):
        reopened = {**closed_entry, "end_time": None}

        errors = validate_entry_history([closed_entry, open_entry], [reopened])

        assert errors == [
            "Entries cannot be deleted, 2 stored but 1 submitted",
            "Entry 1: closed entries cannot be changed",
        ]
