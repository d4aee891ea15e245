"""
Time entry and project field validation.
"""

from core.config import CAS_CATEGORIES, LEARNING_OUTCOMES, PROJECT_PROGRESS
from core.exceptions import MalformedEntryError
from core.timeutils import parse_timestamp


def validate_time_entries(entries: list[dict]) -> list[str]:
    """
    Validate a full list of time entries before it replaces a ledger.

    Checks:
    1. Start time is present and ISO-8601
    2. End time is absent or ISO-8601, and not before start
    3. Manual entries have both bounds
    4. At most one entry is open

    Returns:
        List of error messages, empty if the list is valid
    """
    errors = []
    open_count = 0

    for index, entry in enumerate(entries, start=1):
        label = f"Entry {index}"
        start = end = None

        try:
            start = parse_timestamp(entry.get("start_time"))
        except MalformedEntryError:
            errors.append(f"{label}: invalid or missing start time")

        end_value = entry.get("end_time")
        if end_value is None:
            open_count += 1
            if entry.get("manual"):
                errors.append(f"{label}: manual entry must have an end time")
        else:
            try:
                end = parse_timestamp(end_value)
            except MalformedEntryError:
                errors.append(f"{label}: invalid end time")

        if start and end and end < start:
            errors.append(f"{label}: end time is before start time")

    if open_count > 1:
        errors.append(f"Only one entry may be open, found {open_count}")

    return errors


def validate_entry_history(stored: list[dict], submitted: list[dict]) -> list[str]:
    """
    Check that a submitted entry list only extends the stored one.

    Stored entries must come first, in order. Closed entries are unchanged.
    The running entry keeps its start time and may be closed. New entries
    are appended after the stored ones. Both lists must already be in the
    stored timestamp format.

    Returns:
        List of error messages, empty if the history is preserved
    """
    errors = []

    if len(submitted) < len(stored):
        errors.append(
            f"Entries cannot be deleted, {len(stored)} stored but {len(submitted)} submitted"
        )

    for index, (old, new) in enumerate(zip(stored, submitted), start=1):
        label = f"Entry {index}"
        if old["end_time"] is not None:
            if new != old:
                errors.append(f"{label}: closed entries cannot be changed")
        elif new["start_time"] != old["start_time"] or new["manual"] != old["manual"]:
            errors.append(f"{label}: the running entry can only be closed")

    return errors
    return errors


def validate_project_fields(fields: dict) -> list[str]:
    """Validate user-supplied project fields. Returns error messages."""
    errors = []

    name = (fields.get("name") or "").strip()
    if len(name) < 3:
        errors.append("Project name must be at least 3 characters")

    description = (fields.get("description") or "").strip()
    if len(description) < 10:
        errors.append("Description must be at least 10 characters")

    category = fields.get("category")
    if category not in CAS_CATEGORIES:
        errors.append(f"Invalid category '{category}'")

    progress = fields.get("progress")
    if progress is not None and progress not in PROJECT_PROGRESS:
        errors.append(f"Invalid progress '{progress}'")

    for outcome in fields.get("learning_outcomes") or []:
        if outcome not in LEARNING_OUTCOMES:
            errors.append(f"Unknown learning outcome '{outcome}'")

    start_date = fields.get("start_date")
    end_date = fields.get("end_date")
    if not start_date:
        errors.append("Start date is required")
    elif end_date and str(end_date) < str(start_date):
        errors.append("End date is before start date")

    return errors
