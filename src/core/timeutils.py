"""
Timestamp parsing and formatting for time entries.

Entries are stored as ISO-8601 UTC strings in the same shape browsers
produce with Date.toISOString(), e.g. "2025-11-01T09:00:00.000Z".
"""

from datetime import date, datetime, timedelta, timezone

from core.exceptions import MalformedEntryError

_ONE_MS = timedelta(milliseconds=1)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: str | datetime) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Raises:
        MalformedEntryError: If the value is empty or not ISO-8601
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not value or not isinstance(value, str):
        raise MalformedEntryError(f"Missing or invalid timestamp: {value!r}")
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as e:
        raise MalformedEntryError(f"Invalid ISO-8601 timestamp: '{value}'") from e
    return ensure_utc(parsed)


def format_timestamp(value: datetime) -> str:
    """Format as UTC with millisecond precision and a 'Z' suffix."""
    return ensure_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def millis_between(start: datetime, end: datetime) -> int:
    """Exact signed milliseconds from start to end."""
    return (end - start) // _ONE_MS


def start_of_day(day: date) -> datetime:
    """Midnight UTC at the start of the given date."""
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
