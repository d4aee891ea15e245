"""
Domain errors for time tracking.

All time tracking errors are local validation failures raised before any
database write. They subclass ValueError so callers that treat bad input
generically keep working.
"""


class TimeTrackingError(ValueError):
    """Base class for ledger and entry validation failures."""

    code = "INVALID_REQUEST"


class ConflictError(TimeTrackingError):
    """A second open entry was requested, or a concurrent write won."""

    code = "CONFLICT"


class NoActiveEntryError(TimeTrackingError):
    """Clock-out was requested with no open entry."""

    code = "NO_ACTIVE_ENTRY"


class MalformedEntryError(TimeTrackingError):
    """Entry bounds are missing, unparseable, or out of order."""

    code = "MALFORMED_ENTRY"


class ProjectNotFoundError(LookupError):
    code = "NOT_FOUND"


class PermissionDeniedError(PermissionError):
    code = "FORBIDDEN"
