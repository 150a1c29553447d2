"""Error taxonomy for the statistics engine.

Only structural failures are errors. Data-shaping decisions (out-of-range
gaps, invalid intervals, records outside the window) are silent.
"""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "FetchError",
    "RecordParseError",
    "SproutError",
]


class SproutError(Exception):
    """Base exception for Sprout."""

    pass


class ConfigurationError(SproutError):
    """Raised for an unknown period token or invalid configuration."""

    pass


class RecordParseError(SproutError):
    """Raised when a raw record cannot be turned into an ActivityRecord.

    Attributes
    ----------
    record_id : str | None
        Identifier of the offending record, when it could be read
    field : str | None
        Name of the field that failed to parse
    """

    def __init__(self, message: str, *, record_id: str | None = None, field: str | None = None) -> None:
        super().__init__(message)
        self.record_id = record_id
        self.field = field


class FetchError(SproutError):
    """Raised when the activity log store fails to deliver a snapshot.

    Callers must present "stats unavailable" rather than zeroed stats.
    """

    def __init__(self, message: str, *, subject_id: str | None = None) -> None:
        super().__init__(message)
        self.subject_id = subject_id
