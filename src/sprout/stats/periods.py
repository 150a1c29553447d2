"""Period resolution with DST awareness.

Turn a symbolic period token ("7day") and a reference instant into an
absolute UTC range covering whole local days.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Mapping

from ..core.errors import ConfigurationError
from ..core.time import TimeZoneSpec, end_of_local_day, ensure_utc, local_date, start_of_local_day

__all__ = [
    "DEFAULT_PERIODS",
    "PeriodWindow",
    "period_label",
    "resolve_period",
    "validate_periods",
]

DEFAULT_PERIODS: Mapping[str, int] = {
    "2day": 2,
    "7day": 7,
    "14day": 14,
    "30day": 30,
}


@dataclass(frozen=True)
class PeriodWindow:
    """Resolved period.

    Attributes
    ----------
    token : str
        Period token the window was resolved from
    days : int
        Configured day count, the denominator of per-day rates
    start_utc : datetime
        Local midnight ``days`` days before the reference day, in UTC
    end_utc : datetime
        23:59:59.999 local on the reference day, in UTC (inclusive)
    """

    token: str
    days: int
    start_utc: datetime
    end_utc: datetime

    def contains(self, instant: datetime) -> bool:
        """Check if ``instant`` lies in ``[start_utc, end_utc]``."""
        return self.start_utc <= instant <= self.end_utc


def validate_periods(periods: Mapping[str, object]) -> dict[str, int]:
    """Validate a period table.

    Raises
    ------
    ConfigurationError
        If the table is empty or a day count is not a positive integer
    """
    if not periods:
        raise ConfigurationError("Period table is empty")

    validated: dict[str, int] = {}
    for token, days in periods.items():
        if isinstance(days, bool) or not isinstance(days, int) or days <= 0:
            raise ConfigurationError(f"Invalid day count for period {token!r}: {days!r}")
        validated[str(token)] = days

    return validated


def resolve_period(
    token: str,
    now: datetime,
    tz: TimeZoneSpec = None,
    periods: Mapping[str, int] | None = None,
) -> PeriodWindow:
    """Resolve a period token against a reference instant.

    ``start = local_midnight(now) - N days`` and ``end = local end of
    now's day``. Day arithmetic happens on the local calendar, so a window
    spanning a DST switch still starts and ends on local midnight.

    Parameters
    ----------
    token
        Period token (e.g., "7day")
    now
        Reference instant (UTC, from an injected clock)
    tz
        Zone used to find local day boundaries
    periods
        Period table (default: DEFAULT_PERIODS)

    Returns
    -------
    PeriodWindow
        Resolved window

    Raises
    ------
    ConfigurationError
        If the token is not in the period table or its day count is invalid

    Examples
    --------
    >>> window = resolve_period("7day", datetime(2024, 1, 10, 15))
    >>> window.start_utc.isoformat()
    '2024-01-03T00:00:00+00:00'
    >>> window.end_utc.isoformat()
    '2024-01-10T23:59:59.999000+00:00'
    """
    table = validate_periods(periods if periods is not None else DEFAULT_PERIODS)

    if token not in table:
        known = ", ".join(table)
        raise ConfigurationError(f"Unknown period {token!r} (expected one of: {known})")

    days = table[token]
    today = local_date(ensure_utc(now), tz)

    return PeriodWindow(
        token=token,
        days=days,
        start_utc=start_of_local_day(today - timedelta(days=days), tz),
        end_utc=end_of_local_day(today, tz),
    )


def period_label(token: str, periods: Mapping[str, int] | None = None) -> str:
    """Human label for a period token ("7day" -> "7 Days")."""
    table = periods if periods is not None else DEFAULT_PERIODS
    if token not in table:
        raise ConfigurationError(f"Unknown period {token!r}")
    days = table[token]
    return f"{days} Day" if days == 1 else f"{days} Days"
