"""Time and timezone utilities for Sprout.

Provides consistent timezone handling across the engine with:
- UTC discipline: every record timestamp is a UTC instant
- ISO-8601 parsing and formatting
- Caller-supplied zones (offset minutes, IANA name, or tzinfo) used for
  local-day bucketing only, never stored back on records
- Injectable clocks so period resolution stays deterministic
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Protocol, Union

import pytz

from .errors import ConfigurationError

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "TimeZoneSpec",
    "end_of_local_day",
    "ensure_utc",
    "format_utc_iso8601",
    "get_current_utc",
    "local_date",
    "local_hour",
    "localize_utc_to_tz",
    "minutes_between",
    "parse_utc_iso8601",
    "resolve_timezone",
    "start_of_local_day",
]

# Minutes east of UTC, an IANA zone name, or a tzinfo instance
TimeZoneSpec = Union[int, str, tzinfo, None]


class Clock(Protocol):
    """Source of the reference "now" instant."""

    def now(self) -> datetime:
        """Return the current instant in UTC."""
        ...


class SystemClock:
    """Clock reading the system time."""

    def now(self) -> datetime:
        return get_current_utc()


@dataclass(frozen=True)
class FixedClock:
    """Clock frozen at a given instant (tests, replays, CLI --now)."""

    instant: datetime

    def now(self) -> datetime:
        return ensure_utc(self.instant)


def get_current_utc() -> datetime:
    """Get current time in UTC.

    Returns
    -------
    datetime
        Current time in UTC with timezone info

    Example
    -------
    >>> now_utc = get_current_utc()
    >>> now_utc.tzinfo
    datetime.timezone.utc
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Return ``dt`` as an aware UTC datetime.

    Naive datetimes are assumed to already be UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_utc_iso8601(dt: datetime) -> str:
    """Format datetime as ISO-8601 UTC string.

    Always converts to UTC before formatting.

    Parameters
    ----------
    dt
        Datetime to format (with or without timezone)

    Returns
    -------
    str
        ISO-8601 UTC string (e.g., "2025-10-08T12:30:00+00:00")

    Example
    -------
    >>> from datetime import datetime, timezone
    >>> dt = datetime(2025, 10, 8, 12, 30, 0, tzinfo=timezone.utc)
    >>> format_utc_iso8601(dt)
    '2025-10-08T12:30:00+00:00'
    """
    return ensure_utc(dt).isoformat()


def parse_utc_iso8601(iso_string: str) -> datetime:
    """Parse ISO-8601 string to UTC datetime.

    Parameters
    ----------
    iso_string
        ISO-8601 formatted string

    Returns
    -------
    datetime
        Datetime in UTC

    Raises
    ------
    ValueError
        If string is not valid ISO-8601

    Example
    -------
    >>> dt = parse_utc_iso8601("2025-10-08T14:30:00+02:00")
    >>> dt.hour  # Converted to UTC
    12
    """
    # Handle 'Z' suffix (Zulu time = UTC)
    iso_string = iso_string.strip().replace("Z", "+00:00")

    return ensure_utc(datetime.fromisoformat(iso_string))


def resolve_timezone(spec: TimeZoneSpec) -> tzinfo:
    """Turn a caller-supplied zone into a tzinfo.

    Parameters
    ----------
    spec
        Minutes east of UTC (``60`` for UTC+01:00), an IANA zone name
        (``"Europe/Brussels"``), a tzinfo, or None for UTC

    Returns
    -------
    tzinfo
        Zone usable for local-day math

    Raises
    ------
    ConfigurationError
        If the zone name is unknown or the offset is out of range
    """
    if spec is None:
        return pytz.UTC

    if isinstance(spec, tzinfo):
        return spec

    if isinstance(spec, bool):
        raise ConfigurationError(f"Invalid timezone offset: {spec!r}")

    if isinstance(spec, int):
        if not -24 * 60 < spec < 24 * 60:
            raise ConfigurationError(f"Timezone offset out of range: {spec} minutes")
        return pytz.FixedOffset(spec)

    if isinstance(spec, str):
        text = spec.strip()
        # "+05:30" / "-0800" style offsets
        if text[:1] in ("+", "-") and text[1:].replace(":", "").isdigit():
            digits = text[1:].replace(":", "")
            if len(digits) != 4:
                raise ConfigurationError(f"Invalid timezone offset: {spec}")
            minutes = int(digits[:2]) * 60 + int(digits[2:])
            return resolve_timezone(minutes if text[0] == "+" else -minutes)
        try:
            return pytz.timezone(text)
        except pytz.UnknownTimeZoneError as exc:
            raise ConfigurationError(f"Invalid timezone: {spec}") from exc

    raise ConfigurationError(f"Unsupported timezone specification: {spec!r}")


def _localize(naive: datetime, tz: tzinfo) -> datetime:
    """Attach ``tz`` to a naive local datetime (pytz-aware)."""
    localize = getattr(tz, "localize", None)
    if localize is not None:
        return localize(naive)
    return naive.replace(tzinfo=tz)


def localize_utc_to_tz(utc_dt: datetime, tz: TimeZoneSpec) -> datetime:
    """Convert UTC datetime to a local zone.

    Example
    -------
    >>> utc_dt = datetime(2025, 10, 8, 12, 0, 0, tzinfo=timezone.utc)
    >>> localize_utc_to_tz(utc_dt, "Europe/Brussels").hour
    14
    """
    return ensure_utc(utc_dt).astimezone(resolve_timezone(tz))


def local_date(utc_dt: datetime, tz: TimeZoneSpec) -> date:
    """Local calendar date of a UTC instant."""
    return localize_utc_to_tz(utc_dt, tz).date()


def local_hour(utc_dt: datetime, tz: TimeZoneSpec) -> int:
    """Local wall-clock hour (0-23) of a UTC instant."""
    return localize_utc_to_tz(utc_dt, tz).hour


def start_of_local_day(day: date, tz: TimeZoneSpec) -> datetime:
    """UTC instant of local midnight starting ``day``.

    Handles DST: the result is midnight on the local wall clock.
    """
    zone = resolve_timezone(tz)
    local_start = _localize(datetime(day.year, day.month, day.day, 0, 0, 0), zone)
    return local_start.astimezone(timezone.utc)


def end_of_local_day(day: date, tz: TimeZoneSpec) -> datetime:
    """UTC instant of 23:59:59.999 local time on ``day``."""
    zone = resolve_timezone(tz)
    local_end = _localize(datetime(day.year, day.month, day.day, 23, 59, 59, 999000), zone)
    return local_end.astimezone(timezone.utc)


def minutes_between(start: datetime, end: datetime) -> float:
    """Signed minutes from ``start`` to ``end``."""
    return (end - start) / timedelta(minutes=1)
