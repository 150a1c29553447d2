"""Single-day summary: time asleep and awake, intake, diapers."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Iterable

from ..core.records import ActivityRecord, DiaperRecord, FeedRecord, SleepRecord
from ..core.time import (
    TimeZoneSpec,
    end_of_local_day,
    ensure_utc,
    local_date,
    minutes_between,
    resolve_timezone,
    start_of_local_day,
)

__all__ = ["DailySummary", "format_minutes", "summarize_day"]

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class DailySummary:
    """What happened on one local day.

    Attributes
    ----------
    day : date
        Local calendar day
    sleep_minutes : int
        Minutes asleep inside the day, including the parts of sleeps that
        started the evening before or end the next morning
    awake_minutes : int
        Elapsed minutes of the day minus ``sleep_minutes``
    consumed : dict[str, float]
        Feed amount totals by unit
    diaper_changes : int
        Diapers changed that day
    poops : int
        Dirty diapers among them
    """

    day: date
    sleep_minutes: int = 0
    awake_minutes: int = 0
    consumed: dict[str, float] = field(default_factory=dict)
    diaper_changes: int = 0
    poops: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day.isoformat(),
            "sleep_minutes": self.sleep_minutes,
            "awake_minutes": self.awake_minutes,
            "consumed": dict(self.consumed),
            "diaper_changes": self.diaper_changes,
            "poops": self.poops,
        }


def format_minutes(minutes: int) -> str:
    """Render minutes as ``"2h 05m"``."""
    hours, mins = divmod(max(0, minutes), 60)
    return f"{hours}h {mins:02d}m"


def summarize_day(
    records: Iterable[ActivityRecord],
    day: date,
    tz: TimeZoneSpec = None,
    now: datetime | None = None,
) -> DailySummary:
    """Summarize one local day of a single subject's records.

    Parameters
    ----------
    records
        Typed records of one subject; sleeps from the previous day that
        run past midnight should be included
    day
        Local calendar day to summarize
    tz
        Zone defining the day
    now
        Reference instant; when it falls on ``day`` only the minutes
        elapsed so far count toward awake time

    Returns
    -------
    DailySummary
        Day totals
    """
    zone = resolve_timezone(tz)
    day_start = start_of_local_day(day, zone)
    day_end = end_of_local_day(day, zone)
    next_day_start = start_of_local_day(day + timedelta(days=1), zone)

    sleep_minutes = 0
    consumed: dict[str, float] = {}
    diaper_changes = 0
    poops = 0

    for record in records:
        if isinstance(record, SleepRecord):
            if not record.has_valid_interval:
                continue
            overlap_start = max(record.start_time, day_start)
            overlap_end = min(record.end_time, next_day_start)
            if overlap_end > overlap_start:
                sleep_minutes += math.floor(minutes_between(overlap_start, overlap_end))

        elif isinstance(record, FeedRecord):
            if record.has_amount and record.amount > 0 and day_start <= record.time <= day_end:
                consumed[record.unit] = consumed.get(record.unit, 0.0) + record.amount

        elif isinstance(record, DiaperRecord):
            if day_start <= record.time <= day_end:
                diaper_changes += 1
                if record.is_poop:
                    poops += 1

    elapsed = MINUTES_PER_DAY
    if now is not None and local_date(ensure_utc(now), zone) == day:
        elapsed = math.floor(minutes_between(day_start, ensure_utc(now)))

    return DailySummary(
        day=day,
        sleep_minutes=sleep_minutes,
        awake_minutes=max(0, elapsed - sleep_minutes),
        consumed=consumed,
        diaper_changes=diaper_changes,
        poops=poops,
    )
