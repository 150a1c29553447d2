"""Local-day bucketing and night/nap classification.

A record lands in the bucket of the local calendar date of its primary
timestamp. Sleeps are bucketed by their start: a sleep crossing midnight
is not split and counts entirely toward the day it started.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from ..core.errors import ConfigurationError
from ..core.records import ActivityRecord, SleepRecord, primary_timestamp
from ..core.time import TimeZoneSpec, local_date, local_hour, resolve_timezone

__all__ = [
    "DEFAULT_NIGHT_WINDOW",
    "DayBuckets",
    "NightWindow",
    "bucketize",
    "is_night",
    "night_sleeps",
]

DayBuckets = dict[date, list[ActivityRecord]]


@dataclass(frozen=True)
class NightWindow:
    """Local night hours ``[start_hour, 24) ∪ [0, end_hour)``."""

    start_hour: int = 19
    end_hour: int = 7

    def __post_init__(self) -> None:
        for name in ("start_hour", "end_hour"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 23:
                raise ConfigurationError(f"Night window {name} must be an hour 0-23, got {value!r}")
        if self.end_hour >= self.start_hour:
            raise ConfigurationError(
                f"Night window must wrap midnight (start {self.start_hour}, end {self.end_hour})"
            )

    def contains_hour(self, hour: int) -> bool:
        return hour >= self.start_hour or hour < self.end_hour


DEFAULT_NIGHT_WINDOW = NightWindow()


def is_night(sleep: SleepRecord, tz: TimeZoneSpec = None, window: NightWindow = DEFAULT_NIGHT_WINDOW) -> bool:
    """Classify a sleep as night sleep.

    Night when the local start hour OR the local end hour (if the sleep has
    ended) falls in the night window. A sleep starting at 18:00 and ending
    at 21:00 is therefore night sleep.
    """
    zone = resolve_timezone(tz)

    if window.contains_hour(local_hour(sleep.start_time, zone)):
        return True

    if sleep.end_time is not None:
        return window.contains_hour(local_hour(sleep.end_time, zone))

    return False


def bucketize(records: Iterable[ActivityRecord], tz: TimeZoneSpec = None) -> DayBuckets:
    """Group records by local calendar day.

    Input order is preserved inside each bucket; records without a primary
    timestamp are left out. The input is never mutated.

    Parameters
    ----------
    records
        Filtered records of a single subject
    tz
        Zone defining local days

    Returns
    -------
    dict[date, list[ActivityRecord]]
        Buckets keyed by local date, in ascending date order
    """
    zone = resolve_timezone(tz)
    buckets: defaultdict[date, list[ActivityRecord]] = defaultdict(list)

    for record in records:
        timestamp = primary_timestamp(record)
        if timestamp is None:
            continue
        buckets[local_date(timestamp, zone)].append(record)

    return {day: buckets[day] for day in sorted(buckets)}


def night_sleeps(
    day_records: Iterable[ActivityRecord],
    tz: TimeZoneSpec = None,
    window: NightWindow = DEFAULT_NIGHT_WINDOW,
) -> list[SleepRecord]:
    """Night-classified sleeps among one day's records."""
    return [
        record
        for record in day_records
        if isinstance(record, SleepRecord) and is_night(record, tz, window)
    ]
