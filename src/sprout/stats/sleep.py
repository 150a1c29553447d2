"""Sleep and wake statistics.

Outlier policy, all bounds exclusive on both ends:
- wake window: 0 < gap < 1440 minutes (overlaps and tracking outages
  are dropped)
- nap: 0 < duration < 360 minutes
- night sleep record: 0 < duration < 720 minutes

Sleeps that end before they start are ignored by every duration-based
statistic but still count as night sleep presence for night wakings.

Night sleep averages over days that have qualifying night sleep; night
wakings average over every day of the period.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable

from ..core.errors import ConfigurationError
from ..core.records import ActivityRecord, SleepRecord
from ..core.time import TimeZoneSpec, resolve_timezone
from .buckets import DEFAULT_NIGHT_WINDOW, DayBuckets, NightWindow, is_night, night_sleeps
from .rounding import round_minutes, round_one_decimal

__all__ = [
    "DEFAULT_SLEEP_BOUNDS",
    "SleepBounds",
    "average_nap",
    "average_night_sleep",
    "average_night_wakings",
    "average_wake_window",
    "wake_window_gaps",
]


@dataclass(frozen=True)
class SleepBounds:
    """Exclusive upper bounds (minutes) for sleep and wake durations."""

    max_wake_window_minutes: int = 24 * 60
    max_nap_minutes: int = 6 * 60
    max_night_sleep_minutes: int = 12 * 60

    def __post_init__(self) -> None:
        for name in ("max_wake_window_minutes", "max_nap_minutes", "max_night_sleep_minutes"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")


DEFAULT_SLEEP_BOUNDS = SleepBounds()


def _sleeps(records: Iterable[ActivityRecord]) -> list[SleepRecord]:
    return [record for record in records if isinstance(record, SleepRecord)]


def _rounded_duration(sleep: SleepRecord) -> int:
    return round_minutes((sleep.end_time - sleep.start_time) / timedelta(minutes=1))


def wake_window_gaps(
    records: Iterable[ActivityRecord],
    max_gap_minutes: int = DEFAULT_SLEEP_BOUNDS.max_wake_window_minutes,
) -> list[int]:
    """Whole-minute gaps between consecutive sleeps that count as wake windows.

    Ended sleeps are ordered by start time; the gap from one sleep's end
    to the next sleep's start is floored to whole minutes and kept when
    ``0 < gap < max_gap_minutes``.
    """
    ended = sorted(
        (sleep for sleep in _sleeps(records) if sleep.has_valid_interval),
        key=lambda sleep: sleep.start_time,
    )

    gaps: list[int] = []
    for current, following in zip(ended, ended[1:]):
        gap = math.floor((following.start_time - current.end_time) / timedelta(minutes=1))
        if 0 < gap < max_gap_minutes:
            gaps.append(gap)

    return gaps


def average_wake_window(
    records: Iterable[ActivityRecord],
    max_gap_minutes: int = DEFAULT_SLEEP_BOUNDS.max_wake_window_minutes,
) -> int:
    """Mean wake window in whole minutes (0 without a qualifying gap)."""
    gaps = wake_window_gaps(records, max_gap_minutes)
    if not gaps:
        return 0
    return round_minutes(sum(gaps) / len(gaps))


def average_nap(
    records: Iterable[ActivityRecord],
    tz: TimeZoneSpec = None,
    window: NightWindow = DEFAULT_NIGHT_WINDOW,
    max_nap_minutes: int = DEFAULT_SLEEP_BOUNDS.max_nap_minutes,
) -> int:
    """Mean nap duration over every qualifying nap in the period.

    A nap is an ended sleep not classified as night sleep.
    """
    zone = resolve_timezone(tz)
    durations = [
        duration
        for duration in (
            _rounded_duration(sleep)
            for sleep in _sleeps(records)
            if sleep.has_valid_interval and not is_night(sleep, zone, window)
        )
        if 0 < duration < max_nap_minutes
    ]

    if not durations:
        return 0
    return round_minutes(sum(durations) / len(durations))


def average_night_sleep(
    buckets: DayBuckets,
    tz: TimeZoneSpec = None,
    window: NightWindow = DEFAULT_NIGHT_WINDOW,
    max_night_sleep_minutes: int = DEFAULT_SLEEP_BOUNDS.max_night_sleep_minutes,
) -> int:
    """Mean nightly sleep total over days with qualifying night sleep.

    Per local day the durations of night sleeps with
    ``0 < duration < max_night_sleep_minutes`` are summed; days without
    such a sleep do not enter the denominator.
    """
    zone = resolve_timezone(tz)
    daily_totals: list[int] = []

    for day_records in buckets.values():
        durations = [
            duration
            for duration in (
                _rounded_duration(sleep)
                for sleep in night_sleeps(day_records, zone, window)
                if sleep.has_valid_interval
            )
            if 0 < duration < max_night_sleep_minutes
        ]
        if durations:
            daily_totals.append(sum(durations))

    if not daily_totals:
        return 0
    return round_minutes(sum(daily_totals) / len(daily_totals))


def average_night_wakings(
    buckets: DayBuckets,
    period_days: int,
    tz: TimeZoneSpec = None,
    window: NightWindow = DEFAULT_NIGHT_WINDOW,
) -> float:
    """Mean night wakings per day of the period, one decimal.

    A day with ``n`` night sleeps has ``max(0, n - 1)`` wakings. The
    denominator is the full period length, including days without sleep.
    """
    if period_days <= 0:
        raise ConfigurationError(f"Period day count must be positive, got {period_days}")

    zone = resolve_timezone(tz)
    wakings = sum(max(0, len(night_sleeps(day_records, zone, window)) - 1) for day_records in buckets.values())

    return round_one_decimal(wakings / period_days)
