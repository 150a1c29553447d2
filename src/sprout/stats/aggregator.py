"""Period statistics for one subject.

Wires the stages together: resolve the period, filter the records,
bucket them by local day, then run every calculator over the result.
Pure and synchronous; identical inputs give identical output.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Iterable

from ..core.time import TimeZoneSpec, format_utc_iso8601, resolve_timezone
from ..observability.loguru_config import get_logger
from .buckets import bucketize
from .config import DEFAULT_STATS_CONFIG, StatsConfig
from .filtering import RawOrRecord, filter_records
from .intake import average_feed_amount, diaper_changes_per_day, feedings_per_day, poops_per_day
from .periods import PeriodWindow, resolve_period
from .sleep import average_nap, average_night_sleep, average_night_wakings, average_wake_window

__all__ = [
    "StatsReport",
    "StatsResult",
    "compute_stats",
    "compute_stats_report",
]

log = get_logger("stats")


@dataclass(frozen=True)
class StatsResult:
    """Statistics of one period.

    Every value is non-negative and 0 when the period has no qualifying
    data. Minutes are whole numbers, rates and amounts carry one decimal.
    """

    avg_wake_window_minutes: int = 0
    avg_nap_minutes: int = 0
    avg_night_sleep_minutes: int = 0
    avg_night_wakings: float = 0.0
    avg_feedings_per_day: float = 0.0
    avg_feed_amount: float = 0.0
    avg_diaper_changes_per_day: float = 0.0
    avg_poops_per_day: float = 0.0

    def to_dict(self) -> dict[str, float]:
        """Values keyed by metric name."""
        return asdict(self)


@dataclass(frozen=True)
class StatsReport:
    """StatsResult with the diagnostics of how it was computed."""

    result: StatsResult
    window: PeriodWindow
    subject_id: str
    records_considered: int
    records_skipped: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject_id": self.subject_id,
            "period": self.window.token,
            "days": self.window.days,
            "start_utc": format_utc_iso8601(self.window.start_utc),
            "end_utc": format_utc_iso8601(self.window.end_utc),
            "records_considered": self.records_considered,
            "records_skipped": self.records_skipped,
            "stats": self.result.to_dict(),
        }


def compute_stats_report(
    records: Iterable[RawOrRecord],
    subject_id: str,
    period_token: str,
    now: datetime,
    tz: TimeZoneSpec = None,
    config: StatsConfig | None = None,
) -> StatsReport:
    """Compute statistics of one subject over one period.

    Parameters
    ----------
    records
        Typed records or raw mappings; never mutated
    subject_id
        Tracked subject
    period_token
        Period token from the configured table (e.g., "7day")
    now
        Reference instant
    tz
        Zone defining local days (default: the configured zone)
    config
        Engine settings (default: built-in defaults)

    Returns
    -------
    StatsReport
        Result with the resolved window and record counts

    Raises
    ------
    ConfigurationError
        If the period token is unknown or the zone is invalid
    """
    settings = config or DEFAULT_STATS_CONFIG
    zone = resolve_timezone(tz if tz is not None else settings.timezone)

    window = resolve_period(period_token, now, zone, settings.periods)
    selected = filter_records(records, subject_id, window.start_utc, window.end_utc)
    buckets = bucketize(selected.records, zone)

    night = settings.night_window
    bounds = settings.bounds
    result = StatsResult(
        avg_wake_window_minutes=average_wake_window(selected.records, bounds.max_wake_window_minutes),
        avg_nap_minutes=average_nap(selected.records, zone, night, bounds.max_nap_minutes),
        avg_night_sleep_minutes=average_night_sleep(buckets, zone, night, bounds.max_night_sleep_minutes),
        avg_night_wakings=average_night_wakings(buckets, window.days, zone, night),
        avg_feedings_per_day=feedings_per_day(selected.records, window.days),
        avg_feed_amount=average_feed_amount(selected.records),
        avg_diaper_changes_per_day=diaper_changes_per_day(selected.records, window.days),
        avg_poops_per_day=poops_per_day(selected.records, window.days),
    )

    log.debug(
        "Computed period stats",
        subject_id=subject_id,
        period=period_token,
        records=len(selected.records),
        skipped=selected.skipped,
        days_with_data=len(buckets),
    )

    return StatsReport(
        result=result,
        window=window,
        subject_id=subject_id,
        records_considered=len(selected.records),
        records_skipped=selected.skipped,
    )


def compute_stats(
    records: Iterable[RawOrRecord],
    subject_id: str,
    period_token: str,
    now: datetime,
    tz: TimeZoneSpec = None,
    config: StatsConfig | None = None,
) -> StatsResult:
    """Compute statistics of one subject over one period.

    Same as ``compute_stats_report`` without the diagnostics.
    """
    return compute_stats_report(records, subject_id, period_token, now, tz, config).result
