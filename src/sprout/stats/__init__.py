"""Activity statistics engine.

Pure functions from records to period statistics, daily summaries and
period-over-period trends.
"""

from .aggregator import StatsReport, StatsResult, compute_stats, compute_stats_report
from .buckets import DEFAULT_NIGHT_WINDOW, NightWindow, bucketize, is_night
from .compare import DEFAULT_TREND_POLICIES, Trend, TrendMap, TrendPolicy, compare_stats
from .config import DEFAULT_STATS_CONFIG, StatsConfig
from .daily import DailySummary, summarize_day
from .filtering import FilterResult, filter_records
from .periods import DEFAULT_PERIODS, PeriodWindow, period_label, resolve_period
from .sleep import DEFAULT_SLEEP_BOUNDS, SleepBounds

__all__ = [
    "DEFAULT_NIGHT_WINDOW",
    "DEFAULT_PERIODS",
    "DEFAULT_SLEEP_BOUNDS",
    "DEFAULT_STATS_CONFIG",
    "DEFAULT_TREND_POLICIES",
    "DailySummary",
    "FilterResult",
    "NightWindow",
    "PeriodWindow",
    "SleepBounds",
    "StatsConfig",
    "StatsReport",
    "StatsResult",
    "Trend",
    "TrendMap",
    "TrendPolicy",
    "bucketize",
    "compare_stats",
    "compute_stats",
    "compute_stats_report",
    "filter_records",
    "is_night",
    "period_label",
    "resolve_period",
    "summarize_day",
]
