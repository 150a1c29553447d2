"""Sprout - activity statistics for infant care logs."""

from .core.errors import ConfigurationError, FetchError, RecordParseError, SproutError
from .stats import StatsReport, StatsResult, Trend, compare_stats, compute_stats, compute_stats_report

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "FetchError",
    "RecordParseError",
    "SproutError",
    "StatsReport",
    "StatsResult",
    "Trend",
    "__version__",
    "compare_stats",
    "compute_stats",
    "compute_stats_report",
]
