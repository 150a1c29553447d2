"""Trend comparison between two periods.

Trends are table-driven: each metric maps to a policy, and the policy
alone decides the direction. Adding a metric means adding a table entry.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Mapping

from ..core.errors import ConfigurationError

if TYPE_CHECKING:
    from .aggregator import StatsResult

__all__ = [
    "DEFAULT_TREND_POLICIES",
    "Trend",
    "TrendMap",
    "TrendPolicy",
    "compare_stats",
    "parse_trend_policies",
    "trend_for",
]


class Trend(str, Enum):
    """Direction of a metric in the main period relative to the compare period."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class TrendPolicy(str, Enum):
    """How a metric is judged."""

    HIGHER_IS_BETTER = "higher_is_better"
    LOWER_IS_BETTER = "lower_is_better"
    NEUTRAL = "neutral"


TrendMap = dict[str, Trend]

DEFAULT_TREND_POLICIES: Mapping[str, TrendPolicy] = {
    "avg_wake_window_minutes": TrendPolicy.NEUTRAL,
    "avg_nap_minutes": TrendPolicy.HIGHER_IS_BETTER,
    "avg_night_sleep_minutes": TrendPolicy.HIGHER_IS_BETTER,
    "avg_night_wakings": TrendPolicy.LOWER_IS_BETTER,
    "avg_feedings_per_day": TrendPolicy.NEUTRAL,
    "avg_feed_amount": TrendPolicy.HIGHER_IS_BETTER,
    "avg_diaper_changes_per_day": TrendPolicy.NEUTRAL,
    "avg_poops_per_day": TrendPolicy.NEUTRAL,
}


def trend_for(policy: TrendPolicy, main: float, compare: float) -> Trend:
    """Apply one policy to a pair of values.

    Ties are positive for both directional policies.
    """
    if policy is TrendPolicy.HIGHER_IS_BETTER:
        return Trend.POSITIVE if main >= compare else Trend.NEGATIVE
    if policy is TrendPolicy.LOWER_IS_BETTER:
        return Trend.POSITIVE if main <= compare else Trend.NEGATIVE
    return Trend.NEUTRAL


def parse_trend_policies(
    table: Mapping[str, object],
    known_metrics: set[str] | None = None,
) -> dict[str, TrendPolicy]:
    """Build a policy table from configuration values.

    Parameters
    ----------
    table
        Metric name -> policy name (or TrendPolicy)
    known_metrics
        Metric names a table may mention (None: no check)

    Raises
    ------
    ConfigurationError
        If a policy name is unknown or a metric is not reported
    """
    policies: dict[str, TrendPolicy] = {}

    for metric, value in table.items():
        if known_metrics is not None and metric not in known_metrics:
            raise ConfigurationError(f"Trend table names unknown metric {metric!r}")
        try:
            policies[metric] = TrendPolicy(value)
        except ValueError as exc:
            allowed = ", ".join(policy.value for policy in TrendPolicy)
            raise ConfigurationError(
                f"Unknown trend policy {value!r} for {metric!r} (expected one of: {allowed})"
            ) from exc

    return policies


def compare_stats(
    main: StatsResult,
    compare: StatsResult,
    policies: Mapping[str, TrendPolicy] | None = None,
) -> TrendMap:
    """Attach a trend to every metric of ``main``.

    Parameters
    ----------
    main
        Statistics of the main period
    compare
        Statistics of the compare period
    policies
        Metric -> policy table (default: DEFAULT_TREND_POLICIES); metrics
        missing from the table are neutral

    Returns
    -------
    dict[str, Trend]
        Trend per metric name, in StatsResult field order

    Raises
    ------
    ConfigurationError
        If the table names a metric StatsResult does not report
    """
    table = DEFAULT_TREND_POLICIES if policies is None else policies
    main_values = main.to_dict()
    compare_values = compare.to_dict()

    unknown = set(table) - set(main_values)
    if unknown:
        raise ConfigurationError(f"Trend table names unknown metrics: {', '.join(sorted(unknown))}")

    return {
        metric: trend_for(table.get(metric, TrendPolicy.NEUTRAL), value, compare_values[metric])
        for metric, value in main_values.items()
    }
