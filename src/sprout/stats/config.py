"""Statistics settings extracted from the layered configuration."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Mapping

from ..core.config import DEFAULT_CONFIG, Config
from ..core.errors import ConfigurationError
from .buckets import NightWindow
from .compare import DEFAULT_TREND_POLICIES, TrendPolicy, parse_trend_policies
from .periods import DEFAULT_PERIODS, validate_periods
from .sleep import SleepBounds

__all__ = ["DEFAULT_STATS_CONFIG", "StatsConfig", "metric_names"]


def metric_names() -> set[str]:
    """Names of the metrics a StatsResult reports."""
    from .aggregator import StatsResult

    return {f.name for f in fields(StatsResult)}


@dataclass(frozen=True)
class StatsConfig:
    """Tunables of the statistics engine.

    Attributes
    ----------
    periods : dict[str, int]
        Period token -> day count
    night_window : NightWindow
        Local hours counted as night
    bounds : SleepBounds
        Exclusive upper bounds for wake windows, naps and night sleep
    trend_policies : dict[str, TrendPolicy]
        Metric -> trend policy
    main_period : str
        Default main period token
    compare_period : str
        Default compare period token
    timezone : str
        Default zone for local days when the caller gives none
    """

    periods: Mapping[str, int] = field(default_factory=lambda: dict(DEFAULT_PERIODS))
    night_window: NightWindow = field(default_factory=NightWindow)
    bounds: SleepBounds = field(default_factory=SleepBounds)
    trend_policies: Mapping[str, TrendPolicy] = field(default_factory=lambda: dict(DEFAULT_TREND_POLICIES))
    main_period: str = "7day"
    compare_period: str = "14day"
    timezone: str = "UTC"

    def __post_init__(self) -> None:
        periods = validate_periods(self.periods)
        for name in ("main_period", "compare_period"):
            token = getattr(self, name)
            if token not in periods:
                raise ConfigurationError(
                    f"{name} {token!r} is not a configured period (expected one of: {', '.join(periods)})"
                )

    @classmethod
    def from_config(cls, config: Config) -> StatsConfig:
        """Build and validate statistics settings from a Config.

        Raises
        ------
        ConfigurationError
            If any section is malformed
        """
        defaults = DEFAULT_CONFIG["stats"]

        night = _section(config, "stats.night_window", defaults["night_window"])
        bounds = _section(config, "stats.bounds", defaults["bounds"])
        trends = _section(config, "stats.trends", defaults["trends"])
        periods = _section(config, "stats.periods", defaults["periods"])

        try:
            night_window = NightWindow(**night)
            sleep_bounds = SleepBounds(**bounds)
        except TypeError as exc:
            raise ConfigurationError(f"Invalid stats configuration: {exc}") from exc

        return cls(
            periods=validate_periods(periods),
            night_window=night_window,
            bounds=sleep_bounds,
            trend_policies=parse_trend_policies(trends, known_metrics=metric_names()),
            main_period=str(config.get("stats.main_period", defaults["main_period"])),
            compare_period=str(config.get("stats.compare_period", defaults["compare_period"])),
            timezone=str(config.get("core.timezone", "UTC")),
        )


def _section(config: Config, key: str, default: Mapping[str, Any]) -> dict[str, Any]:
    value = config.get(key, default)
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Config section {key} must be a mapping, got {type(value).__name__}")
    return dict(value)


DEFAULT_STATS_CONFIG = StatsConfig()
