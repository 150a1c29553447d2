"""CLI command for period statistics with trends."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Mapping

import click

from ..core.time import FixedClock, SystemClock
from ..pipelines.stats_pipeline import StatsComparison, create_stats_pipeline
from ..stats.daily import format_minutes
from ..stats.periods import period_label
from .cli_common import (
    CLIContext,
    cli_command,
    handle_cli_error,
    handle_cli_success,
    load_runtime,
    parse_now,
    parse_tz,
    run_command,
)

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

METRIC_LABELS = {
    "avg_wake_window_minutes": "Avg wake window",
    "avg_nap_minutes": "Avg nap",
    "avg_night_sleep_minutes": "Avg night sleep",
    "avg_night_wakings": "Night wakings / day",
    "avg_feedings_per_day": "Feedings / day",
    "avg_feed_amount": "Avg feed amount",
    "avg_diaper_changes_per_day": "Diapers / day",
    "avg_poops_per_day": "Poops / day",
}

TREND_MARKS = {"positive": "+", "negative": "-", "neutral": "="}


@click.command(
    "stats",
    context_settings=CONTEXT_SETTINGS,
    help="Compute statistics for a main period and compare them to another period",
)
@click.option("--subject", required=True, help="Tracked subject ID")
@click.option("--period", "main_period", type=str, help="Main period token (e.g., 7day)")
@click.option("--compare", "compare_period", type=str, help="Compare period token (e.g., 14day)")
@click.option("--tz", type=str, help="Timezone: IANA name, +HH:MM, or minutes east of UTC")
@click.option("--now", "now_value", type=str, help="Reference instant (ISO-8601, default: current time)")
@click.option("--data", "data_path", type=click.Path(path_type=Path), help="JSON-lines activity log")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="YAML config file")
@cli_command
def cli(
    ctx: CLIContext,
    subject: str,
    main_period: str | None,
    compare_period: str | None,
    tz: str | None,
    now_value: str | None,
    data_path: Path | None,
    config_path: Path | None,
) -> int:
    """Show period statistics with trends."""
    cmd = "stats"
    args = {"subject": subject, "period": main_period, "compare": compare_period, "tz": tz, "now": now_value}

    try:
        runtime = load_runtime(ctx, config_path)
        now = parse_now(now_value)
        pipeline = create_stats_pipeline(
            data_path or runtime.settings.require_data_path(),
            clock=FixedClock(now) if now else SystemClock(),
            config=runtime.stats_config,
        )

        comparison = asyncio.run(
            pipeline.request(subject, main_period, compare_period, parse_tz(tz), trace_id=ctx.trace_id)
        )

        periods = runtime.stats_config.periods
        if ctx.json_output:
            return handle_cli_success(ctx, comparison.to_dict(), cmd, args)
        return handle_cli_success(ctx, format_comparison(comparison, periods), cmd, args)

    except Exception as exc:
        return handle_cli_error(ctx, exc, cmd, args)


def format_value(metric: str, value: float) -> str:
    if metric.endswith("_minutes"):
        return format_minutes(int(value))
    return f"{value:.1f}"


def format_comparison(comparison: StatsComparison, periods: Mapping[str, int]) -> str:
    """Render a comparison as a plain-text table."""
    main_label = period_label(comparison.main.window.token, periods)
    compare_label = period_label(comparison.compare.window.token, periods)
    main_values = comparison.main.result.to_dict()
    compare_values = comparison.compare.result.to_dict()

    lines = [
        f"Subject {comparison.subject_id}: {main_label} vs {compare_label}",
        f"{'':<22}{main_label:>10}{compare_label:>10}  trend",
    ]
    for metric, label in METRIC_LABELS.items():
        trend = comparison.trends[metric].value
        lines.append(
            f"{label:<22}{format_value(metric, main_values[metric]):>10}"
            f"{format_value(metric, compare_values[metric]):>10}  {TREND_MARKS[trend]}"
        )

    skipped = comparison.main.records_skipped + comparison.compare.records_skipped
    if skipped:
        lines.append(f"({skipped} unreadable records skipped)")

    return "\n".join(lines)


def main(args: list[str] | None = None) -> int:
    """Run the stats command."""
    return run_command(cli, args)


if __name__ == "__main__":  # pragma: no cover - executable module
    sys.exit(main())
