"""CLI command for a single-day summary."""

from __future__ import annotations

import asyncio
import sys
from datetime import date
from pathlib import Path

import click

from ..core.time import FixedClock, SystemClock
from ..pipelines.stats_pipeline import create_stats_pipeline
from ..stats.daily import DailySummary, format_minutes
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


@click.command(
    "daily",
    context_settings=CONTEXT_SETTINGS,
    help="Summarize one day: time asleep and awake, intake, diapers",
)
@click.option("--subject", required=True, help="Tracked subject ID")
@click.option("--date", "day_value", type=str, help="Day to summarize (YYYY-MM-DD, default: today)")
@click.option("--tz", type=str, help="Timezone: IANA name, +HH:MM, or minutes east of UTC")
@click.option("--now", "now_value", type=str, help="Reference instant (ISO-8601, default: current time)")
@click.option("--data", "data_path", type=click.Path(path_type=Path), help="JSON-lines activity log")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="YAML config file")
@cli_command
def cli(
    ctx: CLIContext,
    subject: str,
    day_value: str | None,
    tz: str | None,
    now_value: str | None,
    data_path: Path | None,
    config_path: Path | None,
) -> int:
    """Show a daily summary."""
    cmd = "daily"
    args = {"subject": subject, "date": day_value, "tz": tz, "now": now_value}

    try:
        day = parse_day(day_value)
        runtime = load_runtime(ctx, config_path)
        now = parse_now(now_value)
        pipeline = create_stats_pipeline(
            data_path or runtime.settings.require_data_path(),
            clock=FixedClock(now) if now else SystemClock(),
            config=runtime.stats_config,
        )

        summary = asyncio.run(pipeline.daily(subject, day, parse_tz(tz), trace_id=ctx.trace_id))

        if ctx.json_output:
            return handle_cli_success(ctx, summary.to_dict(), cmd, args)
        return handle_cli_success(ctx, format_summary(summary), cmd, args)

    except Exception as exc:
        return handle_cli_error(ctx, exc, cmd, args)


def parse_day(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise click.BadParameter(f"Invalid date format: {value}. Use YYYY-MM-DD") from exc


def format_summary(summary: DailySummary) -> str:
    """Render a daily summary as plain text."""
    consumed = ", ".join(f"{amount:g} {unit}" for unit, amount in summary.consumed.items()) or "None"
    return "\n".join(
        [
            f"Day {summary.day.isoformat()}",
            f"  Awake:    {format_minutes(summary.awake_minutes)}",
            f"  Asleep:   {format_minutes(summary.sleep_minutes)}",
            f"  Consumed: {consumed}",
            f"  Diapers:  {summary.diaper_changes}",
            f"  Poops:    {summary.poops}",
        ]
    )


def main(args: list[str] | None = None) -> int:
    """Run the daily command."""
    return run_command(cli, args)


if __name__ == "__main__":  # pragma: no cover - executable module
    sys.exit(main())
