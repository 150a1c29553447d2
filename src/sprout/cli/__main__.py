"""Sprout command-line entry point."""

import sys

import click

from .cli_common import run_command
from .sprout_config import cli as config_cli
from .sprout_daily import cli as daily_cli
from .sprout_periods import cli as periods_cli
from .sprout_stats import cli as stats_cli

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
EPILOG = """
Examples:
  sprout stats --subject baby-1                     # Last 7 days vs last 14 days
  sprout stats --subject baby-1 --period 2day --compare 7day --tz Europe/Brussels
  sprout stats --subject baby-1 --json              # Machine-readable output
  sprout daily --subject baby-1 --date 2024-03-10   # One-day summary
  sprout periods                                    # Configured period tokens
  sprout config show                                # Effective configuration
""".strip()


@click.group(
    context_settings=CONTEXT_SETTINGS,
    help="Sprout - activity statistics for infant care logs",
    epilog=EPILOG,
)
def cli() -> None:
    """Root CLI command."""


cli.add_command(stats_cli, "stats")
cli.add_command(daily_cli, "daily")
cli.add_command(periods_cli, "periods")
cli.add_command(config_cli, "config")


def main(args: list[str] | None = None) -> int:
    """Main CLI function."""
    return run_command(cli, args)


if __name__ == "__main__":  # pragma: no cover - executable module
    sys.exit(main())
