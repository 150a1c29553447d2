"""CLI command listing the configured period tokens."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from ..stats.periods import period_label
from .cli_common import CLIContext, cli_command, handle_cli_error, handle_cli_success, load_runtime, run_command

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.command("periods", context_settings=CONTEXT_SETTINGS, help="List configured periods")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="YAML config file")
@cli_command
def cli(ctx: CLIContext, config_path: Path | None) -> int:
    """List period tokens with their labels."""
    cmd = "periods"
    args = {"config": str(config_path) if config_path else None}

    try:
        stats_config = load_runtime(ctx, config_path).stats_config

        periods = [
            {
                "token": token,
                "days": days,
                "label": period_label(token, stats_config.periods),
                "main": token == stats_config.main_period,
                "compare": token == stats_config.compare_period,
            }
            for token, days in stats_config.periods.items()
        ]

        if ctx.json_output:
            return handle_cli_success(ctx, periods, cmd, args)

        lines = []
        for period in periods:
            marks = [name for name in ("main", "compare") if period[name]]
            suffix = f"  ({', '.join(marks)})" if marks else ""
            lines.append(f"{period['token']:<8} {period['label']}{suffix}")
        return handle_cli_success(ctx, "\n".join(lines), cmd, args)

    except Exception as exc:
        return handle_cli_error(ctx, exc, cmd, args)


def main(args: list[str] | None = None) -> int:
    """Run the periods command."""
    return run_command(cli, args)


if __name__ == "__main__":  # pragma: no cover - executable module
    sys.exit(main())
