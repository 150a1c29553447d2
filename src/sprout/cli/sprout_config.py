"""CLI commands for inspecting configuration."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from ..config.settings import generate_example_env
from ..core.config import dump_config
from .cli_common import CLIContext, cli_command, handle_cli_error, handle_cli_success, load_runtime, run_command

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(context_settings=CONTEXT_SETTINGS, help="Inspect Sprout configuration")
def cli() -> None:
    """Root command for configuration."""


@cli.command("show")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="YAML config file")
@cli_command
def show_command(ctx: CLIContext, config_path: Path | None) -> int:
    """Print the effective configuration (defaults, file, environment)."""
    cmd = "config.show"
    args = {"config": str(config_path) if config_path else None}

    try:
        runtime = load_runtime(ctx, config_path)
        if ctx.json_output:
            return handle_cli_success(ctx, runtime.config.to_dict(), cmd, args)
        return handle_cli_success(ctx, dump_config(runtime.config).rstrip(), cmd, args)
    except Exception as exc:
        return handle_cli_error(ctx, exc, cmd, args)


@cli.command("env")
@click.option("--output", type=click.Path(path_type=Path), help="Write the example to this file")
@cli_command
def env_command(ctx: CLIContext, output: Path | None) -> int:
    """Print an example .env file."""
    cmd = "config.env"
    args = {"output": str(output) if output else None}

    try:
        example = generate_example_env(output)
        if output:
            return handle_cli_success(ctx, {"written": str(output)}, cmd, args)
        return handle_cli_success(ctx, example.rstrip(), cmd, args)
    except Exception as exc:
        return handle_cli_error(ctx, exc, cmd, args)


def main(args: list[str] | None = None) -> int:
    """Run the config commands."""
    return run_command(cli, args)


if __name__ == "__main__":  # pragma: no cover - executable module
    sys.exit(main())
