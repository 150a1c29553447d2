"""Common CLI utilities: JSON output, stable exit codes, and command logging."""

from __future__ import annotations

import functools
import json
import traceback
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Any, Callable

import click

from ..config.settings import Settings, load_settings
from ..core.config import Config
from ..core.errors import ConfigurationError, FetchError, RecordParseError
from ..core.time import parse_utc_iso8601
from ..observability.loguru_config import configure_loguru, get_logger
from ..stats.config import StatsConfig

__all__ = [
    "CLIContext",
    "ExitCode",
    "RuntimeEnv",
    "cli_command",
    "handle_cli_error",
    "handle_cli_success",
    "load_runtime",
    "parse_now",
    "parse_tz",
    "run_command",
]

log = get_logger("cli")


class ExitCode(IntEnum):
    """Stable exit codes for CLI commands."""

    SUCCESS = 0  # Successful execution
    VALIDATION_ERROR = 2  # Malformed record or argument
    IO_ERROR = 5  # Activity log unreadable, stats unavailable
    CONFIG_ERROR = 6  # Configuration error
    UNKNOWN_ERROR = 7  # Unknown/unexpected error


class CLIContext:
    """Context for CLI execution with JSON output and trace ID."""

    def __init__(
        self,
        json_output: bool = False,
        trace_id: str | None = None,
        verbose: bool = False,
    ):
        """Initialize CLI context.

        Args:
            json_output: Enable JSON output mode
            trace_id: Trace ID for correlation
            verbose: Verbose output
        """
        self.json_output = json_output
        self.trace_id = trace_id or f"trace-{uuid.uuid4().hex[:12]}"
        self.verbose = verbose

    def output(
        self, data: Any, status: str = "success", error: str | None = None, meta: dict[str, Any] | None = None
    ) -> None:
        """Output result in appropriate format.

        Args:
            data: Result data (a dict, a list, or preformatted text)
            status: Status ("success", "error")
            error: Error message if status is error
            meta: Additional metadata
        """
        if self.json_output:
            # JSON mode: print only JSON, no logs
            result: dict[str, Any] = {"status": status, "trace_id": self.trace_id}

            if error:
                result["error"] = error
            else:
                result["data"] = data

            if meta:
                result["meta"] = meta

            click.echo(json.dumps(result, ensure_ascii=False, indent=2))
            return

        if status == "error":
            click.echo(f"Error: {error}", err=True)
        elif isinstance(data, dict):
            for key, value in data.items():
                click.echo(f"{key}: {value}")
        elif isinstance(data, list):
            for item in data:
                click.echo(f"  - {item}")
        else:
            click.echo(data)


def cli_command(func: Callable[..., int]) -> Callable[..., int]:
    """Decorator to add common CLI options to commands.

    Adds:
    - --json: JSON output mode
    - --trace-id: Trace ID for correlation
    - --verbose: Log to the console and print tracebacks
    """

    @click.option("--json", "json_output", is_flag=True, help="Output as JSON (machine-readable)")
    @click.option("--trace-id", type=str, help="Trace ID for correlation")
    @click.option("--verbose", "-v", is_flag=True, help="Verbose output")
    @functools.wraps(func)
    def wrapper(json_output: bool, trace_id: str | None, verbose: bool, *args: Any, **kwargs: Any) -> int:
        ctx = CLIContext(json_output=json_output, trace_id=trace_id, verbose=verbose)
        return func(ctx, *args, **kwargs)

    return wrapper


def exit_code_for(exc: BaseException) -> ExitCode:
    """Map an exception to its stable exit code."""
    if isinstance(exc, ConfigurationError):
        return ExitCode.CONFIG_ERROR
    if isinstance(exc, (FetchError, OSError)):
        return ExitCode.IO_ERROR
    if isinstance(exc, (RecordParseError, click.BadParameter, ValueError)):
        return ExitCode.VALIDATION_ERROR
    return ExitCode.UNKNOWN_ERROR


def handle_cli_error(ctx: CLIContext, exc: Exception, cmd: str, args: dict[str, Any]) -> int:
    """Handle CLI error and return appropriate exit code.

    Args:
        ctx: CLI context
        exc: Exception to handle
        cmd: Command name
        args: Command arguments

    Returns:
        Appropriate exit code
    """
    exit_code = exit_code_for(exc)
    error_msg = str(exc)

    if isinstance(exc, FetchError):
        error_msg = f"Stats unavailable: {exc.__cause__ or exc}"

    log.bind(trace_id=ctx.trace_id).error(
        "Command failed",
        command=cmd,
        args=args,
        error=error_msg,
        error_type=type(exc).__name__,
        exit_code=int(exit_code),
    )

    ctx.output(None, status="error", error=error_msg, meta={"exit_code": int(exit_code)})

    if ctx.verbose and not ctx.json_output:
        click.echo("\nTraceback:", err=True)
        click.echo(traceback.format_exc(), err=True)

    return int(exit_code)


def handle_cli_success(
    ctx: CLIContext, data: Any, cmd: str, args: dict[str, Any], meta: dict[str, Any] | None = None
) -> int:
    """Handle CLI success and return success code.

    Args:
        ctx: CLI context
        data: Success data
        cmd: Command name
        args: Command arguments
        meta: Additional metadata

    Returns:
        Success exit code (0)
    """
    log.bind(trace_id=ctx.trace_id).info("Command succeeded", command=cmd, args=args)
    ctx.output(data, status="success", meta=meta)
    return int(ExitCode.SUCCESS)


@dataclass
class RuntimeEnv:
    """Settings and engine configuration resolved for one command."""

    settings: Settings
    config: Config
    stats_config: StatsConfig


def load_runtime(ctx: CLIContext, config_path: Path | None = None) -> RuntimeEnv:
    """Load settings, configure logging, and build the engine configuration.

    Raises:
        ConfigurationError: If settings or the config file are invalid
    """
    settings = load_settings()
    configure_loguru(log_dir=settings.log_dir, level=settings.log_level, enable_console=ctx.verbose)

    # SPROUT_* overrides (including those from .env) are applied by Config.load
    config = Config.load(config_path or settings.config_path)

    return RuntimeEnv(settings=settings, config=config, stats_config=StatsConfig.from_config(config))


def parse_tz(value: str | None) -> str | int | None:
    """Parse a ``--tz`` option; bare integers are minutes east of UTC."""
    if value is None:
        return None
    text = value.strip()
    if text.lstrip("-").isdigit():
        return int(text)
    return text


def run_command(command: click.Command, args: list[str] | None = None) -> int:
    """Invoke a click command and return its exit code."""
    try:
        normalized_args = list(args) if args is not None else None
        result = command.main(args=normalized_args, standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted!", err=True)
        return int(ExitCode.UNKNOWN_ERROR)
    except SystemExit as exc:  # pragma: no cover - click normalizes exit codes
        return int(exc.code) if exc.code is not None else 0

    return int(result) if result is not None else int(ExitCode.SUCCESS)


def parse_now(value: str | None) -> datetime | None:
    """Parse a ``--now`` ISO-8601 option into a UTC instant."""
    if value is None:
        return None
    try:
        return parse_utc_iso8601(value)
    except ValueError as exc:
        raise click.BadParameter(f"Invalid --now value {value!r}: expected ISO-8601") from exc
