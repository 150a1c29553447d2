"""Loguru setup for Sprout.

One console sink for humans, and under ``log_dir`` serialized JSONL sinks:
``sprout.jsonl`` (everything), ``timing.jsonl`` (records bound with
``timing=True``) and one file per component (stats, pipeline, storage,
cli). Loggers are obtained with ``get_logger(component)``; durations are
measured with ``timing_context`` or ``log_timing``.
"""

from __future__ import annotations

import functools
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from loguru import logger

if TYPE_CHECKING:
    from collections.abc import Generator

__all__ = [
    "COMPONENTS",
    "configure_loguru",
    "get_logger",
    "log_timing",
    "timing_context",
]

F = TypeVar("F", bound=Callable[..., Any])

COMPONENTS = ("stats", "pipeline", "storage", "cli")

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> "
    "<level>{level: <7}</level> "
    "<cyan>[{extra[component]}]</cyan> {message}"
)


def _component_filter(component: str) -> Callable[[dict[str, Any]], bool]:
    return lambda record: record["extra"].get("component") == component


def _is_timing(record: dict[str, Any]) -> bool:
    return bool(record["extra"].get("timing"))


def configure_loguru(
    *,
    log_dir: Path | None = None,
    level: str = "INFO",
    rotation: str = "50 MB",
    retention: str = "14 days",
    enable_console: bool = True,
) -> None:
    """Replace every loguru sink with Sprout's sinks.

    Parameters
    ----------
    log_dir
        Directory for the JSONL files; None keeps logging on the console
    level
        Minimum level for the console and the main and component files
    rotation
        Size or age after which a file is rotated
    retention
        How long rotated files are kept
    enable_console
        Log to stderr (off in the CLI unless --verbose)
    """
    logger.remove()
    logger.configure(extra={"component": "sprout"})

    if enable_console:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True, diagnose=False)

    if log_dir is None:
        return

    log_dir.mkdir(parents=True, exist_ok=True)
    file_options: dict[str, Any] = {
        "format": "{message}",
        "serialize": True,
        "rotation": rotation,
        "retention": retention,
        "enqueue": True,
        "diagnose": False,
    }

    logger.add(log_dir / "sprout.jsonl", level=level, **file_options)
    logger.add(log_dir / "timing.jsonl", level="DEBUG", filter=_is_timing, **file_options)
    for component in COMPONENTS:
        logger.add(log_dir / f"{component}.jsonl", level=level, filter=_component_filter(component), **file_options)

    get_logger("cli").debug("Logging to files", log_dir=str(log_dir), level=level)


def get_logger(component: str = "sprout") -> Any:
    """Logger bound to ``component`` (stats, pipeline, storage, cli)."""
    return logger.bind(component=component)


@contextmanager
def timing_context(
    operation: str,
    *,
    component: str = "sprout",
    trace_id: str | None = None,
    **metadata: Any,
) -> Generator[dict[str, Any], None, None]:
    """Log the start and end of ``operation`` with its duration.

    The yielded dict collects extra fields for the end record, e.g. a
    record count known only once the operation finished. The end record is
    written even when the block raises.

    Parameters
    ----------
    operation
        Name of the timed operation
    component
        Component the records are bound to
    trace_id
        Correlation id of the request
    **metadata
        Fields added to the start record

    Example
    -------
    >>> with timing_context("fetch_records", component="pipeline", trace_id=trace_id) as ctx:
    ...     records = await store.fetch(subject_id, start_utc, end_utc)
    ...     ctx["records"] = len(records)
    """
    bound = logger.bind(component=component, timing=True, operation=operation, trace_id=trace_id)
    extra: dict[str, Any] = {}
    started = time.perf_counter_ns()

    bound.debug(f"{operation} started", phase="start", **metadata)
    try:
        yield extra
    finally:
        elapsed_ns = time.perf_counter_ns() - started
        bound.debug(
            f"{operation} finished",
            phase="end",
            duration_ms=elapsed_ns / 1_000_000,
            **extra,
        )


def log_timing(component: str = "sprout") -> Callable[[F], F]:
    """Decorator timing every call of the wrapped function.

    Example
    -------
    >>> @log_timing(component="storage")
    ... def read_rows(self):
    ...     ...
    """

    def decorator(func: F) -> F:
        operation = f"{func.__module__}.{func.__qualname__}"

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with timing_context(operation, component=component):
                return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
