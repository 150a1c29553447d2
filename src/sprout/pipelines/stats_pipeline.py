"""Stats Pipeline - fetch once, compute two periods, attach trends.

The pipeline reads one snapshot covering both the main and the compare
window, then computes the two periods concurrently in worker threads.
Only the most recent request may deliver: starting a new request cancels
the one still in flight, whose awaiter gets ``asyncio.CancelledError``.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any

from ..core.errors import FetchError
from ..core.time import (
    Clock,
    SystemClock,
    TimeZoneSpec,
    end_of_local_day,
    format_utc_iso8601,
    local_date,
    resolve_timezone,
    start_of_local_day,
)
from ..observability.loguru_config import get_logger, timing_context
from ..stats.aggregator import StatsReport, compute_stats_report
from ..stats.compare import TrendMap, compare_stats
from ..stats.config import DEFAULT_STATS_CONFIG, StatsConfig
from ..stats.daily import DailySummary, summarize_day
from ..stats.filtering import filter_records
from ..stats.periods import resolve_period
from ..storage.log_store import ActivityLogStore, FetchedRecord, JsonlLogStore

__all__ = [
    "StatsComparison",
    "StatsPipeline",
    "create_stats_pipeline",
]

log = get_logger("pipeline")


@dataclass(frozen=True)
class StatsComparison:
    """Main and compare period statistics with per-metric trends."""

    subject_id: str
    main: StatsReport
    compare: StatsReport
    trends: TrendMap
    trace_id: str
    duration_ms: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject_id": self.subject_id,
            "trace_id": self.trace_id,
            "main": self.main.to_dict(),
            "compare": self.compare.to_dict(),
            "trends": {metric: trend.value for metric, trend in self.trends.items()},
        }


class StatsPipeline:
    """Async orchestration of a stats request.

    Example:
        >>> pipeline = StatsPipeline(InMemoryLogStore(records), clock=FixedClock(now))
        >>> comparison = await pipeline.request("baby-1", "7day", "14day", tz="Europe/Brussels")
        >>> comparison.trends["avg_night_wakings"]
        <Trend.POSITIVE: 'positive'>
    """

    def __init__(
        self,
        store: ActivityLogStore,
        *,
        clock: Clock | None = None,
        config: StatsConfig | None = None,
    ) -> None:
        """Initialize stats pipeline.

        Parameters
        ----------
        store
            Activity log store to fetch from
        clock
            Source of the reference instant (default: system clock)
        config
            Engine settings (default: built-in defaults)
        """
        self.store = store
        self.clock = clock or SystemClock()
        self.config = config or DEFAULT_STATS_CONFIG
        self._current: asyncio.Task[StatsComparison] | None = None

    async def request(
        self,
        subject_id: str,
        main_period: str | None = None,
        compare_period: str | None = None,
        tz: TimeZoneSpec = None,
        *,
        trace_id: str | None = None,
    ) -> StatsComparison:
        """Compute main and compare statistics for a subject.

        Cancels any request still in flight on this pipeline.

        Parameters
        ----------
        subject_id
            Tracked subject
        main_period
            Main period token (default: configured main period)
        compare_period
            Compare period token (default: configured compare period)
        tz
            Zone defining local days (default: configured zone)
        trace_id
            Trace ID for log correlation (generated when omitted)

        Returns
        -------
        StatsComparison
            Both reports and their trends

        Raises
        ------
        FetchError
            If the store fails; nothing is computed
        ConfigurationError
            If a period token or the zone is invalid
        asyncio.CancelledError
            If a newer request superseded this one
        """
        if self._current is not None and not self._current.done():
            log.debug("Cancelling superseded request", subject_id=subject_id)
            self._current.cancel()

        task = asyncio.create_task(
            self._run(
                subject_id,
                main_period or self.config.main_period,
                compare_period or self.config.compare_period,
                tz,
                trace_id or f"stats-{uuid.uuid4().hex[:12]}",
            )
        )
        self._current = task

        try:
            return await task
        finally:
            if self._current is task:
                self._current = None

    async def _run(
        self,
        subject_id: str,
        main_period: str,
        compare_period: str,
        tz: TimeZoneSpec,
        trace_id: str,
    ) -> StatsComparison:
        start_time = time.perf_counter()
        now = self.clock.now()
        zone = resolve_timezone(tz if tz is not None else self.config.timezone)

        main_window = resolve_period(main_period, now, zone, self.config.periods)
        compare_window = resolve_period(compare_period, now, zone, self.config.periods)
        start_utc = min(main_window.start_utc, compare_window.start_utc)
        end_utc = max(main_window.end_utc, compare_window.end_utc)

        log.info(
            "Stats request started",
            trace_id=trace_id,
            subject_id=subject_id,
            main_period=main_period,
            compare_period=compare_period,
        )

        records = await self._fetch(subject_id, start_utc, end_utc, trace_id)

        with timing_context("compute_stats", component="pipeline", trace_id=trace_id, subject_id=subject_id):
            main_report, compare_report = await asyncio.gather(
                asyncio.to_thread(compute_stats_report, records, subject_id, main_period, now, zone, self.config),
                asyncio.to_thread(compute_stats_report, records, subject_id, compare_period, now, zone, self.config),
            )

        trends = compare_stats(main_report.result, compare_report.result, self.config.trend_policies)
        duration_ms = (time.perf_counter() - start_time) * 1000

        log.info(
            "Stats request completed",
            trace_id=trace_id,
            subject_id=subject_id,
            records=len(records),
            skipped=main_report.records_skipped + compare_report.records_skipped,
            duration_ms=duration_ms,
        )

        return StatsComparison(
            subject_id=subject_id,
            main=main_report,
            compare=compare_report,
            trends=trends,
            trace_id=trace_id,
            duration_ms=duration_ms,
        )

    async def daily(
        self,
        subject_id: str,
        day: date | None = None,
        tz: TimeZoneSpec = None,
        *,
        trace_id: str | None = None,
    ) -> DailySummary:
        """Summarize one local day of a subject.

        The fetch starts a day early so sleeps running past midnight into
        ``day`` are counted.

        Parameters
        ----------
        subject_id
            Tracked subject
        day
            Local day (default: today per the clock)
        tz
            Zone defining the day (default: configured zone)
        trace_id
            Trace ID for log correlation

        Raises
        ------
        FetchError
            If the store fails
        """
        trace_id = trace_id or f"daily-{uuid.uuid4().hex[:12]}"
        now = self.clock.now()
        zone = resolve_timezone(tz if tz is not None else self.config.timezone)
        day = day or local_date(now, zone)

        start_utc = start_of_local_day(day - timedelta(days=1), zone)
        end_utc = end_of_local_day(day, zone)

        records = await self._fetch(subject_id, start_utc, end_utc, trace_id)
        selected = filter_records(records, subject_id, start_utc, end_utc)

        summary = summarize_day(selected.records, day, zone, now)
        log.info("Daily summary computed", trace_id=trace_id, subject_id=subject_id, day=day.isoformat())
        return summary

    async def _fetch(
        self, subject_id: str, start_utc: datetime, end_utc: datetime, trace_id: str
    ) -> list[FetchedRecord]:
        with timing_context(
            "fetch_records",
            component="pipeline",
            trace_id=trace_id,
            subject_id=subject_id,
            start=format_utc_iso8601(start_utc),
            end=format_utc_iso8601(end_utc),
        ) as ctx:
            try:
                records = await self.store.fetch(subject_id, start_utc, end_utc)
            except Exception as exc:
                log.error(
                    "Fetch failed, stats unavailable",
                    trace_id=trace_id,
                    subject_id=subject_id,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                raise FetchError(f"Stats unavailable for {subject_id}: {exc}", subject_id=subject_id) from exc
            ctx["records"] = len(records)

        return list(records)


def create_stats_pipeline(
    data_path: Path | str,
    *,
    clock: Clock | None = None,
    config: StatsConfig | None = None,
) -> StatsPipeline:
    """Factory for a pipeline reading a JSON-lines activity log.

    Parameters
    ----------
    data_path
        JSON-lines file with one record per line
    clock
        Source of the reference instant
    config
        Engine settings

    Returns
    -------
    StatsPipeline
        Configured pipeline
    """
    return StatsPipeline(JsonlLogStore(data_path), clock=clock, config=config)
