"""Async pipelines around the statistics engine."""

from .stats_pipeline import StatsComparison, StatsPipeline, create_stats_pipeline

__all__ = [
    "StatsComparison",
    "StatsPipeline",
    "create_stats_pipeline",
]
