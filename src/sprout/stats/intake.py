"""Feeding and diaper statistics.

Rates are per day of the whole period, not per day with data.
"""

from __future__ import annotations

from typing import Iterable

from ..core.errors import ConfigurationError
from ..core.records import ActivityRecord, DiaperRecord, FeedRecord
from .rounding import round_one_decimal

__all__ = [
    "average_feed_amount",
    "diaper_changes_per_day",
    "feedings_per_day",
    "poops_per_day",
]


def _per_day(count: int, period_days: int) -> float:
    if period_days <= 0:
        raise ConfigurationError(f"Period day count must be positive, got {period_days}")
    return round_one_decimal(count / period_days)


def feedings_per_day(records: Iterable[ActivityRecord], period_days: int) -> float:
    """Feed records per period day, one decimal."""
    return _per_day(sum(1 for record in records if isinstance(record, FeedRecord)), period_days)


def average_feed_amount(records: Iterable[ActivityRecord]) -> float:
    """Mean amount over feeds that recorded one, one decimal.

    Feeds without a usable amount (missing, negative or non-finite) are
    left out of both sum and count.
    """
    amounts = [
        record.amount
        for record in records
        if isinstance(record, FeedRecord) and record.has_amount
    ]
    if not amounts:
        return 0.0
    return round_one_decimal(sum(amounts) / len(amounts))


def diaper_changes_per_day(records: Iterable[ActivityRecord], period_days: int) -> float:
    """Diaper changes per period day, one decimal."""
    return _per_day(sum(1 for record in records if isinstance(record, DiaperRecord)), period_days)


def poops_per_day(records: Iterable[ActivityRecord], period_days: int) -> float:
    """Dirty (``DIRTY`` or ``BOTH``) diapers per period day, one decimal."""
    return _per_day(
        sum(1 for record in records if isinstance(record, DiaperRecord) and record.is_poop),
        period_days,
    )
