"""Record selection for one subject and one window."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Mapping, Union

from ..core.errors import RecordParseError
from ..core.records import ActivityRecord, parse_record, primary_timestamp
from ..observability.loguru_config import get_logger

__all__ = [
    "FilterResult",
    "RawOrRecord",
    "filter_records",
]

log = get_logger("stats")

RawOrRecord = Union[ActivityRecord, Mapping[str, Any]]


@dataclass
class FilterResult:
    """Records that passed the filter and how many were skipped."""

    records: list[ActivityRecord] = field(default_factory=list)
    skipped: int = 0


def filter_records(
    records: Iterable[RawOrRecord],
    subject_id: str,
    start: datetime,
    end: datetime,
) -> FilterResult:
    """Keep records of ``subject_id`` whose primary timestamp is in ``[start, end]``.

    Raw mappings are parsed first. A record whose primary timestamp is
    missing or unparseable is skipped and counted, never fatal.

    Parameters
    ----------
    records
        Typed records or raw mappings
    subject_id
        Tracked subject to keep
    start
        Window start (UTC, inclusive)
    end
        Window end (UTC, inclusive)

    Returns
    -------
    FilterResult
        Selected records in input order plus the skipped count
    """
    result = FilterResult()

    for item in records:
        if isinstance(item, Mapping):
            try:
                record = parse_record(item)
            except RecordParseError as exc:
                log.debug("Skipping unparseable record", record_id=exc.record_id, field=exc.field, error=str(exc))
                result.skipped += 1
                continue
        else:
            record = item

        if record.subject_id != subject_id:
            continue

        timestamp = primary_timestamp(record)
        if timestamp is None:
            log.debug("Skipping record without timestamp", record_id=record.id)
            result.skipped += 1
            continue

        if start <= timestamp <= end:
            result.records.append(record)

    return result
