"""Activity log stores.

The engine reads activity through ``ActivityLogStore.fetch`` only. Two
implementations ship here: an in-memory store for embedding callers and
tests, and a JSON-lines file store used by the CLI.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Mapping, Protocol, Union

from ..core.records import ActivityRecord, primary_timestamp, record_to_dict
from ..observability.loguru_config import get_logger, log_timing

__all__ = [
    "ActivityLogStore",
    "FetchedRecord",
    "InMemoryLogStore",
    "JsonlLogStore",
]

log = get_logger("storage")

FetchedRecord = Union[ActivityRecord, Mapping[str, Any]]


class ActivityLogStore(Protocol):
    """Source of activity records for one subject."""

    async def fetch(self, subject_id: str, start_utc: datetime, end_utc: datetime) -> list[FetchedRecord]:
        """Return the subject's records in ``[start_utc, end_utc]``.

        Stores may return extra records; callers filter again. Any
        exception means the snapshot is unavailable.
        """
        ...


class InMemoryLogStore:
    """Store backed by a list of typed records."""

    def __init__(self, records: Iterable[ActivityRecord] = ()) -> None:
        self._records: list[ActivityRecord] = list(records)

    def add(self, *records: ActivityRecord) -> None:
        self._records.extend(records)

    async def fetch(self, subject_id: str, start_utc: datetime, end_utc: datetime) -> list[FetchedRecord]:
        selected: list[FetchedRecord] = []
        for record in self._records:
            if record.subject_id != subject_id:
                continue
            timestamp = primary_timestamp(record)
            if timestamp is not None and start_utc <= timestamp <= end_utc:
                selected.append(record)
        return selected


class JsonlLogStore:
    """Store reading one JSON object per line from a file.

    Rows are returned raw; parsing and window selection happen in the
    record filter. Blank lines are ignored and malformed lines are logged
    and skipped.

    Parameters
    ----------
    path
        JSON-lines file
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    async def fetch(self, subject_id: str, start_utc: datetime, end_utc: datetime) -> list[FetchedRecord]:
        rows = await asyncio.to_thread(self.read_rows)
        selected = [row for row in rows if _subject_of(row) in (None, subject_id)]
        log.debug(
            "Fetched rows",
            path=str(self.path),
            subject_id=subject_id,
            rows=len(rows),
            selected=len(selected),
            start=start_utc.isoformat(),
            end=end_utc.isoformat(),
        )
        return selected

    @log_timing(component="storage")
    def read_rows(self) -> list[dict[str, Any]]:
        """Read every row of the file.

        Raises
        ------
        FileNotFoundError
            If the file does not exist
        """
        rows: list[dict[str, Any]] = []

        with open(self.path, encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    row = json.loads(line)
                except json.JSONDecodeError as exc:
                    log.warning("Skipping malformed line", path=str(self.path), line=line_no, error=str(exc))
                    continue
                if not isinstance(row, dict):
                    log.warning("Skipping non-object line", path=str(self.path), line=line_no)
                    continue
                rows.append(row)

        return rows

    def append(self, records: Iterable[ActivityRecord]) -> int:
        """Append typed records to the file, creating it if needed.

        Returns
        -------
        int
            Number of records written
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        written = 0

        with open(self.path, "a", encoding="utf-8") as f:
            for record in records:
                f.write(json.dumps(record_to_dict(record), ensure_ascii=False) + "\n")
                written += 1

        log.debug("Appended records", path=str(self.path), count=written)
        return written


def _subject_of(row: Mapping[str, Any]) -> str | None:
    for key in ("subject_id", "subjectId", "baby_id", "babyId"):
        if row.get(key) is not None:
            return str(row[key])
    return None
