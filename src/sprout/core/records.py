"""Activity records as explicit tagged variants.

Every record carries an ``ActivityKind`` tag and only the fields relevant
to that kind. Records are frozen: the engine never mutates its input.

Raw mappings (JSON lines, API payloads) become typed records through
``parse_record``: ISO-8601 strings with ``Z`` or an explicit offset are
converted to UTC. Every record normalizes its datetimes on construction,
so aware values are converted to UTC and naive ones are taken to already
be UTC, whether the record was parsed or built directly.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Union

from .errors import RecordParseError
from .time import ensure_utc, format_utc_iso8601, minutes_between, parse_utc_iso8601

__all__ = [
    "ActivityKind",
    "ActivityRecord",
    "DiaperRecord",
    "FeedRecord",
    "GenericRecord",
    "SleepRecord",
    "parse_record",
    "primary_timestamp",
    "record_to_dict",
]

POOP_DIAPER_TYPES = frozenset({"DIRTY", "BOTH"})
DEFAULT_FEED_UNIT = "oz"


class ActivityKind(str, Enum):
    """Kinds of tracked activity."""

    SLEEP = "SLEEP"
    FEED = "FEED"
    DIAPER = "DIAPER"
    NOTE = "NOTE"
    BATH = "BATH"
    PUMP = "PUMP"
    MEASUREMENT = "MEASUREMENT"
    MILESTONE = "MILESTONE"
    MOOD = "MOOD"


def _normalize_timestamps(record: Any, *names: str) -> None:
    """Convert the named datetime fields of a frozen record to aware UTC."""
    for name in names:
        value = getattr(record, name)
        if isinstance(value, datetime):
            object.__setattr__(record, name, ensure_utc(value))


# Kinds without a dedicated payload type
GENERIC_KINDS = frozenset(
    {
        ActivityKind.NOTE,
        ActivityKind.BATH,
        ActivityKind.PUMP,
        ActivityKind.MEASUREMENT,
        ActivityKind.MILESTONE,
        ActivityKind.MOOD,
    }
)


@dataclass(frozen=True)
class SleepRecord:
    """Sleep interval.

    ``duration_minutes`` is whatever the source stored; calculators always
    recompute durations from ``end_time - start_time``.
    """

    id: str
    subject_id: str
    start_time: datetime
    end_time: datetime | None = None
    duration_minutes: float | None = None
    sleep_type: str | None = None
    location: str | None = None
    quality: str | None = None
    kind: ActivityKind = field(default=ActivityKind.SLEEP, init=False)

    def __post_init__(self) -> None:
        _normalize_timestamps(self, "start_time", "end_time")

    @property
    def is_complete(self) -> bool:
        """Sleep has ended."""
        return self.end_time is not None

    @property
    def has_valid_interval(self) -> bool:
        """Sleep has ended and does not end before it starts."""
        return self.end_time is not None and self.end_time >= self.start_time

    def elapsed_minutes(self) -> float | None:
        """Recomputed duration in minutes, None while the sleep is open."""
        if self.end_time is None:
            return None
        return minutes_between(self.start_time, self.end_time)


@dataclass(frozen=True)
class FeedRecord:
    """Feeding event."""

    id: str
    subject_id: str
    time: datetime
    feed_type: str = "BOTTLE"
    amount: float | None = None
    unit: str = DEFAULT_FEED_UNIT
    kind: ActivityKind = field(default=ActivityKind.FEED, init=False)

    def __post_init__(self) -> None:
        _normalize_timestamps(self, "time")

    @property
    def has_amount(self) -> bool:
        """Amount is recorded, finite and not negative."""
        return self.amount is not None and math.isfinite(self.amount) and self.amount >= 0


@dataclass(frozen=True)
class DiaperRecord:
    """Diaper change."""

    id: str
    subject_id: str
    time: datetime
    diaper_type: str = "WET"
    condition: str | None = None
    kind: ActivityKind = field(default=ActivityKind.DIAPER, init=False)

    def __post_init__(self) -> None:
        _normalize_timestamps(self, "time")

    @property
    def is_poop(self) -> bool:
        return self.diaper_type.upper() in POOP_DIAPER_TYPES


@dataclass(frozen=True)
class GenericRecord:
    """Note, bath, pump, measurement, milestone or mood entry.

    Interval kinds (pump) set ``start_time``/``end_time``; instantaneous
    kinds set ``time``.
    """

    id: str
    subject_id: str
    kind: ActivityKind
    time: datetime | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    details: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _normalize_timestamps(self, "time", "start_time", "end_time")


ActivityRecord = Union[SleepRecord, FeedRecord, DiaperRecord, GenericRecord]


def primary_timestamp(record: ActivityRecord) -> datetime | None:
    """Timestamp that places a record in a period or a day.

    ``time`` for instantaneous kinds, ``start_time`` for interval kinds.
    """
    if isinstance(record, SleepRecord):
        return record.start_time
    if isinstance(record, (FeedRecord, DiaperRecord)):
        return record.time
    if record.time is not None:
        return record.time
    return record.start_time


# Raw field aliases: snake_case first, then the camelCase API spelling
_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ("id",),
    "subject_id": ("subject_id", "subjectId", "baby_id", "babyId"),
    "kind": ("kind",),
    "time": ("time",),
    "start_time": ("start_time", "startTime"),
    "end_time": ("end_time", "endTime"),
    "duration_minutes": ("duration_minutes", "durationMinutes", "duration"),
    "amount": ("amount",),
    "unit": ("unit", "unitAbbr", "unit_abbr"),
    "type": ("type",),
    "condition": ("condition",),
    "location": ("location",),
    "quality": ("quality",),
}

_COMMON_KEYS = frozenset(key for aliases in _ALIASES.values() for key in aliases)


def _get(raw: Mapping[str, Any], name: str) -> Any:
    for key in _ALIASES[name]:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _parse_timestamp(value: Any, field_name: str, record_id: str | None, *, required: bool) -> datetime | None:
    if value is None or value == "":
        if required:
            raise RecordParseError(
                f"Record {record_id}: missing {field_name}", record_id=record_id, field=field_name
            )
        return None

    if isinstance(value, datetime):
        return ensure_utc(value)

    if isinstance(value, str):
        try:
            return parse_utc_iso8601(value)
        except ValueError as exc:
            raise RecordParseError(
                f"Record {record_id}: cannot parse {field_name} {value!r}",
                record_id=record_id,
                field=field_name,
            ) from exc

    raise RecordParseError(
        f"Record {record_id}: {field_name} must be an ISO-8601 string, got {type(value).__name__}",
        record_id=record_id,
        field=field_name,
    )


def _parse_number(value: Any, field_name: str, record_id: str | None) -> float | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise RecordParseError(
            f"Record {record_id}: {field_name} must be numeric", record_id=record_id, field=field_name
        )
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError as exc:
            raise RecordParseError(
                f"Record {record_id}: {field_name} must be numeric, got {value!r}",
                record_id=record_id,
                field=field_name,
            ) from exc
    else:
        raise RecordParseError(
            f"Record {record_id}: {field_name} must be numeric", record_id=record_id, field=field_name
        )

    # NaN and infinities (JSON Infinity, "inf") cannot be averaged
    if not math.isfinite(number):
        raise RecordParseError(
            f"Record {record_id}: {field_name} must be finite, got {value!r}", record_id=record_id, field=field_name
        )
    return number


def parse_record(raw: Mapping[str, Any]) -> ActivityRecord:
    """Build a typed record from a raw mapping.

    Parameters
    ----------
    raw
        Mapping with at least ``id``, ``subject_id`` (or ``babyId``),
        ``kind`` and the kind's primary timestamp

    Returns
    -------
    ActivityRecord
        Typed, UTC-normalized record

    Raises
    ------
    RecordParseError
        If identifiers are missing, the kind is unknown, or a timestamp or
        amount cannot be parsed
    """
    if not isinstance(raw, Mapping):
        raise RecordParseError(f"Record must be a mapping, got {type(raw).__name__}")

    record_id = _get(raw, "id")
    if record_id is None:
        raise RecordParseError("Record is missing 'id'", field="id")
    record_id = str(record_id)

    subject_id = _get(raw, "subject_id")
    if subject_id is None:
        raise RecordParseError(f"Record {record_id}: missing subject", record_id=record_id, field="subject_id")
    subject_id = str(subject_id)

    kind_value = _get(raw, "kind")
    try:
        kind = ActivityKind(str(kind_value).upper())
    except ValueError as exc:
        raise RecordParseError(
            f"Record {record_id}: unknown kind {kind_value!r}", record_id=record_id, field="kind"
        ) from exc

    if kind is ActivityKind.SLEEP:
        return SleepRecord(
            id=record_id,
            subject_id=subject_id,
            start_time=_parse_timestamp(_get(raw, "start_time"), "start_time", record_id, required=True),
            end_time=_parse_timestamp(_get(raw, "end_time"), "end_time", record_id, required=False),
            duration_minutes=_parse_number(_get(raw, "duration_minutes"), "duration_minutes", record_id),
            sleep_type=_get(raw, "type"),
            location=_get(raw, "location"),
            quality=_get(raw, "quality"),
        )

    if kind is ActivityKind.FEED:
        return FeedRecord(
            id=record_id,
            subject_id=subject_id,
            time=_parse_timestamp(_get(raw, "time"), "time", record_id, required=True),
            feed_type=str(_get(raw, "type") or "BOTTLE").upper(),
            amount=_parse_number(_get(raw, "amount"), "amount", record_id),
            unit=str(_get(raw, "unit") or DEFAULT_FEED_UNIT),
        )

    if kind is ActivityKind.DIAPER:
        return DiaperRecord(
            id=record_id,
            subject_id=subject_id,
            time=_parse_timestamp(_get(raw, "time"), "time", record_id, required=True),
            diaper_type=str(_get(raw, "type") or "WET").upper(),
            condition=_get(raw, "condition"),
        )

    time = _parse_timestamp(_get(raw, "time"), "time", record_id, required=False)
    start_time = _parse_timestamp(_get(raw, "start_time"), "start_time", record_id, required=time is None)
    return GenericRecord(
        id=record_id,
        subject_id=subject_id,
        kind=kind,
        time=time,
        start_time=start_time,
        end_time=_parse_timestamp(_get(raw, "end_time"), "end_time", record_id, required=False),
        details={key: value for key, value in raw.items() if key not in _COMMON_KEYS},
    )


def _iso(dt: datetime | None) -> str | None:
    return format_utc_iso8601(dt) if dt is not None else None


def record_to_dict(record: ActivityRecord) -> dict[str, Any]:
    """Serialize a record to a JSON-ready mapping (ISO-8601 UTC strings)."""
    data: dict[str, Any] = {
        "id": record.id,
        "subject_id": record.subject_id,
        "kind": record.kind.value,
    }

    if isinstance(record, SleepRecord):
        data.update(
            start_time=_iso(record.start_time),
            end_time=_iso(record.end_time),
            duration_minutes=record.duration_minutes,
            type=record.sleep_type,
            location=record.location,
            quality=record.quality,
        )
    elif isinstance(record, FeedRecord):
        data.update(time=_iso(record.time), type=record.feed_type, amount=record.amount, unit=record.unit)
    elif isinstance(record, DiaperRecord):
        data.update(time=_iso(record.time), type=record.diaper_type, condition=record.condition)
    else:
        data.update(
            time=_iso(record.time),
            start_time=_iso(record.start_time),
            end_time=_iso(record.end_time),
            **dict(record.details),
        )

    return {key: value for key, value in data.items() if value is not None}
