"""Tests for typed activity records and raw record parsing."""

from __future__ import annotations

import json
import math
from datetime import datetime, timedelta, timezone

import pytest

from sprout.core.errors import RecordParseError
from sprout.core.records import (
    ActivityKind,
    DiaperRecord,
    FeedRecord,
    GenericRecord,
    SleepRecord,
    parse_record,
    primary_timestamp,
    record_to_dict,
)


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestParseRecord:
    """Raw mappings become tagged, UTC-normalized records."""

    def test_sleep_with_api_spelling(self):
        record = parse_record(
            {
                "id": "s1",
                "babyId": "b1",
                "kind": "sleep",
                "startTime": "2024-01-10T20:00:00Z",
                "endTime": "2024-01-11T06:00:00Z",
                "duration": 600,
                "type": "NIGHT_SLEEP",
            }
        )

        assert isinstance(record, SleepRecord)
        assert record.kind is ActivityKind.SLEEP
        assert record.subject_id == "b1"
        assert record.start_time == utc(2024, 1, 10, 20)
        assert record.end_time == utc(2024, 1, 11, 6)
        assert record.duration_minutes == 600.0
        assert record.sleep_type == "NIGHT_SLEEP"
        assert record.elapsed_minutes() == 600.0

    def test_open_sleep(self):
        record = parse_record({"id": "s2", "subject_id": "b1", "kind": "SLEEP", "start_time": "2024-01-10T20:00:00Z"})

        assert record.end_time is None
        assert not record.is_complete
        assert not record.has_valid_interval
        assert record.elapsed_minutes() is None

    def test_offsets_normalized_to_utc(self):
        record = parse_record(
            {"id": "f1", "subject_id": "b1", "kind": "FEED", "time": "2024-01-10T09:00:00+01:00", "amount": 4}
        )
        assert record.time == utc(2024, 1, 10, 8)

    def test_feed_fields(self):
        record = parse_record(
            {"id": "f1", "subject_id": "b1", "kind": "feed", "time": "2024-01-10T08:00:00Z", "amount": "4.5",
             "unitAbbr": "ml", "type": "bottle"}
        )

        assert isinstance(record, FeedRecord)
        assert record.amount == 4.5
        assert record.unit == "ml"
        assert record.feed_type == "BOTTLE"

    def test_feed_defaults(self):
        record = parse_record({"id": "f2", "subject_id": "b1", "kind": "FEED", "time": "2024-01-10T08:00:00Z"})

        assert record.amount is None
        assert record.unit == "oz"

    @pytest.mark.parametrize(("label", "is_poop"), [("both", True), ("DIRTY", True), ("wet", False)])
    def test_diaper_poop_flag(self, label, is_poop):
        record = parse_record({"id": "d1", "subject_id": "b1", "kind": "DIAPER", "time": "2024-01-10T08:00:00Z",
                               "type": label})

        assert isinstance(record, DiaperRecord)
        assert record.is_poop is is_poop

    def test_generic_note_keeps_details(self):
        record = parse_record(
            {"id": "n1", "subject_id": "b1", "kind": "NOTE", "time": "2024-01-10T08:00:00Z", "content": "Fussy"}
        )

        assert isinstance(record, GenericRecord)
        assert record.kind is ActivityKind.NOTE
        assert record.details == {"content": "Fussy"}

    def test_pump_uses_start_time(self):
        record = parse_record(
            {"id": "p1", "subject_id": "b1", "kind": "PUMP", "startTime": "2024-01-10T08:00:00Z",
             "endTime": "2024-01-10T08:20:00Z"}
        )

        assert record.time is None
        assert primary_timestamp(record) == utc(2024, 1, 10, 8)


class TestParseErrors:
    """Malformed rows raise RecordParseError with context."""

    def test_not_a_mapping(self):
        with pytest.raises(RecordParseError):
            parse_record(["SLEEP"])  # type: ignore[arg-type]

    def test_missing_id(self):
        with pytest.raises(RecordParseError, match="missing 'id'") as exc_info:
            parse_record({"subject_id": "b1", "kind": "FEED", "time": "2024-01-10T08:00:00Z"})
        assert exc_info.value.field == "id"

    def test_missing_subject(self):
        with pytest.raises(RecordParseError, match="missing subject"):
            parse_record({"id": "x", "kind": "FEED", "time": "2024-01-10T08:00:00Z"})

    def test_unknown_kind(self):
        with pytest.raises(RecordParseError, match="unknown kind") as exc_info:
            parse_record({"id": "x", "subject_id": "b1", "kind": "NAP", "time": "2024-01-10T08:00:00Z"})
        assert exc_info.value.record_id == "x"

    def test_unparseable_timestamp(self):
        with pytest.raises(RecordParseError, match="cannot parse") as exc_info:
            parse_record({"id": "x", "subject_id": "b1", "kind": "SLEEP", "startTime": "last night"})
        assert exc_info.value.field == "start_time"

    def test_missing_timestamp(self):
        with pytest.raises(RecordParseError, match="missing time"):
            parse_record({"id": "x", "subject_id": "b1", "kind": "DIAPER"})

    def test_non_numeric_amount(self):
        with pytest.raises(RecordParseError, match="numeric"):
            parse_record({"id": "x", "subject_id": "b1", "kind": "FEED", "time": "2024-01-10T08:00:00Z",
                          "amount": "lots"})

    @pytest.mark.parametrize("amount", [float("inf"), "inf", "-Infinity", float("nan"), "NaN"])
    def test_non_finite_amount(self, amount):
        with pytest.raises(RecordParseError, match="finite") as exc_info:
            parse_record({"id": "x", "subject_id": "b1", "kind": "FEED", "time": "2024-01-10T08:00:00Z",
                          "amount": amount})
        assert exc_info.value.field == "amount"

    def test_json_infinity_amount(self):
        row = json.loads(
            '{"id": "x", "subject_id": "b1", "kind": "FEED", "time": "2024-01-10T08:00:00Z", "amount": Infinity}'
        )
        assert math.isinf(row["amount"])

        with pytest.raises(RecordParseError, match="finite"):
            parse_record(row)

    def test_non_finite_duration(self):
        with pytest.raises(RecordParseError) as exc_info:
            parse_record({"id": "x", "subject_id": "b1", "kind": "SLEEP", "startTime": "2024-01-10T08:00:00Z",
                          "duration": "nan"})
        assert exc_info.value.field == "duration_minutes"


class TestRecordModel:
    def test_records_are_frozen(self):
        record = FeedRecord(id="f1", subject_id="b1", time=utc(2024, 1, 10, 8))
        with pytest.raises(AttributeError):
            record.amount = 3  # type: ignore[misc]

    def test_end_before_start_is_invalid(self):
        record = SleepRecord(id="s1", subject_id="b1", start_time=utc(2024, 1, 10, 8), end_time=utc(2024, 1, 10, 7))

        assert record.is_complete
        assert not record.has_valid_interval

    def test_serialized_record_parses_back(self):
        record = SleepRecord(
            id="s1",
            subject_id="b1",
            start_time=utc(2024, 1, 10, 20),
            end_time=utc(2024, 1, 11, 6),
            location="Crib",
        )

        data = record_to_dict(record)

        assert data["start_time"] == "2024-01-10T20:00:00+00:00"
        assert "quality" not in data
        assert parse_record(data) == record


class TestTimestampNormalization:
    """Records built directly normalize their datetimes to aware UTC."""

    def test_naive_sleep_taken_as_utc(self):
        record = SleepRecord(
            id="s1", subject_id="b1", start_time=datetime(2024, 1, 9, 8), end_time=datetime(2024, 1, 9, 9)
        )

        assert record.start_time == utc(2024, 1, 9, 8)
        assert record.end_time.tzinfo is timezone.utc
        assert record.elapsed_minutes() == 60.0

    def test_aware_feed_converted_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        record = FeedRecord(id="f1", subject_id="b1", time=datetime(2024, 1, 9, 10, tzinfo=plus_two))

        assert record.time == utc(2024, 1, 9, 8)
        assert record.time.tzinfo is timezone.utc

    def test_naive_diaper_taken_as_utc(self):
        record = DiaperRecord(id="d1", subject_id="b1", time=datetime(2024, 1, 9, 11))
        assert record.time == utc(2024, 1, 9, 11)

    def test_generic_keeps_missing_fields(self):
        record = GenericRecord(id="p1", subject_id="b1", kind=ActivityKind.PUMP, start_time=datetime(2024, 1, 9, 7))

        assert record.time is None
        assert record.end_time is None
        assert primary_timestamp(record) == utc(2024, 1, 9, 7)


class TestFeedAmount:
    @pytest.mark.parametrize(
        "amount, usable",
        [(4.0, True), (0.0, True), (None, False), (-1.0, False), (float("inf"), False), (float("nan"), False)],
    )
    def test_has_amount(self, amount, usable):
        record = FeedRecord(id="f1", subject_id="b1", time=utc(2024, 1, 9, 8), amount=amount)
        assert record.has_amount is usable
