"""Tests for subject and window filtering."""

from __future__ import annotations

from datetime import datetime, timezone

from sprout.core.records import ActivityKind, FeedRecord, GenericRecord, SleepRecord
from sprout.stats.filtering import filter_records


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


START = utc(2024, 1, 3)
END = datetime(2024, 1, 10, 23, 59, 59, 999000, tzinfo=timezone.utc)


def test_keeps_subject_records_inside_window(make_feed, make_sleep):
    inside = make_feed(utc(2024, 1, 5, 8))
    sleep = make_sleep(utc(2024, 1, 9, 20), utc(2024, 1, 10, 6))
    before = make_feed(utc(2024, 1, 2, 23, 59))
    after = make_feed(utc(2024, 1, 11))

    result = filter_records([before, inside, sleep, after], "baby-1", START, END)

    assert result.records == [inside, sleep]
    assert result.skipped == 0


def test_bounds_are_inclusive(make_feed):
    first = make_feed(START)
    last = make_feed(END)

    result = filter_records([first, last], "baby-1", START, END)

    assert result.records == [first, last]


def test_sleep_placed_by_start_time(make_sleep):
    """A sleep starting before the window is out even if it ends inside."""
    early = make_sleep(utc(2024, 1, 2, 22), utc(2024, 1, 3, 5))

    assert filter_records([early], "baby-1", START, END).records == []


def test_other_subjects_dropped_without_counting(make_feed):
    other = make_feed(utc(2024, 1, 5, 8), subject_id="baby-2")

    result = filter_records([other], "baby-1", START, END)

    assert result.records == []
    assert result.skipped == 0


def test_raw_rows_parsed_and_bad_rows_skipped():
    rows = [
        {"id": "f1", "babyId": "baby-1", "kind": "FEED", "time": "2024-01-05T08:00:00Z", "amount": 4},
        {"id": "s1", "babyId": "baby-1", "kind": "SLEEP", "startTime": "not a time"},
        {"id": "d1", "babyId": "baby-1", "kind": "DIAPER"},
        {"id": "x1", "babyId": "baby-1", "kind": "TELEPORT", "time": "2024-01-05T08:00:00Z"},
    ]

    result = filter_records(rows, "baby-1", START, END)

    assert [record.id for record in result.records] == ["f1"]
    assert isinstance(result.records[0], FeedRecord)
    assert result.skipped == 3


def test_input_is_not_mutated(make_sleep):
    records = [make_sleep(utc(2024, 1, 5, 20), utc(2024, 1, 6, 6))]
    snapshot = list(records)

    filter_records(records, "baby-1", START, END)

    assert records == snapshot
    assert isinstance(records[0], SleepRecord)


def test_non_finite_amounts_skipped_and_counted():
    rows = [
        {"id": "f1", "babyId": "baby-1", "kind": "FEED", "time": "2024-01-05T08:00:00Z", "amount": 4},
        {"id": "f2", "babyId": "baby-1", "kind": "FEED", "time": "2024-01-05T09:00:00Z", "amount": float("inf")},
        {"id": "f3", "babyId": "baby-1", "kind": "FEED", "time": "2024-01-05T10:00:00Z", "amount": "inf"},
    ]

    result = filter_records(rows, "baby-1", START, END)

    assert [record.id for record in result.records] == ["f1"]
    assert result.skipped == 2


def test_naive_typed_records_compared_as_utc():
    sleep = SleepRecord(
        id="s1", subject_id="baby-1", start_time=datetime(2024, 1, 9, 8), end_time=datetime(2024, 1, 9, 9)
    )
    before = FeedRecord(id="f1", subject_id="baby-1", time=datetime(2024, 1, 2, 23, 59))

    result = filter_records([sleep, before], "baby-1", START, END)

    assert result.records == [sleep]


def test_record_without_timestamp_counted_only_for_subject():
    own = GenericRecord(id="n1", subject_id="baby-1", kind=ActivityKind.NOTE)
    other = GenericRecord(id="n2", subject_id="baby-2", kind=ActivityKind.NOTE)

    result = filter_records([own, other], "baby-1", START, END)

    assert result.records == []
    assert result.skipped == 1
