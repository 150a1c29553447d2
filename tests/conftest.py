"""Shared fixtures: record factories and environment isolation."""

from __future__ import annotations

import itertools
import os
from datetime import datetime

import pytest

from sprout.core.records import DiaperRecord, FeedRecord, SleepRecord

SUBJECT = "baby-1"


@pytest.fixture
def ids():
    counter = itertools.count(1)
    return lambda prefix: f"{prefix}-{next(counter)}"


@pytest.fixture
def make_sleep(ids):
    def factory(start: datetime, end: datetime | None = None, subject_id: str = SUBJECT, **kwargs) -> SleepRecord:
        return SleepRecord(id=ids("sleep"), subject_id=subject_id, start_time=start, end_time=end, **kwargs)

    return factory


@pytest.fixture
def make_feed(ids):
    def factory(time: datetime, amount: float | None = None, subject_id: str = SUBJECT, **kwargs) -> FeedRecord:
        return FeedRecord(id=ids("feed"), subject_id=subject_id, time=time, amount=amount, **kwargs)

    return factory


@pytest.fixture
def make_diaper(ids):
    def factory(time: datetime, diaper_type: str = "WET", subject_id: str = SUBJECT, **kwargs) -> DiaperRecord:
        return DiaperRecord(id=ids("diaper"), subject_id=subject_id, time=time, diaper_type=diaper_type, **kwargs)

    return factory


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Drop SPROUT_* variables, reset global settings and run in tmp_path."""
    for var in [k for k in os.environ if k.startswith("SPROUT_")]:
        monkeypatch.delenv(var)

    import sprout.config.settings as settings_module

    monkeypatch.setattr(settings_module, "_settings", None)
    monkeypatch.chdir(tmp_path)
    return tmp_path
