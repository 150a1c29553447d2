"""Tests for wake window, nap, night sleep and night waking statistics."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from sprout.core.errors import ConfigurationError
from sprout.stats.buckets import bucketize
from sprout.stats.sleep import (
    SleepBounds,
    average_nap,
    average_night_sleep,
    average_night_wakings,
    average_wake_window,
    wake_window_gaps,
)


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def scenario_a(make_sleep):
    """One day: two night sleeps and a morning nap."""
    return [
        make_sleep(utc(2024, 1, 8, 20), utc(2024, 1, 8, 23)),
        make_sleep(utc(2024, 1, 8, 23, 30), utc(2024, 1, 9, 2)),
        make_sleep(utc(2024, 1, 8, 7), utc(2024, 1, 8, 8, 30)),
    ]


class TestScenarioA:
    def test_nap_average(self, scenario_a):
        assert average_nap(scenario_a) == 90

    def test_night_sleep_total(self, scenario_a):
        assert average_night_sleep(bucketize(scenario_a)) == 330

    def test_one_waking_that_day(self, scenario_a):
        assert average_night_wakings(bucketize(scenario_a), 1) == 1.0
        assert average_night_wakings(bucketize(scenario_a), 7) == 0.1

    def test_wake_windows(self, scenario_a):
        # 08:30 -> 20:00 and 23:00 -> 23:30
        assert wake_window_gaps(scenario_a) == [690, 30]
        assert average_wake_window(scenario_a) == 360


class TestWakeWindow:
    """Gaps between consecutive ended sleeps, 0 < gap < 1440."""

    @pytest.mark.parametrize(
        ("gap_minutes", "expected"),
        [(0, []), (1, [1]), (1439, [1439]), (1440, [])],
    )
    def test_boundaries(self, make_sleep, gap_minutes, expected):
        first_end = utc(2024, 1, 8, 9)
        second_start = first_end + timedelta(minutes=gap_minutes)
        records = [
            make_sleep(utc(2024, 1, 8, 8), first_end),
            make_sleep(second_start, second_start + timedelta(hours=1)),
        ]

        assert wake_window_gaps(records) == expected

    def test_gap_is_floored(self, make_sleep):
        records = [
            make_sleep(utc(2024, 1, 8, 8), utc(2024, 1, 8, 9)),
            make_sleep(utc(2024, 1, 8, 10, 59, 54), utc(2024, 1, 8, 12)),
        ]
        assert wake_window_gaps(records) == [119]

    def test_sorted_by_start_not_input_order(self, make_sleep):
        later = make_sleep(utc(2024, 1, 8, 13), utc(2024, 1, 8, 14))
        earlier = make_sleep(utc(2024, 1, 8, 8), utc(2024, 1, 8, 10))

        assert wake_window_gaps([later, earlier]) == [180]

    def test_overlapping_sleeps_ignored(self, make_sleep):
        records = [
            make_sleep(utc(2024, 1, 8, 8), utc(2024, 1, 8, 11)),
            make_sleep(utc(2024, 1, 8, 10), utc(2024, 1, 8, 12)),
        ]
        assert average_wake_window(records) == 0

    def test_open_and_invalid_sleeps_skipped(self, make_sleep):
        records = [
            make_sleep(utc(2024, 1, 8, 8), utc(2024, 1, 8, 9)),
            make_sleep(utc(2024, 1, 8, 10), utc(2024, 1, 8, 9, 30)),  # ends before it starts
            make_sleep(utc(2024, 1, 8, 11)),  # still asleep
            make_sleep(utc(2024, 1, 8, 12), utc(2024, 1, 8, 13)),
        ]
        assert wake_window_gaps(records) == [180]

    def test_mean_rounds_half_up(self, make_sleep):
        # gaps of 10 and 11 minutes average to 10.5
        records = [
            make_sleep(utc(2024, 1, 8, 8), utc(2024, 1, 8, 9)),
            make_sleep(utc(2024, 1, 8, 9, 10), utc(2024, 1, 8, 10)),
            make_sleep(utc(2024, 1, 8, 10, 11), utc(2024, 1, 8, 11)),
        ]
        assert average_wake_window(records) == 11

    def test_no_sleep(self, make_feed):
        assert average_wake_window([make_feed(utc(2024, 1, 8, 9))]) == 0


class TestNaps:
    """Naps are ended, non-night sleeps with 0 < duration < 360."""

    @pytest.mark.parametrize(("minutes", "counted"), [(0, False), (1, True), (359, True), (360, False)])
    def test_duration_bounds(self, make_sleep, minutes, counted):
        start = utc(2024, 1, 8, 9)
        nap = make_sleep(start, start + timedelta(minutes=minutes))

        assert average_nap([nap]) == (minutes if counted else 0)

    def test_duration_rounded_half_up(self, make_sleep):
        nap = make_sleep(utc(2024, 1, 8, 9), utc(2024, 1, 8, 10, 30, 30))
        assert average_nap([nap]) == 91

    def test_mean_over_all_naps(self, make_sleep):
        naps = [
            make_sleep(utc(2024, 1, 8, 9), utc(2024, 1, 8, 10)),
            make_sleep(utc(2024, 1, 8, 13), utc(2024, 1, 8, 15)),
            make_sleep(utc(2024, 1, 9, 9), utc(2024, 1, 9, 9, 30)),
        ]
        assert average_nap(naps) == 70

    def test_custom_bound(self, make_sleep):
        nap = make_sleep(utc(2024, 1, 8, 9), utc(2024, 1, 8, 11))
        assert average_nap([nap], max_nap_minutes=90) == 0

    @pytest.mark.parametrize("offset", [0, 60, -300, 240])
    def test_zone_invariance(self, make_sleep, offset):
        """13:00-14:30 UTC stays a 90 minute nap for every offset that keeps it daytime."""
        nap = make_sleep(utc(2024, 1, 8, 13), utc(2024, 1, 8, 14, 30))
        assert average_nap([nap], offset) == 90

    def test_reclassified_sleep_moves_to_night(self, make_sleep):
        """17:00-18:00 UTC is a nap in UTC and night sleep at UTC+02:00."""
        sleep = make_sleep(utc(2024, 1, 8, 17), utc(2024, 1, 8, 18))

        assert average_nap([sleep], 0) == 60
        assert average_night_sleep(bucketize([sleep], 0), 0) == 0

        assert average_nap([sleep], 120) == 0
        assert average_night_sleep(bucketize([sleep], 120), 120) == 60


class TestNightSleep:
    def test_average_over_days_with_night_sleep(self, make_sleep):
        records = [
            make_sleep(utc(2024, 1, 8, 20), utc(2024, 1, 9, 6)),  # 600
            make_sleep(utc(2024, 1, 9, 13), utc(2024, 1, 9, 14)),  # nap only
            make_sleep(utc(2024, 1, 10, 20), utc(2024, 1, 11, 4)),  # 480
        ]
        assert average_night_sleep(bucketize(records)) == 540

    @pytest.mark.parametrize(("minutes", "expected"), [(719, 719), (720, 0)])
    def test_per_record_bound(self, make_sleep, minutes, expected):
        start = utc(2024, 1, 8, 19)
        sleep = make_sleep(start, start + timedelta(minutes=minutes))
        assert average_night_sleep(bucketize([sleep])) == expected

    def test_outlier_does_not_hide_the_rest_of_the_night(self, make_sleep):
        records = [
            make_sleep(utc(2024, 1, 8, 19), utc(2024, 1, 9, 8)),  # 780, dropped
            make_sleep(utc(2024, 1, 8, 22), utc(2024, 1, 8, 23)),
        ]
        assert average_night_sleep(bucketize(records)) == 60

    def test_invalid_interval_excluded(self, make_sleep):
        records = [
            make_sleep(utc(2024, 1, 8, 20), utc(2024, 1, 8, 23)),
            make_sleep(utc(2024, 1, 8, 22), utc(2024, 1, 8, 21)),
        ]
        assert average_night_sleep(bucketize(records)) == 180

    def test_bounds_object(self):
        with pytest.raises(ConfigurationError):
            SleepBounds(max_nap_minutes=0)


class TestNightWakings:
    """A day with n night sleeps has max(0, n - 1) wakings."""

    def test_one_night_sleep_no_waking(self, make_sleep):
        records = [make_sleep(utc(2024, 1, 8, 20), utc(2024, 1, 9, 6))]
        assert average_night_wakings(bucketize(records), 1) == 0.0

    def test_three_night_sleeps_two_wakings(self, make_sleep):
        records = [
            make_sleep(utc(2024, 1, 8, 19), utc(2024, 1, 8, 22)),
            make_sleep(utc(2024, 1, 8, 22, 30), utc(2024, 1, 9, 1)),
            make_sleep(utc(2024, 1, 8, 23, 45), utc(2024, 1, 9, 5)),
        ]
        assert average_night_wakings(bucketize(records), 1) == 2.0

    def test_day_without_night_sleep(self, make_sleep):
        records = [make_sleep(utc(2024, 1, 8, 13), utc(2024, 1, 8, 14))]
        assert average_night_wakings(bucketize(records), 7) == 0.0

    def test_denominator_is_period_length(self, make_sleep):
        records = [
            make_sleep(utc(2024, 1, 8, 20), utc(2024, 1, 8, 23)),
            make_sleep(utc(2024, 1, 8, 23, 30), utc(2024, 1, 9, 5)),
            make_sleep(utc(2024, 1, 10, 20), utc(2024, 1, 10, 23)),
            make_sleep(utc(2024, 1, 10, 23, 30), utc(2024, 1, 11, 5)),
        ]
        assert average_night_wakings(bucketize(records), 4) == 0.5

    def test_invalid_and_open_sleeps_still_count(self, make_sleep):
        records = [
            make_sleep(utc(2024, 1, 8, 20), utc(2024, 1, 8, 23)),
            make_sleep(utc(2024, 1, 8, 23, 30), utc(2024, 1, 8, 22)),
            make_sleep(utc(2024, 1, 8, 23, 50)),
        ]
        assert average_night_wakings(bucketize(records), 1) == 2.0

    def test_zero_period_rejected(self):
        with pytest.raises(ConfigurationError):
            average_night_wakings({}, 0)
