"""
Tests for time utility functions.

Covers millisecond arithmetic on naive and aware datetimes, cooldown
formatting and admin date windows.
"""

from datetime import datetime, timedelta, timezone

import pytest

from helpers.time_utils import (
    elapsed_ms,
    ensure_utc,
    format_cooldown,
    utc_now,
    window_start,
)

NOW = datetime(2026, 3, 14, 15, 9, 26, 535000, tzinfo=timezone.utc)


class TestEnsureUtc:
    def test_naive_is_assumed_utc(self):
        naive = datetime(2026, 1, 1, 12, 0)
        assert ensure_utc(naive) == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_aware_is_converted(self):
        plus_two = timezone(timedelta(hours=2))
        aware = datetime(2026, 1, 1, 14, 0, tzinfo=plus_two)
        result = ensure_utc(aware)
        assert result.tzinfo == timezone.utc
        assert result.hour == 12

    def test_utc_now_is_aware(self):
        assert utc_now().tzinfo is not None


class TestElapsedMs:
    def test_mixed_naive_and_aware(self):
        """SQLite returns naive values; comparisons must still work."""
        start = (NOW - timedelta(seconds=2)).replace(tzinfo=None)
        assert elapsed_ms(start, NOW) == 2000

    def test_floors_sub_millisecond(self):
        assert elapsed_ms(NOW, NOW + timedelta(microseconds=1999)) == 1

    def test_negative_when_end_before_start(self):
        assert elapsed_ms(NOW, NOW - timedelta(milliseconds=5)) == -5


class TestFormatCooldown:
    @pytest.mark.parametrize(
        "milliseconds,expected",
        [
            (1_200_000, "20m 0s"),
            (61_999, "1m 1s"),
            (999, "0m 0s"),
            (1, "0m 0s"),
            (0, "0m 0s"),
        ],
    )
    def test_format(self, milliseconds, expected):
        assert format_cooldown(milliseconds) == expected


class TestWindowStart:
    def test_today_is_midnight(self):
        assert window_start("today", NOW) == datetime(
            2026, 3, 14, tzinfo=timezone.utc
        )

    def test_week_and_month(self):
        assert window_start("week", NOW) == NOW - timedelta(days=7)
        assert window_start("month", NOW) == NOW - timedelta(days=30)

    @pytest.mark.parametrize("window", ["all", "yesterday", ""])
    def test_no_bound(self, window):
        assert window_start(window, NOW) is None
