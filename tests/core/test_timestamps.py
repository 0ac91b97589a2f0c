"""Tests for cadence.core.timestamps."""

from datetime import UTC, datetime, timedelta

import pytest

from cadence.core.timestamps import (
    DISTANT_FUTURE,
    REFERENCE_DATE,
    WallTime,
    delay_until,
    to_seconds,
    to_timedelta,
    utc_now,
)


class TestUtcNow:
    def test_is_timezone_aware(self):
        assert utc_now().tzinfo is not None


class TestAnchors:
    def test_reference_date(self):
        assert REFERENCE_DATE == datetime(2001, 1, 1, tzinfo=UTC)

    def test_distant_future_is_after_everything(self):
        assert DISTANT_FUTURE > utc_now() + timedelta(days=365 * 1000)


class TestIntervalCoercion:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (timedelta(seconds=1.5), timedelta(seconds=1.5)),
            (2, timedelta(seconds=2)),
            (0.25, timedelta(milliseconds=250)),
        ],
    )
    def test_to_timedelta(self, value, expected):
        assert to_timedelta(value) == expected

    def test_to_seconds(self):
        assert to_seconds(timedelta(minutes=1)) == 60.0
        assert to_seconds(3) == 3.0


class TestWallTime:
    """Instants split into seconds and nanoseconds."""

    def test_epoch_is_zero(self):
        assert WallTime.from_datetime(datetime(1970, 1, 1, tzinfo=UTC)) == WallTime(0, 0)

    def test_keeps_microseconds_exactly(self):
        wall = WallTime.from_datetime(datetime(2001, 1, 1, 0, 0, 0, 123456, tzinfo=UTC))
        assert wall.seconds == 978_307_200
        assert wall.nanoseconds == 123_456_000

    def test_naive_datetime_is_utc(self):
        naive = datetime(2001, 1, 1, 12, 0, 0)
        aware = naive.replace(tzinfo=UTC)
        assert WallTime.from_datetime(naive) == WallTime.from_datetime(aware)

    def test_before_epoch(self):
        wall = WallTime.from_datetime(datetime(1969, 12, 31, 23, 59, 59, 500000, tzinfo=UTC))
        assert wall.total_nanoseconds == -500_000_000

    def test_far_dates_keep_microsecond_delays(self):
        """Float seconds since the epoch cannot resolve 1µs near year 9000."""
        base = datetime(9000, 1, 1, tzinfo=UTC)
        later = base + timedelta(microseconds=1)
        delay = WallTime.from_datetime(later).delay_from(WallTime.from_datetime(base))
        assert delay == pytest.approx(1e-6)

    def test_delay_clamped_at_zero(self):
        earlier = WallTime(10, 0)
        assert earlier.delay_from(WallTime(20, 0)) == 0.0


class TestDelayUntil:
    def test_future_date(self):
        now = datetime(2024, 1, 1, tzinfo=UTC)
        assert delay_until(now + timedelta(seconds=2.5), now) == 2.5

    def test_past_date_is_zero(self):
        now = datetime(2024, 1, 1, tzinfo=UTC)
        assert delay_until(now - timedelta(days=1), now) == 0.0

    def test_defaults_to_current_time(self):
        delay = delay_until(utc_now() + timedelta(hours=1))
        assert 3590 < delay <= 3600
