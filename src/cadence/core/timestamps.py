"""
Timestamp and interval utilities (stdlib-only).

Shared time primitives for every scheduler in cadence. Real-time
schedulers need to turn an absolute ``datetime`` into a delay for the
native work queue; the virtual-time scheduler needs well-known anchor
dates and interval arithmetic. Both live here so there is one definition
of "now", one way to coerce an interval, and one split of an instant into
seconds and nanoseconds.

Features:
    - **utc_now():** Timezone-aware UTC datetime
    - **WallTime:** Instant split into integral seconds + nanoseconds
    - **to_timedelta() / to_seconds():** Accept ``timedelta`` or float seconds
    - **REFERENCE_DATE / DISTANT_FUTURE:** Virtual clock anchors

Tags:
    timestamps, utc, datetime, interval, wall-time, cadence, stdlib-only

Doc-Types:
    - API Reference
    - Utility Documentation

STDLIB ONLY - NO PYDANTIC.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import NamedTuple

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

# Default start date of the virtual clock.
REFERENCE_DATE = datetime(2001, 1, 1, tzinfo=UTC)

# Farthest date the virtual clock can be advanced to.
DISTANT_FUTURE = datetime.max.replace(tzinfo=UTC)

NSEC_PER_SEC = 1_000_000_000

Interval = timedelta | float | int


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def to_timedelta(interval: Interval) -> timedelta:
    """Coerce a ``timedelta`` or a number of seconds into a ``timedelta``."""
    if isinstance(interval, timedelta):
        return interval
    return timedelta(seconds=interval)


def to_seconds(interval: Interval) -> float:
    """Coerce a ``timedelta`` or a number of seconds into float seconds."""
    if isinstance(interval, timedelta):
        return interval.total_seconds()
    return float(interval)


class WallTime(NamedTuple):
    """An absolute instant as whole seconds plus nanoseconds since the epoch.

    Converting through float seconds loses precision for dates far from the
    epoch, and repeated conversions accumulate that error. Keeping the
    integral and fractional parts apart lets delays be computed with integer
    arithmetic.
    """

    seconds: int
    nanoseconds: int

    @classmethod
    def from_datetime(cls, dt: datetime) -> WallTime:
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        delta = dt - EPOCH
        seconds = delta.days * 86_400 + delta.seconds
        return cls(seconds, delta.microseconds * 1_000)

    @property
    def total_nanoseconds(self) -> int:
        return self.seconds * NSEC_PER_SEC + self.nanoseconds

    def delay_from(self, now: WallTime) -> float:
        """Seconds from ``now`` until this instant, clamped at zero."""
        nanos = self.total_nanoseconds - now.total_nanoseconds
        if nanos <= 0:
            return 0.0
        whole, frac = divmod(nanos, NSEC_PER_SEC)
        return whole + frac / NSEC_PER_SEC


def delay_until(date: datetime, now: datetime | None = None) -> float:
    """Delay in seconds from ``now`` (default: current UTC time) until ``date``."""
    reference = WallTime.from_datetime(now if now is not None else utc_now())
    return WallTime.from_datetime(date).delay_from(reference)
