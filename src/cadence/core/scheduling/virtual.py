"""Virtual-time scheduler for deterministic tests.

``TestScheduler`` satisfies :class:`DateScheduler` but its clock only moves
when the caller advances it. Pending actions sit in a list ordered by date;
advancing the clock drains every action whose date has been reached, in date
order, with ties run in submission order.

┌──────────────────────────────────────────────────────────────────────────────┐
│  VIRTUAL CLOCK                                                                │
│                                                                               │
│   schedule_after(date, action) ──► insort by date (stable) ──► scheduled[]    │
│                                                                               │
│   advance_to(new_date)                                                        │
│      │  assert new_date >= current_date          (ClockError otherwise)      │
│      │  current_date = new_date                                              │
│      ▼                                                                        │
│   while scheduled and scheduled[0].date <= new_date:                          │
│       action = scheduled.pop(0)                                               │
│       action()            ◄── may schedule / advance / dispose re-entrantly   │
│                                                                               │
│   schedule_repeating(date, interval, action)                                  │
│       serial.inner = schedule_after(date,        fire)                        │
│       fire: action(); serial.inner = schedule_after(date + interval, fire')   │
│                                                                               │
│  One RLock guards every entry point. Actions run while it is held, so an     │
│  action calling back into the scheduler re-acquires it on the same thread.   │
└──────────────────────────────────────────────────────────────────────────────┘

Example:
    >>> scheduler = TestScheduler()
    >>> ran = []
    >>> _ = scheduler.schedule(lambda: ran.append("now"))
    >>> _ = scheduler.schedule_after(scheduler.current_date + timedelta(seconds=5),
    ...                          lambda: ran.append("later"))
    >>> scheduler.advance_by(3)
    >>> ran
    ['now']
    >>> scheduler.advance_by(2)
    >>> ran
    ['now', 'later']

Guardrails:
    ❌ Calling run() while a repeating action is outstanding
    ✅ advance_to() a finite date, or run(max_actions=...) to fail loudly
"""

from __future__ import annotations

import bisect
import threading
from datetime import datetime, timedelta
from operator import attrgetter

from cadence.core.disposables import ActionDisposable, Disposable, SerialDisposable
from cadence.core.errors import ClockError, DrainLimitError
from cadence.core.logging import get_logger
from cadence.core.timestamps import (
    DISTANT_FUTURE,
    REFERENCE_DATE,
    Interval,
    to_timedelta,
)

from .protocol import Action

logger = get_logger(__name__)

_by_date = attrgetter("date")


class _ScheduledAction:
    __slots__ = ("date", "action")

    def __init__(self, date: datetime, action: Action) -> None:
        self.date = date
        self.action = action

    def __repr__(self) -> str:
        return f"_ScheduledAction(date={self.date.isoformat()})"


class TestScheduler:
    """A scheduler that implements virtualized time, for use in testing."""

    __test__ = False

    def __init__(self, start_date: datetime = REFERENCE_DATE) -> None:
        self._lock = threading.RLock()
        self._current_date = start_date
        self._scheduled: list[_ScheduledAction] = []

    @property
    def current_date(self) -> datetime:
        """The virtual date that the scheduler is currently at."""
        with self._lock:
            return self._current_date

    @property
    def pending_count(self) -> int:
        """Number of actions waiting for the clock to reach their date."""
        with self._lock:
            return len(self._scheduled)

    def _enqueue(self, scheduled: _ScheduledAction) -> Disposable:
        with self._lock:
            bisect.insort_right(self._scheduled, scheduled, key=_by_date)

        def remove() -> None:
            with self._lock:
                self._scheduled = [s for s in self._scheduled if s is not scheduled]

        return ActionDisposable(remove)

    def schedule(self, action: Action) -> Disposable | None:
        with self._lock:
            return self._enqueue(_ScheduledAction(self._current_date, action))

    def schedule_after(self, date: datetime, action: Action) -> Disposable | None:
        return self._enqueue(_ScheduledAction(date, action))

    def schedule_repeating(
        self,
        date: datetime,
        interval: Interval,
        action: Action,
        leeway: Interval = 0.0,
    ) -> Disposable | None:
        """Schedule ``action`` at ``date`` and every ``interval`` after it.

        ``leeway`` is accepted for compatibility with real-time schedulers and
        has no effect on virtual time.
        """
        period = to_timedelta(interval)
        if period.total_seconds() <= 0:
            raise ValueError(f"repeat interval must be positive, got {period}")

        disposable = SerialDisposable()
        self._schedule_occurrence(date, period, disposable, action)
        return disposable

    def _schedule_occurrence(
        self,
        date: datetime,
        interval: timedelta,
        disposable: SerialDisposable,
        action: Action,
    ) -> None:
        def fire() -> None:
            action()
            self._schedule_occurrence(date + interval, interval, disposable, action)

        disposable.inner = self.schedule_after(date, fire)

    def advance_by(self, interval: Interval, *, max_actions: int | None = None) -> None:
        """Advance the virtual clock by ``interval``, running due actions."""
        step = to_timedelta(interval)
        with self._lock:
            # Stop at DISTANT_FUTURE rather than overflow datetime.
            if step >= DISTANT_FUTURE - self._current_date:
                target = DISTANT_FUTURE
            else:
                target = self._current_date + step
            self.advance_to(target, max_actions=max_actions)

    def advance_to(self, new_date: datetime, *, max_actions: int | None = None) -> None:
        """Advance the virtual clock to ``new_date``, running due actions.

        Args:
            new_date: Date to move to. Must not be earlier than current_date.
            max_actions: Optional cap on actions run by this call. When more
                actions are due, DrainLimitError is raised after running
                ``max_actions`` of them.

        Raises:
            ClockError: If ``new_date`` is earlier than the current date.
            DrainLimitError: If ``max_actions`` is exceeded.
        """
        with self._lock:
            if new_date < self._current_date:
                raise ClockError("virtual time cannot move backward").with_context(
                    scheduler=type(self).__name__,
                    current_date=self._current_date.isoformat(),
                    requested_date=new_date.isoformat(),
                )
            self._current_date = new_date

            executed = 0
            while self._scheduled and self._scheduled[0].date <= new_date:
                if max_actions is not None and executed >= max_actions:
                    raise DrainLimitError(
                        f"drain exceeded {max_actions} actions", max_actions=max_actions
                    ).with_context(
                        scheduler=type(self).__name__,
                        current_date=self._current_date.isoformat(),
                    )
                scheduled = self._scheduled.pop(0)
                scheduled.action()
                executed += 1

            if executed:
                logger.debug(
                    "virtual_drain_finished",
                    executed=executed,
                    current_date=new_date.isoformat(),
                    pending=len(self._scheduled),
                )

    def run(self, *, max_actions: int | None = None) -> None:
        """Run all scheduled actions, leaving the clock at DISTANT_FUTURE.

        A repeating action keeps rescheduling itself, so without
        ``max_actions`` this call never returns while one is outstanding.
        """
        self.advance_to(DISTANT_FUTURE, max_actions=max_actions)

    def __repr__(self) -> str:
        return (
            f"TestScheduler(current_date={self.current_date.isoformat()}, "
            f"pending={self.pending_count})"
        )
