"""Scheduler protocols.

┌──────────────────────────────────────────────────────────────────────────────┐
│  SCHEDULER PROTOCOLS                                                          │
│                                                                               │
│  Design Philosophy:                                                           │
│  Client code depends on WHAT a scheduler can do, never on WHERE the work     │
│  runs. The same code path is driven by a real serial queue in production     │
│  and by a virtual clock in tests.                                            │
│                                                                               │
│  ┌─────────────────────────────────────────────────────────────────────┐     │
│  │                                                                     │     │
│  │   Scheduler                    schedule(action)                     │     │
│  │      ▲                                                              │     │
│  │      │ structurally includes                                        │     │
│  │      │                                                              │     │
│  │   DateScheduler                schedule_after(date, action)         │     │
│  │                                schedule_repeating(date, interval,   │     │
│  │                                                   action, leeway)   │     │
│  │                                                                     │     │
│  │   ImmediateScheduler ── Scheduler                                   │     │
│  │   QueueScheduler     ── DateScheduler                               │     │
│  │   MainScheduler      ── DateScheduler (wraps a QueueScheduler)      │     │
│  │   TestScheduler      ── DateScheduler (virtual time)                │     │
│  └─────────────────────────────────────────────────────────────────────┘     │
│                                                                               │
│  No shared base class: each scheduler is a distinct type that satisfies     │
│  the relevant protocol.                                                      │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Protocol, runtime_checkable

from cadence.core.disposables import Disposable
from cadence.core.timestamps import Interval

Action = Callable[[], None]


@runtime_checkable
class Scheduler(Protocol):
    """Represents a serial queue of work items.

    Example (custom scheduler):
        >>> class InlineScheduler:
        ...     def schedule(self, action):
        ...         action()
        ...         return None
        >>> isinstance(InlineScheduler(), Scheduler)
        True
    """

    def schedule(self, action: Action) -> Disposable | None:
        """Enqueue an action on the scheduler.

        When the work is executed depends on the scheduler in use.

        Returns:
            A disposable that can withdraw the work before it begins, or
            None when withdrawal is meaningless for this scheduler.
        """
        ...


@runtime_checkable
class DateScheduler(Scheduler, Protocol):
    """A scheduler that also supports enqueuing actions at future dates."""

    def schedule_after(self, date: datetime, action: Action) -> Disposable | None:
        """Schedule an action for execution at or after ``date``."""
        ...

    def schedule_repeating(
        self,
        date: datetime,
        interval: Interval,
        action: Action,
        leeway: Interval = 0.0,
    ) -> Disposable | None:
        """Schedule a recurring action every ``interval``, beginning at ``date``.

        Args:
            date: First firing date.
            interval: Period between firings.
            action: Work to run on each firing.
            leeway: Tolerance the scheduler may use to coalesce firings.

        Returns:
            A disposable that cancels the remaining series.
        """
        ...
