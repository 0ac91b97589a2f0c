"""Scheduler bound to the designated main worker."""

from __future__ import annotations

from datetime import datetime

from cadence.core.disposables import Disposable
from cadence.core.timestamps import Interval

from .protocol import Action
from .queue import QueueScheduler
from .work_queue import SerialWorkQueue, main_queue


class MainScheduler:
    """A scheduler that performs all work on the main worker thread.

    Every call is delegated to an inner :class:`QueueScheduler` bound to
    :func:`main_queue`. Pass ``queue`` to bind a different single-thread
    queue, e.g. one pumped by a UI event loop.
    """

    def __init__(self, queue: SerialWorkQueue | None = None) -> None:
        self._inner = QueueScheduler(queue if queue is not None else main_queue())

    @property
    def queue(self) -> SerialWorkQueue:
        return self._inner.queue

    def schedule(self, action: Action) -> Disposable | None:
        return self._inner.schedule(action)

    def schedule_after(self, date: datetime, action: Action) -> Disposable | None:
        return self._inner.schedule_after(date, action)

    def schedule_repeating(
        self,
        date: datetime,
        interval: Interval,
        action: Action,
        leeway: Interval = 0.0,
    ) -> Disposable | None:
        return self._inner.schedule_repeating(date, interval, action, leeway)

    def close(self) -> None:
        """Cancel this scheduler's repeating timers. The main worker keeps running."""
        self._inner.close()

    def __repr__(self) -> str:
        return f"MainScheduler(queue={self.queue.name!r})"
