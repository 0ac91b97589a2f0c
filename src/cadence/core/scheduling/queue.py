"""Scheduler backed by a serial work queue.

``QueueScheduler`` forwards every scheduling call to the native submission
primitive of its work queue. One-shot work is wrapped in a guard that reads
the disposable at the last moment before running the action, so disposing
after submission but before execution still withdraws the work. Repeating
work is a native timer that can only be cancelled as a whole.

Construction::

    QueueScheduler()                          # default priority (settings)
    QueueScheduler(QueuePriority.LOW)         # shared LOW queue and executor
    QueueScheduler("low", name="reports")     # own queue over the LOW executor
    QueueScheduler(SerialWorkQueue("db"))     # an existing serial queue

    with QueueScheduler(ThreadPoolExecutor(8)) as scheduler:
        scheduler.schedule(work)              # own queue, shut down on exit
"""

from __future__ import annotations

from concurrent.futures import Executor
from datetime import datetime
from typing import Any

from cadence.core.config import QueuePriority, get_settings
from cadence.core.disposables import (
    ActionDisposable,
    CompositeDisposable,
    Disposable,
    SimpleDisposable,
)
from cadence.core.errors import InvalidSchedulerConfigError, QueueClosedError
from cadence.core.logging import get_logger
from cadence.core.timestamps import Interval, delay_until

from .protocol import Action
from .work_queue import SerialWorkQueue, priority_queue

logger = get_logger(__name__)


def _resolve_queue(queue: Any, name: str | None) -> tuple[SerialWorkQueue, bool]:
    """Return the queue to schedule on and whether the scheduler owns it."""
    if queue is None:
        queue = get_settings().default_priority

    if isinstance(queue, SerialWorkQueue):
        return queue, False

    if isinstance(queue, Executor):
        return SerialWorkQueue(name=name or "cadence.queue", target=queue), True

    if isinstance(queue, (QueuePriority, str)):
        try:
            priority = QueuePriority(queue)
        except ValueError as exc:
            raise InvalidSchedulerConfigError(
                f"unknown queue priority: {queue!r}", value=queue, cause=exc
            ).with_context(scheduler="QueueScheduler") from exc
        return priority_queue(priority, name=name), name is not None

    raise InvalidSchedulerConfigError(
        "QueueScheduler needs a SerialWorkQueue, an Executor or a QueuePriority",
        value=queue,
    ).with_context(scheduler="QueueScheduler")


class QueueScheduler:
    """A scheduler backed by a serial work queue.

    Even if the queue targets a concurrent executor, all work enqueued with
    one QueueScheduler runs serially with respect to itself.

    Schedulers bound to a priority share one queue per priority unless
    ``name`` is given. A scheduler built over an executor, or over a priority
    with a ``name``, owns its queue: :meth:`close` (or leaving a ``with``
    block) shuts that queue down. Injected and shared queues are left running;
    closing only cancels the repeating timers this scheduler started.
    """

    def __init__(
        self,
        queue: SerialWorkQueue | Executor | QueuePriority | str | None = None,
        *,
        name: str | None = None,
    ) -> None:
        self._queue, self._owns_queue = _resolve_queue(queue, name)
        self._timers = CompositeDisposable()
        logger.debug(
            "queue_scheduler_created", queue=self._queue.name, owns_queue=self._owns_queue
        )

    @property
    def queue(self) -> SerialWorkQueue:
        return self._queue

    @property
    def owns_queue(self) -> bool:
        return self._owns_queue

    @property
    def closed(self) -> bool:
        return self._timers.disposed

    def schedule(self, action: Action) -> Disposable | None:
        self._check_open()
        disposable = SimpleDisposable()
        self._queue.submit(_guarded(disposable, action))
        return disposable

    def schedule_after(self, date: datetime, action: Action) -> Disposable | None:
        self._check_open()
        disposable = SimpleDisposable()
        self._queue.submit_after(delay_until(date), _guarded(disposable, action))
        return disposable

    def schedule_repeating(
        self,
        date: datetime,
        interval: Interval,
        action: Action,
        leeway: Interval = 0.0,
    ) -> Disposable | None:
        self._check_open()
        timer = self._queue.create_timer(delay_until(date), interval, leeway, action)

        def cancel() -> None:
            timer.cancel()
            self._timers.remove(handle)

        handle = ActionDisposable(cancel)
        self._timers.add(handle)
        return handle

    def close(self) -> None:
        """Cancel this scheduler's timers and shut down the queue it owns."""
        if self._timers.disposed:
            return
        self._timers.dispose()
        if self._owns_queue:
            self._queue.shutdown()
        logger.debug("queue_scheduler_closed", queue=self._queue.name)

    def _check_open(self) -> None:
        if self._timers.disposed:
            raise QueueClosedError("scheduler has been closed").with_context(
                scheduler="QueueScheduler", queue=self._queue.name
            )

    def __enter__(self) -> QueueScheduler:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"QueueScheduler(queue={self._queue.name!r})"


def _guarded(disposable: Disposable, action: Action) -> Action:
    def run() -> None:
        if not disposable.disposed:
            action()

    return run
