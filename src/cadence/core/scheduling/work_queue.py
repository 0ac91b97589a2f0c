"""Native serial work queues.

The real-time schedulers are thin layers over a serial work queue: a single
dispatch thread that runs submitted closures one at a time, in deadline
order, with first-in-first-out order for equal deadlines.

┌──────────────────────────────────────────────────────────────────────────────┐
│  SERIAL WORK QUEUE ARCHITECTURE                                               │
│                                                                               │
│   submit(fn) ──────────┐                                                      │
│   submit_after(d, fn) ─┼──► min-heap (deadline, sequence, fn)                 │
│   TimerSource._arm() ──┘          │                                           │
│                                   ▼                                           │
│   ┌──────────────────────────────────────────────────────────────┐           │
│   │            Dispatch Thread (daemon, named after queue)       │           │
│   │                                                              │           │
│   │   while not closed:                                          │           │
│   │       wait until heap[0].deadline                            │           │
│   │       item = heappop(heap)                                   │           │
│   │       target is None ─► item.fn()                            │           │
│   │       target is pool ─► target.submit(item.fn).result()      │           │
│   └──────────────────────────────────────────────────────────────┘           │
│                                                                               │
│  With a target executor the work runs on the pool's threads, but the         │
│  dispatch thread waits for each item before handing over the next, so the    │
│  queue stays serial with respect to itself.                                   │
│                                                                               │
│  Process-wide queues:                                                         │
│   global_executor(priority)   shared ThreadPoolExecutor per QueuePriority    │
│   priority_queue(priority)    shared serial queue over that executor          │
│   main_queue()                the designated single "main" worker             │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

import heapq
import itertools
import math
import threading
import time
import weakref
from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, TypeVar

from cadence.core.config import QueuePriority, get_settings
from cadence.core.errors import QueueClosedError, SchedulingError
from cadence.core.logging import get_logger
from cadence.core.timestamps import Interval, to_seconds, utc_now

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(order=True)
class _WorkItem:
    deadline: float
    sequence: int
    fn: Callable[[], None] = field(compare=False)


@dataclass
class WorkQueueHealth:
    """Structured work queue health response."""

    healthy: bool
    queue: str
    pending: int = 0
    executed_count: int = 0
    failed_count: int = 0
    last_executed: datetime | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "healthy": self.healthy,
            "queue": self.queue,
            "pending": self.pending,
            "executed_count": self.executed_count,
            "failed_count": self.failed_count,
            "last_executed": self.last_executed.isoformat() if self.last_executed else None,
            **self.extra,
        }


class TimerSource:
    """A periodic timer firing ``handler`` on a work queue.

    Deadlines are anchored at ``start + n * interval`` so repeated firing does
    not drift. If the queue falls behind, the missed periods are coalesced
    into one firing and the timer resumes at the next anchored deadline still
    in the future.

    Cancelling stops all further firings. A firing already running on the
    queue is not interrupted.
    """

    def __init__(
        self,
        queue: SerialWorkQueue,
        start_deadline: float,
        interval: float,
        leeway: float,
        handler: Callable[[], None],
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._queue = queue
        self._clock = clock
        self._next_deadline = start_deadline
        self._interval = interval
        self._leeway = leeway
        self._handler = handler
        self._cancelled = threading.Event()
        self._fire_count = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def leeway(self) -> float:
        return self._leeway

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def fire_count(self) -> int:
        return self._fire_count

    def cancel(self) -> None:
        if not self._cancelled.is_set():
            self._cancelled.set()
            logger.debug("timer_cancelled", queue=self._queue.name, fired=self._fire_count)

    def _arm(self) -> None:
        self._queue._enqueue(self._next_deadline, self._fire)

    def _fire(self) -> None:
        if self._cancelled.is_set():
            return
        self._fire_count += 1
        try:
            self._handler()
        finally:
            if not self._cancelled.is_set() and not self._queue.closed:
                now = self._clock()
                missed = max(0, math.floor((now - self._next_deadline) / self._interval))
                self._next_deadline += (missed + 1) * self._interval
                self._arm()


class SerialWorkQueue:
    """A serial work queue backed by one dispatch thread.

    Example:
        >>> queue = SerialWorkQueue("example")
        >>> queue.submit(lambda: print("first"))
        >>> queue.submit_after(0.5, lambda: print("later"))
        >>> queue.run_sync(lambda: None)  # waits for "first"
        >>> queue.shutdown()
    """

    def __init__(self, name: str = "cadence-queue", target: Executor | None = None) -> None:
        self._name = name
        self._target = target
        self._heap: list[_WorkItem] = []
        self._sequence = itertools.count()
        self._condition = threading.Condition()
        self._closed = False

        self._stats_lock = threading.Lock()
        self._executed_count = 0
        self._failed_count = 0
        self._last_executed: datetime | None = None
        self._worker: threading.Thread | None = None
        self._target_lost = False

        self._thread = threading.Thread(target=self._run, daemon=True, name=name)
        self._thread.start()
        logger.debug("work_queue_started", queue=name, targeted=target is not None)

    @property
    def name(self) -> str:
        return self._name

    @property
    def target(self) -> Executor | None:
        return self._target

    @property
    def closed(self) -> bool:
        with self._condition:
            return self._closed

    @property
    def is_running(self) -> bool:
        return not self.closed and self._thread.is_alive()

    @property
    def pending_count(self) -> int:
        with self._condition:
            return len(self._heap)

    @property
    def thread(self) -> threading.Thread:
        """The dispatch thread that orders this queue's work."""
        return self._thread

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self, fn: Callable[[], None]) -> None:
        """Enqueue ``fn`` to run after everything already due."""
        self._enqueue(time.monotonic(), fn)

    def submit_after(self, delay: Interval, fn: Callable[[], None]) -> None:
        """Enqueue ``fn`` to run once ``delay`` has elapsed."""
        self._enqueue(time.monotonic() + max(0.0, to_seconds(delay)), fn)

    def create_timer(
        self,
        start_delay: Interval,
        interval: Interval,
        leeway: Interval,
        handler: Callable[[], None],
    ) -> TimerSource:
        """Start a periodic timer firing ``handler`` every ``interval``.

        The first firing happens after ``start_delay``.
        """
        period = to_seconds(interval)
        if period <= 0:
            raise ValueError(f"timer interval must be positive, got {period}")
        timer = TimerSource(
            self,
            start_deadline=time.monotonic() + max(0.0, to_seconds(start_delay)),
            interval=period,
            leeway=max(0.0, to_seconds(leeway)),
            handler=handler,
        )
        timer._arm()
        return timer

    def run_sync(self, fn: Callable[[], T], timeout: float | None = None) -> T:
        """Run ``fn`` on the queue and block until it returns its result.

        Everything submitted before this call runs first, so
        ``run_sync(lambda: None)`` is a barrier.
        """
        current = threading.current_thread()
        if current is self._thread or current is self._worker:
            raise SchedulingError(
                "run_sync() called from a work item running on the same queue"
            ).with_context(queue=self._name)

        future: Future[T] = Future()

        def _call() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(fn())
            except BaseException as exc:
                future.set_exception(exc)

        self.submit(_call)
        return future.result(timeout=timeout)

    def _enqueue(self, deadline: float, fn: Callable[[], None]) -> None:
        with self._condition:
            if self._closed:
                raise QueueClosedError("work queue has been shut down").with_context(
                    queue=self._name
                )
            heapq.heappush(self._heap, _WorkItem(deadline, next(self._sequence), fn))
            self._condition.notify()

    # ------------------------------------------------------------------
    # Dispatch loop
    # ------------------------------------------------------------------

    def _run(self) -> None:
        while True:
            with self._condition:
                while not self._heap and not self._closed:
                    self._condition.wait()

                if self._closed:
                    return

                wait_time = self._heap[0].deadline - time.monotonic()
                if wait_time > 0:
                    self._condition.wait(timeout=wait_time)
                    continue

                item = heapq.heappop(self._heap)

            # Execute outside lock
            self._execute(item.fn)

    def _execute(self, fn: Callable[[], None]) -> None:
        failed = False
        try:
            if self._target is None:
                fn()
            else:
                try:
                    future = self._target.submit(self._on_worker, fn)
                except RuntimeError:
                    # Target executor has been shut down; nothing can run here again.
                    failed = True
                    self._target_lost = True
                    logger.error("work_queue_target_shut_down", queue=self._name)
                    self.shutdown(wait=False)
                    return
                future.result()
        except Exception:
            failed = True
            logger.exception("work_item_failed", queue=self._name)
        finally:
            with self._stats_lock:
                self._executed_count += 1
                if failed:
                    self._failed_count += 1
                self._last_executed = utc_now()

    def _on_worker(self, fn: Callable[[], None]) -> None:
        # Items run one at a time, so a single slot identifies the worker thread.
        self._worker = threading.current_thread()
        try:
            fn()
        finally:
            self._worker = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def shutdown(self, wait: bool = True, timeout: float | None = None) -> None:
        """Stop the dispatch thread, dropping work that has not started.

        Args:
            wait: Join the dispatch thread before returning.
            timeout: Join timeout (default: ``shutdown_timeout_seconds``).
        """
        with self._condition:
            if self._closed:
                return
            self._closed = True
            dropped = len(self._heap)
            self._heap.clear()
            self._condition.notify_all()

        if dropped:
            logger.warning("work_queue_dropped_pending", queue=self._name, dropped=dropped)

        if wait and threading.current_thread() is not self._thread:
            if timeout is None:
                timeout = get_settings().shutdown_timeout_seconds
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("work_queue_thread_did_not_stop", queue=self._name)

        logger.info("work_queue_stopped", queue=self._name)

    def health(self) -> WorkQueueHealth:
        """Return structured health status."""
        with self._stats_lock:
            executed = self._executed_count
            failed = self._failed_count
            last = self._last_executed
        return WorkQueueHealth(
            healthy=self.is_running and not self._target_lost,
            queue=self._name,
            pending=self.pending_count,
            executed_count=executed,
            failed_count=failed,
            last_executed=last,
            extra={"targeted": self._target is not None, "target_lost": self._target_lost},
        )

    def __repr__(self) -> str:
        return f"SerialWorkQueue(name={self._name!r}, closed={self.closed})"


# ---------------------------------------------------------------------------
# Process-wide queues
# ---------------------------------------------------------------------------

_global_lock = threading.Lock()
_global_executors: dict[QueuePriority, ThreadPoolExecutor] = {}
_priority_queues: dict[QueuePriority, SerialWorkQueue] = {}
_priority_bound: weakref.WeakSet[SerialWorkQueue] = weakref.WeakSet()
_main_queue: SerialWorkQueue | None = None


def global_executor(priority: QueuePriority | str = QueuePriority.DEFAULT) -> ThreadPoolExecutor:
    """Return the shared executor for a priority class, creating it on first use."""
    priority = QueuePriority(priority)
    with _global_lock:
        executor = _global_executors.get(priority)
        if executor is None:
            executor = ThreadPoolExecutor(
                max_workers=get_settings().global_queue_workers,
                thread_name_prefix=f"cadence-{priority.value}",
            )
            _global_executors[priority] = executor
            logger.debug("global_executor_created", priority=priority.value)
        return executor


def priority_queue(
    priority: QueuePriority | str = QueuePriority.DEFAULT, name: str | None = None
) -> SerialWorkQueue:
    """Return a serial queue over the shared executor for ``priority``.

    Without ``name`` every caller gets the same queue per priority, so building
    schedulers repeatedly does not start new dispatch threads. With ``name`` a
    new queue is created; the caller owns it and must shut it down.

    Either way the queue is closed by :func:`shutdown_global_queues` together
    with the executor it targets.
    """
    priority = QueuePriority(priority)
    executor = global_executor(priority)
    with _global_lock:
        if name is not None:
            queue = SerialWorkQueue(name=name, target=executor)
            _priority_bound.add(queue)
            return queue

        queue = _priority_queues.get(priority)
        if queue is None or queue.closed or queue.target is not executor:
            queue = SerialWorkQueue(name=f"cadence.queue.{priority.value}", target=executor)
            _priority_queues[priority] = queue
        return queue


def main_queue() -> SerialWorkQueue:
    """Return the designated main work queue, creating it on first use."""
    global _main_queue
    with _global_lock:
        if _main_queue is None or _main_queue.closed:
            _main_queue = SerialWorkQueue(name=get_settings().main_queue_name)
        return _main_queue


def shutdown_global_queues(wait: bool = True) -> None:
    """Shut down the main queue, every priority executor and the queues over them.

    Queues bound to a priority are closed before their executors, so later
    submissions raise :class:`QueueClosedError` instead of being dropped.
    """
    global _main_queue
    with _global_lock:
        executors = list(_global_executors.values())
        _global_executors.clear()
        queues = list(_priority_queues.values()) + list(_priority_bound)
        _priority_queues.clear()
        _priority_bound.clear()
        if _main_queue is not None:
            queues.append(_main_queue)
            _main_queue = None

    for queue in queues:
        queue.shutdown(wait=wait)
    for executor in executors:
        executor.shutdown(wait=wait)
