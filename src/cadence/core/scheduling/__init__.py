"""Scheduler package for cadence.

Manifesto:
    Code that defers work should not care whether "later" means a worker
    thread, the main worker, or a clock a test advances by hand. Client code
    depends on the ``Scheduler`` / ``DateScheduler`` protocols; production
    wires a ``QueueScheduler`` or ``MainScheduler``, tests wire a
    ``TestScheduler`` and get the same ordering and cancellation semantics
    with fully reproducible timing.

┌──────────────────────────────────────────────────────────────────────────────┐
│  CADENCE SCHEDULERS                                                           │
│                                                                               │
│  Quick Start:                                                                 │
│  ┌──────────────────────────────────────────────────────────────────────┐   │
│  │   from cadence.core.scheduling import QueueScheduler, TestScheduler  │   │
│  │                                                                      │   │
│  │   def poll_later(scheduler, fn):                                     │   │
│  │       when = utc_now() + timedelta(seconds=30)                       │   │
│  │       return scheduler.schedule_after(when, fn)                      │   │
│  │                                                                      │   │
│  │   poll_later(QueueScheduler(), fetch)          # production          │   │
│  │                                                                      │   │
│  │   test = TestScheduler(start_date=utc_now())                         │   │
│  │   poll_later(test, fetch)                      # tests               │   │
│  │   test.advance_by(30)                          # fetch runs here     │   │
│  └──────────────────────────────────────────────────────────────────────┘   │
│                                                                               │
│  Architecture:                                                                │
│  ┌─────────────────────────────────────────────────────────────────────┐    │
│  │                                                                     │    │
│  │   ImmediateScheduler   runs inline, returns no handle               │    │
│  │                                                                     │    │
│  │   QueueScheduler ────► SerialWorkQueue ────► (optional) Executor    │    │
│  │        ▲                    ▲                                        │    │
│  │   MainScheduler         main_queue()                                 │    │
│  │                                                                     │    │
│  │   TestScheduler        virtual clock + ordered pending list         │    │
│  │                                                                     │    │
│  └─────────────────────────────────────────────────────────────────────┘    │
└──────────────────────────────────────────────────────────────────────────────┘

Guardrails:
    ❌ Calling time.sleep() in code that should be testable
    ✅ Accept a ``DateScheduler`` and schedule_after() instead
    ❌ Relying on ordering between two different scheduler instances
    ✅ Route work that must be ordered through one scheduler

Tags:
    cadence, scheduling, virtual-time, serial-queue, cancellation, testing

Doc-Types:
    package-overview, architecture-map, module-index
"""

from __future__ import annotations

from .immediate import ImmediateScheduler
from .main import MainScheduler
from .protocol import Action, DateScheduler, Scheduler
from .queue import QueueScheduler
from .virtual import TestScheduler
from .work_queue import (
    SerialWorkQueue,
    TimerSource,
    WorkQueueHealth,
    global_executor,
    main_queue,
    priority_queue,
    shutdown_global_queues,
)

__all__ = [
    # Protocol
    "Action",
    "Scheduler",
    "DateScheduler",
    # Schedulers
    "ImmediateScheduler",
    "QueueScheduler",
    "MainScheduler",
    "TestScheduler",
    # Work queues
    "SerialWorkQueue",
    "TimerSource",
    "WorkQueueHealth",
    "global_executor",
    "main_queue",
    "priority_queue",
    "shutdown_global_queues",
]
