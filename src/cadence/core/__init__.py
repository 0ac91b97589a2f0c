"""
Cadence core primitives.

Subpackages and modules:
    scheduling   Scheduler protocols and implementations
    disposables  Cancellation handles
    timestamps   UTC, wall-time and interval helpers
    errors       Typed error hierarchy
    logging      structlog configuration
    config       Settings
"""

from cadence.core.config import QueuePriority, get_settings
from cadence.core.disposables import (
    ActionDisposable,
    CompositeDisposable,
    Disposable,
    SerialDisposable,
    SimpleDisposable,
)
from cadence.core.errors import (
    CadenceError,
    ClockError,
    ConfigError,
    DrainLimitError,
    InvalidSchedulerConfigError,
    QueueClosedError,
    SchedulingError,
)
from cadence.core.scheduling import (
    DateScheduler,
    ImmediateScheduler,
    MainScheduler,
    QueueScheduler,
    Scheduler,
    SerialWorkQueue,
    TestScheduler,
)

__all__ = [
    # Scheduling
    "Scheduler",
    "DateScheduler",
    "ImmediateScheduler",
    "QueueScheduler",
    "MainScheduler",
    "TestScheduler",
    "SerialWorkQueue",
    "QueuePriority",
    # Disposables
    "Disposable",
    "SimpleDisposable",
    "ActionDisposable",
    "SerialDisposable",
    "CompositeDisposable",
    # Errors
    "CadenceError",
    "ConfigError",
    "InvalidSchedulerConfigError",
    "SchedulingError",
    "ClockError",
    "DrainLimitError",
    "QueueClosedError",
    # Config
    "get_settings",
]
