"""
Structured error types for cadence.

Every failure cadence can raise is a programming error: a scheduler built
over something that is not a work queue, a virtual clock asked to run
backwards, a drain that exceeded an explicit cap, or work submitted to a
queue that has been shut down. None of them is meant to be caught and
retried. A withdrawn action is not an error at all; it simply never runs.

Instead of bare ``AssertionError`` / ``ValueError`` the errors carry a
category, structured context and an optional chained cause so they log
well through ``cadence.core.logging``.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       CadenceError                               │
        │  (category, context, cause)                                      │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ConfigError                    SchedulingError                  │
        │  (CONFIG)                       (SCHEDULING)                     │
        │       │                              │                           │
        │  InvalidSchedulerConfigError    ClockError                       │
        │                                 DrainLimitError                  │
        │                                 QueueClosedError                 │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    Adding context to an error:

    >>> error = ClockError("virtual time cannot move backward")
    >>> error.with_context(scheduler="TestScheduler").context.scheduler
    'TestScheduler'

    Serializing for logging:

    >>> ClockError("boom").to_dict()["category"]
    'SCHEDULING'

Guardrails:
    ❌ DON'T: Catch ClockError to "fix up" a test's clock
    ✅ DO: Treat every CadenceError as a bug at the call site

    ❌ DON'T: Swallow the original exception
    ✅ DO: Pass it as cause= for error chaining

Tags:
    error-handling, exception-hierarchy, error-context, cadence

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories for classification and routing."""

    CONFIG = "CONFIG"             # Invalid queue, priority or settings
    SCHEDULING = "SCHEDULING"     # Clock, drain and queue invariants
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Attributes:
        scheduler: Class name of the scheduler involved
        queue: Name of the native work queue involved
        current_date: Virtual clock position, ISO formatted
        requested_date: Date the caller asked for, ISO formatted
        metadata: Additional key-value pairs
    """

    scheduler: str | None = None
    queue: str | None = None
    current_date: str | None = None
    requested_date: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["scheduler", "queue", "current_date", "requested_date"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class CadenceError(Exception):
    """
    Base exception for all cadence errors.

    Subclasses set ``default_category``. Errors are never retryable: they
    signal misuse of a scheduler, not a transient condition.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    @property
    def retryable(self) -> bool:
        return False

    def with_context(self, **kwargs: Any) -> CadenceError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ClockError("backwards").with_context(
                scheduler="TestScheduler",
                requested_date="2000-01-01T00:00:00+00:00",
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIG ERRORS
# =============================================================================


class ConfigError(CadenceError):
    """Configuration error."""

    default_category = ErrorCategory.CONFIG


class InvalidSchedulerConfigError(ConfigError):
    """A scheduler was constructed over something that is not a work queue or priority."""

    def __init__(self, message: str, *, value: Any = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        if value is not None:
            self.context.metadata["value_type"] = type(value).__name__


# =============================================================================
# SCHEDULING ERRORS
# =============================================================================


class SchedulingError(CadenceError):
    """Scheduler invariant violation."""

    default_category = ErrorCategory.SCHEDULING


class ClockError(SchedulingError):
    """The virtual clock was asked to move backward."""


class DrainLimitError(SchedulingError):
    """A drain ran more actions than its explicit ``max_actions`` cap allows."""

    def __init__(self, message: str, *, max_actions: int | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.max_actions = max_actions
        if max_actions is not None:
            self.context.metadata["max_actions"] = max_actions


class QueueClosedError(SchedulingError):
    """Work was submitted to a work queue that has been shut down."""
