"""
Component enumerations.

Example::

    from cadence.core.config.components import QueuePriority

    QueuePriority("low")        # QueuePriority.LOW
"""

from __future__ import annotations

from enum import Enum


class QueuePriority(str, Enum):
    """Priority classes of the process-wide work executors.

    Each class maps to its own shared executor, so work on a LOW scheduler
    never waits behind a saturated HIGH pool. Priorities do not reorder
    items within a single scheduler; those always run in submission order.
    """

    HIGH = "high"
    DEFAULT = "default"
    LOW = "low"
    BACKGROUND = "background"


class LogFormat(str, Enum):
    """Supported log renderers."""

    JSON = "json"
    CONSOLE = "console"
    AUTO = "auto"
