"""Centralized configuration for cadence.

Quick start::

    from cadence.core.config import get_settings

    settings = get_settings()
    print(settings.default_priority)   # QueuePriority.DEFAULT

Architecture::

    settings.py       CadenceSettings (Pydantic) + get_settings() cache
    components.py     QueuePriority / LogFormat enums

Guardrails:
    ❌ Parsing env vars ad-hoc in each module
    ✅ ``get_settings().global_queue_workers`` from the cached instance
"""

from .components import LogFormat, QueuePriority
from .settings import CadenceSettings, clear_settings_cache, get_settings

__all__ = [
    "CadenceSettings",
    "LogFormat",
    "QueuePriority",
    "clear_settings_cache",
    "get_settings",
]
