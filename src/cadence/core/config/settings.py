"""
Centralized settings for cadence.

:class:`CadenceSettings` is the single, validated source of truth for the
knobs of the real-time work queues and for logging. Values come from
``CADENCE_*`` environment variables or a ``.env`` file.

Tags:
    cadence, configuration, settings, pydantic, caching, validation

Doc-Types:
    api-reference
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .components import LogFormat, QueuePriority


class CadenceSettings(BaseSettings):
    """Cadence centralized configuration.

    All fields can be set via ``CADENCE_*`` environment variables (e.g.
    ``CADENCE_DEFAULT_PRIORITY=low``) or through a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="CADENCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Work queues ──────────────────────────────────────────────
    default_priority: QueuePriority = Field(
        default=QueuePriority.DEFAULT,
        description="Priority class used by QueueScheduler() with no argument",
    )
    global_queue_workers: int = Field(
        default=4,
        ge=1,
        description="Worker threads per process-wide priority executor",
    )
    main_queue_name: str = Field(
        default="cadence-main",
        description="Thread name of the designated main worker",
    )
    shutdown_timeout_seconds: float = Field(default=5.0, gt=0)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: LogFormat = Field(default=LogFormat.CONSOLE)

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value!r}")
        return level


_settings_cache: dict[str, CadenceSettings] = {}


def get_settings(*, _force_reload: bool = False) -> CadenceSettings:
    """Load, validate, and cache a :class:`CadenceSettings` instance.

    Parameters
    ----------
    _force_reload:
        Bypass cache and re-read the environment.
    """
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = CadenceSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Drop the cached settings so the next ``get_settings()`` re-reads them."""
    _settings_cache.clear()
