"""
Shared pytest fixtures and configuration for cadence tests.

This module provides:
- Marker auto-tagging by the fixtures a test uses
- Settings cache isolation
- Virtual-time scheduler fixtures
- Real work queues that are always shut down after the test

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments:

    def test_something(virtual_scheduler, at):
        virtual_scheduler.schedule_after(at(5), action)
"""

import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Generator

import pytest

# Ensure cadence package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cadence.core.config import clear_settings_cache
from cadence.core.scheduling import SerialWorkQueue, TestScheduler, shutdown_global_queues
from cadence.core.timestamps import REFERENCE_DATE


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their fixtures."""
    for item in items:
        fixtures = set(getattr(item, "fixturenames", ()))
        if fixtures & {"work_queue", "make_queue", "make_scheduler"}:
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings_cache() -> Generator[None, None, None]:
    """Clear cached settings before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(scope="session", autouse=True)
def shutdown_process_queues() -> Generator[None, None, None]:
    """Tear down the main queue and shared executors at the end of the run."""
    yield
    shutdown_global_queues()


# =============================================================================
# Virtual Time Fixtures
# =============================================================================


@pytest.fixture
def virtual_scheduler() -> TestScheduler:
    """A TestScheduler starting at REFERENCE_DATE."""
    return TestScheduler()


@pytest.fixture
def at() -> Callable[[float], datetime]:
    """Build a virtual date ``seconds`` after REFERENCE_DATE."""

    def _at(seconds: float) -> datetime:
        return REFERENCE_DATE + timedelta(seconds=seconds)

    return _at


# =============================================================================
# Real Work Queue Fixtures
# =============================================================================


@pytest.fixture
def make_queue() -> Generator[Callable[..., SerialWorkQueue], None, None]:
    """Factory for SerialWorkQueues that are shut down after the test."""
    queues: list[SerialWorkQueue] = []

    def _make(name: str = "test-queue", **kwargs) -> SerialWorkQueue:
        queue = SerialWorkQueue(name=name, **kwargs)
        queues.append(queue)
        return queue

    yield _make

    for queue in queues:
        queue.shutdown(wait=True, timeout=2.0)


@pytest.fixture
def work_queue(make_queue) -> SerialWorkQueue:
    """A single SerialWorkQueue with its own dispatch thread."""
    return make_queue("test-queue")
