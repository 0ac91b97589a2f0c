"""Pytest fixtures for scheduling tests."""

import threading
from typing import Callable, Generator

import pytest


@pytest.fixture
def make_scheduler() -> Generator[Callable, None, None]:
    """Create QueueSchedulers that are closed after the test."""
    from cadence.core.scheduling import QueueScheduler

    schedulers = []

    def _make(*args, **kwargs):
        scheduler = QueueScheduler(*args, **kwargs)
        schedulers.append(scheduler)
        return scheduler

    yield _make

    for scheduler in schedulers:
        scheduler.close()


@pytest.fixture
def gate() -> Generator[threading.Event, None, None]:
    """An event that blocks a queue until the test releases it."""
    event = threading.Event()
    yield event
    event.set()
