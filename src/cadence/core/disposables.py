"""Cancellation handles for scheduled work.

A disposable represents a pending unit of work. Disposing it withdraws the
work: a scheduler checks ``disposed`` immediately before running the action,
so a handle disposed after submission but before execution still prevents
the action from running.

┌──────────────────────────────────────────────────────────────────────────────┐
│  DISPOSABLES                                                                  │
│                                                                               │
│   SimpleDisposable      flag only                                             │
│   ActionDisposable      flag + one-shot callback (e.g. cancel a timer)        │
│   SerialDisposable      flag + replaceable inner handle (repeating chains)    │
│   CompositeDisposable   flag + a bag of handles disposed together             │
│                                                                               │
│   SerialDisposable over a repeating series:                                   │
│                                                                               │
│      serial.inner = occurrence#1 ──fires──► serial.inner = occurrence#2 ...   │
│      serial.dispose()  ──►  disposes whichever occurrence is current          │
└──────────────────────────────────────────────────────────────────────────────┘

All implementations are safe to dispose from any thread and ``dispose()`` is
idempotent.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Protocol, runtime_checkable


@runtime_checkable
class Disposable(Protocol):
    """Handle that can withdraw a previously scheduled unit of work."""

    @property
    def disposed(self) -> bool:
        """Whether the work has been withdrawn."""
        ...

    def dispose(self) -> None:
        """Withdraw the work. Calling this more than once has no effect."""
        ...


class SimpleDisposable:
    """A disposable that only records whether it has been disposed."""

    def __init__(self) -> None:
        self._disposed = threading.Event()

    @property
    def disposed(self) -> bool:
        return self._disposed.is_set()

    def dispose(self) -> None:
        self._disposed.set()

    def __repr__(self) -> str:
        return f"SimpleDisposable(disposed={self.disposed})"


class ActionDisposable:
    """A disposable that runs ``action`` the first time it is disposed."""

    def __init__(self, action: Callable[[], None]) -> None:
        self._lock = threading.Lock()
        self._action: Callable[[], None] | None = action

    @property
    def disposed(self) -> bool:
        with self._lock:
            return self._action is None

    def dispose(self) -> None:
        with self._lock:
            action, self._action = self._action, None
        if action is not None:
            action()


class SerialDisposable:
    """A disposable wrapping a replaceable inner disposable.

    Assigning a new inner disposable disposes the previous one. Once the
    serial disposable itself is disposed, any inner disposable assigned
    afterwards is disposed immediately.
    """

    def __init__(self, inner: Disposable | None = None) -> None:
        self._lock = threading.Lock()
        self._disposed = False
        self._inner: Disposable | None = None
        if inner is not None:
            self.inner = inner

    @property
    def disposed(self) -> bool:
        with self._lock:
            return self._disposed

    @property
    def inner(self) -> Disposable | None:
        with self._lock:
            return self._inner

    @inner.setter
    def inner(self, value: Disposable | None) -> None:
        self.replace_inner(value)

    def replace_inner(self, value: Disposable | None) -> None:
        """Point this handle at ``value``, disposing the previous inner handle."""
        with self._lock:
            previous, self._inner = self._inner, value
            disposed = self._disposed
        if previous is not None and previous is not value:
            previous.dispose()
        if disposed and value is not None:
            value.dispose()

    def dispose(self) -> None:
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            inner = self._inner
        if inner is not None:
            inner.dispose()


class CompositeDisposable:
    """A disposable that disposes a collection of handles together."""

    def __init__(self, *disposables: Disposable | None) -> None:
        self._lock = threading.Lock()
        self._disposed = False
        self._disposables: list[Disposable] = [d for d in disposables if d is not None]

    @property
    def disposed(self) -> bool:
        with self._lock:
            return self._disposed

    def add(self, disposable: Disposable | None) -> None:
        if disposable is None:
            return
        with self._lock:
            if not self._disposed:
                self._disposables.append(disposable)
                return
        disposable.dispose()

    def remove(self, disposable: Disposable) -> bool:
        """Stop tracking ``disposable`` without disposing it."""
        with self._lock:
            try:
                self._disposables.remove(disposable)
            except ValueError:
                return False
            return True

    def dispose(self) -> None:
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            disposables, self._disposables = self._disposables, []
        for disposable in disposables:
            disposable.dispose()

    def __len__(self) -> int:
        with self._lock:
            return len(self._disposables)
