"""Synchronous scheduler."""

from __future__ import annotations

from cadence.core.disposables import Disposable

from .protocol import Action


class ImmediateScheduler:
    """A scheduler that performs all work synchronously on the caller's thread.

    ``schedule()`` returns None: by the time the caller has a handle the work
    has already completed, so there is nothing left to withdraw.
    """

    def schedule(self, action: Action) -> Disposable | None:
        action()
        return None

    def __repr__(self) -> str:
        return "ImmediateScheduler()"
