"""Tests for cadence.core.disposables."""

import threading

from cadence.core.disposables import (
    ActionDisposable,
    CompositeDisposable,
    Disposable,
    SerialDisposable,
    SimpleDisposable,
)


class TestSimpleDisposable:
    """Flag-only disposable."""

    def test_starts_live(self):
        d = SimpleDisposable()
        assert not d.disposed
        assert isinstance(d, Disposable)

    def test_dispose_is_idempotent(self):
        d = SimpleDisposable()
        d.dispose()
        d.dispose()
        assert d.disposed

    def test_visible_across_threads(self):
        d = SimpleDisposable()
        t = threading.Thread(target=d.dispose)
        t.start()
        t.join()
        assert d.disposed


class TestActionDisposable:
    """Disposable with a one-shot callback."""

    def test_runs_action_once(self):
        calls = []
        d = ActionDisposable(lambda: calls.append(1))

        d.dispose()
        d.dispose()

        assert calls == [1]
        assert d.disposed

    def test_action_runs_once_under_contention(self):
        calls = []
        d = ActionDisposable(lambda: calls.append(1))
        threads = [threading.Thread(target=d.dispose) for _ in range(8)]

        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert calls == [1]


class TestSerialDisposable:
    """Disposable with a replaceable inner handle."""

    def test_replacing_disposes_previous(self):
        first, second = SimpleDisposable(), SimpleDisposable()
        serial = SerialDisposable(first)

        serial.inner = second

        assert first.disposed
        assert not second.disposed
        assert serial.inner is second

    def test_reassigning_same_inner_keeps_it(self):
        inner = SimpleDisposable()
        serial = SerialDisposable(inner)
        serial.replace_inner(inner)
        assert not inner.disposed

    def test_dispose_disposes_current_inner(self):
        inner = SimpleDisposable()
        serial = SerialDisposable(inner)

        serial.dispose()

        assert serial.disposed
        assert inner.disposed

    def test_inner_assigned_after_dispose_is_disposed(self):
        serial = SerialDisposable()
        serial.dispose()

        late = SimpleDisposable()
        serial.inner = late

        assert late.disposed

    def test_empty_serial_can_be_disposed(self):
        serial = SerialDisposable()
        serial.dispose()
        assert serial.disposed
        assert serial.inner is None


class TestCompositeDisposable:
    """A bag of handles disposed together."""

    def test_disposes_all(self):
        a, b = SimpleDisposable(), SimpleDisposable()
        composite = CompositeDisposable(a, None, b)

        assert len(composite) == 2
        composite.dispose()

        assert a.disposed and b.disposed
        assert len(composite) == 0

    def test_add_after_dispose_disposes_immediately(self):
        composite = CompositeDisposable()
        composite.dispose()

        late = SimpleDisposable()
        composite.add(late)

        assert late.disposed

    def test_add_ignores_none(self):
        composite = CompositeDisposable()
        composite.add(None)
        assert len(composite) == 0

    def test_remove_stops_tracking_without_disposing(self):
        kept, removed = SimpleDisposable(), SimpleDisposable()
        composite = CompositeDisposable(kept, removed)

        assert composite.remove(removed)
        assert not composite.remove(removed)
        composite.dispose()

        assert kept.disposed
        assert not removed.disposed
