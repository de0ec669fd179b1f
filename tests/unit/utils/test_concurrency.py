"""Tests for the synchronized decorator."""

from __future__ import annotations

import threading

from app.utils.concurrency import synchronized


class Counter:
    def __init__(self, lock=None):
        self._lock = lock
        self.value = 0
        self.held = None

    @synchronized
    def bump(self, by=1):
        """Add ``by`` to the counter."""
        self.held = self._lock is not None and self._lock._is_owned()
        self.value += by
        return self.value


def test_runs_under_instance_lock():
    counter = Counter(threading.RLock())

    assert counter.bump(by=2) == 2
    assert counter.held is True


def test_runs_without_lock_when_missing():
    counter = Counter()

    assert counter.bump() == 1
    assert counter.held is False


def test_keeps_method_metadata():
    assert Counter.bump.__name__ == "bump"
    assert Counter.bump.__doc__ == "Add ``by`` to the counter."
