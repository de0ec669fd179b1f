"""
Concurrency utilities.

Provides a `synchronized` decorator that acquires the instance's ``_lock``
around a method. The row mutation coordinator uses it for the short critical
sections that flip per-row state; store calls and transition delays always
happen outside the lock.
"""

from __future__ import annotations

from functools import wraps
from typing import Callable


def synchronized(method: Callable) -> Callable:
    """Decorator that acquires ``self._lock`` if present on the instance.

    If the attribute is missing or ``None`` the method runs without locking.
    """

    @wraps(method)
    def _wrapped(self, *args, **kwargs):
        lock = getattr(self, "_lock", None)
        if lock is None:
            return method(self, *args, **kwargs)
        with lock:
            return method(self, *args, **kwargs)

    return _wrapped
