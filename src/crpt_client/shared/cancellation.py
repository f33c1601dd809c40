"""Cooperative cancellation for callers parked on a permit.

Threads cannot be interrupted from outside, so a caller that wants to abandon
a blocked :meth:`acquire` hands in a :class:`CancellationToken` and cancels it
from another thread. Waiters register a wake-up callback so the blocked
thread re-checks the token immediately instead of polling.
"""

from __future__ import annotations

import threading
from typing import Callable


class CancellationToken:
    """Thread-safe cancellation token.

    Examples:
        >>> token = CancellationToken()
        >>> token.is_cancelled()
        False
        >>> token.cancel()
        >>> token.is_cancelled()
        True
    """

    def __init__(self) -> None:
        self._is_cancelled = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    def cancel(self) -> None:
        """Signal cancellation and wake every registered waiter."""
        with self._lock:
            if self._is_cancelled.is_set():
                return
            self._is_cancelled.set()
            callbacks = list(self._callbacks)
        for cb in callbacks:
            cb()

    def is_cancelled(self) -> bool:
        return self._is_cancelled.is_set()

    def add_callback(self, cb: Callable[[], None]) -> None:
        """Register ``cb`` to run on cancellation; runs at once if already cancelled."""
        with self._lock:
            if not self._is_cancelled.is_set():
                self._callbacks.append(cb)
                return
        cb()

    def remove_callback(self, cb: Callable[[], None]) -> None:
        with self._lock:
            try:
                self._callbacks.remove(cb)
            except ValueError:
                pass
