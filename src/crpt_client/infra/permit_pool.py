from __future__ import annotations

import logging
import threading
import time
from typing import Optional

from ..core.domain.models import Window
from ..core.ports.rate_limiter_port import PermitPoolPort
from ..errors import AcquireCancelled, ConfigurationError
from ..shared.cancellation import CancellationToken

logger = logging.getLogger(__name__)

# Shortest replenishment period the ticker honours; shorter windows are stretched to it.
MIN_TICK_SECONDS = 0.001


class FixedWindowPermitPool(PermitPoolPort):
    """Permit pool that resets to full capacity at every window boundary.

    Unlike a token bucket there is no trickle: up to ``capacity`` requests may
    go out back-to-back at the start of each window, and whatever was left
    unused is simply topped up again at the next tick.

    Example:
        # 100 submissions per minute
        with FixedWindowPermitPool(capacity=100, window=Window(TimeUnit.MINUTES)) as pool:
            pool.acquire()
            ...
    """

    def __init__(self, capacity: int, window: Window) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise ConfigurationError(f"Request limit must be a positive integer, got {capacity!r}")
        self._capacity = capacity
        self._window = window
        if window.seconds < MIN_TICK_SECONDS:
            logger.warning(
                "Window %s is shorter than %.3fs; replenishing every %.3fs instead",
                window,
                MIN_TICK_SECONDS,
                MIN_TICK_SECONDS,
            )
        self._available = capacity
        self._cond = threading.Condition(threading.Lock())

        self._lifecycle_lock = threading.Lock()
        self._ticker: Optional[threading.Thread] = None
        self._stopped = threading.Event()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def window(self) -> Window:
        return self._window

    @property
    def available(self) -> int:
        with self._cond:
            return self._available

    def acquire(self, cancel_token: Optional[CancellationToken] = None, timeout: Optional[float] = None) -> None:
        """Take one permit, blocking while the pool is empty.

        Args:
            cancel_token: Optional token; cancelling it from another thread
                aborts the wait with AcquireCancelled.
            timeout: Optional upper bound on the wait in seconds.

        Raises:
            AcquireCancelled: The wait was cancelled or timed out. No permit was taken.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        if cancel_token is not None:
            cancel_token.add_callback(self._wake_waiters)
        try:
            with self._cond:
                while True:
                    if cancel_token is not None and cancel_token.is_cancelled():
                        raise AcquireCancelled("Permit acquisition cancelled")
                    if self._available > 0:
                        self._available -= 1
                        logger.debug("Permit acquired (%d/%d left)", self._available, self._capacity)
                        return
                    remaining = None
                    if deadline is not None:
                        remaining = deadline - time.monotonic()
                        if remaining <= 0:
                            raise AcquireCancelled(f"No permit available within {timeout}s")
                    self._cond.wait(remaining)
        finally:
            if cancel_token is not None:
                cancel_token.remove_callback(self._wake_waiters)

    def replenish(self) -> None:
        """Reset the pool to full capacity and wake blocked callers."""
        with self._cond:
            used = self._capacity - self._available
            self._available = self._capacity
            self._cond.notify_all()
        logger.debug("Permit pool replenished (%d used in last window)", used)

    def start(self) -> None:
        """Start the replenishment ticker. No-op if it is already running."""
        with self._lifecycle_lock:
            if self._ticker is not None and self._ticker.is_alive():
                return
            self._stopped = threading.Event()
            self._ticker = threading.Thread(
                target=self._run,
                args=(self._stopped,),
                name=f"permit-pool-ticker-{id(self):x}",
                daemon=True,
            )
            self._ticker.start()
        logger.info("Permit pool started: %d requests per %s", self._capacity, self._window)

    def stop(self) -> None:
        """Stop the ticker and wait for its thread to exit. Safe to call repeatedly.

        Callers already blocked in acquire() stay blocked.
        """
        with self._lifecycle_lock:
            ticker, self._ticker = self._ticker, None
            self._stopped.set()
        if ticker is None:
            return
        if ticker is not threading.current_thread():
            ticker.join()
        logger.info("Permit pool stopped")

    def _run(self, stopped: threading.Event) -> None:
        period = max(self._window.seconds, MIN_TICK_SECONDS)
        next_tick = time.monotonic() + period
        while not stopped.wait(max(0.0, next_tick - time.monotonic())):
            self.replenish()
            next_tick += period
            # a late tick already refilled the pool; skip boundaries it overran
            now = time.monotonic()
            if next_tick <= now:
                next_tick += period * (int((now - next_tick) / period) + 1)

    def _wake_waiters(self) -> None:
        with self._cond:
            self._cond.notify_all()

    def __enter__(self) -> FixedWindowPermitPool:
        self.start()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.stop()
