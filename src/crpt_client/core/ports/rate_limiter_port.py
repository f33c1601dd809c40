from __future__ import annotations

from typing import Optional, Protocol

from ...shared.cancellation import CancellationToken


class PermitPoolPort(Protocol):
    def acquire(self, cancel_token: Optional[CancellationToken] = None, timeout: Optional[float] = None) -> None:
        """Block until a permit is available, then take it.

        Raises AcquireCancelled if the wait is cancelled or times out; no permit is taken then.
        """

    def stop(self) -> None:
        """Stop replenishing permits."""
