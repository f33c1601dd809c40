from __future__ import annotations

import logging
import threading
from datetime import timedelta
from typing import Optional

from ..domain.models import Credential
from ..ports.clock_port import ClockPort
from ..ports.credential_port import CredentialIssuerPort, CredentialProviderPort
from ...errors import RenewalError

logger = logging.getLogger(__name__)


class _Renewal:
    """One in-flight renewal shared by every caller that found the cache stale."""

    def __init__(self) -> None:
        self.done = threading.Event()
        self.credential: Optional[Credential] = None
        self.error: Optional[BaseException] = None


def _follower_error(error: BaseException) -> RenewalError:
    # one instance per waiter; the leader's exception is only chained as the cause
    if isinstance(error, RenewalError):
        return type(error)(str(error), code=error.code, error_message=error.error_message)
    return RenewalError(f"Credential renewal failed: {type(error).__name__}: {error}")


class CredentialCache(CredentialProviderPort):
    """Serve a valid credential, renewing it at most once per expiry.

    The first caller that observes a missing or expired credential performs the
    renewal round-trip; callers arriving while it is in flight wait for it and
    share its result, including its failure. The round-trip itself runs outside
    the state lock so valid-credential reads never queue behind the network.
    """

    def __init__(
        self,
        issuer: CredentialIssuerPort,
        clock: ClockPort,
        refresh_margin: timedelta = timedelta(0),
    ) -> None:
        self._issuer = issuer
        self._clock = clock
        self._margin = refresh_margin
        self._lock = threading.Lock()
        self._credential: Optional[Credential] = None
        self._renewal: Optional[_Renewal] = None

    def get(self) -> Credential:
        with self._lock:
            cred = self._credential
            if cred is not None and cred.is_valid(self._clock.now(), self._margin):
                return cred
            renewal = self._renewal
            leader = renewal is None
            if leader:
                renewal = self._renewal = _Renewal()
                logger.debug("Credential %s, renewing", "expired" if cred is not None else "absent")

        if leader:
            return self._renew(renewal)

        logger.debug("Waiting for in-flight credential renewal")
        renewal.done.wait()
        if renewal.error is not None:
            raise _follower_error(renewal.error) from renewal.error
        assert renewal.credential is not None
        return renewal.credential

    def peek(self) -> Optional[Credential]:
        """Return the cached credential without validating or renewing it."""
        with self._lock:
            return self._credential

    def invalidate(self) -> None:
        """Drop the cached credential so the next get() renews."""
        with self._lock:
            self._credential = None

    def _renew(self, renewal: _Renewal) -> Credential:
        try:
            renewal.credential = self._issuer.renew()
            return renewal.credential
        except BaseException as e:
            renewal.error = e
            logger.warning("Credential renewal failed: %s", type(e).__name__)
            raise
        finally:
            with self._lock:
                if renewal.credential is not None:
                    self._credential = renewal.credential
                self._renewal = None
            renewal.done.set()
