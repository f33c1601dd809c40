"""Exception hierarchy for the document submission client.

Callers can react to broad categories (configuration mistakes, transport
faults, failed authentication, cancelled waits) while business-level failures
reported by the registry stay ordinary response data.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "CrptClientError",
    "ConfigurationError",
    "TransportError",
    "EncodingError",
    "RenewalError",
    "SigningError",
    "AcquireCancelled",
]


class CrptClientError(RuntimeError):
    """Base exception for all client failures."""


class ConfigurationError(CrptClientError, ValueError):
    """Raised synchronously when construction arguments are invalid."""


class TransportError(CrptClientError):
    """Raised when a remote call fails or returns an undecodable body."""

    def __init__(self, message: str, *, url: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class EncodingError(CrptClientError):
    """Raised when an outbound payload cannot be serialized."""


class RenewalError(CrptClientError):
    """Raised when the authentication flow cannot produce a credential."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.error_message = error_message


class SigningError(RenewalError):
    """Raised when the injected signer fails to sign challenge data."""


class AcquireCancelled(CrptClientError):
    """Raised when a blocked permit acquisition is cancelled or times out."""
