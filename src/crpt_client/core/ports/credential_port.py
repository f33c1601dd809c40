from __future__ import annotations

from typing import Protocol

from ..domain.models import Credential


class CredentialProviderPort(Protocol):
    def get(self) -> Credential:
        """Return a credential that is valid now, renewing it first if needed."""
        ...


class CredentialIssuerPort(Protocol):
    def renew(self) -> Credential:
        """Run a full authentication round-trip and return a fresh credential."""
        ...
