from __future__ import annotations

from typing import Protocol


class SignerPort(Protocol):
    def sign(self, data: str) -> str:
        """Return a detached signature for challenge data, encoded as the registry expects."""
        ...
