from __future__ import annotations

from typing import Mapping, Optional, Protocol


class TransportPort(Protocol):
    def get_json(self, url: str, headers: Optional[Mapping[str, str]] = None) -> dict:
        """GET url and return the decoded JSON object, whatever the HTTP status.

        Raises TransportError on network faults or when the body is not a JSON object.
        """
        ...

    def post_json(self, url: str, payload: dict, headers: Optional[Mapping[str, str]] = None) -> dict:
        """POST payload as JSON and return the decoded JSON object, whatever the HTTP status."""
        ...

    def close(self) -> None:
        ...
