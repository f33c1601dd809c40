from __future__ import annotations

import logging
from typing import Mapping, Optional

import httpx

from ..core.ports.transport_port import TransportPort
from ..errors import TransportError

logger = logging.getLogger(__name__)

JSON_ACCEPT = "application/json;charset=UTF-8"


class HttpClient(TransportPort):
    def __init__(
        self,
        base_headers: Optional[Mapping[str, str]] = None,
        timeout_seconds: float = 20.0,
    ) -> None:
        headers = {"Accept": JSON_ACCEPT}
        headers.update(base_headers or {})
        self._client = httpx.Client(
            timeout=timeout_seconds,
            headers=headers,
            follow_redirects=True,
            max_redirects=10
        )

    def get_json(self, url: str, headers: Optional[Mapping[str, str]] = None) -> dict:
        return self._send("GET", url, headers=headers)

    def post_json(self, url: str, payload: dict, headers: Optional[Mapping[str, str]] = None) -> dict:
        return self._send("POST", url, headers=headers, payload=payload)

    def _send(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        payload: Optional[dict] = None,
    ) -> dict:
        logger.debug("%s %s", method, url)
        try:
            if method == "POST":
                resp = self._client.post(url, json=payload, headers=dict(headers or {}))
            else:
                resp = self._client.get(url, headers=dict(headers or {}))
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, url, type(e).__name__)
            raise TransportError(f"{method} {url} failed: {e}", url=url) from e

        # Error statuses still carry {code, error_message, description}; only an
        # undecodable body makes them a transport fault.
        status = resp.status_code
        try:
            data = resp.json()
        except ValueError as e:
            raise self._undecodable(method, url, resp, "a non-JSON body") from e
        if not isinstance(data, dict):
            raise self._undecodable(method, url, resp, "a JSON value that is not an object")
        if resp.is_error:
            logger.warning("%s %s returned HTTP %d with an error body", method, url, status)
        return data

    @staticmethod
    def _undecodable(method: str, url: str, resp: httpx.Response, what: str) -> TransportError:
        status = resp.status_code
        if resp.is_error:
            logger.warning("%s %s failed with HTTP %d", method, url, status)
            return TransportError(f"{method} {url} returned HTTP {status} with {what}", url=url, status_code=status)
        return TransportError(f"{method} {url} returned {what}", url=url, status_code=status)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
