"""tests/conftest.py

Common fixtures for the entire test suite.
"""

import json
import os
import threading
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from typer.testing import CliRunner


@pytest.fixture(scope="session")
def runner() -> CliRunner:
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep CRPT_CLIENT_* variables from the developer's shell out of the tests."""
    for key in list(os.environ):
        if key.upper().startswith("CRPT_CLIENT_"):
            monkeypatch.delenv(key, raising=False)


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def advance(self, delta: timedelta) -> None:
        with self._lock:
            self._now = self._now + delta


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def mock_httpx_client(monkeypatch):
    """
    Replaces httpx.Client with a mock that uses a MockTransport.

    Returns a handler function that tests can use to register mock responses.
    Every request is recorded in ``add_response.requests``; ``add_response.calls``
    keeps (method, url) pairs.
    """
    responses = {}
    calls_log: list[tuple[str, str]] = []
    requests_log: list[httpx.Request] = []
    original_client = httpx.Client

    def add_response(
        url: str,
        method: str = "GET",
        status_code: int = 200,
        json_payload: dict | list | None = None,
        content: bytes | None = None,
    ):
        """Register a mock response for a given URL and method."""
        if json_payload is not None:
            body = json.dumps(json_payload).encode("utf-8")
        else:
            body = content if content is not None else b""
        responses[(method.upper(), url)] = (status_code, body)

    def mock_transport(request: httpx.Request) -> httpx.Response:
        """The transport logic that returns registered responses or a 404."""
        key = (request.method, str(request.url))
        calls_log.append(key)
        requests_log.append(request)
        if key in responses:
            status, body = responses[key]
            headers = {"Content-Length": str(len(body))}
            return httpx.Response(status, content=body, headers=headers)

        return httpx.Response(404, text=f"Mock URL not found: {request.method} {request.url}")

    def patched_client(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(mock_transport)
        return original_client(*args, **kwargs)

    monkeypatch.setattr(httpx, "Client", patched_client)
    add_response.calls = calls_log  # type: ignore[attr-defined]
    add_response.requests = requests_log  # type: ignore[attr-defined]
    return add_response


BASE_URL = "https://ismp.crpt.ru/api/v3"
CHALLENGE_URL = f"{BASE_URL}/auth/cert/key"
TOKEN_URL = f"{BASE_URL}/auth/cert/"
CREATE_URL = f"{BASE_URL}/lk/documents/create"


@pytest.fixture
def registry(mock_httpx_client):
    """Mock registry answering the challenge, token and create endpoints successfully."""
    mock_httpx_client(CHALLENGE_URL, json_payload={"uuid": "challenge-1", "data": "sign-me"})
    mock_httpx_client(TOKEN_URL, method="POST", json_payload={"token": "tok-1"})
    mock_httpx_client(CREATE_URL, method="POST", json_payload={"value": "doc-1"})
    return mock_httpx_client
