from __future__ import annotations

import json
from datetime import timedelta

import pytest

from crpt_client.core.services.auth_challenge import AuthChallengeFlow
from crpt_client.errors import RenewalError, SigningError, TransportError
from crpt_client.infra.http_client import HttpClient
from crpt_client.infra.signers import CallableSigner

CHALLENGE_URL = "https://ismp.crpt.ru/api/v3/auth/cert/key"
TOKEN_URL = "https://ismp.crpt.ru/api/v3/auth/cert/"


def _flow(clock, signer=None) -> AuthChallengeFlow:
    return AuthChallengeFlow(
        HttpClient(),
        signer or CallableSigner(lambda data: data[::-1]),
        clock,
        challenge_url=CHALLENGE_URL,
        token_url=TOKEN_URL,
    )


def test_renew_runs_challenge_sign_exchange_in_order(mock_httpx_client, clock):
    mock_httpx_client(CHALLENGE_URL, json_payload={"uuid": "u-1", "data": "abc"})
    mock_httpx_client(TOKEN_URL, method="POST", json_payload={"token": "tok"})

    cred = _flow(clock).renew()

    assert cred.token == "tok"
    assert cred.issued_at == clock.now()
    assert cred.expires_at == clock.now() + timedelta(hours=10)
    assert mock_httpx_client.calls == [("GET", CHALLENGE_URL), ("POST", TOKEN_URL)]
    assert json.loads(mock_httpx_client.requests[1].content) == {"uuid": "u-1", "data": "cba"}


def test_renew_uses_configured_lifetime(mock_httpx_client, clock):
    mock_httpx_client(CHALLENGE_URL, json_payload={"uuid": "u-1", "data": "abc"})
    mock_httpx_client(TOKEN_URL, method="POST", json_payload={"token": "tok"})
    flow = AuthChallengeFlow(
        HttpClient(),
        CallableSigner(str.upper),
        clock,
        challenge_url=CHALLENGE_URL,
        token_url=TOKEN_URL,
        lifetime=timedelta(minutes=30),
    )
    assert flow.renew().expires_at == clock.now() + timedelta(minutes=30)


def test_challenge_transport_failure_is_renewal_error(mock_httpx_client, clock):
    mock_httpx_client(CHALLENGE_URL, status_code=500, content=b"Internal Server Error")

    with pytest.raises(RenewalError) as exc_info:
        _flow(clock).renew()
    assert isinstance(exc_info.value.__cause__, TransportError)
    # no token exchange attempted
    assert mock_httpx_client.calls == [("GET", CHALLENGE_URL)]


def test_malformed_challenge_is_renewal_error(mock_httpx_client, clock):
    mock_httpx_client(CHALLENGE_URL, json_payload={"unexpected": True})
    with pytest.raises(RenewalError):
        _flow(clock).renew()


def test_refused_token_exchange_carries_remote_error(mock_httpx_client, clock):
    mock_httpx_client(CHALLENGE_URL, json_payload={"uuid": "u-1", "data": "abc"})
    mock_httpx_client(
        TOKEN_URL,
        method="POST",
        json_payload={"code": "401", "error_message": "signature invalid", "description": "bad cert"},
    )

    with pytest.raises(RenewalError) as exc_info:
        _flow(clock).renew()
    assert exc_info.value.code == "401"
    assert exc_info.value.error_message == "signature invalid"


def test_challenge_error_body_carries_remote_error(mock_httpx_client, clock):
    mock_httpx_client(CHALLENGE_URL, status_code=403, json_payload={"code": 403, "error_message": "certificate revoked"})

    with pytest.raises(RenewalError) as exc_info:
        _flow(clock).renew()
    assert exc_info.value.code == "403"
    assert exc_info.value.error_message == "certificate revoked"
    assert mock_httpx_client.calls == [("GET", CHALLENGE_URL)]


def test_refused_token_exchange_with_error_status_and_numeric_code(mock_httpx_client, clock):
    mock_httpx_client(CHALLENGE_URL, json_payload={"uuid": "u-1", "data": "abc"})
    mock_httpx_client(TOKEN_URL, method="POST", status_code=401, json_payload={"code": 401, "error_message": "signature invalid"})

    with pytest.raises(RenewalError) as exc_info:
        _flow(clock).renew()
    assert exc_info.value.code == "401"
    assert exc_info.value.error_message == "signature invalid"


def test_token_response_with_numeric_code_still_authenticates(mock_httpx_client, clock):
    mock_httpx_client(CHALLENGE_URL, json_payload={"uuid": "u-1", "data": "abc"})
    mock_httpx_client(TOKEN_URL, method="POST", json_payload={"token": "tok", "code": 0})

    assert _flow(clock).renew().token == "tok"


def test_token_endpoint_failure_is_renewal_error(mock_httpx_client, clock):
    mock_httpx_client(CHALLENGE_URL, json_payload={"uuid": "u-1", "data": "abc"})
    mock_httpx_client(TOKEN_URL, method="POST", content=b"not json")
    with pytest.raises(RenewalError):
        _flow(clock).renew()


def test_signer_exception_becomes_signing_error(mock_httpx_client, clock):
    mock_httpx_client(CHALLENGE_URL, json_payload={"uuid": "u-1", "data": "abc"})

    def broken(data: str) -> str:
        raise ValueError("token device not found")

    with pytest.raises(SigningError) as exc_info:
        _flow(clock, CallableSigner(broken)).renew()
    assert isinstance(exc_info.value.__cause__, ValueError)
    assert ("POST", TOKEN_URL) not in mock_httpx_client.calls


def test_empty_signature_is_signing_error(mock_httpx_client, clock):
    mock_httpx_client(CHALLENGE_URL, json_payload={"uuid": "u-1", "data": "abc"})
    with pytest.raises(SigningError):
        _flow(clock, CallableSigner(lambda data: "")).renew()
