from __future__ import annotations

import logging
from datetime import timedelta

from pydantic import ValidationError

from ..domain.models import Challenge, Credential
from ..domain.schemas import ChallengeResponse, TokenRequest, TokenResponse
from ..ports.clock_port import ClockPort
from ..ports.credential_port import CredentialIssuerPort
from ..ports.signer_port import SignerPort
from ..ports.transport_port import TransportPort
from ...errors import RenewalError, SigningError, TransportError

logger = logging.getLogger(__name__)


class AuthChallengeFlow(CredentialIssuerPort):
    """Obtain a bearer token by signing a server-issued challenge.

    Each renew() runs one complete cycle: fetch challenge, sign it, exchange
    the signature for a token. Failures are not retried here.
    """

    def __init__(
        self,
        transport: TransportPort,
        signer: SignerPort,
        clock: ClockPort,
        *,
        challenge_url: str,
        token_url: str,
        lifetime: timedelta = timedelta(hours=10),
    ) -> None:
        self._transport = transport
        self._signer = signer
        self._clock = clock
        self._challenge_url = challenge_url
        self._token_url = token_url
        self._lifetime = lifetime

    def renew(self) -> Credential:
        challenge = self.fetch_challenge()
        signature = self._sign(challenge)
        token = self.exchange(challenge, signature)
        credential = Credential.issue(token, now=self._clock.now(), lifetime=self._lifetime)
        logger.info("Obtained new credential valid until %s", credential.expires_at.isoformat())
        return credential

    def fetch_challenge(self) -> Challenge:
        logger.debug("Requesting authentication challenge")
        try:
            data = self._transport.get_json(self._challenge_url)
            resp = ChallengeResponse.model_validate(data)
        except TransportError as e:
            raise RenewalError(f"Could not fetch authentication challenge: {e}") from e
        except ValidationError as e:
            raise RenewalError(f"Malformed authentication challenge: {e.error_count()} invalid field(s)") from e

        if not resp.uuid or resp.data is None:
            logger.error("Registry refused challenge request: code=%s message=%s", resp.code, resp.error_message)
            raise RenewalError(
                f"No authentication challenge issued: {resp.error_message or resp.description or 'uuid/data missing'}",
                code=resp.code,
                error_message=resp.error_message,
            )
        return Challenge(uuid=resp.uuid, data=resp.data)

    def exchange(self, challenge: Challenge, signature: str) -> str:
        body = TokenRequest(uuid=challenge.uuid, data=signature).model_dump()
        try:
            data = self._transport.post_json(self._token_url, body)
            resp = TokenResponse.model_validate(data)
        except TransportError as e:
            raise RenewalError(f"Token exchange failed: {e}") from e
        except ValidationError as e:
            raise RenewalError(f"Malformed token response: {e.error_count()} invalid field(s)") from e

        if not resp.token:
            logger.error("Registry refused token exchange: code=%s message=%s", resp.code, resp.error_message)
            raise RenewalError(
                f"Registry refused token exchange: {resp.error_message or resp.description or 'no token issued'}",
                code=resp.code,
                error_message=resp.error_message,
            )
        return resp.token

    def _sign(self, challenge: Challenge) -> str:
        try:
            signature = self._signer.sign(challenge.data)
        except SigningError:
            raise
        except Exception as e:
            raise SigningError(f"Signer failed: {type(e).__name__}: {e}") from e
        if not signature:
            raise SigningError("Signer returned an empty signature")
        return signature
