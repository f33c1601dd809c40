from __future__ import annotations

import logging
from typing import Callable, Optional, Union

from dependency_injector import providers
from pydantic import ValidationError

from .container import Container
from ..config.settings import AppConfig
from ..core.domain.enums import DocumentFormat, DocumentType, TimeUnit
from ..core.domain.models import Credential
from ..core.domain.schemas import CreateDocumentResponse
from ..core.ports.clock_port import ClockPort
from ..core.ports.signer_port import SignerPort
from ..errors import ConfigurationError
from ..infra.signers import CallableSigner
from ..shared.cancellation import CancellationToken
from ..shared.encoding import Document

logger = logging.getLogger(__name__)


class CrptClient:
    """Rate-limited, self-authenticating client for the document registry.

    One instance is meant to be shared by every thread that submits documents:
    it owns the permit pool (and its replenishment ticker), the cached bearer
    token and the HTTP connection pool.

    Example:
        # 100 submissions per minute, signing with an external command
        with CrptClient(
            window_unit=TimeUnit.MINUTES,
            request_limit=100,
            signer_command="/usr/local/bin/sign-detached",
        ) as client:
            resp = client.create_introduce_goods_document(document, signature)
            if not resp.ok:
                print(resp.code, resp.error_message)

        # Signing from Python code
        with CrptClient(request_limit=5, signer=my_sign_function) as client:
            client.submit(document, signature, document_format=DocumentFormat.MANUAL)
    """

    def __init__(
        self,
        *,
        window_unit: TimeUnit | str | None = None,
        request_limit: int | None = None,
        window_count: int | None = None,
        signer: Union[SignerPort, Callable[[str], str], None] = None,
        signer_command: str | None = None,
        base_url: str | None = None,
        token_lifetime_hours: float | None = None,
        refresh_margin_seconds: float | None = None,
        timeout_seconds: float | None = None,
        clock: ClockPort | None = None,
    ) -> None:
        """Initialize the client. Unset arguments fall back to CRPT_CLIENT_* environment variables.

        Args:
            window_unit: Time unit of the rate limit window (e.g. TimeUnit.HOURS or "hour").
            request_limit: Maximum submissions per window. Must be positive.
            window_count: Units per window (default 1).
            signer: Object with a sign(data) -> str method, or a plain function,
                    used to sign authentication challenges. Takes precedence over signer_command.
            signer_command: External command that signs data read from stdin.
            base_url: Registry API root.
            token_lifetime_hours: Validity of an issued token (default 10).
            refresh_margin_seconds: Renew this long before expiry (default 0, no early refresh).
            timeout_seconds: HTTP timeout.
            clock: Clock used for token expiry; defaults to the system clock.

        Raises:
            ConfigurationError: An argument is invalid or no signer is configured.
        """
        overrides = {
            "window_unit": window_unit,
            "request_limit": request_limit,
            "window_count": window_count,
            "signer_command": signer_command,
            "base_url": base_url,
            "token_lifetime_hours": token_lifetime_hours,
            "refresh_margin_seconds": refresh_margin_seconds,
            "timeout_seconds": timeout_seconds,
        }
        try:
            config = AppConfig(**{k: v for k, v in overrides.items() if v is not None})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid client configuration: {e}") from e

        self._closed = False
        self._container = Container()
        self._container.config.from_pydantic(config)
        if signer is not None:
            if not hasattr(signer, "sign"):
                signer = CallableSigner(signer)
            self._container.signer.override(providers.Object(signer))
        if clock is not None:
            self._container.clock.override(providers.Object(clock))

        try:
            self._container.init_resources()
            self._gate = self._container.submission_gate()
        except Exception:
            self._container.shutdown_resources()
            raise
        logger.info(
            "Client ready: %d requests per %d %s against %s",
            config.request_limit,
            config.window_count,
            config.window_unit.value.lower(),
            config.base_url,
        )

    def submit(
        self,
        document: Document,
        signature: str,
        *,
        document_format: DocumentFormat = DocumentFormat.MANUAL,
        document_type: DocumentType = DocumentType.LP_INTRODUCE_GOODS,
        cancel_token: Optional[CancellationToken] = None,
    ) -> CreateDocumentResponse:
        """Submit a signed document, blocking while the rate limit is exhausted.

        Args:
            document: JSON-serializable mapping or pydantic model; sent base64-encoded.
            signature: Detached signature of the document.
            document_format: Format tag of the document.
            document_type: Registry document type.
            cancel_token: Cancel it from another thread to abandon the wait for a permit.

        Returns:
            The registry's response. Check ``ok``/``error_message`` for business errors.

        Raises:
            AcquireCancelled: The wait for a permit was cancelled.
            RenewalError: Authentication failed.
            EncodingError: The document could not be serialized.
            TransportError: The network call failed or the response was malformed.
        """
        return self._gate.submit(
            document,
            signature,
            document_format=document_format,
            document_type=document_type,
            cancel_token=cancel_token,
        )

    def create_introduce_goods_document(self, document: Document, signature: str) -> CreateDocumentResponse:
        """Submit an "introduce goods into circulation" document produced in Russia."""
        return self._gate.create_introduce_goods_document(document, signature)

    def authenticate(self) -> Credential:
        """Return the current credential, authenticating first if needed. Consumes no permit."""
        return self._container.credential_cache().get()

    @property
    def available_permits(self) -> int:
        return self._container.permit_pool().available

    def close(self) -> None:
        """Stop the permit ticker and close the HTTP client. Calling it again does nothing.

        Threads still blocked on a permit are not woken up.
        """
        if self._closed:
            return
        self._closed = True
        self._container.shutdown_resources()

    def __enter__(self) -> CrptClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = [
    "CrptClient",
    "AppConfig",
]
