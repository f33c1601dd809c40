from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from ..domain.enums import DocumentFormat, DocumentType
from ..domain.schemas import CreateDocumentRequest, CreateDocumentResponse
from ..ports.credential_port import CredentialProviderPort
from ..ports.rate_limiter_port import PermitPoolPort
from ..ports.transport_port import TransportPort
from ...errors import EncodingError, TransportError
from ...shared.cancellation import CancellationToken
from ...shared.encoding import Document, encode_document

logger = logging.getLogger(__name__)


class SubmissionGate:
    def __init__(
        self,
        permits: PermitPoolPort,
        credentials: CredentialProviderPort,
        transport: TransportPort,
        *,
        create_url: str,
    ) -> None:
        self._permits = permits
        self._credentials = credentials
        self._transport = transport
        self._create_url = create_url

    def submit(
        self,
        document: Document,
        signature: str,
        *,
        document_format: DocumentFormat = DocumentFormat.MANUAL,
        document_type: DocumentType = DocumentType.LP_INTRODUCE_GOODS,
        cancel_token: Optional[CancellationToken] = None,
    ) -> CreateDocumentResponse:
        """Submit one document, waiting for a permit and a valid credential first.

        The permit is spent once acquired, whatever happens afterwards. Errors
        reported by the registry come back in the response; only encoding,
        authentication and transport faults raise.

        Raises:
            AcquireCancelled: cancel_token was cancelled while waiting for a permit.
            RenewalError: No credential could be obtained.
            EncodingError: The document or signature could not be serialized.
            TransportError: The submission call failed or returned garbage.
        """
        self._permits.acquire(cancel_token)
        credential = self._credentials.get()

        product_document = encode_document(document)
        try:
            request = CreateDocumentRequest(
                document_format=document_format,
                product_document=product_document,
                signature=signature,
                type=document_type,
            )
        except ValidationError as e:
            raise EncodingError(f"Invalid submission request: {e.error_count()} invalid field(s)") from e
        headers = {"Authorization": f"Bearer {credential.token}"}

        logger.info("Submitting %s document (%s)", document_type.value, document_format.value)
        data = self._transport.post_json(self._create_url, request.model_dump(), headers=headers)
        try:
            response = CreateDocumentResponse.model_validate(data)
        except ValidationError as e:
            raise TransportError(f"Malformed submission response: {e.error_count()} invalid field(s)", url=self._create_url) from e

        if not response.ok:
            logger.warning("Registry reported an error: code=%s message=%s", response.code, response.error_message)
        else:
            logger.info("Document accepted: %s", response.value)
        return response

    def create_introduce_goods_document(self, document: Document, signature: str) -> CreateDocumentResponse:
        return self.submit(
            document,
            signature,
            document_format=DocumentFormat.MANUAL,
            document_type=DocumentType.LP_INTRODUCE_GOODS,
        )
