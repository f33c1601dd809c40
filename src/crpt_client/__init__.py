"""crpt_client package: app/core/infra/shared.

Expose the library-friendly client at the package level.
"""

from .app.api import AppConfig, CrptClient
from .core.domain.enums import DocumentFormat, DocumentType, TimeUnit
from .core.domain.schemas import CreateDocumentResponse
from .errors import (
    AcquireCancelled,
    ConfigurationError,
    CrptClientError,
    EncodingError,
    RenewalError,
    SigningError,
    TransportError,
)
from .shared.cancellation import CancellationToken

import logging

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

__all__ = [
    "CrptClient",
    "AppConfig",
    "TimeUnit",
    "DocumentFormat",
    "DocumentType",
    "CreateDocumentResponse",
    "CancellationToken",
    "CrptClientError",
    "ConfigurationError",
    "TransportError",
    "EncodingError",
    "RenewalError",
    "SigningError",
    "AcquireCancelled",
]
