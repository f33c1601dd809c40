from __future__ import annotations

import base64
import json
from typing import Any, Mapping, Union

from pydantic import BaseModel

from ..errors import EncodingError

Document = Union[BaseModel, Mapping[str, Any]]


def encode_document(document: Document) -> str:
    """Serialize a document to JSON and return it base64-encoded.

    Pydantic models are dumped by alias so wire names (``doc_id``, ``owner_inn``...)
    can be declared on the model. Dates and other non-JSON types in plain mappings
    are rendered with ``str``.

    Examples:
        >>> encode_document({"doc_id": "1"})
        'eyJkb2NfaWQiOiAiMSJ9'
    """
    try:
        if isinstance(document, BaseModel):
            raw = document.model_dump_json(by_alias=True).encode("utf-8")
        elif isinstance(document, Mapping):
            raw = json.dumps(dict(document), ensure_ascii=False, default=str).encode("utf-8")
        else:
            raise TypeError(f"unsupported document type {type(document).__name__}")
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Document cannot be serialized: {e}") from e
    return base64.b64encode(raw).decode("ascii")
