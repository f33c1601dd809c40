from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from .enums import DocumentFormat, DocumentType


class RegistryResponse(BaseModel):
	"""Error fields the registry may attach to any answer, whatever the HTTP status"""
	# the registry sends codes both as strings and as bare numbers
	model_config = ConfigDict(coerce_numbers_to_str=True)

	code: Optional[str] = None
	error_message: Optional[str] = None
	description: Optional[str] = None


class ChallengeResponse(RegistryResponse):
	"""Data to sign, returned by the challenge endpoint"""
	uuid: Optional[str] = None
	data: Optional[str] = None


class TokenRequest(BaseModel):
	"""Signed challenge; ``data`` carries the signature"""
	uuid: str
	data: str


class TokenResponse(RegistryResponse):
	token: Optional[str] = None


class CreateDocumentRequest(BaseModel):
	model_config = ConfigDict(use_enum_values=True)

	document_format: DocumentFormat
	product_document: str  # base64 of the document JSON
	signature: str
	type: DocumentType


class CreateDocumentResponse(RegistryResponse):
	"""Outcome of a submission. Business failures are reported through ``code``/``error_message``."""
	value: Optional[str] = None

	@property
	def ok(self) -> bool:
		return self.error_message is None and self.value is not None
