from __future__ import annotations

DEFAULT_BASE_URL = "https://ismp.crpt.ru/api/v3"


def get_auth_challenge_url(base_url: str) -> str:
	return f"{base_url.rstrip('/')}/auth/cert/key"


def get_auth_token_url(base_url: str) -> str:
	return f"{base_url.rstrip('/')}/auth/cert/"


def get_document_create_url(base_url: str) -> str:
	return f"{base_url.rstrip('/')}/lk/documents/create"
