from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.domain.enums import TimeUnit
from .urls import DEFAULT_BASE_URL


class AppConfig(BaseSettings):
    """Client configuration with automatic environment variable loading.

    All settings can be overridden via environment variables with the CRPT_CLIENT_ prefix.
    For example:
        - CRPT_CLIENT_REQUEST_LIMIT=100
        - CRPT_CLIENT_WINDOW_UNIT=MINUTES
        - CRPT_CLIENT_SIGNER_COMMAND="cryptcp -signf -dir /tmp -der -strict -cert -detached -thumbprint ABC"

    Alternatively, settings can be provided programmatically:
        client = CrptClient(request_limit=100, window_unit=TimeUnit.MINUTES)
    """

    model_config = SettingsConfigDict(
        env_prefix="CRPT_CLIENT_",
        case_sensitive=False,
        extra="forbid",
    )

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Root of the registry API; endpoint paths are appended to it",
    )

    window_unit: TimeUnit = Field(
        default=TimeUnit.SECONDS,
        description="Time unit of the rate limit window",
    )

    window_count: int = Field(
        default=1,
        description="Number of window_unit units in one window",
    )

    request_limit: int = Field(
        default=10,
        description="Maximum number of submissions per window",
    )

    token_lifetime_hours: float = Field(
        default=10.0,
        gt=0,
        description="How long an issued bearer token is considered valid",
    )

    refresh_margin_seconds: float = Field(
        default=0.0,
        ge=0,
        description="Renew the token this many seconds before it expires (0 disables early refresh)",
    )

    timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="HTTP timeout for every remote call",
    )

    signer_command: Optional[str] = Field(
        default=None,
        description="External command that reads challenge data on stdin and prints the signature on stdout",
    )

    @field_validator("window_unit", mode="before")
    @classmethod
    def _parse_window_unit(cls, value: object) -> object:
        if isinstance(value, str):
            return TimeUnit.from_str(value)
        return value
