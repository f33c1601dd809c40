from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from .enums import TimeUnit
from ...errors import ConfigurationError


@dataclass(frozen=True)
class Window:
    """Fixed replenishment period of the permit pool, e.g. ``Window(TimeUnit.HOURS)``."""

    unit: TimeUnit
    count: int = 1

    def __post_init__(self) -> None:
        if self.count < 1:
            raise ConfigurationError(f"Window count must be positive, got {self.count}")

    @property
    def seconds(self) -> float:
        return self.unit.seconds * self.count

    def __str__(self) -> str:
        return f"{self.count} {self.unit.value.lower()}"


@dataclass(frozen=True)
class Challenge:
    uuid: str
    data: str


@dataclass(frozen=True, repr=False)
class Credential:
    token: str
    issued_at: datetime
    expires_at: datetime

    @staticmethod
    def issue(token: str, *, now: datetime, lifetime: timedelta) -> "Credential":
        return Credential(token=token, issued_at=now, expires_at=now + lifetime)

    def is_valid(self, now: datetime, margin: timedelta = timedelta(0)) -> bool:
        return now < self.expires_at - margin

    def __repr__(self) -> str:
        return f"Credential(token=***, issued_at={self.issued_at.isoformat()}, expires_at={self.expires_at.isoformat()})"
