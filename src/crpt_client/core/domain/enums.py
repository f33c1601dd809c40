from __future__ import annotations

from enum import Enum


class TimeUnit(Enum):
    NANOSECONDS = "NANOSECONDS"
    MICROSECONDS = "MICROSECONDS"
    MILLISECONDS = "MILLISECONDS"
    SECONDS = "SECONDS"
    MINUTES = "MINUTES"
    HOURS = "HOURS"
    DAYS = "DAYS"

    @property
    def seconds(self) -> float:
        return _UNIT_SECONDS[self]

    @classmethod
    def from_str(cls, value: str) -> "TimeUnit":
        """Parse a unit name case-insensitively, accepting singular forms ("hour", "SECOND")."""
        u = value.strip().upper()
        if not u:
            raise ValueError("empty time unit")
        if not u.endswith("S"):
            u = f"{u}S"
        try:
            return cls(u)
        except ValueError:
            raise ValueError(f"Unknown time unit: {value!r}") from None


_UNIT_SECONDS = {
    TimeUnit.NANOSECONDS: 1e-9,
    TimeUnit.MICROSECONDS: 1e-6,
    TimeUnit.MILLISECONDS: 1e-3,
    TimeUnit.SECONDS: 1.0,
    TimeUnit.MINUTES: 60.0,
    TimeUnit.HOURS: 3600.0,
    TimeUnit.DAYS: 86400.0,
}


class DocumentFormat(Enum):
    MANUAL = "MANUAL"
    XML = "XML"
    CSV = "CSV"


class DocumentType(Enum):
    LP_INTRODUCE_GOODS = "LP_INTRODUCE_GOODS"
