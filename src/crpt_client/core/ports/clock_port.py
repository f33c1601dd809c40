from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class ClockPort(Protocol):
    def now(self) -> datetime:
        """Return the current timezone-aware UTC datetime used for credential expiry."""
        ...


class SystemClock(ClockPort):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)
