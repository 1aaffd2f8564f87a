from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


DEFAULT_DAY_OFF_REASON = "Day off"


@dataclass(frozen=True)
class DayOff:
    day: date
    reason: str = DEFAULT_DAY_OFF_REASON
    created_at: datetime | None = None
