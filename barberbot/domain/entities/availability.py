from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


class DateState(str, Enum):
    SELECTABLE = "selectable"
    CLOSED_WEEKLY = "closed_weekly"
    CLOSED_DECLARED = "closed_declared"


@dataclass(frozen=True)
class BusinessHours:
    opening_hour: int = 9
    closing_hour: int = 18  # last bookable hour, inclusive
    closed_weekday: int = 5  # date.weekday(): Saturday
    booking_window_days: int = 7
    days_off_window_days: int = 14

    def candidate_hours(self) -> range:
        return range(self.opening_hour, self.closing_hour + 1)


@dataclass(frozen=True)
class DateOption:
    day: date
    state: DateState
    offset: int  # days from today


@dataclass(frozen=True)
class HourSlot:
    hour: int
    occupied: bool


@dataclass(frozen=True)
class DayOffOption:
    day: date
    is_day_off: bool
