from __future__ import annotations

from collections.abc import Collection, Iterable
from datetime import date, datetime, time, timedelta

from barberbot.domain.entities.availability import (
    BusinessHours,
    DateOption,
    DateState,
    DayOffOption,
    HourSlot,
)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Half-open interval [00:00, next day 00:00) covering the given date."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def classify_date(day: date, days_off: Collection[date], hours: BusinessHours) -> DateState:
    if day.weekday() == hours.closed_weekday:
        return DateState.CLOSED_WEEKLY
    if day in days_off:
        return DateState.CLOSED_DECLARED
    return DateState.SELECTABLE


def booking_window(today: date, days_off: Collection[date], hours: BusinessHours) -> list[DateOption]:
    """Date picker entries starting today, closed dates included but tagged."""
    options: list[DateOption] = []
    for offset in range(hours.booking_window_days):
        day = today + timedelta(days=offset)
        options.append(DateOption(day=day, state=classify_date(day, days_off, hours), offset=offset))
    return options


def is_past_hour(day: date, hour: int, now: datetime) -> bool:
    if day < now.date():
        return True
    return day == now.date() and hour <= now.hour


def is_bookable_hour(day: date, hour: int, now: datetime, hours: BusinessHours) -> bool:
    return hour in hours.candidate_hours() and not is_past_hour(day, hour, now)


def hour_slots(
    day: date,
    now: datetime,
    occupied_hours: Iterable[int],
    hours: BusinessHours,
) -> list[HourSlot]:
    """
    Candidate hours for a date in ascending order.

    Hours at or before the current hour are dropped when the date is today.
    Remaining hours are tagged occupied when any appointment holds them.
    """
    occupied = set(occupied_hours)
    return [
        HourSlot(hour=hour, occupied=hour in occupied)
        for hour in hours.candidate_hours()
        if not is_past_hour(day, hour, now)
    ]


def days_off_window(today: date, days_off: Collection[date], hours: BusinessHours) -> list[DayOffOption]:
    options: list[DayOffOption] = []
    for offset in range(hours.days_off_window_days):
        day = today + timedelta(days=offset)
        if day.weekday() == hours.closed_weekday:
            continue
        options.append(DayOffOption(day=day, is_day_off=day in days_off))
    return options
