from __future__ import annotations

import logging
from datetime import date
from typing import Callable

from barberbot.domain.entities.action import (
    Action,
    AddDayOff,
    AllAppointments,
    ApproveAppointment,
    BackToMenu,
    BookAppointment,
    BookSlot,
    CustomerCancel,
    ManageDaysOff,
    MyAppointments,
    Notice,
    NoticeKind,
    ProviderCancel,
    RejectAppointment,
    RemoveDayOff,
    SelectDate,
    UnknownAction,
)

logger = logging.getLogger(__name__)

_LITERALS: dict[str, Action] = {
    "book_appointment": BookAppointment(),
    "my_appointments": MyAppointments(),
    "all_appointments": AllAppointments(),
    "back_to_menu": BackToMenu(),
    "manage_days_off": ManageDaysOff(),
}
_LITERALS.update({kind.value: Notice(kind) for kind in NoticeKind})


def _parse_day(value: str) -> date:
    return date.fromisoformat(value)


def _parse_book_slot(value: str) -> BookSlot:
    day_part, hour_part = value.split("_", 1)
    return BookSlot(day=_parse_day(day_part), hour=int(hour_part))


def _parse_id(value: str) -> str:
    if not value:
        raise ValueError("empty appointment id")
    return value


# "barber_cancel_" is listed before "cancel_" so the longer prefix always wins.
_PREFIXES: tuple[tuple[str, Callable[[str], Action]], ...] = (
    ("select_date_", lambda v: SelectDate(day=_parse_day(v))),
    ("book_slot_", _parse_book_slot),
    ("approve_", lambda v: ApproveAppointment(appointment_id=_parse_id(v))),
    ("reject_", lambda v: RejectAppointment(appointment_id=_parse_id(v))),
    ("barber_cancel_", lambda v: ProviderCancel(appointment_id=_parse_id(v))),
    ("cancel_", lambda v: CustomerCancel(appointment_id=_parse_id(v))),
    ("add_day_off_", lambda v: AddDayOff(day=_parse_day(v))),
    ("remove_day_off_", lambda v: RemoveDayOff(day=_parse_day(v))),
)


def decode_action(token: str | None) -> Action:
    """Decode a callback token. Malformed or unknown tokens become UnknownAction."""
    token = (token or "").strip()
    literal = _LITERALS.get(token)
    if literal is not None:
        return literal

    for prefix, parse in _PREFIXES:
        if not token.startswith(prefix):
            continue
        try:
            return parse(token[len(prefix):])
        except ValueError:
            logger.warning("Malformed action token", extra={"token": token})
            return UnknownAction(token=token)

    return UnknownAction(token=token)
