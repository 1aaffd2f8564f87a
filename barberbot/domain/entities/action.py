from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Union


class NoticeKind(str, Enum):
    SLOT_UNAVAILABLE = "slot_unavailable"
    NO_SLOTS = "no_slots"
    CLOSED_WEEKLY = "day_off_saturday"
    DAY_OFF = "day_off_selected"


@dataclass(frozen=True)
class BookAppointment:
    def to_token(self) -> str:
        return "book_appointment"


@dataclass(frozen=True)
class SelectDate:
    day: date

    def to_token(self) -> str:
        return f"select_date_{self.day.isoformat()}"


@dataclass(frozen=True)
class BookSlot:
    day: date
    hour: int

    def to_token(self) -> str:
        return f"book_slot_{self.day.isoformat()}_{self.hour}"


@dataclass(frozen=True)
class MyAppointments:
    def to_token(self) -> str:
        return "my_appointments"


@dataclass(frozen=True)
class AllAppointments:
    def to_token(self) -> str:
        return "all_appointments"


@dataclass(frozen=True)
class ApproveAppointment:
    appointment_id: str

    def to_token(self) -> str:
        return f"approve_{self.appointment_id}"


@dataclass(frozen=True)
class RejectAppointment:
    appointment_id: str

    def to_token(self) -> str:
        return f"reject_{self.appointment_id}"


@dataclass(frozen=True)
class ProviderCancel:
    appointment_id: str

    def to_token(self) -> str:
        return f"barber_cancel_{self.appointment_id}"


@dataclass(frozen=True)
class CustomerCancel:
    appointment_id: str

    def to_token(self) -> str:
        return f"cancel_{self.appointment_id}"


@dataclass(frozen=True)
class BackToMenu:
    def to_token(self) -> str:
        return "back_to_menu"


@dataclass(frozen=True)
class ManageDaysOff:
    def to_token(self) -> str:
        return "manage_days_off"


@dataclass(frozen=True)
class AddDayOff:
    day: date

    def to_token(self) -> str:
        return f"add_day_off_{self.day.isoformat()}"


@dataclass(frozen=True)
class RemoveDayOff:
    day: date

    def to_token(self) -> str:
        return f"remove_day_off_{self.day.isoformat()}"


@dataclass(frozen=True)
class Notice:
    """Dead-end button that only answers with a short message."""

    kind: NoticeKind

    def to_token(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class UnknownAction:
    token: str

    def to_token(self) -> str:
        return self.token


Action = Union[
    BookAppointment,
    SelectDate,
    BookSlot,
    MyAppointments,
    AllAppointments,
    ApproveAppointment,
    RejectAppointment,
    ProviderCancel,
    CustomerCancel,
    BackToMenu,
    ManageDaysOff,
    AddDayOff,
    RemoveDayOff,
    Notice,
    UnknownAction,
]
