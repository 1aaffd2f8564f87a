from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date, datetime

from barberbot.domain.entities.action import (
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
)
from barberbot.domain.entities.appointment import Appointment, AppointmentStatus
from barberbot.domain.entities.availability import DateOption, DateState, DayOffOption, HourSlot
from barberbot.domain.entities.user import User
from barberbot.domain.entities.view import Button, View


SLOTS_PER_ROW = 3

DATE_FORMAT = "%d/%m/%Y"
TIME_FORMAT = "%H:%M"
SHORT_DATE_FORMAT = "%d/%m (%a)"

STATUS_LABELS = {
    AppointmentStatus.APPROVED: "✅ Approved",
    AppointmentStatus.REJECTED: "❌ Rejected",
    AppointmentStatus.PENDING: "⏳ Awaiting approval",
}
STATUS_ICONS = {
    AppointmentStatus.APPROVED: "✅",
    AppointmentStatus.REJECTED: "❌",
    AppointmentStatus.PENDING: "⏳",
}

NOTICE_TEXTS = {
    NoticeKind.SLOT_UNAVAILABLE: "❌ This time is already taken",
    NoticeKind.NO_SLOTS: "No available hours on this day, please choose another day",
    NoticeKind.CLOSED_WEEKLY: "🚫 The barbershop is closed on this day",
    NoticeKind.DAY_OFF: "🏖️ The barber is off on this day",
}
# Only the taken-slot notice is a quiet toast, the rest are alerts.
PROMINENT_NOTICES = frozenset(
    {NoticeKind.NO_SLOTS, NoticeKind.CLOSED_WEEKLY, NoticeKind.DAY_OFF}
)

USER_NOT_FOUND = "❌ User not found"
PERMISSION_DENIED = "❌ You don't have permission"
APPOINTMENT_NOT_FOUND = "❌ Appointment not found"
ONE_PER_DAY = "❌ You already have an appointment on this day. Only one appointment per day is allowed."
APPROVED_ACK = "✅ Appointment approved!"
REJECTED_ACK = "❌ Appointment rejected"
CANCELLED_ACK = "✅ Appointment cancelled"
GENERIC_FAILURE = "❌ Something went wrong. Please try again later."
REGISTRATION_FAILURE = "❌ Registration failed. Please try again later."
ACTION_FAILURE = "❌ Something went wrong"


def _main_menu_button() -> Button:
    return Button("🔙 Main menu", BackToMenu().to_token())


def _format_date(value: date | datetime) -> str:
    return value.strftime(DATE_FORMAT)


def _format_hour(hour: int) -> str:
    return f"{hour:02d}:00"


def _chunk(buttons: Sequence[Button], size: int) -> list[tuple[Button, ...]]:
    return [tuple(buttons[i:i + size]) for i in range(0, len(buttons), size)]


class MenuRenderer:
    def __init__(self, business_name: str = "the barbershop") -> None:
        self._business_name = business_name

    def main_menu(self, is_provider: bool, text: str = "Main menu:") -> View:
        rows: list[tuple[Button, ...]] = [
            (Button("📅 Book appointment", BookAppointment().to_token()),),
            (Button("📋 My appointments", MyAppointments().to_token()),),
        ]
        if is_provider:
            rows.append((Button("👥 All appointments", AllAppointments().to_token()),))
            rows.append((Button("🏖️ Manage days off", ManageDaysOff().to_token()),))
        return View(text=text, rows=tuple(rows))

    def greeting(self, user: User) -> View:
        return self.main_menu(user.is_provider, f"👋 Hello {user.name}!\n\nWhat would you like to do?")

    def registration_prompt(self) -> View:
        return View(text=f"👋 Welcome to {self._business_name} bookings!\n\nWhat is your name?")

    def registration_complete(self, user: User) -> View:
        return self.main_menu(
            user.is_provider,
            f"✅ Registered successfully!\n\nHello {user.name}, what would you like to do?",
        )

    def date_picker(self, options: Sequence[DateOption]) -> View:
        rows: list[tuple[Button, ...]] = []
        for option in options:
            if option.offset == 0:
                label = "Today"
            elif option.offset == 1:
                label = "Tomorrow"
            else:
                label = option.day.strftime(SHORT_DATE_FORMAT)

            if option.state == DateState.CLOSED_WEEKLY:
                rows.append((Button(f"🚫 {label} (closed)", Notice(NoticeKind.CLOSED_WEEKLY).to_token()),))
            elif option.state == DateState.CLOSED_DECLARED:
                rows.append((Button(f"🏖️ {label} (day off)", Notice(NoticeKind.DAY_OFF).to_token()),))
            else:
                rows.append((Button(label, SelectDate(option.day).to_token()),))
        rows.append((_main_menu_button(),))
        return View(text="📅 Choose a date for your appointment:", rows=tuple(rows))

    def hour_picker(self, day: date, slots: Sequence[HourSlot]) -> View:
        buttons = [
            Button(f"❌ {_format_hour(slot.hour)}", Notice(NoticeKind.SLOT_UNAVAILABLE).to_token())
            if slot.occupied
            else Button(f"✅ {_format_hour(slot.hour)}", BookSlot(day, slot.hour).to_token())
            for slot in slots
        ]
        rows = _chunk(buttons, SLOTS_PER_ROW)
        if not rows:
            rows.append((Button("No available hours on this day", Notice(NoticeKind.NO_SLOTS).to_token()),))
        rows.append((Button("🔙 Back to dates", BookAppointment().to_token()),))
        rows.append((_main_menu_button(),))
        text = (
            f"📅 Date: {_format_date(day)}\n\n"
            "⏰ Choose a time:\n\n"
            "✅ = available | ❌ = taken"
        )
        return View(text=text, rows=tuple(rows))

    def booking_confirmed(self, appointment: Appointment) -> View:
        text = (
            "✅ Your appointment is booked!\n\n"
            f"📅 Date: {_format_date(appointment.scheduled_at)}\n"
            f"⏰ Time: {appointment.scheduled_at.strftime(TIME_FORMAT)}\n\n"
            "✂️ The barber will confirm it soon."
        )
        return View(text=text, rows=((_main_menu_button(),),))

    def my_appointments(self, appointments: Sequence[Appointment]) -> View:
        if not appointments:
            return View(text="You have no upcoming appointments.", rows=((_main_menu_button(),),))

        lines = ["📋 Your appointments:", ""]
        rows: list[tuple[Button, ...]] = []
        for idx, appointment in enumerate(appointments, start=1):
            when = appointment.scheduled_at
            lines.append(f"{idx}. {_format_date(when)} at {when.strftime(TIME_FORMAT)}")
            lines.append(f"   Status: {STATUS_LABELS[appointment.status]}")
            lines.append("")
            rows.append((Button(f"🗑️ Cancel appointment {idx}", CustomerCancel(appointment.id).to_token()),))
        rows.append((_main_menu_button(),))
        return View(text="\n".join(lines).rstrip() + "\n", rows=tuple(rows))

    def all_appointments(self, appointments: Sequence[Appointment], customers: Mapping[str, User]) -> View:
        if not appointments:
            return View(text="No upcoming appointments.", rows=((_main_menu_button(),),))

        lines = ["👥 All appointments:", ""]
        rows: list[tuple[Button, ...]] = []
        for idx, appointment in enumerate(appointments, start=1):
            customer = customers.get(appointment.user_id)
            name = customer.name if customer else "Unknown customer"
            when = appointment.scheduled_at.strftime(f"{DATE_FORMAT} {TIME_FORMAT}")
            lines.append(f"{idx}. {name}")
            lines.append(f"   {when} {STATUS_ICONS[appointment.status]}")
            lines.append("")
            if appointment.status == AppointmentStatus.PENDING:
                rows.append(
                    (
                        Button(f"✅ Approve {idx}", ApproveAppointment(appointment.id).to_token()),
                        Button(f"❌ Reject {idx}", RejectAppointment(appointment.id).to_token()),
                    )
                )
            else:
                rows.append((Button(f"🗑️ Cancel {idx}", ProviderCancel(appointment.id).to_token()),))
        rows.append((_main_menu_button(),))
        return View(text="\n".join(lines).rstrip() + "\n", rows=tuple(rows))

    def days_off(self, options: Sequence[DayOffOption]) -> View:
        rows: list[tuple[Button, ...]] = []
        for option in options:
            label = option.day.strftime(SHORT_DATE_FORMAT)
            if option.is_day_off:
                rows.append((Button(f"🏖️ {label}", RemoveDayOff(option.day).to_token()),))
            else:
                rows.append((Button(f"✅ {label}", AddDayOff(option.day).to_token()),))
        rows.append((_main_menu_button(),))
        text = (
            "🏖️ Manage days off\n\n"
            "✅ = working day\n"
            "🏖️ = day off\n\n"
            "Tap a day to toggle it:"
        )
        return View(text=text, rows=tuple(rows))

    def failure(self, text: str = GENERIC_FAILURE) -> View:
        return View(text=text)

    # Texts pushed to the other party of an appointment.

    def new_booking_notice(self, customer: User, appointment: Appointment) -> str:
        return (
            "🔔 New appointment!\n\n"
            f"👤 Customer: {customer.name}\n"
            f"📅 Date: {_format_date(appointment.scheduled_at)}\n"
            f"⏰ Time: {appointment.scheduled_at.strftime(TIME_FORMAT)}"
        )

    def status_notice(self, appointment: Appointment) -> str:
        when = self._when(appointment)
        if appointment.status == AppointmentStatus.APPROVED:
            return f"✅ Your appointment was approved!\n\n{when}\n\nSee you there! 👋"
        if appointment.status == AppointmentStatus.REJECTED:
            return f"❌ Your appointment was rejected\n\n{when}\n\nPlease choose another date or time."
        return f"⏳ Your appointment is awaiting approval\n\n{when}"

    def provider_cancel_notice(self, appointment: Appointment) -> str:
        return (
            "❌ Your appointment was cancelled by the barber\n\n"
            f"{self._when(appointment)}\n\n"
            "Please get in touch for more details."
        )

    # Acknowledgment texts.

    def notice_text(self, kind: NoticeKind) -> str:
        return NOTICE_TEXTS[kind]

    def notice_is_prominent(self, kind: NoticeKind) -> bool:
        return kind in PROMINENT_NOTICES

    def day_off_added(self, day: date) -> str:
        return f"✅ {_format_date(day)} marked as a day off"

    def day_off_removed(self, day: date) -> str:
        return f"✅ {_format_date(day)} removed from days off"

    def _when(self, appointment: Appointment) -> str:
        return (
            f"📅 Date: {_format_date(appointment.scheduled_at)}\n"
            f"⏰ Time: {appointment.scheduled_at.strftime(TIME_FORMAT)}"
        )
