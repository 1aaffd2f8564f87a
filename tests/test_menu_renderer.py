"""
Tests for rendered views and notice texts.
"""

from __future__ import annotations

from datetime import date, datetime

from barberbot.application.use_cases.menu_renderer import SLOTS_PER_ROW, MenuRenderer
from barberbot.domain.entities.appointment import Appointment, AppointmentStatus
from barberbot.domain.entities.availability import DateOption, DateState, DayOffOption, HourSlot
from barberbot.domain.entities.user import User, UserRole

renderer = MenuRenderer(business_name="Test Barbershop")
DAY = date(2026, 10, 20)


def _user(role: UserRole = UserRole.CUSTOMER) -> User:
    return User(id="user1", name="Dana", email="dana@example.com", role=role, password_hash="x", external_id="u1")


def _appointment(status: AppointmentStatus = AppointmentStatus.PENDING) -> Appointment:
    return Appointment(
        id="appt1",
        user_id="user1",
        provider="barber",
        scheduled_at=datetime(2026, 10, 20, 9),
        status=status,
    )


def test_hour_picker_rows_of_three_with_partial_last_row():
    slots = [HourSlot(hour=h, occupied=False) for h in range(9, 19)]

    view = renderer.hour_picker(DAY, slots)

    slot_rows = view.rows[:-2]
    assert [len(row) for row in slot_rows] == [SLOTS_PER_ROW] * 3 + [1]
    assert slot_rows[0][0].label == "✅ 09:00"
    assert slot_rows[0][0].token == "book_slot_2026-10-20_9"
    assert view.tokens()[-2:] == ["book_appointment", "back_to_menu"]


def test_hour_picker_without_slots_offers_notice():
    view = renderer.hour_picker(DAY, [])

    assert view.tokens() == ["no_slots", "book_appointment", "back_to_menu"]


def test_date_picker_labels():
    options = [
        DateOption(day=date(2026, 10, 19), state=DateState.SELECTABLE, offset=0),
        DateOption(day=date(2026, 10, 20), state=DateState.CLOSED_DECLARED, offset=1),
        DateOption(day=date(2026, 10, 21), state=DateState.SELECTABLE, offset=2),
        DateOption(day=date(2026, 10, 24), state=DateState.CLOSED_WEEKLY, offset=5),
    ]

    view = renderer.date_picker(options)
    labels = [row[0].label for row in view.rows]

    assert labels[0] == "Today"
    assert labels[1].endswith("Tomorrow (day off)")
    assert labels[2].startswith("21/10")
    assert labels[3].endswith("(closed)")
    assert view.tokens()[-1] == "back_to_menu"


def test_every_navigable_view_returns_to_main_menu():
    appointment = _appointment()
    views = [
        renderer.date_picker([]),
        renderer.hour_picker(DAY, []),
        renderer.booking_confirmed(appointment),
        renderer.my_appointments([]),
        renderer.my_appointments([appointment]),
        renderer.all_appointments([], {}),
        renderer.all_appointments([appointment], {"user1": _user()}),
        renderer.days_off([DayOffOption(day=DAY, is_day_off=True)]),
    ]

    assert all(view.tokens()[-1] == "back_to_menu" for view in views)


def test_main_menu_depends_on_role():
    assert len(renderer.greeting(_user()).rows) == 2
    assert len(renderer.greeting(_user(UserRole.PROVIDER)).rows) == 4
    assert "Dana" in renderer.greeting(_user()).text
    assert "Test Barbershop" in renderer.registration_prompt().text


def test_all_appointments_handles_missing_customer():
    view = renderer.all_appointments([_appointment(AppointmentStatus.REJECTED)], {})

    assert "Unknown customer" in view.text
    assert view.tokens() == ["barber_cancel_appt1", "back_to_menu"]


def test_days_off_toggle_tokens():
    view = renderer.days_off(
        [DayOffOption(day=DAY, is_day_off=False), DayOffOption(day=date(2026, 10, 21), is_day_off=True)]
    )

    assert view.tokens() == ["add_day_off_2026-10-20", "remove_day_off_2026-10-21", "back_to_menu"]


def test_status_notices_include_date_and_time():
    approved = renderer.status_notice(_appointment(AppointmentStatus.APPROVED))
    rejected = renderer.status_notice(_appointment(AppointmentStatus.REJECTED))
    cancelled = renderer.provider_cancel_notice(_appointment())

    for text in (approved, rejected, cancelled):
        assert "20/10/2026" in text
        assert "09:00" in text
    assert "approved" in approved
    assert "rejected" in rejected


def test_new_booking_notice_names_customer():
    text = renderer.new_booking_notice(_user(), _appointment())

    assert "Dana" in text
    assert "20/10/2026" in text
