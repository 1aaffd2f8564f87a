from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Callable

from barberbot.application.exceptions import (
    DayClosedError,
    DuplicateBookingError,
    DuplicateDayOffError,
    DuplicateUserError,
    SlotTakenError,
)
from barberbot.application.ports.booking_store import BookingStorePort
from barberbot.application.ports.message_platform import MessagePlatformPort
from barberbot.application.ports.session_store import SessionStorePort
from barberbot.application.use_cases import menu_renderer as texts
from barberbot.application.use_cases.menu_renderer import MenuRenderer
from barberbot.application.use_cases.notify import NotifyUseCase
from barberbot.application.utils.action_tokens import decode_action
from barberbot.application.utils.availability import (
    booking_window,
    classify_date,
    day_bounds,
    days_off_window,
    hour_slots,
    is_bookable_hour,
)
from barberbot.application.utils.credentials import hash_password, placeholder_email, placeholder_password
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
from barberbot.domain.entities.appointment import AppointmentStatus
from barberbot.domain.entities.availability import BusinessHours, DateState
from barberbot.domain.entities.event import ActionEvent, InboundEvent, StartEvent, TextEvent
from barberbot.domain.entities.session import Session, SessionStep
from barberbot.domain.entities.user import User, UserRole
from barberbot.domain.entities.view import Acknowledgment, View

COMMAND_MARKER = "/"

ActionHandler = Callable[[ActionEvent, Action], Acknowledgment | None]


class ConversationRouter:
    """
    Interprets inbound chat events against per-conversation session state.

    Start and Text events answer with a new message. Action events edit the
    message that carried the pressed button and are always acknowledged
    exactly once, silently when the handler has nothing to say.
    """

    def __init__(
        self,
        store: BookingStorePort,
        sessions: SessionStorePort,
        messenger: MessagePlatformPort,
        renderer: MenuRenderer,
        notify: NotifyUseCase,
        hours: BusinessHours | None = None,
        provider_chat_id: str | None = None,
        provider_label: str = "barber",
        placeholder_email_domain: str = "temp.com",
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._store = store
        self._sessions = sessions
        self._messenger = messenger
        self._renderer = renderer
        self._notify = notify
        self._hours = hours or BusinessHours()
        self._provider_chat_id = provider_chat_id
        self._provider_label = provider_label
        self._placeholder_email_domain = placeholder_email_domain
        self._clock = clock
        self._logger = logging.getLogger(__name__)
        self._action_handlers: dict[type, ActionHandler] = {
            BookAppointment: self._on_book_appointment,
            SelectDate: self._on_select_date,
            BookSlot: self._on_book_slot,
            MyAppointments: self._on_my_appointments,
            AllAppointments: self._on_all_appointments,
            ApproveAppointment: self._on_set_status,
            RejectAppointment: self._on_set_status,
            ProviderCancel: self._on_provider_cancel,
            CustomerCancel: self._on_customer_cancel,
            BackToMenu: self._on_back_to_menu,
            ManageDaysOff: self._on_manage_days_off,
            AddDayOff: self._on_add_day_off,
            RemoveDayOff: self._on_remove_day_off,
            Notice: self._on_notice,
            UnknownAction: self._on_unknown,
        }

    def handle(self, event: InboundEvent) -> None:
        if isinstance(event, StartEvent):
            self.handle_start(event)
        elif isinstance(event, TextEvent):
            self.handle_text(event)
        elif isinstance(event, ActionEvent):
            self.handle_action(event)
        else:
            raise TypeError(f"Unsupported event: {type(event).__name__}")

    # Entry points

    def handle_start(self, event: StartEvent) -> None:
        conversation_id = event.conversation_id
        try:
            user = self._store.find_user_by_external_id(event.external_user_id)
            if user:
                self._sessions.clear(conversation_id)
                self._messenger.render_view(conversation_id, self._renderer.greeting(user))
                return

            self._sessions.put(
                conversation_id,
                Session(step=SessionStep.AWAITING_NAME, temp_data={"external_id": event.external_user_id}),
            )
            self._messenger.render_view(conversation_id, self._renderer.registration_prompt())
            self._logger.info(
                "Registration started",
                extra={"conversation_id": conversation_id, "external_user_id": event.external_user_id},
            )
        except Exception as e:
            self._logger.exception(
                "Error handling start",
                extra={"conversation_id": conversation_id, "reason": str(e)},
            )
            self._reply_failure(conversation_id, texts.GENERIC_FAILURE)

    def handle_text(self, event: TextEvent) -> None:
        conversation_id = event.conversation_id
        if event.body.startswith(COMMAND_MARKER):
            return

        session = self._sessions.get(conversation_id)
        if session.step != SessionStep.AWAITING_NAME:
            self._logger.debug("Text outside of a flow ignored", extra={"conversation_id": conversation_id})
            return

        try:
            name = event.body.strip()
            if not name:
                self._messenger.render_view(conversation_id, self._renderer.registration_prompt())
                return

            external_id = str(session.temp_data.get("external_id") or event.external_user_id)
            user = self._register_customer(name, external_id)
            self._sessions.clear(conversation_id)
            self._messenger.render_view(conversation_id, self._renderer.registration_complete(user))
        except Exception as e:
            self._logger.exception(
                "Error creating user",
                extra={"conversation_id": conversation_id, "reason": str(e)},
            )
            self._sessions.clear(conversation_id)
            self._reply_failure(conversation_id, texts.REGISTRATION_FAILURE)

    def handle_action(self, event: ActionEvent) -> None:
        action = decode_action(event.token)
        handler = self._action_handlers.get(type(action), self._on_unknown)
        try:
            ack = handler(event, action)
        except Exception as e:
            self._logger.exception(
                "Error handling action",
                extra={
                    "conversation_id": event.conversation_id,
                    "token": event.token,
                    "action": type(action).__name__,
                    "reason": str(e),
                },
            )
            ack = Acknowledgment(texts.ACTION_FAILURE, prominent=True)
        self._acknowledge(event, ack)

    # Booking flow

    def _on_book_appointment(self, event: ActionEvent, action: BookAppointment) -> Acknowledgment | None:
        days_off = self._days_off()
        options = booking_window(self._clock().date(), days_off, self._hours)
        self._render(event, self._renderer.date_picker(options))
        return None

    def _on_select_date(self, event: ActionEvent, action: SelectDate) -> Acknowledgment | None:
        now = self._clock()
        closed = self._closed_date_ack(action.day)
        if closed:
            return closed
        if action.day < now.date():
            return self._notice_ack(NoticeKind.NO_SLOTS)

        session = self._sessions.get(event.conversation_id)
        self._sessions.put(
            event.conversation_id,
            Session(step=session.step, temp_data={"selected_date": action.day.isoformat()}),
        )

        start, end = day_bounds(action.day)
        booked = self._store.find_appointments(start=start, end=end)
        slots = hour_slots(action.day, now, [a.scheduled_at.hour for a in booked], self._hours)
        self._render(event, self._renderer.hour_picker(action.day, slots))
        return None

    def _on_book_slot(self, event: ActionEvent, action: BookSlot) -> Acknowledgment | None:
        user = self._store.find_user_by_external_id(event.external_user_id)
        if not user:
            return Acknowledgment(texts.USER_NOT_FOUND, prominent=True)

        closed = self._closed_date_ack(action.day)
        if closed:
            return closed
        if not is_bookable_hour(action.day, action.hour, self._clock(), self._hours):
            return Acknowledgment(self._renderer.notice_text(NoticeKind.SLOT_UNAVAILABLE), prominent=True)

        scheduled_at = datetime.combine(action.day, time(hour=action.hour))
        try:
            appointment = self._store.create_appointment(
                user_id=user.id,
                provider=self._provider_ref(),
                scheduled_at=scheduled_at,
                one_per_day=not user.is_provider,
            )
        except DuplicateBookingError:
            return Acknowledgment(texts.ONE_PER_DAY, prominent=True)
        except SlotTakenError:
            return Acknowledgment(self._renderer.notice_text(NoticeKind.SLOT_UNAVAILABLE), prominent=True)
        except DayClosedError:
            return self._notice_ack(NoticeKind.DAY_OFF)

        self._logger.info(
            "Appointment booked",
            extra={
                "conversation_id": event.conversation_id,
                "appointment_id": appointment.id,
                "external_user_id": event.external_user_id,
            },
        )
        self._sessions.clear(event.conversation_id)
        self._render(event, self._renderer.booking_confirmed(appointment))
        self._notify.execute(self._provider_chat_id, self._renderer.new_booking_notice(user, appointment))
        return None

    def _on_my_appointments(self, event: ActionEvent, action: MyAppointments) -> Acknowledgment | None:
        user = self._store.find_user_by_external_id(event.external_user_id)
        if not user:
            return Acknowledgment(texts.USER_NOT_FOUND, prominent=True)
        self._render_my_appointments(event, user)
        return None

    def _on_customer_cancel(self, event: ActionEvent, action: CustomerCancel) -> Acknowledgment | None:
        user = self._store.find_user_by_external_id(event.external_user_id)
        if not user:
            return Acknowledgment(texts.USER_NOT_FOUND, prominent=True)

        appointment = self._store.get_appointment(action.appointment_id)
        if appointment is None:
            self._render_my_appointments(event, user)
            return Acknowledgment(texts.APPOINTMENT_NOT_FOUND, prominent=True)
        if appointment.user_id != user.id and not user.is_provider:
            return self._permission_denied(event, action)

        self._store.delete_appointment(appointment.id)
        self._logger.info(
            "Appointment cancelled by customer",
            extra={"conversation_id": event.conversation_id, "appointment_id": appointment.id},
        )
        self._render_my_appointments(event, user)
        return Acknowledgment(texts.CANCELLED_ACK, prominent=True)

    # Provider flow

    def _on_all_appointments(self, event: ActionEvent, action: AllAppointments) -> Acknowledgment | None:
        if not self._acting_provider(event):
            return self._permission_denied(event, action)
        self._render_all_appointments(event)
        return None

    def _on_set_status(
        self, event: ActionEvent, action: ApproveAppointment | RejectAppointment
    ) -> Acknowledgment | None:
        if not self._acting_provider(event):
            return self._permission_denied(event, action)

        appointment = self._store.get_appointment(action.appointment_id)
        if appointment is None:
            return Acknowledgment(texts.APPOINTMENT_NOT_FOUND, prominent=True)

        if isinstance(action, ApproveAppointment):
            status, ack_text = AppointmentStatus.APPROVED, texts.APPROVED_ACK
        else:
            status, ack_text = AppointmentStatus.REJECTED, texts.REJECTED_ACK

        updated = self._store.update_appointment_status(appointment.id, status)
        if updated is None:
            return Acknowledgment(texts.APPOINTMENT_NOT_FOUND, prominent=True)

        if appointment.status != status:
            self._logger.info(
                "Appointment status changed",
                extra={"appointment_id": appointment.id, "reason": status.value},
            )
            self._notify_customer(appointment.user_id, self._renderer.status_notice(updated))

        self._render_all_appointments(event)
        return Acknowledgment(ack_text, prominent=True)

    def _on_provider_cancel(self, event: ActionEvent, action: ProviderCancel) -> Acknowledgment | None:
        if not self._acting_provider(event):
            return self._permission_denied(event, action)

        appointment = self._store.get_appointment(action.appointment_id)
        if appointment is None:
            return Acknowledgment(texts.APPOINTMENT_NOT_FOUND, prominent=True)

        if self._store.delete_appointment(appointment.id):
            self._logger.info(
                "Appointment cancelled by provider",
                extra={"conversation_id": event.conversation_id, "appointment_id": appointment.id},
            )
            self._notify_customer(appointment.user_id, self._renderer.provider_cancel_notice(appointment))

        self._render_all_appointments(event)
        return Acknowledgment(texts.CANCELLED_ACK, prominent=True)

    def _on_manage_days_off(self, event: ActionEvent, action: ManageDaysOff) -> Acknowledgment | None:
        if not self._acting_provider(event):
            return self._permission_denied(event, action)
        self._render_days_off(event)
        return None

    def _on_add_day_off(self, event: ActionEvent, action: AddDayOff) -> Acknowledgment | None:
        if not self._acting_provider(event):
            return self._permission_denied(event, action)
        if classify_date(action.day, (), self._hours) == DateState.CLOSED_WEEKLY:
            return self._notice_ack(NoticeKind.CLOSED_WEEKLY)

        try:
            self._store.create_day_off(action.day)
        except DuplicateDayOffError:
            self._logger.info("Day off already declared", extra={"reason": action.day.isoformat()})

        self._render_days_off(event)
        return Acknowledgment(self._renderer.day_off_added(action.day), prominent=True)

    def _on_remove_day_off(self, event: ActionEvent, action: RemoveDayOff) -> Acknowledgment | None:
        if not self._acting_provider(event):
            return self._permission_denied(event, action)

        self._store.delete_day_off(action.day)
        self._render_days_off(event)
        return Acknowledgment(self._renderer.day_off_removed(action.day), prominent=True)

    # Navigation and dead ends

    def _on_back_to_menu(self, event: ActionEvent, action: BackToMenu) -> Acknowledgment | None:
        user = self._store.find_user_by_external_id(event.external_user_id)
        self._render(event, self._renderer.main_menu(bool(user and user.is_provider)))
        return None

    def _on_notice(self, event: ActionEvent, action: Notice) -> Acknowledgment | None:
        return self._notice_ack(action.kind)

    def _on_unknown(self, event: ActionEvent, action: Action) -> Acknowledgment | None:
        self._logger.debug("Unrecognized action token", extra={"token": event.token})
        return None

    # Helpers

    def _register_customer(self, name: str, external_id: str) -> User:
        try:
            user = self._store.create_user(
                name=name,
                email=placeholder_email(external_id, self._placeholder_email_domain),
                password_hash=hash_password(placeholder_password(external_id)),
                role=UserRole.CUSTOMER,
                external_id=external_id,
            )
        except DuplicateUserError:
            existing = self._store.find_user_by_external_id(external_id)
            if existing is None:
                raise
            return existing
        self._logger.info("User registered", extra={"external_user_id": external_id})
        return user

    def _acting_provider(self, event: ActionEvent) -> User | None:
        user = self._store.find_user_by_external_id(event.external_user_id)
        if user and user.is_provider:
            return user
        return None

    def _permission_denied(self, event: ActionEvent, action: Action) -> Acknowledgment:
        self._logger.warning(
            "Permission denied",
            extra={
                "conversation_id": event.conversation_id,
                "external_user_id": event.external_user_id,
                "action": type(action).__name__,
            },
        )
        return Acknowledgment(texts.PERMISSION_DENIED, prominent=True)

    def _provider_ref(self) -> str:
        provider = self._store.find_provider()
        return provider.id if provider else self._provider_label

    def _days_off(self) -> set[date]:
        return {day_off.day for day_off in self._store.list_days_off()}

    def _closed_date_ack(self, day: date) -> Acknowledgment | None:
        state = classify_date(day, self._days_off(), self._hours)
        if state == DateState.CLOSED_WEEKLY:
            return self._notice_ack(NoticeKind.CLOSED_WEEKLY)
        if state == DateState.CLOSED_DECLARED:
            return self._notice_ack(NoticeKind.DAY_OFF)
        return None

    def _notice_ack(self, kind: NoticeKind) -> Acknowledgment:
        return Acknowledgment(self._renderer.notice_text(kind), prominent=self._renderer.notice_is_prominent(kind))

    def _notify_customer(self, user_id: str, text: str) -> None:
        customer = self._store.get_user(user_id)
        if customer and customer.external_id:
            self._notify.execute(customer.external_id, text)

    def _render_my_appointments(self, event: ActionEvent, user: User) -> None:
        appointments = self._store.find_appointments(user_id=user.id, start=self._clock(), ascending=True)
        self._render(event, self._renderer.my_appointments(appointments))

    def _render_all_appointments(self, event: ActionEvent) -> None:
        appointments = self._store.find_appointments(start=self._clock(), ascending=True)
        customers: dict[str, User] = {}
        for appointment in appointments:
            if appointment.user_id not in customers:
                customer = self._store.get_user(appointment.user_id)
                if customer:
                    customers[appointment.user_id] = customer
        self._render(event, self._renderer.all_appointments(appointments, customers))

    def _render_days_off(self, event: ActionEvent) -> None:
        options = days_off_window(self._clock().date(), self._days_off(), self._hours)
        self._render(event, self._renderer.days_off(options))

    def _render(self, event: ActionEvent, view: View) -> None:
        self._messenger.render_view(event.conversation_id, view, message_id=event.message_id)

    def _acknowledge(self, event: ActionEvent, ack: Acknowledgment | None) -> None:
        if not event.callback_id:
            return
        ack = ack or Acknowledgment()
        try:
            self._messenger.acknowledge(event.callback_id, text=ack.text, prominent=ack.prominent)
        except Exception as e:
            self._logger.exception(
                "Failed to acknowledge action",
                extra={"conversation_id": event.conversation_id, "token": event.token, "reason": str(e)},
            )

    def _reply_failure(self, conversation_id: str, text: str) -> None:
        try:
            self._messenger.render_view(conversation_id, self._renderer.failure(text))
        except Exception as e:
            self._logger.exception(
                "Failed to deliver failure notice",
                extra={"conversation_id": conversation_id, "reason": str(e)},
            )
