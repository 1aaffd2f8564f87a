from __future__ import annotations

import threading
import uuid
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Iterator

from barberbot.application.exceptions import (
    DayClosedError,
    DuplicateBookingError,
    DuplicateDayOffError,
    DuplicateUserError,
    SlotTakenError,
)
from barberbot.application.ports.booking_store import BookingStorePort
from barberbot.application.ports.session_store import SessionStorePort
from barberbot.application.utils.availability import day_bounds
from barberbot.domain.entities.appointment import Appointment, AppointmentStatus
from barberbot.domain.entities.day_off import DEFAULT_DAY_OFF_REASON, DayOff
from barberbot.domain.entities.session import Session
from barberbot.domain.entities.user import User, UserRole


class MemorySessionStore(SessionStorePort):
    """Process-local sessions. Least recently used entries are evicted past max_entries."""

    def __init__(self, max_entries: int = 10_000) -> None:
        self._sessions: OrderedDict[str, Session] = OrderedDict()
        self._max_entries = max_entries
        self._lock = threading.Lock()

    def get(self, conversation_id: str) -> Session:
        with self._lock:
            session = self._sessions.get(conversation_id)
            if session is None:
                session = Session()
                self._store(conversation_id, session)
            else:
                self._sessions.move_to_end(conversation_id)
            return session

    def put(self, conversation_id: str, session: Session) -> None:
        with self._lock:
            self._store(conversation_id, session)

    def clear(self, conversation_id: str) -> None:
        with self._lock:
            self._sessions.pop(conversation_id, None)

    def __len__(self) -> int:
        return len(self._sessions)

    def _store(self, conversation_id: str, session: Session) -> None:
        self._sessions[conversation_id] = session
        self._sessions.move_to_end(conversation_id)
        while len(self._sessions) > self._max_entries:
            self._sessions.popitem(last=False)


class MemoryBookingStore(BookingStorePort):
    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._users: dict[str, User] = {}
        self._appointments: dict[str, Appointment] = {}
        self._days_off: dict[date, DayOff] = {}
        self._clock = clock
        # Every check-then-write below runs inside this lock.
        self._lock = threading.RLock()

    # Users

    def find_user_by_external_id(self, external_id: str) -> User | None:
        with self._reading():
            return next((u for u in self._users.values() if u.external_id == external_id), None)

    def get_user(self, user_id: str) -> User | None:
        with self._reading():
            return self._users.get(user_id)

    def find_provider(self) -> User | None:
        with self._reading():
            return next((u for u in self._users.values() if u.role == UserRole.PROVIDER), None)

    def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: UserRole,
        external_id: str | None = None,
    ) -> User:
        with self._writing():
            for existing in self._users.values():
                if external_id is not None and existing.external_id == external_id:
                    raise DuplicateUserError(f"external id {external_id} already registered")
                if existing.email == email:
                    raise DuplicateUserError(f"email {email} already registered")
            user = User(
                id=_new_id(),
                name=name,
                email=email,
                role=role,
                password_hash=password_hash,
                external_id=external_id,
            )
            self._users[user.id] = user
            return user

    def set_user_role(self, user_id: str, role: UserRole) -> User | None:
        with self._writing():
            user = self._users.get(user_id)
            if user is None:
                return None
            user = replace(user, role=role)
            self._users[user_id] = user
            return user

    # Appointments

    def find_appointments(
        self,
        user_id: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        ascending: bool = False,
    ) -> list[Appointment]:
        with self._reading():
            matches = [
                a
                for a in self._appointments.values()
                if (user_id is None or a.user_id == user_id)
                and (start is None or a.scheduled_at >= start)
                and (end is None or a.scheduled_at < end)
            ]
        if ascending:
            matches.sort(key=lambda a: a.scheduled_at)
        return matches

    def get_appointment(self, appointment_id: str) -> Appointment | None:
        with self._reading():
            return self._appointments.get(appointment_id)

    def create_appointment(
        self,
        user_id: str,
        provider: str,
        scheduled_at: datetime,
        one_per_day: bool = True,
    ) -> Appointment:
        day = scheduled_at.date()
        start, end = day_bounds(day)
        with self._writing():
            if day in self._days_off:
                raise DayClosedError(f"{day.isoformat()} is a day off")
            same_day = [a for a in self._appointments.values() if start <= a.scheduled_at < end]
            if one_per_day and any(a.user_id == user_id for a in same_day):
                raise DuplicateBookingError(f"user {user_id} already booked {day.isoformat()}")
            if any(a.scheduled_at == scheduled_at for a in same_day):
                raise SlotTakenError(f"{scheduled_at.isoformat()} is taken")

            appointment = Appointment(
                id=_new_id(),
                user_id=user_id,
                provider=provider,
                scheduled_at=scheduled_at,
                status=AppointmentStatus.PENDING,
                created_at=self._clock(),
            )
            self._appointments[appointment.id] = appointment
            return appointment

    def update_appointment_status(self, appointment_id: str, status: AppointmentStatus) -> Appointment | None:
        with self._writing():
            appointment = self._appointments.get(appointment_id)
            if appointment is None:
                return None
            if appointment.status != status:
                appointment = replace(appointment, status=status)
                self._appointments[appointment_id] = appointment
            return appointment

    def delete_appointment(self, appointment_id: str) -> bool:
        with self._writing():
            return self._appointments.pop(appointment_id, None) is not None

    # Days off

    def list_days_off(self) -> list[DayOff]:
        with self._reading():
            return sorted(self._days_off.values(), key=lambda d: d.day)

    def create_day_off(self, day: date, reason: str | None = None) -> DayOff:
        with self._writing():
            if day in self._days_off:
                raise DuplicateDayOffError(f"{day.isoformat()} is already a day off")
            day_off = DayOff(day=day, reason=reason or DEFAULT_DAY_OFF_REASON, created_at=self._clock())
            self._days_off[day] = day_off
            return day_off

    def delete_day_off(self, day: date) -> bool:
        with self._writing():
            return self._days_off.pop(day, None) is not None

    # Transactions

    @contextmanager
    def _reading(self) -> Iterator[None]:
        with self._lock:
            self._refresh()
            yield

    @contextmanager
    def _writing(self) -> Iterator[None]:
        """
        Run a mutation as one unit: persisted when the block exits normally,
        rolled back in memory when the block or the persist step raises.
        """
        with self._lock:
            self._refresh()
            snapshot = (dict(self._users), dict(self._appointments), dict(self._days_off))
            try:
                yield
                if self._changed(snapshot):
                    self._persist()
            except Exception:
                self._users, self._appointments, self._days_off = snapshot
                raise

    def _changed(self, snapshot: tuple[dict, dict, dict]) -> bool:
        return snapshot != (self._users, self._appointments, self._days_off)

    def _refresh(self) -> None:
        """Hook for durable subclasses to pick up changes made by other processes."""

    def _persist(self) -> None:
        """Hook for durable subclasses, called with the lock held after every mutation."""


def _new_id() -> str:
    return uuid.uuid4().hex
