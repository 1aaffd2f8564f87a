from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime

from barberbot.domain.entities.appointment import Appointment, AppointmentStatus
from barberbot.domain.entities.day_off import DayOff
from barberbot.domain.entities.user import User, UserRole


class BookingStorePort(ABC):
    @abstractmethod
    def find_user_by_external_id(self, external_id: str) -> User | None:
        raise NotImplementedError

    @abstractmethod
    def get_user(self, user_id: str) -> User | None:
        raise NotImplementedError

    @abstractmethod
    def find_provider(self) -> User | None:
        """Return the provider user, or None if nobody holds the provider role yet."""
        raise NotImplementedError

    @abstractmethod
    def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: UserRole,
        external_id: str | None = None,
    ) -> User:
        """Insert a user. Raises DuplicateUserError if external_id or email is taken."""
        raise NotImplementedError

    @abstractmethod
    def set_user_role(self, user_id: str, role: UserRole) -> User | None:
        raise NotImplementedError

    @abstractmethod
    def find_appointments(
        self,
        user_id: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        ascending: bool = False,
    ) -> list[Appointment]:
        """
        Find appointments matching all given filters.
        start is inclusive, end is exclusive. Unsorted unless ascending is set.
        """
        raise NotImplementedError

    @abstractmethod
    def get_appointment(self, appointment_id: str) -> Appointment | None:
        raise NotImplementedError

    @abstractmethod
    def create_appointment(
        self,
        user_id: str,
        provider: str,
        scheduled_at: datetime,
        one_per_day: bool = True,
    ) -> Appointment:
        """
        Insert a pending appointment as a single conditional write.

        Raises DayClosedError if the date is a declared day off,
        DuplicateBookingError if one_per_day is set and the user already has an
        appointment that day, SlotTakenError if any appointment holds the slot.
        """
        raise NotImplementedError

    @abstractmethod
    def update_appointment_status(self, appointment_id: str, status: AppointmentStatus) -> Appointment | None:
        raise NotImplementedError

    @abstractmethod
    def delete_appointment(self, appointment_id: str) -> bool:
        """Delete by id. Returns True if a record was removed."""
        raise NotImplementedError

    @abstractmethod
    def list_days_off(self) -> list[DayOff]:
        raise NotImplementedError

    @abstractmethod
    def create_day_off(self, day: date, reason: str | None = None) -> DayOff:
        """Insert a day off. Raises DuplicateDayOffError if the date is already off."""
        raise NotImplementedError

    @abstractmethod
    def delete_day_off(self, day: date) -> bool:
        raise NotImplementedError
