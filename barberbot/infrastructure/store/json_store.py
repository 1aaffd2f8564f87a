from __future__ import annotations

import json
import logging
import os
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable

from barberbot.domain.entities.appointment import Appointment, AppointmentStatus
from barberbot.domain.entities.day_off import DEFAULT_DAY_OFF_REASON, DayOff
from barberbot.domain.entities.user import User, UserRole
from barberbot.infrastructure.store.memory_store import MemoryBookingStore

STORE_VERSION = 1

FileSignature = tuple[int, int, int]


class JsonBookingStore(MemoryBookingStore):
    """
    Document store persisted to a single JSON file.

    The whole document is rewritten atomically after every mutation. The file
    is read again whenever another process has replaced it since the last
    access, so admin scripts can write while the server runs. Two processes
    writing at the same moment are last-writer-wins.
    """

    def __init__(self, data_dir: str = "./data", clock: Callable[[], datetime] = datetime.now) -> None:
        super().__init__(clock=clock)
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._file_path = self._data_dir / "store.json"
        self._signature: FileSignature | None = None
        self._logger = logging.getLogger(__name__)
        with self._lock:
            self._refresh()

    def _refresh(self) -> None:
        """Reload records if the file changed on disk. A missing file keeps the current records."""
        signature = self._file_signature()
        if signature is None or signature == self._signature:
            return

        try:
            with open(self._file_path, "r", encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError:
            return
        try:
            data = json.loads(raw)
            users = [self._deserialize_user(u) for u in data.get("users", [])]
            appointments = [self._deserialize_appointment(a) for a in data.get("appointments", [])]
            days_off = [self._deserialize_day_off(d) for d in data.get("days_off", [])]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            self._quarantine(e)
            return

        self._users = {u.id: u for u in users}
        self._appointments = {a.id: a for a in appointments}
        self._days_off = {d.day: d for d in days_off}
        self._signature = signature

    def _quarantine(self, error: Exception) -> None:
        """Move an unreadable file aside so the next write cannot overwrite its contents."""
        target = self._file_path.with_name(f"{self._file_path.name}.corrupt-{self._clock():%Y%m%d%H%M%S%f}")
        self._file_path.rename(target)
        self._signature = None
        self._logger.error(
            "Store file unreadable, moved aside",
            extra={"reason": f"{error} -> {target.name}"},
        )

    def _file_signature(self) -> FileSignature | None:
        # Every write replaces the file, so the inode changes along with mtime.
        try:
            stat = os.stat(self._file_path)
        except FileNotFoundError:
            return None
        return (stat.st_ino, stat.st_mtime_ns, stat.st_size)

    def _persist(self) -> None:
        data = {
            "version": STORE_VERSION,
            "users": [self._serialize_user(u) for u in self._users.values()],
            "appointments": [self._serialize_appointment(a) for a in self._appointments.values()],
            "days_off": [self._serialize_day_off(d) for d in self._days_off.values()],
        }
        temp_path = self._file_path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            # Atomic rename
            temp_path.replace(self._file_path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise
        self._signature = self._file_signature()

    def _serialize_user(self, user: User) -> dict[str, Any]:
        return {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "role": user.role.value,
            "password_hash": user.password_hash,
            "external_id": user.external_id,
        }

    def _deserialize_user(self, data: dict[str, Any]) -> User:
        external_id = data.get("external_id")
        return User(
            id=data["id"],
            name=data["name"],
            email=data["email"],
            role=UserRole(data.get("role", UserRole.CUSTOMER.value)),
            password_hash=data.get("password_hash", ""),
            external_id=str(external_id) if external_id is not None else None,
        )

    def _serialize_appointment(self, appointment: Appointment) -> dict[str, Any]:
        return {
            "id": appointment.id,
            "user_id": appointment.user_id,
            "provider": appointment.provider,
            "scheduled_at": appointment.scheduled_at.isoformat(),
            "status": appointment.status.value,
            "created_at": appointment.created_at.isoformat() if appointment.created_at else None,
        }

    def _deserialize_appointment(self, data: dict[str, Any]) -> Appointment:
        return Appointment(
            id=data["id"],
            user_id=data["user_id"],
            provider=data.get("provider", ""),
            scheduled_at=datetime.fromisoformat(data["scheduled_at"]),
            status=AppointmentStatus(data.get("status", AppointmentStatus.PENDING.value)),
            created_at=_parse_datetime(data.get("created_at")),
        )

    def _serialize_day_off(self, day_off: DayOff) -> dict[str, Any]:
        return {
            "date": day_off.day.isoformat(),
            "reason": day_off.reason,
            "created_at": day_off.created_at.isoformat() if day_off.created_at else None,
        }

    def _deserialize_day_off(self, data: dict[str, Any]) -> DayOff:
        return DayOff(
            day=date.fromisoformat(data["date"]),
            reason=data.get("reason") or DEFAULT_DAY_OFF_REASON,
            created_at=_parse_datetime(data.get("created_at")),
        )


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except (ValueError, TypeError):
        return None
