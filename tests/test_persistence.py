"""
Tests for booking store persistence and conditional writes.
"""

from __future__ import annotations

import json
import tempfile
import threading
from datetime import date, datetime
from pathlib import Path

import pytest

from barberbot.application.exceptions import (
    DayClosedError,
    DuplicateBookingError,
    DuplicateDayOffError,
    DuplicateUserError,
    SlotTakenError,
)
from barberbot.domain.entities.appointment import AppointmentStatus
from barberbot.domain.entities.day_off import DEFAULT_DAY_OFF_REASON
from barberbot.domain.entities.session import Session, SessionStep
from barberbot.domain.entities.user import UserRole
from barberbot.infrastructure.store.json_store import JsonBookingStore
from barberbot.infrastructure.store.memory_store import MemoryBookingStore, MemorySessionStore

NOW = datetime(2026, 10, 19, 14, 30)


def _clock() -> datetime:
    return NOW


def _customer(store, external_id: str = "u1", name: str = "Dana"):
    return store.create_user(
        name=name,
        email=f"telegram_{external_id}@temp.com",
        password_hash="hash",
        role=UserRole.CUSTOMER,
        external_id=external_id,
    )


def test_json_store_persistence():
    """Records written by one store instance are read back by the next."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBookingStore(data_dir=tmpdir, clock=_clock)
        user = _customer(store)
        appointment = store.create_appointment(
            user_id=user.id, provider="barber", scheduled_at=datetime(2026, 10, 20, 10)
        )
        store.update_appointment_status(appointment.id, AppointmentStatus.APPROVED)
        store.create_day_off(date(2026, 10, 21))

        reloaded = JsonBookingStore(data_dir=tmpdir, clock=_clock)

        assert reloaded.find_user_by_external_id("u1") == user
        restored = reloaded.get_appointment(appointment.id)
        assert restored.status == AppointmentStatus.APPROVED
        assert restored.scheduled_at == datetime(2026, 10, 20, 10)
        assert restored.created_at == NOW
        days_off = reloaded.list_days_off()
        assert [d.day for d in days_off] == [date(2026, 10, 21)]
        assert days_off[0].reason == DEFAULT_DAY_OFF_REASON


def test_json_store_writes_versioned_document():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBookingStore(data_dir=tmpdir, clock=_clock)
        _customer(store)

        data = json.loads((Path(tmpdir) / "store.json").read_text(encoding="utf-8"))

        assert data["version"] == 1
        assert data["users"][0]["email"] == "telegram_u1@temp.com"
        assert data["appointments"] == []
        assert not (Path(tmpdir) / "store.json.tmp").exists()


def test_json_store_deletions_persist():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBookingStore(data_dir=tmpdir, clock=_clock)
        user = _customer(store)
        appointment = store.create_appointment(
            user_id=user.id, provider="barber", scheduled_at=datetime(2026, 10, 20, 10)
        )
        store.create_day_off(date(2026, 10, 21))

        assert store.delete_appointment(appointment.id)
        assert store.delete_day_off(date(2026, 10, 21))
        assert not store.delete_appointment(appointment.id)

        reloaded = JsonBookingStore(data_dir=tmpdir, clock=_clock)
        assert reloaded.find_appointments() == []
        assert reloaded.list_days_off() == []


def test_json_store_moves_corrupted_file_aside():
    """An unreadable file is kept byte for byte instead of being overwritten."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBookingStore(data_dir=tmpdir, clock=_clock)
        _customer(store, "u1", "Dana")
        _customer(store, "u2", "Noa")
        path = Path(tmpdir) / "store.json"
        damaged = path.read_bytes()[:40]
        path.write_bytes(damaged)

        reopened = JsonBookingStore(data_dir=tmpdir, clock=_clock)
        assert reopened.find_appointments() == []
        assert reopened.find_user_by_external_id("u1") is None
        _customer(reopened, "u3", "Avi")

        moved = list(Path(tmpdir).glob("store.json.corrupt-*"))
        assert len(moved) == 1
        assert moved[0].read_bytes() == damaged
        data = json.loads(path.read_text(encoding="utf-8"))
        assert [u["external_id"] for u in data["users"]] == ["u3"]


def test_json_store_rolls_back_when_write_fails(monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBookingStore(data_dir=tmpdir, clock=_clock)
        user = _customer(store)
        appointment = store.create_appointment(
            user_id=user.id, provider="barber", scheduled_at=datetime(2026, 10, 20, 10)
        )

        def disk_full():
            raise OSError("No space left on device")

        monkeypatch.setattr(store, "_persist", disk_full)

        with pytest.raises(OSError):
            store.create_appointment(user_id=user.id, provider="barber", scheduled_at=datetime(2026, 10, 21, 10))
        with pytest.raises(OSError):
            store.update_appointment_status(appointment.id, AppointmentStatus.APPROVED)
        with pytest.raises(OSError):
            store.delete_appointment(appointment.id)
        with pytest.raises(OSError):
            store.create_day_off(date(2026, 10, 22))
        with pytest.raises(OSError):
            store.set_user_role(user.id, UserRole.PROVIDER)
        with pytest.raises(OSError):
            _customer(store, "u2", "Noa")

        assert [a.id for a in store.find_appointments()] == [appointment.id]
        assert store.get_appointment(appointment.id).status == AppointmentStatus.PENDING
        assert store.list_days_off() == []
        assert store.find_provider() is None
        assert store.find_user_by_external_id("u2") is None

        monkeypatch.undo()
        reloaded = JsonBookingStore(data_dir=tmpdir, clock=_clock)
        assert [a.id for a in reloaded.find_appointments()] == [appointment.id]


def test_unchanged_writes_do_not_touch_disk(monkeypatch):
    store = MemoryBookingStore(clock=_clock)
    user = _customer(store)
    appointment = store.create_appointment(
        user_id=user.id, provider="barber", scheduled_at=datetime(2026, 10, 20, 10)
    )
    writes = []
    monkeypatch.setattr(store, "_persist", lambda: writes.append(1))

    store.update_appointment_status(appointment.id, AppointmentStatus.PENDING)
    store.delete_appointment("missing")
    store.delete_day_off(date(2026, 10, 22))

    assert writes == []


def test_json_stores_sharing_a_directory_see_each_others_writes():
    """A provider promoted by the admin script survives the server's next write."""
    with tempfile.TemporaryDirectory() as tmpdir:
        server = JsonBookingStore(data_dir=tmpdir, clock=_clock)
        user = _customer(server)

        script = JsonBookingStore(data_dir=tmpdir, clock=_clock)
        script.set_user_role(user.id, UserRole.PROVIDER)

        assert server.find_provider().id == user.id
        _customer(server, "u2", "Noa")

        reloaded = JsonBookingStore(data_dir=tmpdir, clock=_clock)
        assert reloaded.find_provider().id == user.id
        assert reloaded.find_user_by_external_id("u2") is not None


def test_duplicate_users_are_refused():
    store = MemoryBookingStore(clock=_clock)
    _customer(store)

    with pytest.raises(DuplicateUserError):
        _customer(store)
    with pytest.raises(DuplicateUserError):
        store.create_user(
            name="Other",
            email="telegram_u1@temp.com",
            password_hash="hash",
            role=UserRole.CUSTOMER,
            external_id="u2",
        )


def test_create_appointment_conditions():
    store = MemoryBookingStore(clock=_clock)
    dana = _customer(store)
    noa = _customer(store, "u2", "Noa")
    slot = datetime(2026, 10, 20, 10)
    store.create_appointment(user_id=dana.id, provider="barber", scheduled_at=slot)

    with pytest.raises(DuplicateBookingError):
        store.create_appointment(user_id=dana.id, provider="barber", scheduled_at=datetime(2026, 10, 20, 11))
    with pytest.raises(SlotTakenError):
        store.create_appointment(user_id=noa.id, provider="barber", scheduled_at=slot)
    with pytest.raises(SlotTakenError):
        store.create_appointment(user_id=dana.id, provider="barber", scheduled_at=slot, one_per_day=False)

    store.create_day_off(date(2026, 10, 21))
    with pytest.raises(DayClosedError):
        store.create_appointment(user_id=noa.id, provider="barber", scheduled_at=datetime(2026, 10, 21, 10))

    assert len(store.find_appointments()) == 1


def test_find_appointments_range_and_order():
    store = MemoryBookingStore(clock=_clock)
    dana = _customer(store)
    noa = _customer(store, "u2", "Noa")
    late = store.create_appointment(user_id=dana.id, provider="barber", scheduled_at=datetime(2026, 10, 22, 9))
    early = store.create_appointment(user_id=noa.id, provider="barber", scheduled_at=datetime(2026, 10, 20, 9))
    store.create_appointment(user_id=noa.id, provider="barber", scheduled_at=datetime(2026, 10, 23, 0))

    found = store.find_appointments(start=datetime(2026, 10, 20), end=datetime(2026, 10, 23), ascending=True)

    assert [a.id for a in found] == [early.id, late.id]
    assert [a.id for a in store.find_appointments(user_id=dana.id)] == [late.id]


def test_status_update_and_roles():
    store = MemoryBookingStore(clock=_clock)
    user = _customer(store)
    appointment = store.create_appointment(
        user_id=user.id, provider="barber", scheduled_at=datetime(2026, 10, 20, 10)
    )

    assert store.update_appointment_status("missing", AppointmentStatus.APPROVED) is None
    assert store.update_appointment_status(appointment.id, AppointmentStatus.REJECTED).status == (
        AppointmentStatus.REJECTED
    )

    assert store.find_provider() is None
    store.set_user_role(user.id, UserRole.PROVIDER)
    assert store.find_provider().id == user.id
    assert store.set_user_role("missing", UserRole.PROVIDER) is None


def test_duplicate_day_off_is_refused():
    store = MemoryBookingStore(clock=_clock)
    store.create_day_off(date(2026, 10, 21), reason="Holiday")

    with pytest.raises(DuplicateDayOffError):
        store.create_day_off(date(2026, 10, 21))
    assert store.list_days_off()[0].reason == "Holiday"
    assert not store.delete_day_off(date(2026, 10, 22))


def test_session_store_defaults_and_clear():
    sessions = MemorySessionStore()

    assert sessions.get("c1") == Session()
    sessions.put("c1", Session(step=SessionStep.AWAITING_NAME, temp_data={"external_id": "u1"}))
    assert sessions.get("c1").step == SessionStep.AWAITING_NAME

    sessions.clear("c1")
    assert sessions.get("c1").step == SessionStep.NONE
    sessions.clear("never-seen")


def test_session_store_evicts_least_recently_used():
    sessions = MemorySessionStore(max_entries=2)
    sessions.put("a", Session(step=SessionStep.AWAITING_NAME))
    sessions.put("b", Session(step=SessionStep.AWAITING_NAME))
    sessions.get("a")
    sessions.put("c", Session(step=SessionStep.AWAITING_NAME))

    assert len(sessions) == 2
    assert sessions.get("a").step == SessionStep.AWAITING_NAME
    assert sessions.get("b").step == SessionStep.NONE


def test_concurrent_bookings_for_one_slot_admit_exactly_one():
    store = MemoryBookingStore(clock=_clock)
    customers = [_customer(store, f"u{i}", f"Customer {i}") for i in range(8)]
    slot = datetime(2026, 10, 20, 10)
    barrier = threading.Barrier(len(customers))
    outcomes: list[str] = []

    def book(user_id: str) -> None:
        barrier.wait()
        try:
            store.create_appointment(user_id=user_id, provider="barber", scheduled_at=slot)
        except SlotTakenError:
            outcomes.append("taken")
        else:
            outcomes.append("booked")

    threads = [threading.Thread(target=book, args=(c.id,)) for c in customers]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(outcomes) == ["booked"] + ["taken"] * (len(customers) - 1)
    assert len(store.find_appointments()) == 1


def test_concurrent_bookings_by_one_customer_admit_one_per_day():
    store = MemoryBookingStore(clock=_clock)
    user = _customer(store)
    hours = range(9, 19)
    barrier = threading.Barrier(len(hours))
    refused: list[int] = []

    def book(hour: int) -> None:
        barrier.wait()
        try:
            store.create_appointment(user_id=user.id, provider="barber", scheduled_at=datetime(2026, 10, 20, hour))
        except DuplicateBookingError:
            refused.append(hour)

    threads = [threading.Thread(target=book, args=(h,)) for h in hours]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(refused) == len(hours) - 1
    assert len(store.find_appointments(user_id=user.id)) == 1
