"""Shared test fixtures."""

from collections.abc import Collection
from datetime import date, datetime

import pytest

from barberbot.application.use_cases.conversation_router import ConversationRouter
from barberbot.application.use_cases.menu_renderer import MenuRenderer
from barberbot.application.use_cases.notify import NotifyUseCase
from barberbot.application.utils.availability import booking_window
from barberbot.domain.entities.availability import BusinessHours, DateState
from barberbot.domain.entities.event import ActionEvent
from barberbot.domain.entities.user import UserRole
from barberbot.infrastructure.store.memory_store import MemoryBookingStore, MemorySessionStore
from barberbot.infrastructure.telegram.mock_platform import MockTelegramPlatform

# Monday afternoon. The closed weekday (Saturday) is 2026-10-24.
NOW = datetime(2026, 10, 19, 14, 30)
PROVIDER_CHAT = "provider_chat"


def selectable_dates(today: date, days_off: Collection[date], hours: BusinessHours) -> list[date]:
    """Dates a customer can pick in the booking window."""
    return [o.day for o in booking_window(today, days_off, hours) if o.state == DateState.SELECTABLE]


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FakeClock(NOW)


@pytest.fixture
def store(clock):
    return MemoryBookingStore(clock=clock)


@pytest.fixture
def sessions():
    return MemorySessionStore()


@pytest.fixture
def messenger():
    return MockTelegramPlatform()


@pytest.fixture
def router(store, sessions, messenger, clock):
    return ConversationRouter(
        store=store,
        sessions=sessions,
        messenger=messenger,
        renderer=MenuRenderer(business_name="Test Barbershop"),
        notify=NotifyUseCase(platform=messenger),
        provider_chat_id=PROVIDER_CHAT,
        clock=clock,
    )


@pytest.fixture
def make_user(store):
    def _make_user(external_id: str, name: str = "Dana", role: UserRole = UserRole.CUSTOMER):
        return store.create_user(
            name=name,
            email=f"{external_id}@example.com",
            password_hash="not-used",
            role=role,
            external_id=external_id,
        )

    return _make_user


@pytest.fixture
def press(router):
    """Press a button as the given user, in that user's private chat."""

    def _press(external_id: str, token: str) -> None:
        router.handle(
            ActionEvent(
                conversation_id=f"chat_{external_id}",
                external_user_id=external_id,
                token=token,
                callback_id=f"cb_{token}",
                message_id="42",
            )
        )

    return _press
