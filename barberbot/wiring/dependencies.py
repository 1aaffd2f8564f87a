from functools import lru_cache
import logging

from barberbot.application.ports.booking_store import BookingStorePort
from barberbot.application.ports.message_platform import MessagePlatformPort
from barberbot.application.ports.session_store import SessionStorePort
from barberbot.application.use_cases.conversation_router import ConversationRouter
from barberbot.application.use_cases.menu_renderer import MenuRenderer
from barberbot.application.use_cases.notify import NotifyUseCase
from barberbot.core.config import settings
from barberbot.domain.entities.availability import BusinessHours
from barberbot.infrastructure.store.json_store import JsonBookingStore
from barberbot.infrastructure.store.memory_store import MemoryBookingStore, MemorySessionStore
from barberbot.infrastructure.telegram.mock_platform import MockTelegramPlatform
from barberbot.infrastructure.telegram.telegram_client import TelegramClient
from barberbot.infrastructure.telegram.telegram_platform import TelegramPlatform


_booking_store: BookingStorePort | None = None
_session_store: SessionStorePort | None = None


def get_booking_store() -> BookingStorePort:
    global _booking_store
    if _booking_store is None:
        if settings.STORE_PROVIDER.lower() == "memory":
            _booking_store = MemoryBookingStore()
        else:
            _booking_store = JsonBookingStore(data_dir=settings.STORE_DATA_DIR)
    return _booking_store


def get_session_store() -> SessionStorePort:
    global _session_store
    if _session_store is None:
        _session_store = MemorySessionStore(max_entries=settings.SESSION_MAX_ENTRIES)
    return _session_store


def get_business_hours() -> BusinessHours:
    return BusinessHours(
        opening_hour=settings.OPENING_HOUR,
        closing_hour=settings.CLOSING_HOUR,
        closed_weekday=settings.CLOSED_WEEKDAY,
        booking_window_days=settings.BOOKING_WINDOW_DAYS,
        days_off_window_days=settings.DAYS_OFF_WINDOW_DAYS,
    )


@lru_cache
def get_telegram_platform() -> MessagePlatformPort:
    logger = logging.getLogger(__name__)
    logger.info("TELEGRAM_BOT_TOKEN present=%s", bool(settings.TELEGRAM_BOT_TOKEN))
    logger.info("ENV=%s", settings.ENV)

    if not settings.TELEGRAM_BOT_TOKEN:
        if settings.ENV.lower() in {"dev", "local"}:
            logger.info("Using MockTelegramPlatform (token missing, ENV=dev/local)")
            return MockTelegramPlatform()
        raise ValueError("TELEGRAM_BOT_TOKEN is required to talk to Telegram.")

    logger.info("Using real TelegramPlatform")
    client = TelegramClient(bot_token=settings.TELEGRAM_BOT_TOKEN, base_url=settings.TELEGRAM_API_BASE_URL)
    return TelegramPlatform(client=client)


@lru_cache
def get_conversation_router() -> ConversationRouter:
    messenger = get_telegram_platform()
    return ConversationRouter(
        store=get_booking_store(),
        sessions=get_session_store(),
        messenger=messenger,
        renderer=MenuRenderer(business_name=settings.BUSINESS_NAME),
        notify=NotifyUseCase(platform=messenger),
        hours=get_business_hours(),
        provider_chat_id=settings.TELEGRAM_PROVIDER_CHAT_ID,
        provider_label=settings.PROVIDER_LABEL,
        placeholder_email_domain=settings.PLACEHOLDER_EMAIL_DOMAIN,
    )
