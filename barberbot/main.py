import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager

from fastapi import FastAPI

from barberbot.api.webhooks import router as webhooks_router
from barberbot.core.config import settings
from barberbot.wiring.dependencies import get_business_hours, get_conversation_router

LOG_FORMAT = "%(levelname)s:%(name)s:%(message)s"
LOG_CONTEXT_KEYS = ("conversation_id", "external_user_id", "token", "action", "appointment_id", "reason")


class ContextFormatter(logging.Formatter):
    """Appends the `extra=` fields named in context_keys as key=value pairs."""

    def __init__(self, fmt: str, context_keys: Sequence[str] = LOG_CONTEXT_KEYS) -> None:
        super().__init__(fmt)
        self._context_keys = tuple(context_keys)

    def format(self, record: logging.LogRecord) -> str:
        extras = [
            f"{key}={value}"
            for key in self._context_keys
            if (value := getattr(record, key, None)) not in (None, "")
        ]
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


def configure_logging(level: str) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter(LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Build the router up front so a missing bot token fails at boot, not on the first update.
    get_conversation_router()
    hours = get_business_hours()
    logging.getLogger(__name__).info(
        "Booking bot ready: %s, hours %02d:00-%02d:00, closed weekday %d, store=%s, env=%s",
        settings.BUSINESS_NAME,
        hours.opening_hour,
        hours.closing_hour,
        hours.closed_weekday,
        settings.STORE_PROVIDER,
        settings.ENV,
    )
    yield


configure_logging(settings.LOG_LEVEL)

app = FastAPI(title="Barbershop Booking Bot", version="1.0.0", lifespan=lifespan)

app.include_router(webhooks_router, tags=["webhooks"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
