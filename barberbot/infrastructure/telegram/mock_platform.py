from __future__ import annotations

import logging

from barberbot.application.ports.message_platform import MessagePlatformPort
from barberbot.domain.entities.view import View


class MockTelegramPlatform(MessagePlatformPort):
    """Logs outbound calls instead of hitting Telegram and keeps them for inspection."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        self.views: list[tuple[str, View, str | None]] = []
        self.notifications: list[tuple[str, str]] = []
        self.acknowledgments: list[tuple[str, str | None, bool]] = []

    def render_view(self, conversation_id: str, view: View, message_id: str | None = None) -> None:
        self.views.append((conversation_id, view, message_id))
        self._logger.info(
            "Mock render to Telegram",
            extra={"conversation_id": conversation_id, "text": view.text, "buttons": view.tokens()},
        )

    def send_text(self, recipient_id: str, text: str) -> None:
        self.notifications.append((recipient_id, text))
        self._logger.info("Mock send to Telegram", extra={"external_user_id": recipient_id, "text": text})

    def acknowledge(self, callback_id: str, text: str | None = None, prominent: bool = False) -> None:
        self.acknowledgments.append((callback_id, text, prominent))
        self._logger.info(
            "Mock callback answer", extra={"callback_id": callback_id, "text": text, "prominent": prominent}
        )

    def last_view(self, conversation_id: str | None = None) -> View | None:
        for cid, view, _ in reversed(self.views):
            if conversation_id is None or cid == conversation_id:
                return view
        return None

    def last_ack(self) -> tuple[str, str | None, bool] | None:
        return self.acknowledgments[-1] if self.acknowledgments else None

    def reset(self) -> None:
        self.views.clear()
        self.notifications.clear()
        self.acknowledgments.clear()
