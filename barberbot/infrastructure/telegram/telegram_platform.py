from __future__ import annotations

from typing import Any

from barberbot.application.ports.message_platform import MessagePlatformPort
from barberbot.domain.entities.view import View
from barberbot.infrastructure.telegram.telegram_client import TelegramClient


def to_inline_keyboard(view: View) -> dict[str, Any] | None:
    if not view.rows:
        return None
    return {
        "inline_keyboard": [
            [{"text": button.label, "callback_data": button.token} for button in row]
            for row in view.rows
        ]
    }


class TelegramPlatform(MessagePlatformPort):
    def __init__(self, client: TelegramClient) -> None:
        self._client = client

    def render_view(self, conversation_id: str, view: View, message_id: str | None = None) -> None:
        markup = to_inline_keyboard(view)
        if message_id is None:
            self._client.send_message(chat_id=conversation_id, text=view.text, reply_markup=markup)
        else:
            self._client.edit_message_text(
                chat_id=conversation_id, message_id=message_id, text=view.text, reply_markup=markup
            )

    def send_text(self, recipient_id: str, text: str) -> None:
        self._client.send_message(chat_id=recipient_id, text=text)

    def acknowledge(self, callback_id: str, text: str | None = None, prominent: bool = False) -> None:
        self._client.answer_callback_query(callback_query_id=callback_id, text=text, show_alert=prominent)
