"""
Tests for the Telegram Bot API adapter.
"""

from __future__ import annotations

import json

import httpx
import pytest

from barberbot.domain.entities.view import Button, View
from barberbot.infrastructure.telegram.telegram_client import TelegramClient
from barberbot.infrastructure.telegram.telegram_platform import TelegramPlatform, to_inline_keyboard

VIEW = View(
    text="Main menu:",
    rows=((Button("📅 Book appointment", "book_appointment"),), (Button("A", "a"), Button("B", "b"))),
)


def _platform(calls: list, status_code: int = 200) -> TelegramPlatform:
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append((request.url.path, json.loads(request.content)))
        if status_code >= 400:
            return httpx.Response(status_code, json={"ok": False, "error_code": status_code, "description": "Bad"})
        return httpx.Response(200, json={"ok": True, "result": {}})

    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    return TelegramPlatform(client=TelegramClient(bot_token="TOKEN", http_client=http_client))


def test_inline_keyboard_layout():
    assert to_inline_keyboard(VIEW) == {
        "inline_keyboard": [
            [{"text": "📅 Book appointment", "callback_data": "book_appointment"}],
            [{"text": "A", "callback_data": "a"}, {"text": "B", "callback_data": "b"}],
        ]
    }
    assert to_inline_keyboard(View(text="plain")) is None


def test_render_without_message_id_sends_new_message():
    calls: list = []
    _platform(calls).render_view("1001", VIEW)

    path, payload = calls[0]
    assert path == "/botTOKEN/sendMessage"
    assert payload["chat_id"] == "1001"
    assert payload["text"] == "Main menu:"
    assert payload["reply_markup"]["inline_keyboard"][0][0]["callback_data"] == "book_appointment"


def test_render_with_message_id_edits_in_place():
    calls: list = []
    _platform(calls).render_view("1001", VIEW, message_id="42")

    path, payload = calls[0]
    assert path == "/botTOKEN/editMessageText"
    assert payload["message_id"] == 42


def test_send_text_and_acknowledge():
    calls: list = []
    platform = _platform(calls)

    platform.send_text("provider_chat", "🔔 New appointment!")
    platform.acknowledge("cbq-1")
    platform.acknowledge("cbq-2", text="❌ You don't have permission", prominent=True)

    assert calls[0] == ("/botTOKEN/sendMessage", {"chat_id": "provider_chat", "text": "🔔 New appointment!"})
    assert calls[1] == ("/botTOKEN/answerCallbackQuery", {"callback_query_id": "cbq-1", "show_alert": False})
    assert calls[2][1] == {
        "callback_query_id": "cbq-2",
        "show_alert": True,
        "text": "❌ You don't have permission",
    }


def test_api_error_raises():
    calls: list = []

    with pytest.raises(httpx.HTTPStatusError):
        _platform(calls, status_code=400).send_text("1001", "hi")
