from __future__ import annotations

import logging
from typing import Any

import httpx


class TelegramClient:
    def __init__(
        self,
        bot_token: str,
        base_url: str = "https://api.telegram.org",
        timeout: float = 10.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._endpoint = f"{base_url.rstrip('/')}/bot{bot_token}"
        self._client = http_client or httpx.Client(timeout=timeout)
        self._logger = logging.getLogger(__name__)

    def send_message(self, chat_id: str, text: str, reply_markup: dict[str, Any] | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        return self._call("sendMessage", payload)

    def edit_message_text(
        self,
        chat_id: str,
        message_id: str,
        text: str,
        reply_markup: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"chat_id": chat_id, "message_id": int(message_id), "text": text}
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        return self._call("editMessageText", payload)

    def answer_callback_query(self, callback_query_id: str, text: str | None = None, show_alert: bool = False) -> dict[str, Any]:
        payload: dict[str, Any] = {"callback_query_id": callback_query_id, "show_alert": show_alert}
        if text:
            payload["text"] = text
        return self._call("answerCallbackQuery", payload)

    def set_webhook(self, url: str, secret_token: str | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"url": url, "allowed_updates": ["message", "callback_query"]}
        if secret_token:
            payload["secret_token"] = secret_token
        return self._call("setWebhook", payload)

    def _call(self, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        resp = self._client.post(f"{self._endpoint}/{method}", json=payload)
        if resp.status_code >= 400:
            try:
                error_json = resp.json()
                error_code = error_json.get("error_code")
                description = error_json.get("description")
            except ValueError:
                error_code = None
                description = resp.text

            self._logger.error(
                "Telegram call failed",
                extra={
                    "method": method,
                    "status": resp.status_code,
                    "error_code": error_code,
                    "reason": description,
                    "chat_id": payload.get("chat_id"),
                },
            )
            resp.raise_for_status()
        return resp.json()
