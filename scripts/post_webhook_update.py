#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import time
from typing import Any

import httpx
from httpx import ConnectError


def build_payload(chat_id: int, user_id: int, text: str | None, token: str | None, message_id: int) -> dict[str, Any]:
    update_id = int(time.time() * 1000)
    sender = {"id": user_id, "first_name": "Local"}
    if token:
        return {
            "update_id": update_id,
            "callback_query": {
                "id": f"cb_{update_id}",
                "from": sender,
                "message": {"message_id": message_id, "chat": {"id": chat_id}},
                "data": token,
            },
        }
    return {
        "update_id": update_id,
        "message": {
            "message_id": message_id,
            "chat": {"id": chat_id},
            "from": sender,
            "text": text or "/start",
        },
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Send a test Telegram webhook POST")
    parser.add_argument("--url", default="http://127.0.0.1:8001/webhooks/telegram")
    parser.add_argument("--chat", type=int, default=1001)
    parser.add_argument("--user", type=int, default=1001)
    parser.add_argument("--text", default=None, help="Message text (defaults to /start)")
    parser.add_argument("--token", default=None, help="Callback data, sends a button press instead of text")
    parser.add_argument("--message-id", type=int, default=1)
    parser.add_argument("--secret", default="", help="Webhook secret token")
    args = parser.parse_args()

    payload = build_payload(args.chat, args.user, args.text, args.token, args.message_id)
    body = json.dumps(payload).encode("utf-8")

    headers = {"Content-Type": "application/json"}
    if args.secret:
        headers["X-Telegram-Bot-Api-Secret-Token"] = args.secret

    try:
        resp = httpx.post(args.url, content=body, headers=headers, timeout=10.0)
    except ConnectError:
        print("Connection refused. Is the FastAPI server running?")
        print("Try: uvicorn barberbot.main:app --reload --port 8001")
        return

    print(resp.status_code)
    if resp.text:
        print(resp.text)


if __name__ == "__main__":
    main()
