#!/usr/bin/env python3
"""
Interactive local chat harness (no HTTP, no Telegram).

Usage:
  python3 scripts/chat_local.py

What it does:
- Keeps a stable conversation id for the session
- Sends your typed messages and button presses through the same ConversationRouter
- Prints the rendered message, its buttons, acknowledgments and notifications
"""
from __future__ import annotations

import os
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dotenv import load_dotenv

from barberbot.application.use_cases.conversation_router import ConversationRouter
from barberbot.application.use_cases.menu_renderer import MenuRenderer
from barberbot.application.use_cases.notify import NotifyUseCase
from barberbot.domain.entities.event import ActionEvent, StartEvent, TextEvent
from barberbot.domain.entities.user import UserRole
from barberbot.infrastructure.store.memory_store import MemoryBookingStore, MemorySessionStore
from barberbot.infrastructure.telegram.mock_platform import MockTelegramPlatform

load_dotenv()


def _print_header(user_id: str) -> None:
    print("\nLocal Chat Harness")
    print("-" * 60)
    print(f"user: {user_id}")
    print("Type a message, or a command:")
    print("  /start            open the bot")
    print("  /press <token>    press a button (or /<n> for the n-th button shown)")
    print("  /as <user id>     switch to another user")
    print("  /provider         make the current user the provider")
    print("  /quit")
    print("-" * 60)


def _print_outbound(messenger: MockTelegramPlatform) -> list[str]:
    tokens: list[str] = []
    for ack in messenger.acknowledgments:
        _, text, prominent = ack
        if text:
            print(f"[{'ALERT' if prominent else 'toast'}] {text}")
    for recipient, text in messenger.notifications:
        print(f"\n--- Notification to {recipient} ---\n{text}")
    view = messenger.last_view()
    if view is not None:
        print(f"\n{view.text}")
        for row in view.rows:
            for button in row:
                tokens.append(button.token)
                print(f"  [{len(tokens)}] {button.label}  ({button.token})")
    messenger.reset()
    return tokens


def main() -> None:
    user_id = os.getenv("CHAT_USER_ID", "local_user_1")
    store = MemoryBookingStore()
    messenger = MockTelegramPlatform()
    router = ConversationRouter(
        store=store,
        sessions=MemorySessionStore(),
        messenger=messenger,
        renderer=MenuRenderer(business_name=os.getenv("BUSINESS_NAME", "Local Barbershop")),
        notify=NotifyUseCase(platform=messenger),
        provider_chat_id=os.getenv("TELEGRAM_PROVIDER_CHAT_ID", "provider_chat"),
    )
    tokens: list[str] = []
    _print_header(user_id)

    while True:
        try:
            user_text = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if not user_text:
            continue

        cmd, _, arg = user_text.partition(" ")
        if cmd in ("/quit", "/exit"):
            print("Bye!")
            return
        if cmd == "/as" and arg:
            user_id = arg.strip()
            print(f"Now acting as {user_id}")
            continue
        if cmd == "/provider":
            user = store.find_user_by_external_id(user_id)
            if user is None:
                print("Register first with /start.")
                continue
            store.set_user_role(user.id, UserRole.PROVIDER)
            print(f"{user.name} is now the provider.")
            continue

        if cmd == "/start":
            router.handle(StartEvent(conversation_id=user_id, external_user_id=user_id))
        elif cmd == "/press" and arg:
            router.handle(_press(user_id, arg.strip()))
        elif cmd[1:].isdigit() and cmd.startswith("/"):
            index = int(cmd[1:]) - 1
            if not 0 <= index < len(tokens):
                print("No such button.")
                continue
            router.handle(_press(user_id, tokens[index]))
        else:
            router.handle(TextEvent(conversation_id=user_id, external_user_id=user_id, body=user_text))

        tokens = _print_outbound(messenger) or tokens


def _press(user_id: str, token: str) -> ActionEvent:
    stamp = str(int(time.time() * 1000))
    return ActionEvent(
        conversation_id=user_id,
        external_user_id=user_id,
        token=token,
        callback_id=f"cb_{stamp}",
        message_id=stamp,
    )


if __name__ == "__main__":
    main()
