#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from barberbot.core.config import settings
from barberbot.infrastructure.telegram.telegram_client import TelegramClient


def main() -> None:
    parser = argparse.ArgumentParser(description="Register the bot webhook with Telegram")
    parser.add_argument("url", help="Public HTTPS URL of /webhooks/telegram")
    args = parser.parse_args()

    if not settings.TELEGRAM_BOT_TOKEN:
        print("TELEGRAM_BOT_TOKEN is not set.")
        sys.exit(1)

    client = TelegramClient(bot_token=settings.TELEGRAM_BOT_TOKEN, base_url=settings.TELEGRAM_API_BASE_URL)
    result = client.set_webhook(args.url, secret_token=settings.TELEGRAM_WEBHOOK_SECRET)
    print(result)


if __name__ == "__main__":
    main()
