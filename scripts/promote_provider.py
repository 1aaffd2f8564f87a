#!/usr/bin/env python3
"""
Mark a registered user as the provider (the barber).

The user must have pressed /start and registered through the bot first.
Safe while the server runs: the server re-reads the store file on its next
request once this script has replaced it.

Usage:
  python3 scripts/promote_provider.py <telegram user id>
  python3 scripts/promote_provider.py <telegram user id> --demote
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from barberbot.core.config import settings
from barberbot.domain.entities.user import UserRole
from barberbot.infrastructure.store.json_store import JsonBookingStore


def main() -> None:
    parser = argparse.ArgumentParser(description="Grant or revoke the provider role")
    parser.add_argument("external_id", help="Telegram user id of a registered user")
    parser.add_argument("--data-dir", default=settings.STORE_DATA_DIR)
    parser.add_argument("--demote", action="store_true", help="Turn the provider back into a customer")
    args = parser.parse_args()

    store = JsonBookingStore(data_dir=args.data_dir)
    user = store.find_user_by_external_id(args.external_id)
    if user is None:
        print(f"No user with external id {args.external_id}. Ask them to /start the bot first.")
        sys.exit(1)

    role = UserRole.CUSTOMER if args.demote else UserRole.PROVIDER
    if role == UserRole.PROVIDER:
        current = store.find_provider()
        if current and current.id != user.id:
            print(f"{current.name} is already the provider. Demote them first.")
            sys.exit(1)

    store.set_user_role(user.id, role)
    print(f"{user.name} is now a {role.value}.")


if __name__ == "__main__":
    main()
