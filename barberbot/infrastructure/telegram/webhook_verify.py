from __future__ import annotations

import hmac
import logging


logger = logging.getLogger(__name__)

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


def verify_secret_token(header_value: str | None, expected_secret: str | None, env: str) -> bool:
    if not expected_secret:
        if env.lower() in {"dev", "local"}:
            logger.warning("No webhook secret configured; accepting in dev mode")
            return True
        logger.error("Missing webhook secret for verification")
        return False

    if not header_value:
        return False

    return hmac.compare_digest(header_value.encode("utf-8"), expected_secret.encode("utf-8"))
