from __future__ import annotations

import hashlib
import hmac
import secrets

_ITERATIONS = 100_000


def placeholder_email(external_id: str, domain: str) -> str:
    return f"telegram_{external_id}@{domain}"


def placeholder_password(external_id: str) -> str:
    return f"telegram_{external_id}"


def hash_password(password: str) -> str:
    """Salted PBKDF2-SHA256, encoded as iterations$salt$digest."""
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), _ITERATIONS)
    return f"{_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        iterations, salt, expected = password_hash.split("$", 2)
        rounds = int(iterations)
    except ValueError:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), rounds)
    return hmac.compare_digest(digest.hex(), expected)
