from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class UserRole(str, Enum):
    CUSTOMER = "customer"
    PROVIDER = "provider"


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    role: UserRole
    password_hash: str
    external_id: str | None = None  # set only for chat-originated users

    @property
    def is_provider(self) -> bool:
        return self.role == UserRole.PROVIDER
