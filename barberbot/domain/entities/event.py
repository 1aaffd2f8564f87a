from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class StartEvent:
    conversation_id: str
    external_user_id: str


@dataclass(frozen=True)
class TextEvent:
    conversation_id: str
    external_user_id: str
    body: str


@dataclass(frozen=True)
class ActionEvent:
    conversation_id: str
    external_user_id: str
    token: str
    callback_id: str | None = None
    message_id: str | None = None


InboundEvent = Union[StartEvent, TextEvent, ActionEvent]
