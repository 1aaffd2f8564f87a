from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SessionStep(str, Enum):
    NONE = "none"
    AWAITING_NAME = "awaiting_name"


@dataclass(frozen=True)
class Session:
    step: SessionStep = SessionStep.NONE
    # "external_id" while registering, "selected_date" while browsing slots
    temp_data: dict[str, Any] = field(default_factory=dict)
