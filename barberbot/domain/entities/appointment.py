from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Appointment:
    id: str
    user_id: str
    provider: str
    scheduled_at: datetime  # local wall clock, minute always zero
    status: AppointmentStatus = AppointmentStatus.PENDING
    created_at: datetime | None = None
