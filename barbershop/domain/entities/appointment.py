from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from barbershop.domain.entities.schedule import TimeRange


class AppointmentStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class AppointmentOrigin(str, Enum):
    MANUAL = "MANUAL"
    WHATSAPP = "WHATSAPP"

    def initial_status(self) -> AppointmentStatus:
        if self is AppointmentOrigin.WHATSAPP:
            return AppointmentStatus.CONFIRMED
        return AppointmentStatus.PENDING


@dataclass(frozen=True)
class Appointment:
    id: str
    tracking_code: str
    client_id: str
    employee_id: str
    service_name: str
    start: datetime
    duration_minutes: int
    origin: AppointmentOrigin
    status: AppointmentStatus
    created_at: datetime
    cancellation_reason: str | None = None
    notes: str | None = None
    calendar_event_id: str | None = None

    @property
    def end(self) -> datetime:
        return self.start + timedelta(minutes=self.duration_minutes)

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end)

    @property
    def blocks_schedule(self) -> bool:
        return self.status is not AppointmentStatus.CANCELLED
