from __future__ import annotations

from dataclasses import dataclass

from barbershop.domain.entities.schedule import WeeklySchedule


@dataclass(frozen=True)
class Employee:
    id: str
    name: str
    schedule: WeeklySchedule
    is_active: bool = True
    phone: str | None = None
    calendar_id: str | None = None  # external calendar, None when not connected
