from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from barbershop.domain.entities.appointment import Appointment
from barbershop.domain.entities.schedule import TimeRange


class CalendarPort(ABC):
    @abstractmethod
    def create_event(self, appointment: Appointment) -> str | None:
        """Create the external event. Returns the event id, or None if the employee has no calendar."""
        raise NotImplementedError

    @abstractmethod
    def update_event(self, appointment: Appointment) -> str | None:
        """Mirror the appointment's current time/status. Returns the event id."""
        raise NotImplementedError

    @abstractmethod
    def list_blocked_ranges(self, employee_id: str, day: date) -> list[TimeRange]:
        """Busy ranges reported by the employee's external calendar for that day."""
        raise NotImplementedError

    @abstractmethod
    def delete_event(self, appointment: Appointment) -> None:
        """Remove the appointment's external event, if it has one."""
        raise NotImplementedError
