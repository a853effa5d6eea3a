from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from barbershop.domain.entities.appointment import Appointment


class AppointmentRepositoryPort(ABC):
    @abstractmethod
    def add(self, appointment: Appointment) -> None:
        raise NotImplementedError

    @abstractmethod
    def get(self, appointment_id: str) -> Appointment | None:
        raise NotImplementedError

    @abstractmethod
    def get_by_tracking_code(self, tracking_code: str) -> Appointment | None:
        raise NotImplementedError

    @abstractmethod
    def update(self, appointment: Appointment) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, appointment_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_between(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        employee_id: str | None = None,
    ) -> list[Appointment]:
        """Appointments with start in [start, end), ordered by start. Every status included."""
        raise NotImplementedError
