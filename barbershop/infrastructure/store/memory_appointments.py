from __future__ import annotations

import threading
from datetime import datetime

from barbershop.application.exceptions import AppointmentNotFoundError
from barbershop.application.ports.appointment_repository import AppointmentRepositoryPort
from barbershop.domain.entities.appointment import Appointment


class MemoryAppointmentRepository(AppointmentRepositoryPort):
    def __init__(self) -> None:
        self._appointments: dict[str, Appointment] = {}
        self._lock = threading.Lock()

    def add(self, appointment: Appointment) -> None:
        with self._lock:
            if appointment.id in self._appointments:
                raise ValueError(f"Appointment {appointment.id} already exists")
            self._appointments[appointment.id] = appointment

    def get(self, appointment_id: str) -> Appointment | None:
        return self._appointments.get(appointment_id)

    def get_by_tracking_code(self, tracking_code: str) -> Appointment | None:
        with self._lock:
            for appointment in self._appointments.values():
                if appointment.tracking_code == tracking_code:
                    return appointment
        return None

    def update(self, appointment: Appointment) -> None:
        with self._lock:
            if appointment.id not in self._appointments:
                raise AppointmentNotFoundError(f"Cita {appointment.id} no encontrada")
            self._appointments[appointment.id] = appointment

    def delete(self, appointment_id: str) -> None:
        with self._lock:
            self._appointments.pop(appointment_id, None)

    def list_between(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        employee_id: str | None = None,
    ) -> list[Appointment]:
        with self._lock:
            appointments = list(self._appointments.values())
        selected = [
            a
            for a in appointments
            if (start is None or a.start >= start)
            and (end is None or a.start < end)
            and (employee_id is None or a.employee_id == employee_id)
        ]
        return sorted(selected, key=lambda a: a.start)
