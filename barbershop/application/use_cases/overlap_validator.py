from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable
from zoneinfo import ZoneInfo

from barbershop.application.exceptions import (
    DoubleBookingError,
    EmployeeNotFoundError,
    LunchWindowError,
    OutsideWorkingHoursError,
    PastDateError,
    ValidationError,
)
from barbershop.application.ports.appointment_repository import AppointmentRepositoryPort
from barbershop.application.ports.employee_directory import EmployeeDirectoryPort
from barbershop.domain.entities.schedule import LunchWindow, TimeRange, day_bounds, localize


class ConflictReason(str, Enum):
    PAST_DATE = "past_date"
    LUNCH_WINDOW = "lunch_window"
    OUTSIDE_WORKING_HOURS = "outside_working_hours"
    DOUBLE_BOOKING = "double_booking"


_ERRORS: dict[ConflictReason, type[ValidationError]] = {
    ConflictReason.PAST_DATE: PastDateError,
    ConflictReason.LUNCH_WINDOW: LunchWindowError,
    ConflictReason.OUTSIDE_WORKING_HOURS: OutsideWorkingHoursError,
    ConflictReason.DOUBLE_BOOKING: DoubleBookingError,
}


@dataclass(frozen=True)
class Conflict:
    reason: ConflictReason
    message: str
    appointment_id: str | None = None  # the appointment collided with, for double bookings

    def to_error(self) -> ValidationError:
        return _ERRORS[self.reason](self.message, appointment_id=self.appointment_id)


class OverlapValidator:
    """Gate-check for a single proposed appointment. Reads only."""

    def __init__(
        self,
        employees: EmployeeDirectoryPort,
        appointments: AppointmentRepositoryPort,
        timezone: ZoneInfo,
        lunch_window: LunchWindow | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._employees = employees
        self._appointments = appointments
        self._timezone = timezone
        self._lunch_window = lunch_window or LunchWindow()
        self._clock = clock or (lambda: datetime.now(timezone))

    def find_conflict(
        self,
        employee_id: str,
        start: datetime,
        duration_minutes: int,
        exclude_appointment_id: str | None = None,
    ) -> Conflict | None:
        if duration_minutes <= 0:
            raise ValueError("duration_minutes must be positive")

        employee = self._employees.get_employee(employee_id)
        if employee is None:
            raise EmployeeNotFoundError(f"Empleado {employee_id} no encontrado")

        start = localize(start, self._timezone)
        proposed = TimeRange.from_duration(start, duration_minutes)
        day = start.date()

        if start < self._clock():
            return Conflict(ConflictReason.PAST_DATE, "No se pueden agendar citas en el pasado")

        if proposed.intersects(self._lunch_window.on(day, self._timezone)):
            return Conflict(
                ConflictReason.LUNCH_WINDOW,
                f"La cita se cruza con el horario de almuerzo ({self._lunch_window.label()})",
            )

        hours = employee.schedule.for_day(day)
        if hours is None:
            return Conflict(ConflictReason.OUTSIDE_WORKING_HOURS, "El empleado no trabaja este día")
        if not hours.on(day, self._timezone).contains(proposed):
            return Conflict(ConflictReason.OUTSIDE_WORKING_HOURS, f"Horario laboral: {hours.label()}")

        return self.find_double_booking(employee_id, start, duration_minutes, exclude_appointment_id)

    def find_double_booking(
        self,
        employee_id: str,
        start: datetime,
        duration_minutes: int,
        exclude_appointment_id: str | None = None,
    ) -> Conflict | None:
        """Only the overlap check against the employee's non-cancelled appointments."""
        start = localize(start, self._timezone)
        proposed = TimeRange.from_duration(start, duration_minutes)
        day_start, day_end = day_bounds(start.date(), self._timezone)
        for existing in self._appointments.list_between(day_start, day_end, employee_id=employee_id):
            if existing.id == exclude_appointment_id or not existing.blocks_schedule:
                continue
            if proposed.intersects(existing.time_range):
                return Conflict(
                    ConflictReason.DOUBLE_BOOKING,
                    "Ya tiene una cita agendada en ese horario",
                    appointment_id=existing.id,
                )
        return None

    def validate(
        self,
        employee_id: str,
        start: datetime,
        duration_minutes: int,
        exclude_appointment_id: str | None = None,
    ) -> None:
        """Raise the typed ValidationError for the first conflict found."""
        conflict = self.find_conflict(employee_id, start, duration_minutes, exclude_appointment_id)
        if conflict is not None:
            raise conflict.to_error()
