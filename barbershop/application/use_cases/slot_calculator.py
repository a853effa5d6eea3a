from __future__ import annotations

import logging
from datetime import date, timedelta
from zoneinfo import ZoneInfo

from barbershop.application.ports.appointment_repository import AppointmentRepositoryPort
from barbershop.application.ports.calendar import CalendarPort
from barbershop.application.ports.employee_directory import EmployeeDirectoryPort
from barbershop.domain.entities.schedule import LunchWindow, TimeRange, day_bounds


class SlotCalculator:
    """Bookable start times for one employee, one day and one service duration."""

    def __init__(
        self,
        employees: EmployeeDirectoryPort,
        appointments: AppointmentRepositoryPort,
        calendar: CalendarPort | None,
        timezone: ZoneInfo,
        lunch_window: LunchWindow | None = None,
    ) -> None:
        self._employees = employees
        self._appointments = appointments
        self._calendar = calendar
        self._timezone = timezone
        self._lunch_window = lunch_window or LunchWindow()
        self._logger = logging.getLogger(__name__)

    def compute_available_slots(self, employee_id: str, day: date, duration_minutes: int) -> list[str]:
        """
        Candidates step by the service duration from the start of the working
        window; a trailing partial slot is never generated. A candidate survives
        only if [start, start + duration) misses every occupied range.
        """
        if duration_minutes <= 0:
            raise ValueError("duration_minutes must be positive")

        employee = self._employees.get_employee(employee_id)
        if employee is None:
            return []
        hours = employee.schedule.for_day(day)
        if hours is None:
            return []

        window = hours.on(day, self._timezone)
        occupied = self.occupied_ranges(employee_id, day)
        step = timedelta(minutes=duration_minutes)

        slots: list[str] = []
        current = window.start
        while current + step <= window.end:
            candidate = TimeRange(start=current, end=current + step)
            if not any(candidate.intersects(busy) for busy in occupied):
                slots.append(current.strftime("%H:%M"))
            current += step
        return slots

    def occupied_ranges(self, employee_id: str, day: date) -> list[TimeRange]:
        day_start, day_end = day_bounds(day, self._timezone)
        occupied = [
            appointment.time_range
            for appointment in self._appointments.list_between(day_start, day_end, employee_id=employee_id)
            if appointment.blocks_schedule
        ]
        occupied.append(self._lunch_window.on(day, self._timezone))
        occupied.extend(self._external_blocks(employee_id, day))
        return occupied

    def _external_blocks(self, employee_id: str, day: date) -> list[TimeRange]:
        if self._calendar is None:
            return []
        try:
            return list(self._calendar.list_blocked_ranges(employee_id, day))
        except Exception as e:
            self._logger.warning(
                "External calendar blocks unavailable, continuing without them",
                extra={"employee_id": employee_id, "day": day.isoformat(), "error": str(e)},
            )
            return []
