from __future__ import annotations

import logging
from datetime import date

from barbershop.application.ports.calendar import CalendarPort
from barbershop.domain.entities.appointment import Appointment
from barbershop.domain.entities.schedule import TimeRange


class MockCalendar(CalendarPort):
    def __init__(self, blocked: dict[tuple[str, date], list[TimeRange]] | None = None) -> None:
        self._events: dict[str, Appointment] = {}
        self._blocked = dict(blocked or {})
        self._logger = logging.getLogger(__name__)

    def block(self, employee_id: str, day: date, time_range: TimeRange) -> None:
        self._blocked.setdefault((employee_id, day), []).append(time_range)

    def create_event(self, appointment: Appointment) -> str:
        event_id = f"mock_event_{len(self._events) + 1}"
        self._events[event_id] = appointment
        self._logger.info(
            "Mock calendar event created",
            extra={
                "event_id": event_id,
                "appointment_id": appointment.id,
                "start": appointment.start.isoformat(),
            },
        )
        return event_id

    def update_event(self, appointment: Appointment) -> str:
        event_id = appointment.calendar_event_id
        if not event_id or event_id not in self._events:
            return self.create_event(appointment)
        self._events[event_id] = appointment
        self._logger.info(
            "Mock calendar event updated",
            extra={"event_id": event_id, "appointment_id": appointment.id, "status": appointment.status.value},
        )
        return event_id

    def delete_event(self, appointment: Appointment) -> None:
        if self._events.pop(appointment.calendar_event_id or "", None) is not None:
            self._logger.info(
                "Mock calendar event deleted",
                extra={"event_id": appointment.calendar_event_id, "appointment_id": appointment.id},
            )

    def list_blocked_ranges(self, employee_id: str, day: date) -> list[TimeRange]:
        return list(self._blocked.get((employee_id, day), []))

    def get_event(self, event_id: str) -> Appointment | None:
        return self._events.get(event_id)
