from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo

import httpx

from barbershop.application.exceptions import IntegrationError
from barbershop.application.ports.calendar import CalendarPort
from barbershop.application.ports.client_directory import ClientDirectoryPort
from barbershop.application.ports.employee_directory import EmployeeDirectoryPort
from barbershop.core.config import settings
from barbershop.domain.entities.appointment import Appointment, AppointmentStatus
from barbershop.domain.entities.schedule import TimeRange, day_bounds

# Google Calendar event colour ids
COLOR_ACTIVE = "2"
COLOR_CANCELLED = "11"
COLOR_COMPLETED = "10"


class GoogleCalendar(CalendarPort):
    """
    Mirrors appointments into each employee's Google calendar over the REST API.
    Employees without a calendar_id are skipped.
    """

    def __init__(
        self,
        employees: EmployeeDirectoryPort,
        clients: ClientDirectoryPort,
        access_token: str | None = None,
        base_url: str | None = None,
        timezone: str | None = None,
        timeout: float | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._employees = employees
        self._clients = clients
        self._access_token = access_token or settings.GOOGLE_CALENDAR_ACCESS_TOKEN
        self._base_url = (base_url or settings.GOOGLE_CALENDAR_BASE_URL).rstrip("/")
        self._timezone = timezone or settings.BUSINESS_TIMEZONE
        self._client = http_client or httpx.Client(timeout=timeout or settings.CALENDAR_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

        if not self._access_token:
            raise ValueError("GOOGLE_CALENDAR_ACCESS_TOKEN is required for Google Calendar")

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._access_token}", "Content-Type": "application/json"}

    def _calendar_id(self, employee_id: str) -> str | None:
        employee = self._employees.get_employee(employee_id)
        return employee.calendar_id if employee else None

    def create_event(self, appointment: Appointment) -> str | None:
        calendar_id = self._calendar_id(appointment.employee_id)
        if not calendar_id:
            return None

        url = f"{self._base_url}/calendars/{calendar_id}/events"
        payload = self._event_body(appointment)
        payload["reminders"] = {
            "useDefault": False,
            "overrides": [{"method": "popup", "minutes": 30}, {"method": "popup", "minutes": 10}],
        }
        try:
            response = self._client.post(url, json=payload, headers=self._headers())
            response.raise_for_status()
        except httpx.HTTPError as e:
            self._logger.error(
                "Error creating calendar event", extra={"appointment_id": appointment.id, "error": str(e)}
            )
            raise IntegrationError(f"Google Calendar insert failed: {e}") from e

        event_id = response.json().get("id")
        if not event_id:
            raise IntegrationError("No event ID returned from Google Calendar API")
        self._logger.info("Calendar event created", extra={"appointment_id": appointment.id, "event_id": event_id})
        return str(event_id)

    def update_event(self, appointment: Appointment) -> str | None:
        if not appointment.calendar_event_id:
            if appointment.status is AppointmentStatus.CANCELLED:
                return None
            return self.create_event(appointment)

        calendar_id = self._calendar_id(appointment.employee_id)
        if not calendar_id:
            return None

        url = f"{self._base_url}/calendars/{calendar_id}/events/{appointment.calendar_event_id}"
        try:
            response = self._client.patch(url, json=self._event_body(appointment), headers=self._headers())
            response.raise_for_status()
        except httpx.HTTPError as e:
            self._logger.error(
                "Error updating calendar event",
                extra={"appointment_id": appointment.id, "event_id": appointment.calendar_event_id, "error": str(e)},
            )
            raise IntegrationError(f"Google Calendar patch failed: {e}") from e

        self._logger.info(
            "Calendar event updated",
            extra={"appointment_id": appointment.id, "event_id": appointment.calendar_event_id},
        )
        return appointment.calendar_event_id

    def delete_event(self, appointment: Appointment) -> None:
        calendar_id = self._calendar_id(appointment.employee_id)
        if not calendar_id or not appointment.calendar_event_id:
            return

        url = f"{self._base_url}/calendars/{calendar_id}/events/{appointment.calendar_event_id}"
        try:
            response = self._client.delete(url, headers=self._headers())
            # 404/410: already gone
            if response.status_code not in (404, 410):
                response.raise_for_status()
        except httpx.HTTPError as e:
            self._logger.error(
                "Error deleting calendar event",
                extra={"appointment_id": appointment.id, "event_id": appointment.calendar_event_id, "error": str(e)},
            )
            raise IntegrationError(f"Google Calendar delete failed: {e}") from e

        self._logger.info(
            "Calendar event deleted",
            extra={"appointment_id": appointment.id, "event_id": appointment.calendar_event_id},
        )

    def list_blocked_ranges(self, employee_id: str, day: date) -> list[TimeRange]:
        calendar_id = self._calendar_id(employee_id)
        if not calendar_id:
            return []

        start, end = day_bounds(day, ZoneInfo(self._timezone))
        payload = {
            "timeMin": start.isoformat(),
            "timeMax": end.isoformat(),
            "timeZone": self._timezone,
            "items": [{"id": calendar_id}],
        }
        try:
            response = self._client.post(f"{self._base_url}/freeBusy", json=payload, headers=self._headers())
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise IntegrationError(f"Google Calendar freeBusy failed: {e}") from e

        busy = response.json().get("calendars", {}).get(calendar_id, {}).get("busy", [])
        ranges: list[TimeRange] = []
        for block in busy:
            try:
                ranges.append(
                    TimeRange(
                        start=datetime.fromisoformat(block["start"].replace("Z", "+00:00")),
                        end=datetime.fromisoformat(block["end"].replace("Z", "+00:00")),
                    )
                )
            except (KeyError, ValueError, AttributeError):
                continue
        return ranges

    def _event_body(self, appointment: Appointment) -> dict[str, Any]:
        client = self._clients.get_client(appointment.client_id)
        client_name = client.name if client else "Cliente"
        lines = [
            f"Cliente: {client_name}",
            f"Teléfono: {client.phone if client else ''}",
            f"Servicio: {appointment.service_name}",
            f"Estado: {appointment.status.value}",
            f"Radicado: {appointment.tracking_code}",
        ]
        if appointment.notes:
            lines.append(f"Notas: {appointment.notes}")
        if appointment.cancellation_reason:
            lines.append(f"Motivo cancelación: {appointment.cancellation_reason}")

        color = COLOR_ACTIVE
        if appointment.status is AppointmentStatus.CANCELLED:
            color = COLOR_CANCELLED
        elif appointment.status is AppointmentStatus.COMPLETED:
            color = COLOR_COMPLETED

        return {
            "summary": f"{appointment.service_name} - {client_name}",
            "description": "\n".join(lines),
            "start": {"dateTime": appointment.start.isoformat(), "timeZone": self._timezone},
            "end": {"dateTime": appointment.end.isoformat(), "timeZone": self._timezone},
            "colorId": color,
            # Cancelled events stay visible but no longer count as busy in freeBusy.
            "transparency": "transparent" if appointment.status is AppointmentStatus.CANCELLED else "opaque",
        }
