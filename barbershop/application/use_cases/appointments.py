from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Callable
from zoneinfo import ZoneInfo

from barbershop.application.exceptions import (
    AppointmentNotFoundError,
    CannotDeleteCompletedError,
    ClientNotFoundError,
    EmployeeNotFoundError,
    IllegalTransitionError,
    ImmutableStateError,
    MissingReasonError,
    NotAvailableError,
    TrackingCodeNotFoundError,
)
from barbershop.application.ports.appointment_repository import AppointmentRepositoryPort
from barbershop.application.ports.calendar import CalendarPort
from barbershop.application.ports.client_directory import ClientDirectoryPort
from barbershop.application.ports.employee_directory import EmployeeDirectoryPort
from barbershop.application.ports.ledger import LedgerPort
from barbershop.application.ports.service_catalog import ServiceCatalogPort
from barbershop.application.use_cases.overlap_validator import ConflictReason, OverlapValidator
from barbershop.application.utils.best_effort import SideEffectOutcome, run_best_effort
from barbershop.application.utils.locks import KeyedLocks
from barbershop.application.utils.tracking_code import generate_tracking_code
from barbershop.domain.entities.appointment import Appointment, AppointmentOrigin, AppointmentStatus
from barbershop.domain.entities.schedule import day_bounds, localize

WHATSAPP_CANCELLATION_REASON = "Cancelado por WhatsApp"
MAX_TRACKING_CODE_ATTEMPTS = 20


class AppointmentService:
    """
    Owns appointment state transitions.

    Validation failures are raised as typed errors. Calendar and ledger calls
    are best-effort: their failures are logged and never undo the appointment
    change they accompany.
    """

    def __init__(
        self,
        appointments: AppointmentRepositoryPort,
        employees: EmployeeDirectoryPort,
        clients: ClientDirectoryPort,
        catalog: ServiceCatalogPort,
        validator: OverlapValidator,
        calendar: CalendarPort | None,
        ledger: LedgerPort | None,
        timezone: ZoneInfo,
        clock: Callable[[], datetime] | None = None,
        code_generator: Callable[[], str] = generate_tracking_code,
    ) -> None:
        self._appointments = appointments
        self._employees = employees
        self._clients = clients
        self._catalog = catalog
        self._validator = validator
        self._calendar = calendar
        self._ledger = ledger
        self._timezone = timezone
        self._clock = clock or (lambda: datetime.now(timezone))
        self._code_generator = code_generator
        self._employee_locks = KeyedLocks()
        self._logger = logging.getLogger(__name__)

    # -- queries ---------------------------------------------------------

    def get(self, appointment_id: str) -> Appointment:
        appointment = self._appointments.get(appointment_id)
        if appointment is None:
            raise AppointmentNotFoundError(f"Cita {appointment_id} no encontrada")
        return appointment

    def find_by_tracking_code(self, tracking_code: str) -> Appointment | None:
        return self._appointments.get_by_tracking_code(tracking_code.strip().upper())

    def list_for_day(self, day: date, employee_id: str | None = None) -> list[Appointment]:
        start, end = day_bounds(day, self._timezone)
        return self._appointments.list_between(start, end, employee_id=employee_id)

    def list_upcoming(self, limit: int = 10, employee_id: str | None = None) -> list[Appointment]:
        upcoming = [
            appointment
            for appointment in self._appointments.list_between(self._clock(), None, employee_id=employee_id)
            if appointment.status in (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED)
        ]
        return upcoming[:limit]

    def statistics(self, start: datetime | None = None, end: datetime | None = None) -> dict[str, int]:
        appointments = self._appointments.list_between(start, end)
        stats = {"total": len(appointments)}
        for status in AppointmentStatus:
            stats[status.value.lower()] = sum(1 for a in appointments if a.status is status)
        return stats

    # -- transitions -----------------------------------------------------

    def create(
        self,
        client_id: str,
        employee_id: str,
        service_name: str,
        start: datetime,
        duration_minutes: int,
        origin: AppointmentOrigin = AppointmentOrigin.MANUAL,
        notes: str | None = None,
    ) -> Appointment:
        if self._employees.get_employee(employee_id) is None:
            raise EmployeeNotFoundError(f"Empleado {employee_id} no encontrado")
        if self._clients.get_client(client_id) is None:
            raise ClientNotFoundError(f"Cliente {client_id} no encontrado")

        start = localize(start, self._timezone)
        with self._employee_locks.hold(employee_id):
            self._validator.validate(employee_id, start, duration_minutes)
            appointment = Appointment(
                id=uuid.uuid4().hex,
                tracking_code=self._new_tracking_code(),
                client_id=client_id,
                employee_id=employee_id,
                service_name=service_name,
                start=start,
                duration_minutes=duration_minutes,
                origin=origin,
                status=origin.initial_status(),
                created_at=self._clock(),
                notes=notes or None,
            )
            self._appointments.add(appointment)

        self._logger.info(
            "Appointment created",
            extra={
                "appointment_id": appointment.id,
                "tracking_code": appointment.tracking_code,
                "employee_id": employee_id,
                "origin": origin.value,
            },
        )
        appointment = self._sync_calendar(appointment, created=True)
        self._open_ledger_entry(appointment)
        return appointment

    def reschedule(
        self,
        appointment_id: str,
        start: datetime | None = None,
        employee_id: str | None = None,
        duration_minutes: int | None = None,
        service_name: str | None = None,
        notes: str | None = None,
    ) -> Appointment:
        current = self.get(appointment_id)
        new_employee_id = employee_id or current.employee_id
        if employee_id and self._employees.get_employee(employee_id) is None:
            raise EmployeeNotFoundError(f"Empleado {employee_id} no encontrado")

        with self._employee_locks.hold(current.employee_id, new_employee_id):
            current = self.get(appointment_id)
            if current.status is AppointmentStatus.COMPLETED:
                raise ImmutableStateError("No se puede modificar una cita completada")

            new_start = localize(start, self._timezone) if start else current.start
            new_duration = duration_minutes or current.duration_minutes
            if start is not None or employee_id is not None or duration_minutes is not None:
                conflict = self._validator.find_conflict(
                    new_employee_id, new_start, new_duration, exclude_appointment_id=appointment_id
                )
                if conflict is not None:
                    if conflict.reason is ConflictReason.DOUBLE_BOOKING:
                        raise NotAvailableError(
                            "El empleado no está disponible en ese horario",
                            appointment_id=conflict.appointment_id,
                        )
                    raise conflict.to_error()

            updated = replace(
                current,
                employee_id=new_employee_id,
                start=new_start,
                duration_minutes=new_duration,
                service_name=service_name or current.service_name,
                notes=current.notes if notes is None else (notes or None),
            )
            self._appointments.update(updated)

        self._logger.info("Appointment rescheduled", extra={"appointment_id": appointment_id})
        return self._sync_calendar(updated, created=False)

    def change_status(
        self,
        appointment_id: str,
        new_status: AppointmentStatus | str,
        cancellation_reason: str | None = None,
    ) -> Appointment:
        new_status = AppointmentStatus(new_status)
        current = self.get(appointment_id)

        with self._employee_locks.hold(current.employee_id):
            current = self.get(appointment_id)
            self._check_transition(current, new_status, cancellation_reason)

            if current.status is AppointmentStatus.CANCELLED:
                # Reactivation puts the appointment back on the schedule.
                conflict = self._validator.find_double_booking(
                    current.employee_id, current.start, current.duration_minutes, exclude_appointment_id=current.id
                )
                if conflict is not None:
                    raise NotAvailableError(conflict.message, appointment_id=conflict.appointment_id)

            updated = replace(
                current,
                status=new_status,
                cancellation_reason=(
                    cancellation_reason.strip() if new_status is AppointmentStatus.CANCELLED else None
                ),
            )
            self._appointments.update(updated)

        self._logger.info(
            "Appointment status changed",
            extra={"appointment_id": appointment_id, "from": current.status.value, "to": new_status.value},
        )
        updated = self._sync_calendar(updated, created=False)
        if new_status is AppointmentStatus.CANCELLED:
            self._void_ledger_entry(appointment_id)
        return updated

    def delete(self, appointment_id: str) -> None:
        current = self.get(appointment_id)
        if current.status is AppointmentStatus.COMPLETED:
            raise CannotDeleteCompletedError("No se puede eliminar una cita completada")

        self._void_ledger_entry(appointment_id)
        with self._employee_locks.hold(current.employee_id):
            self._appointments.delete(appointment_id)
        self._logger.info("Appointment deleted", extra={"appointment_id": appointment_id})
        if self._calendar is not None:
            calendar = self._calendar
            run_best_effort(
                "calendar.delete_event",
                lambda: calendar.delete_event(current),
                self._logger,
                appointment_id=appointment_id,
            )

    def cancel_by_tracking_code(self, tracking_code: str) -> Appointment:
        """
        Cancel with the fixed WhatsApp reason. Callers must already have checked
        that the requesting phone owns the appointment.
        """
        appointment = self.find_by_tracking_code(tracking_code)
        if appointment is None:
            raise TrackingCodeNotFoundError(f"No existe una cita con el código {tracking_code}")
        if appointment.status is AppointmentStatus.CANCELLED:
            return appointment
        return self.change_status(appointment.id, AppointmentStatus.CANCELLED, WHATSAPP_CANCELLATION_REASON)

    # -- helpers ---------------------------------------------------------

    def _check_transition(
        self, current: Appointment, new_status: AppointmentStatus, cancellation_reason: str | None
    ) -> None:
        if current.status is AppointmentStatus.COMPLETED:
            raise ImmutableStateError("No se puede modificar una cita completada")
        if current.status is AppointmentStatus.CANCELLED and new_status is not AppointmentStatus.PENDING:
            raise IllegalTransitionError("Solo se puede reactivar una cita cancelada a estado PENDING")
        if new_status is AppointmentStatus.CANCELLED and not (cancellation_reason and cancellation_reason.strip()):
            raise MissingReasonError("Debe proporcionar un motivo de cancelación")

    def _new_tracking_code(self) -> str:
        for _ in range(MAX_TRACKING_CODE_ATTEMPTS):
            code = self._code_generator()
            if self._appointments.get_by_tracking_code(code) is None:
                return code
        raise RuntimeError("Could not generate a unique tracking code")

    def _sync_calendar(self, appointment: Appointment, created: bool) -> Appointment:
        if self._calendar is None:
            return appointment
        calendar = self._calendar
        if created:
            outcome = run_best_effort(
                "calendar.create_event",
                lambda: calendar.create_event(appointment),
                self._logger,
                appointment_id=appointment.id,
            )
        else:
            outcome = run_best_effort(
                "calendar.update_event",
                lambda: calendar.update_event(appointment),
                self._logger,
                appointment_id=appointment.id,
            )

        if outcome.ok and outcome.value and outcome.value != appointment.calendar_event_id:
            appointment = replace(appointment, calendar_event_id=str(outcome.value))
            self._appointments.update(appointment)
        return appointment

    def _open_ledger_entry(self, appointment: Appointment) -> SideEffectOutcome:
        if self._ledger is None:
            return SideEffectOutcome(ok=True)
        ledger = self._ledger

        def create_entry():
            service = self._catalog.get_by_name(appointment.service_name)
            if service is None:
                raise LookupError(f"Service {appointment.service_name!r} is not in the catalog")
            return ledger.create_pending_entry(appointment, service.price)

        return run_best_effort("ledger.create_pending_entry", create_entry, self._logger, appointment_id=appointment.id)

    def _void_ledger_entry(self, appointment_id: str) -> SideEffectOutcome:
        if self._ledger is None:
            return SideEffectOutcome(ok=True)
        ledger = self._ledger
        return run_best_effort(
            "ledger.void_pending_entry",
            lambda: ledger.void_pending_entry(appointment_id),
            self._logger,
            appointment_id=appointment_id,
        )
