from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Callable
from zoneinfo import ZoneInfo

from barbershop.application.exceptions import NotFoundError, ValidationError
from barbershop.application.ports.client_directory import ClientDirectoryPort
from barbershop.application.ports.employee_directory import EmployeeDirectoryPort
from barbershop.application.ports.service_catalog import ServiceCatalogPort
from barbershop.application.use_cases.appointments import AppointmentService
from barbershop.application.use_cases.slot_calculator import SlotCalculator
from barbershop.application.utils.client_names import PLACEHOLDER_CLIENT_NAME, is_more_complete_name
from barbershop.application.utils.message_parser import (
    contains_all,
    extract_tracking_code,
    is_affirmative,
    is_exit_command,
    is_negative,
    is_valid_full_name,
    normalize_text,
    parse_numeric_option,
    parse_relative_date,
)
from barbershop.application.utils.templates import MessageTemplates, format_long_date, format_time_12h
from barbershop.domain.entities.appointment import AppointmentOrigin, AppointmentStatus
from barbershop.domain.entities.client import Client
from barbershop.domain.entities.conversation_state import (
    CANCELLATION_FLOW,
    Conversation,
    ConversationContext,
    ConversationStep,
)
from barbershop.domain.entities.schedule import parse_hhmm

FALLBACK_SERVICE_NAME = "Corte de cabello"

MENU_LOCATION = 1
MENU_PRICES = 2
MENU_BOOK = 3
MENU_CANCEL = 4


@dataclass(frozen=True)
class StepResult:
    replies: list[str]
    step: ConversationStep
    context: ConversationContext = field(default_factory=ConversationContext)
    finish: bool = False


class ConversationStateMachine:
    """
    Computes one dialogue step: the replies to send and the next step/context.

    Nothing is persisted here apart from what the appointment service and the
    client directory store on their own; saving the conversation is the
    caller's job.
    """

    def __init__(
        self,
        employees: EmployeeDirectoryPort,
        clients: ClientDirectoryPort,
        catalog: ServiceCatalogPort,
        appointments: AppointmentService,
        slots: SlotCalculator,
        templates: MessageTemplates,
        timezone: ZoneInfo,
        clock: Callable[[], datetime] | None = None,
        default_slot_minutes: int = 30,
    ) -> None:
        self._employees = employees
        self._clients = clients
        self._catalog = catalog
        self._appointments = appointments
        self._slots = slots
        self._templates = templates
        self._timezone = timezone
        self._clock = clock or (lambda: datetime.now(timezone))
        self._default_slot_minutes = default_slot_minutes
        self._logger = logging.getLogger(__name__)

        self._handlers: dict[ConversationStep, Callable[[Conversation, str], StepResult]] = {
            ConversationStep.INITIAL: self._on_initial,
            ConversationStep.ESPERANDO_SERVICIO: self._on_anything_else,
            ConversationStep.ESPERANDO_BARBERO: self._on_barber,
            ConversationStep.ESPERANDO_NOMBRE: self._on_name,
            ConversationStep.ESPERANDO_FECHA: self._on_date,
            ConversationStep.ESPERANDO_HORA: self._on_time,
            ConversationStep.ESPERANDO_RADICADO: self._on_tracking_code,
            ConversationStep.ESPERANDO_CONFIRMACION_CANCELACION: self._on_cancel_confirmation,
        }

    def step(self, conversation: Conversation, text: str) -> StepResult:
        handler = self._handlers.get(conversation.step)
        if handler is None:
            self._logger.warning(
                "Unrecognized conversation step, resetting",
                extra={"phone": conversation.phone, "step": conversation.step.value},
            )
            return StepResult(
                replies=[self._templates.invalid_option(), self._templates.welcome()],
                step=ConversationStep.INITIAL,
            )
        return handler(conversation, text)

    def resolve_client(self, phone: str, name: str) -> Client:
        """Find the client by phone or create it; keep the more complete of the two names."""
        client = self._clients.find_by_phone(phone)
        if client is None:
            return self._clients.create_client(name=name, phone=phone)
        if is_more_complete_name(client.name, name):
            self._logger.info("Client name updated", extra={"phone": phone, "client_id": client.id})
            return self._clients.update_client_name(client.id, name.strip())
        return client

    # -- menu --------------------------------------------------------------

    def _on_initial(self, conversation: Conversation, text: str) -> StepResult:
        context = conversation.context
        option = parse_numeric_option(text, 4)

        if option == MENU_LOCATION:
            return StepResult([self._templates.location()], ConversationStep.INITIAL, context)

        if option == MENU_PRICES:
            services = self._catalog.list_active_services()
            return StepResult(
                [self._templates.price_list(services), self._templates.anything_else()],
                ConversationStep.ESPERANDO_SERVICIO,
                context,
            )

        if option == MENU_BOOK:
            employees = self._employees.list_active_employees()
            if not employees:
                return StepResult([self._templates.no_barbers_available()], ConversationStep.INITIAL, context)
            return StepResult([self._templates.choose_barber(employees)], ConversationStep.ESPERANDO_BARBERO, context)

        if option == MENU_CANCEL:
            return StepResult(
                [self._templates.ask_has_tracking_code()],
                ConversationStep.ESPERANDO_RADICADO,
                ConversationContext(flow=CANCELLATION_FLOW),
            )

        if is_affirmative(text):
            return StepResult([self._templates.welcome()], ConversationStep.INITIAL, context)
        if is_negative(text):
            return self._finish()
        return StepResult([self._templates.invalid_option()], ConversationStep.INITIAL, context)

    def _on_anything_else(self, conversation: Conversation, text: str) -> StepResult:
        if is_affirmative(text):
            return StepResult([self._templates.welcome()], ConversationStep.INITIAL)
        if is_negative(text):
            return self._finish()
        return StepResult(
            [self._templates.invalid_option(), self._templates.anything_else()],
            ConversationStep.ESPERANDO_SERVICIO,
            conversation.context,
        )

    # -- booking -----------------------------------------------------------

    def _on_barber(self, conversation: Conversation, text: str) -> StepResult:
        employees = self._employees.list_active_employees()
        option = parse_numeric_option(text, len(employees))

        if option is not None:
            employee = employees[option - 1]
            context = replace(conversation.context, employee_id=employee.id, employee_name=employee.name)
            return StepResult([self._templates.ask_full_name()], ConversationStep.ESPERANDO_NOMBRE, context)

        if normalize_text(text) == "ninguno":
            return self._finish()

        return StepResult(
            [self._templates.invalid_option(), self._templates.choose_barber(employees)],
            ConversationStep.ESPERANDO_BARBERO,
            conversation.context,
        )

    def _on_name(self, conversation: Conversation, text: str) -> StepResult:
        if not is_valid_full_name(text):
            return StepResult([self._templates.invalid_name()], ConversationStep.ESPERANDO_NOMBRE, conversation.context)
        name = " ".join(text.split())
        context = replace(conversation.context, client_name=name)
        return StepResult([self._templates.ask_date()], ConversationStep.ESPERANDO_FECHA, context)

    def _on_date(self, conversation: Conversation, text: str) -> StepResult:
        today = self._clock().astimezone(self._timezone).date()
        day = parse_relative_date(text, today)
        if day is None:
            return StepResult(
                [self._templates.invalid_option(), self._templates.ask_date()],
                ConversationStep.ESPERANDO_FECHA,
                conversation.context,
            )

        times = self._available_times(conversation.context.employee_id, day)
        if not times:
            return StepResult(
                [self._templates.checking_schedule(), self._templates.no_slots()],
                ConversationStep.ESPERANDO_FECHA,
                replace(conversation.context, date=day.isoformat(), slot_labels=(), slot_times=()),
            )

        context = self._with_slots(conversation.context, day, times)
        return StepResult(
            [self._templates.checking_schedule(), self._templates.available_slots(context.slot_labels)],
            ConversationStep.ESPERANDO_HORA,
            context,
        )

    def _on_time(self, conversation: Conversation, text: str) -> StepResult:
        context = conversation.context
        if is_exit_command(text):
            return self._finish()

        option = parse_numeric_option(text, len(context.slot_times))
        if option is None or not context.date or not context.employee_id:
            return StepResult(
                [self._templates.invalid_option(), self._templates.available_slots(context.slot_labels)],
                ConversationStep.ESPERANDO_HORA,
                context,
            )

        context = replace(context, chosen_time=context.slot_times[option - 1])
        day = date.fromisoformat(context.date)
        start = datetime.combine(day, parse_hhmm(context.chosen_time), tzinfo=self._timezone)
        service_name, duration = self._booked_service()
        client = self.resolve_client(conversation.phone, context.client_name or PLACEHOLDER_CLIENT_NAME)

        try:
            appointment = self._appointments.create(
                client_id=client.id,
                employee_id=context.employee_id,
                service_name=service_name,
                start=start,
                duration_minutes=duration,
                origin=AppointmentOrigin.WHATSAPP,
            )
        except ValidationError as e:
            self._logger.info(
                "Chosen slot no longer available",
                extra={"phone": conversation.phone, "employee_id": context.employee_id, "reason": e.reason},
            )
            return self._present_slots_again(context, day)

        return StepResult(
            [
                self._templates.appointment_confirmed(
                    tracking_code=appointment.tracking_code,
                    service=service_name,
                    barber=context.employee_name or "",
                    day=format_long_date(day),
                    hour=format_time_12h(context.chosen_time),
                ),
                self._templates.anything_else(),
            ],
            ConversationStep.ESPERANDO_SERVICIO,
            replace(context, slot_labels=(), slot_times=()),
        )

    def _present_slots_again(self, context: ConversationContext, day: date) -> StepResult:
        times = self._available_times(context.employee_id, day)
        if not times:
            return StepResult(
                [self._templates.slot_taken(), self._templates.no_slots()],
                ConversationStep.ESPERANDO_FECHA,
                replace(context, slot_labels=(), slot_times=(), chosen_time=None),
            )
        context = self._with_slots(context, day, times)
        return StepResult(
            [self._templates.slot_taken(), self._templates.available_slots(context.slot_labels)],
            ConversationStep.ESPERANDO_HORA,
            context,
        )

    def _available_times(self, employee_id: str | None, day: date) -> list[str]:
        if not employee_id:
            return []
        _, duration = self._booked_service()
        times = self._slots.compute_available_slots(employee_id, day, duration)

        now = self._clock().astimezone(self._timezone)
        if day == now.date():
            times = [t for t in times if parse_hhmm(t) > now.time()]
        return times

    def _with_slots(self, context: ConversationContext, day: date, times: list[str]) -> ConversationContext:
        return replace(
            context,
            date=day.isoformat(),
            slot_times=tuple(times),
            slot_labels=tuple(format_time_12h(t) for t in times),
            chosen_time=None,
        )

    def _booked_service(self) -> tuple[str, int]:
        services = self._catalog.list_active_services()
        if not services:
            return FALLBACK_SERVICE_NAME, self._default_slot_minutes
        return services[0].name, services[0].duration_minutes or self._default_slot_minutes

    # -- cancellation ------------------------------------------------------

    def _on_tracking_code(self, conversation: Conversation, text: str) -> StepResult:
        context = replace(conversation.context, flow=CANCELLATION_FLOW)

        if is_affirmative(text):
            return StepResult(
                [self._templates.ask_tracking_code()],
                ConversationStep.ESPERANDO_RADICADO,
                replace(context, awaiting_code=True),
            )
        if is_negative(text):
            return StepResult(
                [self._templates.without_tracking_code(), self._templates.anything_else()],
                ConversationStep.ESPERANDO_SERVICIO,
            )

        code = extract_tracking_code(text)
        appointment = self._appointments.find_by_tracking_code(code) if code else None
        if appointment is None or not self._belongs_to(appointment.client_id, conversation.phone):
            self._logger.info(
                "Tracking code not matched",
                extra={"phone": conversation.phone, "tracking_code": code},
            )
            return StepResult([self._templates.tracking_code_not_found()], ConversationStep.ESPERANDO_RADICADO, context)

        if appointment.status not in (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED):
            return StepResult([self._templates.tracking_code_not_found()], ConversationStep.ESPERANDO_RADICADO, context)

        local_start = appointment.start.astimezone(self._timezone)
        return StepResult(
            [
                self._templates.confirm_cancellation(
                    tracking_code=appointment.tracking_code,
                    service=appointment.service_name,
                    day=format_long_date(local_start),
                    hour=format_time_12h(local_start.time()),
                )
            ],
            ConversationStep.ESPERANDO_CONFIRMACION_CANCELACION,
            replace(context, tracking_code=appointment.tracking_code, appointment_id=appointment.id, awaiting_code=False),
        )

    def _on_cancel_confirmation(self, conversation: Conversation, text: str) -> StepResult:
        context = conversation.context

        if contains_all(text, "si", "cancelar") and context.tracking_code:
            try:
                appointment = self._appointments.cancel_by_tracking_code(context.tracking_code)
            except (ValidationError, NotFoundError) as e:
                self._logger.info(
                    "Appointment could not be cancelled from chat",
                    extra={"phone": conversation.phone, "tracking_code": context.tracking_code, "error": str(e)},
                )
                return StepResult(
                    [self._templates.appointment_not_cancellable(), self._templates.anything_else()],
                    ConversationStep.ESPERANDO_SERVICIO,
                )
            self._logger.info(
                "Appointment cancelled from chat",
                extra={"phone": conversation.phone, "appointment_id": appointment.id},
            )
            return StepResult(
                [self._templates.appointment_cancelled(), self._templates.anything_else()],
                ConversationStep.ESPERANDO_SERVICIO,
            )

        if contains_all(text, "no", "conservar"):
            return StepResult([self._templates.anything_else()], ConversationStep.ESPERANDO_SERVICIO)

        return StepResult([self._templates.invalid_option()], ConversationStep.ESPERANDO_CONFIRMACION_CANCELACION, context)

    def _belongs_to(self, client_id: str, phone: str) -> bool:
        client = self._clients.get_client(client_id)
        return client is not None and _digits(client.phone) == _digits(phone)

    def _finish(self) -> StepResult:
        return StepResult([self._templates.goodbye()], ConversationStep.COMPLETED, finish=True)


def _digits(phone: str) -> str:
    return re.sub(r"\D", "", phone or "")
