"""
Shared builders for the scheduling and chat tests.

Everything runs on in-memory adapters and a fixed clock set to
Monday 2026-10-19 07:00 in America/Bogota.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from barbershop.application.use_cases.appointments import AppointmentService
from barbershop.application.use_cases.conversation_flow import ConversationStateMachine
from barbershop.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from barbershop.application.use_cases.overlap_validator import OverlapValidator
from barbershop.application.use_cases.send_reply import SendReplyUseCase
from barbershop.application.use_cases.slot_calculator import SlotCalculator
from barbershop.application.use_cases.sweep_conversations import ConversationSweeper
from barbershop.application.utils.locks import KeyedLocks
from barbershop.application.utils.templates import MessageTemplates
from barbershop.domain.entities.employee import Employee
from barbershop.domain.entities.message import Message
from barbershop.domain.entities.schedule import WeeklySchedule
from barbershop.domain.entities.service_catalog import Service
from barbershop.infrastructure.calendar.mock_calendar import MockCalendar
from barbershop.infrastructure.catalog.service_catalog_store import ServiceCatalogStore
from barbershop.infrastructure.ledger.memory_ledger import MemoryLedger
from barbershop.infrastructure.store.memory_appointments import MemoryAppointmentRepository
from barbershop.infrastructure.store.memory_directory import MemoryClientDirectory, MemoryEmployeeDirectory
from barbershop.infrastructure.store.memory_store import MemoryConversationStore
from barbershop.infrastructure.whatsapp.mock_platform import MockWhatsAppPlatform

TZ = ZoneInfo("America/Bogota")
MONDAY = date(2026, 10, 19)
SUNDAY = date(2026, 10, 25)
NOW = datetime(2026, 10, 19, 7, 0, tzinfo=TZ)
PHONE = "573001112233"

WEEKDAYS = {weekday: ("09:00", "20:00") for weekday in range(6)}

TEST_EMPLOYEES = [
    Employee(id="emp-1", name="Carlos Ramírez", schedule=WeeklySchedule.from_strings(WEEKDAYS)),
    Employee(id="emp-2", name="Andrés Gómez", schedule=WeeklySchedule.from_strings(WEEKDAYS)),
]

TEST_SERVICES = [
    Service(id="svc-corte", name="Corte de cabello", price=25000, duration_minutes=30),
    Service(id="svc-barba", name="Arreglo de barba", price=15000, duration_minutes=30),
]


def at(hhmm: str, day: date = MONDAY) -> datetime:
    hours, minutes = (int(part) for part in hhmm.split(":"))
    return datetime(day.year, day.month, day.day, hours, minutes, tzinfo=TZ)


class FixedClock:
    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FailingCalendar(MockCalendar):
    """Every call raises, like a provider that is down."""

    def create_event(self, appointment):
        raise RuntimeError("calendar down")

    def update_event(self, appointment):
        raise RuntimeError("calendar down")

    def delete_event(self, appointment):
        raise RuntimeError("calendar down")

    def list_blocked_ranges(self, employee_id, day):
        raise RuntimeError("calendar down")


class FailingLedger(MemoryLedger):
    def create_pending_entry(self, appointment, amount):
        raise RuntimeError("ledger down")

    def void_pending_entry(self, appointment_id):
        raise RuntimeError("ledger down")


@dataclass
class Shop:
    clock: FixedClock
    employees: MemoryEmployeeDirectory
    clients: MemoryClientDirectory
    catalog: ServiceCatalogStore
    repository: MemoryAppointmentRepository
    calendar: MockCalendar
    ledger: MemoryLedger
    validator: OverlapValidator
    slots: SlotCalculator
    appointments: AppointmentService
    templates: MessageTemplates
    state_machine: ConversationStateMachine
    store: MemoryConversationStore
    platform: MockWhatsAppPlatform
    send_reply: SendReplyUseCase
    handler: HandleIncomingMessageUseCase
    sweeper: ConversationSweeper

    def new_client(self, name: str = "Juan Pérez", phone: str = PHONE):
        return self.clients.create_client(name=name, phone=phone)

    def book(self, start: datetime, employee_id: str = "emp-1", duration_minutes: int = 30, **kwargs):
        client = kwargs.pop("client", None) or self.clients.find_by_phone(PHONE) or self.new_client()
        return self.appointments.create(
            client_id=client.id,
            employee_id=employee_id,
            service_name=kwargs.pop("service_name", "Corte de cabello"),
            start=start,
            duration_minutes=duration_minutes,
            **kwargs,
        )

    def send(self, text: str, phone: str = PHONE, message_id: str | None = None) -> list[str]:
        """Push one inbound text through the handler and return the replies it produced."""
        already_sent = len(self.platform.sent)
        self.handler.handle(
            Message(
                id=message_id or f"wamid.{len(self.platform.sent)}.{text}",
                phone=phone,
                text=text,
                timestamp=int(self.clock.now.timestamp()),
                platform="whatsapp",
            )
        )
        return [reply for recipient, reply in self.platform.sent[already_sent:] if recipient == phone]


def build_shop(
    calendar: MockCalendar | None = None,
    ledger: MemoryLedger | None = None,
    employees: list[Employee] | None = None,
    services: list[Service] | None = None,
    clock: FixedClock | None = None,
) -> Shop:
    clock = clock or FixedClock()
    employee_directory = MemoryEmployeeDirectory(TEST_EMPLOYEES if employees is None else employees)
    clients = MemoryClientDirectory()
    catalog = ServiceCatalogStore(TEST_SERVICES if services is None else services)
    repository = MemoryAppointmentRepository()
    calendar = calendar if calendar is not None else MockCalendar()
    ledger = ledger if ledger is not None else MemoryLedger()

    validator = OverlapValidator(employees=employee_directory, appointments=repository, timezone=TZ, clock=clock)
    slots = SlotCalculator(employees=employee_directory, appointments=repository, calendar=calendar, timezone=TZ)
    appointments = AppointmentService(
        appointments=repository,
        employees=employee_directory,
        clients=clients,
        catalog=catalog,
        validator=validator,
        calendar=calendar,
        ledger=ledger,
        timezone=TZ,
        clock=clock,
    )
    templates = MessageTemplates(business_name="Madison MVP Barbería", business_address="Calle 10 # 20-30")
    state_machine = ConversationStateMachine(
        employees=employee_directory,
        clients=clients,
        catalog=catalog,
        appointments=appointments,
        slots=slots,
        templates=templates,
        timezone=TZ,
        clock=clock,
    )
    store = MemoryConversationStore()
    platform = MockWhatsAppPlatform()
    phone_locks = KeyedLocks()
    send_reply = SendReplyUseCase(platform=platform, auto_reply_enabled=True)
    handler = HandleIncomingMessageUseCase(
        store=store,
        state_machine=state_machine,
        send_reply=send_reply,
        templates=templates,
        timezone=TZ,
        clock=clock,
        phone_locks=phone_locks,
    )
    sweeper = ConversationSweeper(
        store=store, timeout_ms=300_000, timezone=TZ, clock=clock, phone_locks=phone_locks
    )

    return Shop(
        clock=clock,
        employees=employee_directory,
        clients=clients,
        catalog=catalog,
        repository=repository,
        calendar=calendar,
        ledger=ledger,
        validator=validator,
        slots=slots,
        appointments=appointments,
        templates=templates,
        state_machine=state_machine,
        store=store,
        platform=platform,
        send_reply=send_reply,
        handler=handler,
        sweeper=sweeper,
    )


@pytest.fixture
def shop() -> Shop:
    return build_shop()
