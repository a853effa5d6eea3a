from functools import lru_cache
import logging
from pathlib import Path
from zoneinfo import ZoneInfo

from barbershop.core.config import settings
from barbershop.application.ports.appointment_repository import AppointmentRepositoryPort
from barbershop.application.ports.calendar import CalendarPort
from barbershop.application.ports.client_directory import ClientDirectoryPort
from barbershop.application.ports.conversation_store import ConversationStorePort
from barbershop.application.ports.employee_directory import EmployeeDirectoryPort
from barbershop.application.ports.ledger import LedgerPort
from barbershop.application.ports.message_platform import MessagePlatformPort
from barbershop.application.ports.service_catalog import ServiceCatalogPort
from barbershop.application.use_cases.appointments import AppointmentService
from barbershop.application.use_cases.conversation_flow import ConversationStateMachine
from barbershop.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from barbershop.application.use_cases.overlap_validator import OverlapValidator
from barbershop.application.use_cases.send_reply import SendReplyUseCase
from barbershop.application.use_cases.slot_calculator import SlotCalculator
from barbershop.application.use_cases.sweep_conversations import ConversationSweeper
from barbershop.application.utils.locks import KeyedLocks
from barbershop.application.utils.templates import MessageTemplates
from barbershop.domain.entities.schedule import LunchWindow, parse_hhmm
from barbershop.infrastructure.calendar.google_calendar import GoogleCalendar
from barbershop.infrastructure.calendar.mock_calendar import MockCalendar
from barbershop.infrastructure.catalog.service_catalog_store import ServiceCatalogStore
from barbershop.infrastructure.ledger.memory_ledger import MemoryLedger
from barbershop.infrastructure.store.json_store import JsonConversationStore
from barbershop.infrastructure.store.memory_appointments import MemoryAppointmentRepository
from barbershop.infrastructure.store.memory_directory import MemoryClientDirectory, MemoryEmployeeDirectory
from barbershop.infrastructure.store.memory_store import MemoryConversationStore
from barbershop.infrastructure.whatsapp.mock_platform import MockWhatsAppPlatform
from barbershop.infrastructure.whatsapp.whatsapp_client import WhatsAppClient
from barbershop.infrastructure.whatsapp.whatsapp_platform import WhatsAppPlatform


_conversation_store: ConversationStorePort | None = None


def get_timezone() -> ZoneInfo:
    return ZoneInfo(settings.BUSINESS_TIMEZONE)


def get_lunch_window() -> LunchWindow:
    return LunchWindow(start=parse_hhmm(settings.LUNCH_START), end=parse_hhmm(settings.LUNCH_END))


def get_conversation_store() -> ConversationStorePort:
    global _conversation_store
    if _conversation_store is None:
        if settings.ENV.lower() in {"dev", "local"}:
            _conversation_store = JsonConversationStore(data_dir=str(Path(settings.DATA_DIR) / "conversations"))
        else:
            _conversation_store = MemoryConversationStore()
    return _conversation_store


@lru_cache
def get_employee_directory() -> EmployeeDirectoryPort:
    return MemoryEmployeeDirectory()


@lru_cache
def get_client_directory() -> ClientDirectoryPort:
    return MemoryClientDirectory()


@lru_cache
def get_service_catalog() -> ServiceCatalogPort:
    return ServiceCatalogStore()


@lru_cache
def get_appointment_repository() -> AppointmentRepositoryPort:
    return MemoryAppointmentRepository()


@lru_cache
def get_ledger() -> LedgerPort:
    return MemoryLedger()


@lru_cache
def get_calendar() -> CalendarPort:
    if not settings.GOOGLE_CALENDAR_ACCESS_TOKEN or settings.ENV.lower() in {"dev", "local"}:
        return MockCalendar()
    return GoogleCalendar(employees=get_employee_directory(), clients=get_client_directory())


@lru_cache
def get_whatsapp_platform() -> MessagePlatformPort:
    logger = logging.getLogger(__name__)
    logger.info("WHATSAPP_ACCESS_TOKEN present=%s", bool(settings.WHATSAPP_ACCESS_TOKEN))
    logger.info("ENV=%s", settings.ENV)

    if not settings.WHATSAPP_ACCESS_TOKEN or not settings.WHATSAPP_PHONE_NUMBER_ID:
        if settings.ENV.lower() in {"dev", "local", "test"}:
            logger.info("Using MockWhatsAppPlatform (token missing, ENV=dev/local)")
            return MockWhatsAppPlatform()
        raise ValueError("WHATSAPP_ACCESS_TOKEN and WHATSAPP_PHONE_NUMBER_ID are required to send WhatsApp replies.")

    logger.info("Using real WhatsAppPlatform")
    client = WhatsAppClient(
        access_token=settings.WHATSAPP_ACCESS_TOKEN,
        phone_number_id=settings.WHATSAPP_PHONE_NUMBER_ID,
        api_url=settings.WHATSAPP_API_URL,
        max_retries=settings.WHATSAPP_MAX_RETRIES,
    )
    return WhatsAppPlatform(client=client)


@lru_cache
def get_overlap_validator() -> OverlapValidator:
    return OverlapValidator(
        employees=get_employee_directory(),
        appointments=get_appointment_repository(),
        timezone=get_timezone(),
        lunch_window=get_lunch_window(),
    )


@lru_cache
def get_slot_calculator() -> SlotCalculator:
    return SlotCalculator(
        employees=get_employee_directory(),
        appointments=get_appointment_repository(),
        calendar=get_calendar(),
        timezone=get_timezone(),
        lunch_window=get_lunch_window(),
    )


@lru_cache
def get_appointment_service() -> AppointmentService:
    return AppointmentService(
        appointments=get_appointment_repository(),
        employees=get_employee_directory(),
        clients=get_client_directory(),
        catalog=get_service_catalog(),
        validator=get_overlap_validator(),
        calendar=get_calendar(),
        ledger=get_ledger(),
        timezone=get_timezone(),
    )


@lru_cache
def get_templates() -> MessageTemplates:
    return MessageTemplates(business_name=settings.BUSINESS_NAME, business_address=settings.BUSINESS_ADDRESS)


@lru_cache
def get_send_reply_use_case() -> SendReplyUseCase:
    return SendReplyUseCase(platform=get_whatsapp_platform(), auto_reply_enabled=settings.AUTO_REPLY_ENABLED)


@lru_cache
def get_conversation_state_machine() -> ConversationStateMachine:
    return ConversationStateMachine(
        employees=get_employee_directory(),
        clients=get_client_directory(),
        catalog=get_service_catalog(),
        appointments=get_appointment_service(),
        slots=get_slot_calculator(),
        templates=get_templates(),
        timezone=get_timezone(),
        default_slot_minutes=settings.DEFAULT_SLOT_MINUTES,
    )


@lru_cache
def get_phone_locks() -> KeyedLocks:
    return KeyedLocks()


@lru_cache
def get_handle_incoming_message_use_case() -> HandleIncomingMessageUseCase:
    return HandleIncomingMessageUseCase(
        store=get_conversation_store(),
        state_machine=get_conversation_state_machine(),
        send_reply=get_send_reply_use_case(),
        templates=get_templates(),
        timezone=get_timezone(),
        phone_locks=get_phone_locks(),
    )


@lru_cache
def get_conversation_sweeper() -> ConversationSweeper:
    return ConversationSweeper(
        store=get_conversation_store(),
        timeout_ms=settings.CONVERSATION_TIMEOUT_MS,
        timezone=get_timezone(),
        phone_locks=get_phone_locks(),
    )
