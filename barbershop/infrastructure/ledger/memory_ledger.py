from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone

from barbershop.application.ports.ledger import LedgerPort
from barbershop.domain.entities.appointment import Appointment
from barbershop.domain.entities.ledger import LedgerEntry, LedgerEntryStatus


class MemoryLedger(LedgerPort):
    """Pending-payment entries, at most one per appointment."""

    def __init__(self) -> None:
        self._entries: dict[str, LedgerEntry] = {}  # appointment_id -> entry
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def create_pending_entry(self, appointment: Appointment, amount: int) -> LedgerEntry:
        with self._lock:
            existing = self._entries.get(appointment.id)
            if existing is not None and existing.status is LedgerEntryStatus.PENDING:
                return existing
            entry = LedgerEntry(
                id=uuid.uuid4().hex,
                appointment_id=appointment.id,
                client_id=appointment.client_id,
                employee_id=appointment.employee_id,
                service_name=appointment.service_name,
                amount=amount,
                status=LedgerEntryStatus.PENDING,
                created_at=datetime.now(timezone.utc),
            )
            self._entries[appointment.id] = entry
        self._logger.info("Ledger entry opened", extra={"appointment_id": appointment.id, "amount": amount})
        return entry

    def void_pending_entry(self, appointment_id: str) -> bool:
        with self._lock:
            entry = self._entries.get(appointment_id)
            if entry is None or entry.status is not LedgerEntryStatus.PENDING:
                return False
            self._entries[appointment_id] = replace(entry, status=LedgerEntryStatus.VOIDED)
        self._logger.info("Ledger entry voided", extra={"appointment_id": appointment_id})
        return True

    def get_entry(self, appointment_id: str) -> LedgerEntry | None:
        return self._entries.get(appointment_id)
