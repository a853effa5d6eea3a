from __future__ import annotations

from abc import ABC, abstractmethod

from barbershop.domain.entities.appointment import Appointment
from barbershop.domain.entities.ledger import LedgerEntry


class LedgerPort(ABC):
    @abstractmethod
    def create_pending_entry(self, appointment: Appointment, amount: int) -> LedgerEntry:
        """Open the pending-payment entry tied to an appointment."""
        raise NotImplementedError

    @abstractmethod
    def void_pending_entry(self, appointment_id: str) -> bool:
        """Void the appointment's pending entry. Returns False when there was none."""
        raise NotImplementedError
