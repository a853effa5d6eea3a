from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class LedgerEntryStatus(str, Enum):
    PENDING = "PENDING"
    VOIDED = "VOIDED"


@dataclass(frozen=True)
class LedgerEntry:
    id: str
    appointment_id: str
    client_id: str
    employee_id: str
    service_name: str
    amount: int
    status: LedgerEntryStatus
    created_at: datetime
