from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ConversationStep(str, Enum):
    INITIAL = "INICIAL"
    ESPERANDO_SERVICIO = "ESPERANDO_SERVICIO"
    ESPERANDO_BARBERO = "ESPERANDO_BARBERO"
    ESPERANDO_NOMBRE = "ESPERANDO_NOMBRE"
    ESPERANDO_FECHA = "ESPERANDO_FECHA"
    ESPERANDO_HORA = "ESPERANDO_HORA"
    ESPERANDO_RADICADO = "ESPERANDO_RADICADO"
    ESPERANDO_CONFIRMACION_CANCELACION = "ESPERANDO_CONFIRMACION_CANCELACION"
    COMPLETED = "COMPLETADA"
    # Persisted value nobody knows how to handle; the bot resets it to INITIAL.
    UNRECOGNIZED = "DESCONOCIDO"

    @classmethod
    def parse(cls, raw: str | None) -> "ConversationStep":
        try:
            return cls(raw)
        except ValueError:
            return cls.UNRECOGNIZED


CANCELLATION_FLOW = "cancellation"


@dataclass(frozen=True)
class ConversationContext:
    employee_id: str | None = None
    employee_name: str | None = None
    client_name: str | None = None
    date: str | None = None  # YYYY-MM-DD
    slot_labels: tuple[str, ...] = ()  # "2:30 PM"
    slot_times: tuple[str, ...] = ()  # "14:30", parallel to slot_labels
    chosen_time: str | None = None
    tracking_code: str | None = None
    appointment_id: str | None = None
    flow: str | None = None
    awaiting_code: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["slot_labels"] = list(self.slot_labels)
        data["slot_times"] = list(self.slot_times)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ConversationContext":
        data = data or {}
        return cls(
            employee_id=data.get("employee_id"),
            employee_name=data.get("employee_name"),
            client_name=data.get("client_name"),
            date=data.get("date"),
            slot_labels=tuple(data.get("slot_labels") or ()),
            slot_times=tuple(data.get("slot_times") or ()),
            chosen_time=data.get("chosen_time"),
            tracking_code=data.get("tracking_code"),
            appointment_id=data.get("appointment_id"),
            flow=data.get("flow"),
            awaiting_code=bool(data.get("awaiting_code", False)),
        )


@dataclass(frozen=True)
class Conversation:
    id: str
    phone: str
    client_id: str
    last_activity: datetime
    created_at: datetime
    step: ConversationStep = ConversationStep.INITIAL
    context: ConversationContext = field(default_factory=ConversationContext)
    active: bool = True
    version: int = 0
