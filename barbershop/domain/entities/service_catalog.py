from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Service:
    id: str
    name: str
    price: int  # pesos
    duration_minutes: int
    description: str | None = None
    is_active: bool = True
