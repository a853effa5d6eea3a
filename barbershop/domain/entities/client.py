from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Client:
    id: str
    name: str
    phone: str
    created_at: datetime | None = None
