from dataclasses import dataclass


@dataclass(frozen=True)
class Message:
    id: str
    phone: str
    text: str
    timestamp: int
    platform: str = "whatsapp"
