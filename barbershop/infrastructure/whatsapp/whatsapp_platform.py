from __future__ import annotations

from barbershop.application.ports.message_platform import MessagePlatformPort
from barbershop.infrastructure.whatsapp.whatsapp_client import WhatsAppClient


class WhatsAppPlatform(MessagePlatformPort):
    def __init__(self, client: WhatsAppClient) -> None:
        self._client = client

    def send_text(self, phone: str, text: str) -> None:
        self._client.send_text(phone=phone, text=text)

    def mark_read(self, message_id: str) -> None:
        self._client.mark_read(message_id)
