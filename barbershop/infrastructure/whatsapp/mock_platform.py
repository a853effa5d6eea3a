from __future__ import annotations

import logging

from barbershop.application.ports.message_platform import MessagePlatformPort


class MockWhatsAppPlatform(MessagePlatformPort):
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []
        self.read: list[str] = []
        self._logger = logging.getLogger(__name__)

    def send_text(self, phone: str, text: str) -> None:
        self.sent.append((phone, text))
        self._logger.info("Mock send to WhatsApp", extra={"phone": phone, "text": text})

    def mark_read(self, message_id: str) -> None:
        self.read.append(message_id)

    def messages_to(self, phone: str) -> list[str]:
        return [text for recipient, text in self.sent if recipient == phone]
