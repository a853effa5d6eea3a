from __future__ import annotations

import logging

from barbershop.application.ports.message_platform import MessagePlatformPort


class SendReplyUseCase:
    def __init__(self, platform: MessagePlatformPort, auto_reply_enabled: bool = True) -> None:
        self._platform = platform
        self._auto_reply_enabled = auto_reply_enabled
        self._logger = logging.getLogger(__name__)

    def execute(self, phone: str, text: str) -> bool:
        """Send a reply. Returns True if actually sent, False if skipped or failed."""
        if not text.strip():
            return False
        if not self._auto_reply_enabled:
            self._logger.info("WOULD_SEND_REPLY", extra={"phone": phone, "text": text})
            self._logger.info("AUTO_REPLY_ENABLED=false -> skipping send")
            return False
        try:
            self._platform.send_text(phone=phone, text=text)
        except Exception as e:
            self._logger.error("Reply send failed", extra={"phone": phone, "error": str(e)})
            return False
        return True

    def mark_read(self, message_id: str) -> None:
        if not self._auto_reply_enabled or not message_id:
            return
        try:
            self._platform.mark_read(message_id)
        except Exception as e:
            self._logger.warning("Mark read failed", extra={"message_id": message_id, "error": str(e)})
