from __future__ import annotations

import logging
from typing import Any

import httpx


class WhatsAppClient:
    """WhatsApp Cloud API client. Timeouts and 5xx responses are retried."""

    def __init__(
        self,
        access_token: str,
        phone_number_id: str,
        api_url: str = "https://graph.facebook.com/v18.0",
        max_retries: int = 2,
        timeout: float = 10.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._access_token = access_token
        self._messages_url = f"{api_url.rstrip('/')}/{phone_number_id}/messages"
        self._max_retries = max_retries
        self._client = http_client or httpx.Client(timeout=timeout)
        self._logger = logging.getLogger(__name__)

    def send_text(self, phone: str, text: str) -> dict[str, Any]:
        payload = {
            "messaging_product": "whatsapp",
            "to": phone,
            "type": "text",
            "text": {"body": text},
        }
        return self._post(payload, phone=phone)

    def mark_read(self, message_id: str) -> dict[str, Any]:
        payload = {
            "messaging_product": "whatsapp",
            "status": "read",
            "message_id": message_id,
        }
        return self._post(payload, message_id=message_id)

    def _post(self, payload: dict[str, Any], **context: Any) -> dict[str, Any]:
        headers = {"Authorization": f"Bearer {self._access_token}"}
        attempt = 0
        while True:
            try:
                resp = self._client.post(self._messages_url, json=payload, headers=headers)
            except httpx.TimeoutException:
                if attempt < self._max_retries:
                    attempt += 1
                    self._logger.warning("WhatsApp request timed out, retrying", extra={"attempt": attempt, **context})
                    continue
                raise

            if resp.status_code >= 500 and attempt < self._max_retries:
                attempt += 1
                self._logger.warning(
                    "WhatsApp server error, retrying",
                    extra={"status": resp.status_code, "attempt": attempt, **context},
                )
                continue

            if resp.status_code >= 400:
                try:
                    error = resp.json().get("error", {})
                    error_code = error.get("code")
                    error_message = error.get("message")
                except ValueError:
                    error_code = None
                    error_message = resp.text

                self._logger.error(
                    "WhatsApp request failed",
                    extra={
                        "status": resp.status_code,
                        "error_code": error_code,
                        "error_message": error_message,
                        **context,
                    },
                )
                resp.raise_for_status()
            return resp.json()
