from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from barbershop.domain.entities.message import Message

WHATSAPP_OBJECT = "whatsapp_business_account"


class WebhookEventDTO(BaseModel):
    object: str | None = None
    entry: list[dict[str, Any]] = Field(default_factory=list)

    def is_whatsapp(self) -> bool:
        return self.object == WHATSAPP_OBJECT

    def extract_messages(self) -> list[Message]:
        """
        Text messages plus interactive button and list replies (their reply id is
        used as the text). Statuses and media messages are skipped.
        """
        messages: list[Message] = []
        for entry in self.entry or []:
            for change in entry.get("changes", []) or []:
                value = change.get("value") or {}
                for msg in value.get("messages", []) or []:
                    message_id = msg.get("id")
                    phone = msg.get("from")
                    timestamp = msg.get("timestamp")
                    text = _message_text(msg)

                    if not (message_id and phone and text and timestamp):
                        continue

                    messages.append(
                        Message(
                            id=str(message_id),
                            phone=str(phone),
                            text=str(text),
                            timestamp=int(timestamp),
                            platform="whatsapp",
                        )
                    )
        return messages


def _message_text(msg: dict[str, Any]) -> str | None:
    kind = msg.get("type")
    if kind == "text":
        return (msg.get("text") or {}).get("body")
    if kind == "interactive":
        interactive = msg.get("interactive") or {}
        reply = interactive.get("button_reply") or interactive.get("list_reply") or {}
        return reply.get("id")
    return None
