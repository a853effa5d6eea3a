from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime

from barbershop.application.exceptions import StaleConversationError
from barbershop.application.ports.conversation_store import ConversationStorePort
from barbershop.domain.entities.conversation_state import Conversation


class MemoryConversationStore(ConversationStorePort):
    def __init__(self, processed_limit: int = 200) -> None:
        self._conversations: dict[str, Conversation] = {}  # phone -> latest conversation
        self._processed: dict[str, list[str]] = {}
        self._processed_limit = processed_limit
        self._lock = threading.Lock()

    def get_active(self, phone: str) -> Conversation | None:
        with self._lock:
            conversation = self._conversations.get(phone)
            if conversation is None or not conversation.active:
                return None
            return conversation

    def create(self, conversation: Conversation) -> Conversation:
        with self._lock:
            current = self._conversations.get(conversation.phone)
            if current is not None and current.active:
                raise ValueError(f"Phone {conversation.phone} already has an active conversation")
            stored = replace(conversation, active=True, version=0)
            self._conversations[conversation.phone] = stored
            return stored

    def save(self, conversation: Conversation) -> Conversation:
        with self._lock:
            current = self._conversations.get(conversation.phone)
            if current is None or current.id != conversation.id or current.version != conversation.version:
                raise StaleConversationError(f"Conversation {conversation.id} changed since it was read")
            stored = replace(conversation, version=conversation.version + 1)
            self._conversations[conversation.phone] = stored
            return stored

    def idle_phones(self, cutoff: datetime) -> list[str]:
        with self._lock:
            return [
                phone
                for phone, conversation in self._conversations.items()
                if conversation.active and conversation.last_activity < cutoff
            ]

    def deactivate_if_idle(self, phone: str, cutoff: datetime) -> bool:
        with self._lock:
            conversation = self._conversations.get(phone)
            if conversation is None or not conversation.active or conversation.last_activity >= cutoff:
                return False
            self._conversations[phone] = replace(conversation, active=False, version=conversation.version + 1)
            return True

    def has_processed(self, phone: str, message_id: str) -> bool:
        with self._lock:
            return message_id in self._processed.get(phone, [])

    def mark_processed(self, phone: str, message_id: str) -> None:
        with self._lock:
            processed = self._processed.setdefault(phone, [])
            processed.append(message_id)
            if len(processed) > self._processed_limit:
                self._processed[phone] = processed[-self._processed_limit :]
