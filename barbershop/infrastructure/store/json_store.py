from __future__ import annotations

import json
import logging
import re
import threading
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any

from barbershop.application.exceptions import StaleConversationError
from barbershop.application.ports.conversation_store import ConversationStorePort
from barbershop.domain.entities.conversation_state import Conversation, ConversationContext, ConversationStep


class JsonConversationStore(ConversationStorePort):
    """One JSON file per phone holding its latest conversation and processed message ids."""

    def __init__(self, data_dir: str = "./data/conversations", processed_limit: int = 200) -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._processed_limit = processed_limit
        self._locks: dict[str, threading.Lock] = {}
        self._lock_lock = threading.Lock()  # Lock for managing locks dict
        self._logger = logging.getLogger(__name__)

    def _get_lock(self, phone: str) -> threading.Lock:
        """Get or create a lock for a phone."""
        with self._lock_lock:
            if phone not in self._locks:
                self._locks[phone] = threading.Lock()
            return self._locks[phone]

    def _get_file_path(self, phone: str) -> Path:
        return self._data_dir / f"{re.sub(r'[^0-9A-Za-z_-]', '_', phone)}.json"

    def _load_phone_data(self, phone: str) -> dict[str, Any]:
        """Load phone data from JSON file, return default if missing or corrupted."""
        file_path = self._get_file_path(phone)
        default = {"phone": phone, "conversation": None, "processed_message_ids": [], "version": 1}
        if not file_path.exists():
            return default

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            self._logger.warning("Corrupted conversation file ignored", extra={"phone": phone, "error": str(e)})
            return default
        data.setdefault("conversation", None)
        data.setdefault("processed_message_ids", [])
        data.setdefault("version", 1)
        return data

    def _save_phone_data(self, phone: str, data: dict[str, Any]) -> None:
        """Save phone data to JSON file atomically."""
        file_path = self._get_file_path(phone)
        temp_path = file_path.with_suffix(".json.tmp")

        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            # Atomic rename
            temp_path.replace(file_path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise

    def _serialize_conversation(self, conversation: Conversation) -> dict[str, Any]:
        return {
            "id": conversation.id,
            "phone": conversation.phone,
            "client_id": conversation.client_id,
            "step": conversation.step.value,
            "context": conversation.context.to_dict(),
            "active": conversation.active,
            "last_activity": conversation.last_activity.isoformat(),
            "created_at": conversation.created_at.isoformat(),
            "version": conversation.version,
        }

    def _deserialize_conversation(self, data: dict[str, Any]) -> Conversation:
        return Conversation(
            id=data["id"],
            phone=data["phone"],
            client_id=data["client_id"],
            step=ConversationStep.parse(data.get("step")),
            context=ConversationContext.from_dict(data.get("context")),
            active=bool(data.get("active", False)),
            last_activity=datetime.fromisoformat(data["last_activity"]),
            created_at=datetime.fromisoformat(data["created_at"]),
            version=int(data.get("version", 0)),
        )

    def _stored_conversation(self, data: dict[str, Any]) -> Conversation | None:
        raw = data.get("conversation")
        if not raw:
            return None
        return self._deserialize_conversation(raw)

    def get_active(self, phone: str) -> Conversation | None:
        with self._get_lock(phone):
            conversation = self._stored_conversation(self._load_phone_data(phone))
        if conversation is None or not conversation.active:
            return None
        return conversation

    def create(self, conversation: Conversation) -> Conversation:
        with self._get_lock(conversation.phone):
            data = self._load_phone_data(conversation.phone)
            current = self._stored_conversation(data)
            if current is not None and current.active:
                raise ValueError(f"Phone {conversation.phone} already has an active conversation")
            stored = replace(conversation, active=True, version=0)
            data["conversation"] = self._serialize_conversation(stored)
            self._save_phone_data(conversation.phone, data)
            return stored

    def save(self, conversation: Conversation) -> Conversation:
        with self._get_lock(conversation.phone):
            data = self._load_phone_data(conversation.phone)
            current = self._stored_conversation(data)
            if current is None or current.id != conversation.id or current.version != conversation.version:
                raise StaleConversationError(f"Conversation {conversation.id} changed since it was read")
            stored = replace(conversation, version=conversation.version + 1)
            data["conversation"] = self._serialize_conversation(stored)
            self._save_phone_data(conversation.phone, data)
            return stored

    def idle_phones(self, cutoff: datetime) -> list[str]:
        phones = []
        for file_path in self._data_dir.glob("*.json"):
            try:
                with open(file_path, "r", encoding="utf-8") as f:
                    phone = json.load(f).get("phone")
            except (json.JSONDecodeError, IOError):
                continue
            if not phone:
                continue
            conversation = self.get_active(phone)
            if conversation is not None and conversation.last_activity < cutoff:
                phones.append(phone)
        return phones

    def deactivate_if_idle(self, phone: str, cutoff: datetime) -> bool:
        with self._get_lock(phone):
            data = self._load_phone_data(phone)
            conversation = self._stored_conversation(data)
            if conversation is None or not conversation.active or conversation.last_activity >= cutoff:
                return False
            data["conversation"] = self._serialize_conversation(
                replace(conversation, active=False, version=conversation.version + 1)
            )
            self._save_phone_data(phone, data)
            return True

    def has_processed(self, phone: str, message_id: str) -> bool:
        with self._get_lock(phone):
            return message_id in self._load_phone_data(phone)["processed_message_ids"]

    def mark_processed(self, phone: str, message_id: str) -> None:
        with self._get_lock(phone):
            data = self._load_phone_data(phone)
            processed = data["processed_message_ids"]
            processed.append(message_id)
            data["processed_message_ids"] = processed[-self._processed_limit :]
            self._save_phone_data(phone, data)
