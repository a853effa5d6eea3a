from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from barbershop.domain.entities.conversation_state import Conversation


class ConversationStorePort(ABC):
    @abstractmethod
    def get_active(self, phone: str) -> Conversation | None:
        raise NotImplementedError

    @abstractmethod
    def create(self, conversation: Conversation) -> Conversation:
        """
        Persist a new active conversation.
        Raises ValueError if the phone already has an active one.
        """
        raise NotImplementedError

    @abstractmethod
    def save(self, conversation: Conversation) -> Conversation:
        """
        Persist step, context, activity and active flag.

        The stored version must equal conversation.version, otherwise
        StaleConversationError is raised. Returns the row with the bumped version.
        """
        raise NotImplementedError

    @abstractmethod
    def idle_phones(self, cutoff: datetime) -> list[str]:
        """Phones whose active conversation's last activity is before cutoff."""
        raise NotImplementedError

    @abstractmethod
    def deactivate_if_idle(self, phone: str, cutoff: datetime) -> bool:
        """
        Deactivate the phone's conversation if it is still active and its last
        activity is before cutoff. Returns whether it was deactivated.
        """
        raise NotImplementedError

    @abstractmethod
    def has_processed(self, phone: str, message_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def mark_processed(self, phone: str, message_id: str) -> None:
        raise NotImplementedError
