from abc import ABC, abstractmethod


class MessagePlatformPort(ABC):
    @abstractmethod
    def send_text(self, phone: str, text: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def mark_read(self, message_id: str) -> None:
        raise NotImplementedError
