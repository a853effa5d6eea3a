from __future__ import annotations

from abc import ABC, abstractmethod

from barbershop.domain.entities.client import Client


class ClientDirectoryPort(ABC):
    @abstractmethod
    def get_client(self, client_id: str) -> Client | None:
        raise NotImplementedError

    @abstractmethod
    def find_by_phone(self, phone: str) -> Client | None:
        raise NotImplementedError

    @abstractmethod
    def create_client(self, name: str, phone: str) -> Client:
        raise NotImplementedError

    @abstractmethod
    def update_client_name(self, client_id: str, name: str) -> Client:
        raise NotImplementedError
