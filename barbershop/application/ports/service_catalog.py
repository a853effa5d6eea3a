from __future__ import annotations

from abc import ABC, abstractmethod

from barbershop.domain.entities.service_catalog import Service


class ServiceCatalogPort(ABC):
    @abstractmethod
    def list_active_services(self) -> list[Service]:
        """Active services in display order."""
        raise NotImplementedError

    @abstractmethod
    def get_by_name(self, name: str) -> Service | None:
        """Case-insensitive lookup by display name."""
        raise NotImplementedError
