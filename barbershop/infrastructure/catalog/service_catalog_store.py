from __future__ import annotations

from barbershop.application.ports.service_catalog import ServiceCatalogPort
from barbershop.application.utils.message_parser import normalize_text
from barbershop.domain.entities.service_catalog import Service
from barbershop.infrastructure.catalog.seed_data import SEED_SERVICES


class ServiceCatalogStore(ServiceCatalogPort):
    def __init__(self, services: list[Service] | None = None) -> None:
        self._services = list(SEED_SERVICES if services is None else services)

    def list_active_services(self) -> list[Service]:
        return [service for service in self._services if service.is_active]

    def get_by_name(self, name: str) -> Service | None:
        wanted = normalize_text(name)
        for service in self._services:
            if normalize_text(service.name) == wanted:
                return service
        return None
