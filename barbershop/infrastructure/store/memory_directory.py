from __future__ import annotations

import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone

from barbershop.application.exceptions import ClientNotFoundError
from barbershop.application.ports.client_directory import ClientDirectoryPort
from barbershop.application.ports.employee_directory import EmployeeDirectoryPort
from barbershop.domain.entities.client import Client
from barbershop.domain.entities.employee import Employee
from barbershop.infrastructure.catalog.seed_data import SEED_EMPLOYEES


class MemoryEmployeeDirectory(EmployeeDirectoryPort):
    def __init__(self, employees: list[Employee] | None = None) -> None:
        self._employees = {e.id: e for e in (SEED_EMPLOYEES if employees is None else employees)}

    def get_employee(self, employee_id: str) -> Employee | None:
        return self._employees.get(employee_id)

    def list_active_employees(self) -> list[Employee]:
        return [e for e in self._employees.values() if e.is_active]


class MemoryClientDirectory(ClientDirectoryPort):
    def __init__(self, clients: list[Client] | None = None) -> None:
        self._clients = {c.id: c for c in (clients or [])}
        self._lock = threading.Lock()

    def get_client(self, client_id: str) -> Client | None:
        return self._clients.get(client_id)

    def find_by_phone(self, phone: str) -> Client | None:
        with self._lock:
            for client in self._clients.values():
                if client.phone == phone:
                    return client
        return None

    def create_client(self, name: str, phone: str) -> Client:
        with self._lock:
            client = Client(
                id=uuid.uuid4().hex,
                name=name.strip(),
                phone=phone,
                created_at=datetime.now(timezone.utc),
            )
            self._clients[client.id] = client
            return client

    def update_client_name(self, client_id: str, name: str) -> Client:
        with self._lock:
            client = self._clients.get(client_id)
            if client is None:
                raise ClientNotFoundError(f"Cliente {client_id} no encontrado")
            updated = replace(client, name=name.strip())
            self._clients[client_id] = updated
            return updated
