from __future__ import annotations

from abc import ABC, abstractmethod

from barbershop.domain.entities.employee import Employee


class EmployeeDirectoryPort(ABC):
    @abstractmethod
    def get_employee(self, employee_id: str) -> Employee | None:
        raise NotImplementedError

    @abstractmethod
    def list_active_employees(self) -> list[Employee]:
        """Active employees in a stable order (the bot numbers them)."""
        raise NotImplementedError
