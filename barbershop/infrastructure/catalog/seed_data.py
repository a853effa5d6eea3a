from __future__ import annotations

from barbershop.domain.entities.employee import Employee
from barbershop.domain.entities.schedule import WeeklySchedule
from barbershop.domain.entities.service_catalog import Service

# Monday=0 ... Sunday=6; None is a day off.
DEFAULT_WEEK: dict[int, tuple[str, str] | None] = {
    0: ("09:00", "20:00"),
    1: ("09:00", "20:00"),
    2: ("09:00", "20:00"),
    3: ("09:00", "20:00"),
    4: ("09:00", "20:00"),
    5: ("09:00", "20:00"),
    6: None,
}

SEED_EMPLOYEES: list[Employee] = [
    Employee(id="emp-carlos", name="Carlos Ramírez", schedule=WeeklySchedule.from_strings(DEFAULT_WEEK)),
    Employee(id="emp-andres", name="Andrés Gómez", schedule=WeeklySchedule.from_strings(DEFAULT_WEEK)),
    Employee(
        id="emp-julian",
        name="Julián Torres",
        schedule=WeeklySchedule.from_strings({**DEFAULT_WEEK, 5: ("09:00", "14:00")}),
    ),
]

SEED_SERVICES: list[Service] = [
    Service(id="svc-corte", name="Corte de cabello", price=25000, duration_minutes=30),
    Service(id="svc-barba", name="Arreglo de barba", price=15000, duration_minutes=30),
    Service(
        id="svc-combo",
        name="Corte y barba",
        price=35000,
        duration_minutes=60,
        description="incluye lavado",
    ),
]
