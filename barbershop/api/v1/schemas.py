from datetime import date, datetime
from pydantic import BaseModel, Field

from barbershop.domain.entities.appointment import Appointment, AppointmentOrigin, AppointmentStatus


class CreateAppointmentSchema(BaseModel):
    client_id: str
    employee_id: str
    service_name: str = Field(min_length=1)
    start: datetime
    duration_minutes: int = Field(gt=0)
    origin: AppointmentOrigin = AppointmentOrigin.MANUAL
    notes: str | None = None


class RescheduleAppointmentSchema(BaseModel):
    start: datetime | None = None
    employee_id: str | None = None
    duration_minutes: int | None = Field(default=None, gt=0)
    service_name: str | None = None
    notes: str | None = None


class ChangeStatusSchema(BaseModel):
    status: AppointmentStatus
    cancellation_reason: str | None = None


class AppointmentSchema(BaseModel):
    id: str
    tracking_code: str
    client_id: str
    employee_id: str
    service_name: str
    start: datetime
    end: datetime
    duration_minutes: int
    origin: AppointmentOrigin
    status: AppointmentStatus
    created_at: datetime
    cancellation_reason: str | None = None
    notes: str | None = None
    calendar_event_id: str | None = None

    @classmethod
    def from_entity(cls, appointment: Appointment) -> "AppointmentSchema":
        return cls(
            id=appointment.id,
            tracking_code=appointment.tracking_code,
            client_id=appointment.client_id,
            employee_id=appointment.employee_id,
            service_name=appointment.service_name,
            start=appointment.start,
            end=appointment.end,
            duration_minutes=appointment.duration_minutes,
            origin=appointment.origin,
            status=appointment.status,
            created_at=appointment.created_at,
            cancellation_reason=appointment.cancellation_reason,
            notes=appointment.notes,
            calendar_event_id=appointment.calendar_event_id,
        )


class AvailableSlotsSchema(BaseModel):
    employee_id: str
    day: date
    duration_minutes: int
    slots: list[str]


class StatisticsSchema(BaseModel):
    total: int
    pending: int
    confirmed: int
    completed: int
    cancelled: int
