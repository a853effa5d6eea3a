from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from barbershop.api.v1.schemas import (
    AppointmentSchema,
    AvailableSlotsSchema,
    ChangeStatusSchema,
    CreateAppointmentSchema,
    RescheduleAppointmentSchema,
    StatisticsSchema,
)
from barbershop.application.exceptions import DoubleBookingError, NotFoundError, ValidationError
from barbershop.application.use_cases.appointments import AppointmentService
from barbershop.application.use_cases.slot_calculator import SlotCalculator
from barbershop.wiring.dependencies import get_appointment_service, get_slot_calculator

router = APIRouter()


def _to_http_error(e: Exception) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, DoubleBookingError):
        return HTTPException(
            status_code=409,
            detail={"reason": e.reason, "message": e.message, "appointment_id": e.appointment_id},
        )
    if isinstance(e, ValidationError):
        return HTTPException(status_code=422, detail={"reason": e.reason, "message": e.message})
    return HTTPException(status_code=500, detail=str(e))


@router.post("", response_model=AppointmentSchema, status_code=201)
def create_appointment(
    req: CreateAppointmentSchema,
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        appointment = service.create(
            client_id=req.client_id,
            employee_id=req.employee_id,
            service_name=req.service_name,
            start=req.start,
            duration_minutes=req.duration_minutes,
            origin=req.origin,
            notes=req.notes,
        )
    except (NotFoundError, ValidationError) as e:
        raise _to_http_error(e)
    return AppointmentSchema.from_entity(appointment)


@router.get("", response_model=list[AppointmentSchema])
def list_appointments(
    day: date,
    employee_id: str | None = None,
    service: AppointmentService = Depends(get_appointment_service),
):
    return [AppointmentSchema.from_entity(a) for a in service.list_for_day(day, employee_id=employee_id)]


@router.get("/upcoming", response_model=list[AppointmentSchema])
def upcoming_appointments(
    limit: int = Query(10, ge=1, le=100),
    employee_id: str | None = None,
    service: AppointmentService = Depends(get_appointment_service),
):
    return [AppointmentSchema.from_entity(a) for a in service.list_upcoming(limit=limit, employee_id=employee_id)]


@router.get("/statistics", response_model=StatisticsSchema)
def appointment_statistics(
    start: datetime | None = None,
    end: datetime | None = None,
    service: AppointmentService = Depends(get_appointment_service),
):
    return StatisticsSchema(**service.statistics(start=start, end=end))


@router.get("/slots", response_model=AvailableSlotsSchema)
def available_slots(
    employee_id: str,
    day: date,
    duration_minutes: int = Query(30, gt=0),
    calculator: SlotCalculator = Depends(get_slot_calculator),
):
    slots = calculator.compute_available_slots(employee_id, day, duration_minutes)
    return AvailableSlotsSchema(employee_id=employee_id, day=day, duration_minutes=duration_minutes, slots=slots)


@router.get("/by-code/{tracking_code}", response_model=AppointmentSchema)
def get_by_tracking_code(
    tracking_code: str,
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = service.find_by_tracking_code(tracking_code)
    if appointment is None:
        raise HTTPException(status_code=404, detail=f"No existe una cita con el código {tracking_code}")
    return AppointmentSchema.from_entity(appointment)


@router.get("/{appointment_id}", response_model=AppointmentSchema)
def get_appointment(
    appointment_id: str,
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        return AppointmentSchema.from_entity(service.get(appointment_id))
    except NotFoundError as e:
        raise _to_http_error(e)


@router.patch("/{appointment_id}", response_model=AppointmentSchema)
def reschedule_appointment(
    appointment_id: str,
    req: RescheduleAppointmentSchema,
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        appointment = service.reschedule(
            appointment_id,
            start=req.start,
            employee_id=req.employee_id,
            duration_minutes=req.duration_minutes,
            service_name=req.service_name,
            notes=req.notes,
        )
    except (NotFoundError, ValidationError) as e:
        raise _to_http_error(e)
    return AppointmentSchema.from_entity(appointment)


@router.post("/{appointment_id}/status", response_model=AppointmentSchema)
def change_appointment_status(
    appointment_id: str,
    req: ChangeStatusSchema,
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        appointment = service.change_status(appointment_id, req.status, req.cancellation_reason)
    except (NotFoundError, ValidationError) as e:
        raise _to_http_error(e)
    return AppointmentSchema.from_entity(appointment)


@router.delete("/{appointment_id}", status_code=204)
def delete_appointment(
    appointment_id: str,
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        service.delete(appointment_id)
    except (NotFoundError, ValidationError) as e:
        raise _to_http_error(e)
    return Response(status_code=204)
