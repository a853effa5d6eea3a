"""
Tests for available slot computation.
"""

from __future__ import annotations

import pytest
from conftest import MONDAY, SUNDAY, FailingCalendar, at, build_shop

from barbershop.domain.entities.appointment import AppointmentStatus
from barbershop.domain.entities.schedule import TimeRange


def _half_hours(first_hour: int, last_hour: int) -> list[str]:
    return [f"{hour:02d}:{minute:02d}" for hour in range(first_hour, last_hour + 1) for minute in (0, 30)]


FREE_MONDAY = _half_hours(9, 12) + ["14:30"] + _half_hours(15, 19)


def test_free_day_skips_lunch(shop):
    """An empty Monday yields every half hour from 09:00 to 19:30 except the lunch window."""
    slots = shop.slots.compute_available_slots("emp-1", MONDAY, 30)

    assert slots == FREE_MONDAY
    assert "13:00" not in slots
    assert "14:00" not in slots
    assert slots[-1] == "19:30"


def test_existing_appointment_removes_its_slot(shop):
    shop.book(at("10:00"))

    slots = shop.slots.compute_available_slots("emp-1", MONDAY, 30)

    assert "10:00" not in slots
    assert "09:30" in slots
    assert "10:30" in slots
    assert len(slots) == len(FREE_MONDAY) - 1


def test_cancelled_appointment_frees_its_slot(shop):
    appointment = shop.book(at("10:00"))
    shop.appointments.change_status(appointment.id, AppointmentStatus.CANCELLED, "cliente no puede")

    assert "10:00" in shop.slots.compute_available_slots("emp-1", MONDAY, 30)


def test_other_employee_bookings_do_not_block(shop):
    shop.book(at("10:00"), employee_id="emp-2")

    assert shop.slots.compute_available_slots("emp-1", MONDAY, 30) == FREE_MONDAY


def test_day_off_and_unknown_employee_yield_nothing(shop):
    assert shop.slots.compute_available_slots("emp-1", SUNDAY, 30) == []
    assert shop.slots.compute_available_slots("emp-unknown", MONDAY, 30) == []


def test_trailing_partial_slot_is_not_generated(shop):
    """45 minute steps: 19:30 would end at 20:15, past closing time."""
    slots = shop.slots.compute_available_slots("emp-1", MONDAY, 45)

    assert slots == ["09:00", "09:45", "10:30", "11:15", "12:00", "15:00", "15:45", "16:30", "17:15", "18:00", "18:45"]


def test_external_calendar_blocks_are_respected(shop):
    shop.calendar.block("emp-1", MONDAY, TimeRange(start=at("16:00"), end=at("17:00")))

    slots = shop.slots.compute_available_slots("emp-1", MONDAY, 30)

    assert "16:00" not in slots
    assert "16:30" not in slots
    assert "17:00" in slots


def test_calendar_failure_falls_back_to_local_data():
    shop = build_shop(calendar=FailingCalendar())

    assert shop.slots.compute_available_slots("emp-1", MONDAY, 30) == FREE_MONDAY


def test_every_slot_passes_validation(shop):
    shop.book(at("11:00"))
    shop.book(at("17:30"))

    for slot in shop.slots.compute_available_slots("emp-1", MONDAY, 30):
        assert shop.validator.find_conflict("emp-1", at(slot), 30) is None


def test_non_positive_duration_is_rejected(shop):
    with pytest.raises(ValueError):
        shop.slots.compute_available_slots("emp-1", MONDAY, 0)
