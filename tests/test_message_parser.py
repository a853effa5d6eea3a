"""
Tests for the chat text helpers.
"""

from __future__ import annotations

from datetime import date

from barbershop.application.utils.client_names import is_more_complete_name
from barbershop.application.utils.message_parser import (
    contains_all,
    extract_tracking_code,
    is_affirmative,
    is_exit_command,
    is_negative,
    is_valid_full_name,
    normalize_text,
    parse_numeric_option,
    parse_relative_date,
)
from barbershop.application.utils.templates import format_long_date, format_price, format_time_12h

TODAY = date(2026, 10, 19)


def test_normalize_text_strips_accents_and_case():
    assert normalize_text("  Sí, MAÑANA ") == "si, manana"


def test_relative_dates():
    assert parse_relative_date("Hoy", TODAY) == TODAY
    assert parse_relative_date("mañana", TODAY) == date(2026, 10, 20)
    assert parse_relative_date("Pasado Mañana!", TODAY) == date(2026, 10, 21)
    assert parse_relative_date("tomorrow", TODAY) == date(2026, 10, 20)
    assert parse_relative_date("el viernes", TODAY) is None
    assert parse_relative_date("25/10", TODAY) is None


def test_numeric_options():
    assert parse_numeric_option("3", 4) == 3
    assert parse_numeric_option(" 2️⃣ ", 4) == 2
    assert parse_numeric_option("opción 1", 4) == 1
    assert parse_numeric_option("5", 4) is None
    assert parse_numeric_option("0", 4) is None
    assert parse_numeric_option("hola", 4) is None


def test_affirmative_and_negative():
    assert is_affirmative("Sí")
    assert is_affirmative("de acuerdo")
    assert is_affirmative("dale pues")
    assert not is_affirmative("tal vez")
    assert is_negative("No gracias")
    assert is_negative("nop")
    assert not is_negative("nose")


def test_exit_commands_must_be_the_whole_message():
    assert is_exit_command("Cancelar")
    assert is_exit_command("  ATRÁS ")
    assert not is_exit_command("quiero cancelar mi cita")


def test_contains_all():
    assert contains_all("Sí, cancelar", "si", "cancelar")
    assert contains_all("no, la quiero conservar", "no", "conservar")
    assert not contains_all("si", "si", "cancelar")


def test_tracking_code_forms():
    assert extract_tracking_code("RAD-4K7M2P") == "RAD-4K7M2P"
    assert extract_tracking_code("mi código es rad 4k7m2p") == "RAD-4K7M2P"
    assert extract_tracking_code("4k7m2p") == "RAD-4K7M2P"
    assert extract_tracking_code("RAD-20261019-AB12") == "RAD-20261019-AB12"
    assert extract_tracking_code("20261019AB12") == "RAD-20261019-AB12"
    assert extract_tracking_code("no lo tengo") is None


def test_full_names():
    assert is_valid_full_name("Juan Pérez")
    assert is_valid_full_name("  María   del Mar  ")
    assert not is_valid_full_name("Juan")
    assert not is_valid_full_name("Juan P")
    assert not is_valid_full_name("Juan P3rez")


def test_more_complete_name():
    assert is_more_complete_name("Cliente WhatsApp", "Juan Pérez")
    assert is_more_complete_name(None, "Juan")
    assert is_more_complete_name("Juan", "Juan Pérez")
    assert not is_more_complete_name("Juan Pérez Gómez", "Juan Pérez")
    assert not is_more_complete_name("Juan Pérez", "  ")


def test_formatting():
    assert format_time_12h("14:30") == "2:30 PM"
    assert format_time_12h("09:00") == "9:00 AM"
    assert format_time_12h("12:00") == "12:00 PM"
    assert format_time_12h("00:30") == "12:30 AM"
    assert format_price(25000) == "25 mil pesos"
    assert format_price(27500) == "27,5 mil pesos"
    assert format_long_date(TODAY) == "lunes, 19 de octubre de 2026"
