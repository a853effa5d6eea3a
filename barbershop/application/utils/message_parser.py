from __future__ import annotations

import re
import unicodedata
from datetime import date, timedelta

AFFIRMATIVE_WORDS = frozenset({"si", "yes", "ok", "okay", "1", "claro", "cierto", "sip", "dale"})
AFFIRMATIVE_PHRASES = frozenset({"de acuerdo"})
NEGATIVE_WORDS = frozenset({"no", "2", "nop", "nope", "negativo"})
EXIT_COMMANDS = frozenset({"cancelar", "salir", "exit", "atras", "volver"})

RELATIVE_DAYS = {
    "hoy": 0,
    "today": 0,
    "manana": 1,
    "tomorrow": 1,
    "pasado manana": 2,
    "day after tomorrow": 2,
}


def normalize_text(text: str) -> str:
    """Trim, lower-case and strip diacritics ("Sí" -> "si", "Mañana" -> "manana")."""
    decomposed = unicodedata.normalize("NFD", text.strip().lower())
    return "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")


def words(text: str) -> list[str]:
    return re.findall(r"[a-z0-9]+", normalize_text(text))


def parse_relative_date(text: str, today: date) -> date | None:
    """Only "hoy", "mañana" and "pasado mañana" (or their English forms) are understood."""
    phrase = " ".join(re.findall(r"[a-z]+", normalize_text(text)))
    offset = RELATIVE_DAYS.get(phrase)
    if offset is None:
        return None
    return today + timedelta(days=offset)


def parse_numeric_option(text: str, max_option: int) -> int | None:
    digits_only = re.sub(r"[^\d\s]", "", text).strip()
    match = re.match(r"\d+", digits_only)
    if not match:
        return None
    option = int(match.group(0))
    if option < 1 or option > max_option:
        return None
    return option


def is_affirmative(text: str) -> bool:
    tokens = words(text)
    if " ".join(tokens) in AFFIRMATIVE_PHRASES:
        return True
    return any(token in AFFIRMATIVE_WORDS for token in tokens)


def is_negative(text: str) -> bool:
    return any(token in NEGATIVE_WORDS for token in words(text))


def is_exit_command(text: str) -> bool:
    return normalize_text(text) in EXIT_COMMANDS


def contains_all(text: str, *required: str) -> bool:
    tokens = set(words(text))
    return all(word in tokens for word in required)


def extract_tracking_code(text: str) -> str | None:
    """
    Accepts RAD-XXXXXX, RAD XXXXXX, a bare six character code and the
    legacy RAD-YYYYMMDD-XXXX form. Returns the canonical upper-case code.
    """
    cleaned = re.sub(r"\s+", "", text.strip().upper())

    legacy = re.search(r"RAD-?(\d{8})-?([A-Z0-9]{4})(?![A-Z0-9])", cleaned)
    if legacy:
        return f"RAD-{legacy.group(1)}-{legacy.group(2)}"

    short = re.search(r"RAD-?([A-Z0-9]{6})(?![A-Z0-9])", cleaned)
    if short:
        return f"RAD-{short.group(1)}"

    bare_legacy = re.fullmatch(r"(\d{8})-?([A-Z0-9]{4})", cleaned)
    if bare_legacy:
        return f"RAD-{bare_legacy.group(1)}-{bare_legacy.group(2)}"

    bare = re.fullmatch(r"[A-Z0-9]{6}", cleaned)
    if bare:
        return f"RAD-{cleaned}"

    return None


def is_valid_full_name(text: str) -> bool:
    parts = text.strip().split()
    if len(parts) < 2:
        return False
    return all(len(part) >= 2 and not any(ch.isdigit() for ch in part) for part in parts)
