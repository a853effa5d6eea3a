from __future__ import annotations

from barbershop.application.utils.message_parser import normalize_text

PLACEHOLDER_CLIENT_NAME = "Cliente WhatsApp"
PLACEHOLDER_NAMES = frozenset({"cliente whatsapp", "cliente", "sin nombre"})


def is_more_complete_name(existing: str | None, captured: str) -> bool:
    """Should the captured name replace the stored one?"""
    captured = captured.strip()
    if not captured:
        return False

    existing_normalized = normalize_text(existing or "")
    if not existing_normalized or existing_normalized in PLACEHOLDER_NAMES:
        return True

    captured_normalized = normalize_text(captured)
    if len(captured_normalized.split()) > len(existing_normalized.split()):
        return True
    return len(captured_normalized) > len(existing_normalized) and existing_normalized in captured_normalized
