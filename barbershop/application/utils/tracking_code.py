from __future__ import annotations

import secrets
import time

# No 0/O or 1/I so codes survive being read aloud and typed back.
ALPHABET = "23456789ABCDEFGHJKLMNPQRSTUVWXYZ"
PREFIX = "RAD-"


def generate_tracking_code(now_ms: int | None = None) -> str:
    """RAD- followed by three clock-derived and three random characters, e.g. RAD-4K7M2P."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)

    base = len(ALPHABET)
    clock_part = ""
    value = now_ms % base**3
    for _ in range(3):
        value, index = divmod(value, base)
        clock_part = ALPHABET[index] + clock_part

    random_part = "".join(secrets.choice(ALPHABET) for _ in range(3))
    return f"{PREFIX}{clock_part}{random_part}"
