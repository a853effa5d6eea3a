from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable


@dataclass(frozen=True)
class SideEffectOutcome:
    ok: bool
    value: Any = None
    reason: str | None = None


def run_best_effort(
    action: str,
    operation: Callable[[], Any],
    logger: logging.Logger,
    **context: Any,
) -> SideEffectOutcome:
    """
    Run an integration call whose failure must not affect the primary operation.
    The outcome is returned so callers and tests can inspect it; it is never raised.
    """
    try:
        value = operation()
    except Exception as e:
        logger.warning(
            "Best-effort side effect failed",
            extra={"action": action, "error": str(e), **context},
        )
        return SideEffectOutcome(ok=False, reason=str(e) or type(e).__name__)
    return SideEffectOutcome(ok=True, value=value)
