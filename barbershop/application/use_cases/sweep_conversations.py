from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable
from zoneinfo import ZoneInfo

from barbershop.application.ports.conversation_store import ConversationStorePort
from barbershop.application.utils.locks import KeyedLocks


class ConversationSweeper:
    """
    Deactivates conversations that have been idle longer than the timeout.

    Shares the per-phone locks of the message handler, so a conversation whose
    message is being processed is only looked at once that step is saved.
    """

    def __init__(
        self,
        store: ConversationStorePort,
        timeout_ms: int,
        timezone: ZoneInfo,
        clock: Callable[[], datetime] | None = None,
        phone_locks: KeyedLocks | None = None,
    ) -> None:
        self._store = store
        self._timeout = timedelta(milliseconds=timeout_ms)
        self._clock = clock or (lambda: datetime.now(timezone))
        self._phone_locks = phone_locks or KeyedLocks()
        self._logger = logging.getLogger(__name__)

    def sweep(self, now: datetime | None = None) -> int:
        cutoff = (now or self._clock()) - self._timeout
        count = 0
        for phone in self._store.idle_phones(cutoff):
            with self._phone_locks.hold(phone):
                # Re-checked under the lock against the stored last activity.
                if self._store.deactivate_if_idle(phone, cutoff):
                    count += 1
        if count:
            self._logger.info("Idle conversations deactivated", extra={"count": count})
        return count
