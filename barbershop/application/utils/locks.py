from __future__ import annotations

import threading
from contextlib import ExitStack, contextmanager
from typing import Iterator


class KeyedLocks:
    """One lock per key (employee id, phone number), created on demand."""

    def __init__(self) -> None:
        self._locks: dict[str, threading.RLock] = {}
        self._lock_lock = threading.Lock()  # guards the locks dict

    def _get_lock(self, key: str) -> threading.RLock:
        with self._lock_lock:
            if key not in self._locks:
                self._locks[key] = threading.RLock()
            return self._locks[key]

    @contextmanager
    def hold(self, *keys: str) -> Iterator[None]:
        # Sorted acquisition keeps two multi-key holders from deadlocking.
        with ExitStack() as stack:
            for key in sorted(set(keys)):
                stack.enter_context(self._get_lock(key))
            yield
