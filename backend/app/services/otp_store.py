"""
Short-lived key/value storage with per-entry TTL.

Used for password-reset OTPs keyed by contact number. One instance is owned by the
application (app.state.otp_store) and handed to routes through a dependency, so tests
can inject their own store and clock.
"""
from __future__ import annotations

import enum
import threading
import time
from typing import Any, Callable, Union


class TtlMiss(enum.Enum):
    MISSING = "missing"
    EXPIRED = "expired"


MISSING = TtlMiss.MISSING
EXPIRED = TtlMiss.EXPIRED


class TtlStore:
    """In-memory TTL store. Expired entries are evicted on read and by purge_expired()."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def put(self, key: str, value: Any, ttl: float) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl)

    def get(self, key: str) -> Union[Any, TtlMiss]:
        """Stored value, or EXPIRED (entry evicted) / MISSING."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return MISSING
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return EXPIRED
            return value

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            stale = [k for k, (_, exp) in self._entries.items() if now >= exp]
            for k in stale:
                del self._entries[k]
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
