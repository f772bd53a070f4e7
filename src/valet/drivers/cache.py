"""Resolution cache: site name -> last driver that served it.

The resolver depends on the ``DriverCache`` protocol, not on a concrete
store, so tests can pass a cache with a controllable clock.

Entries are advisory. ``assign(..., no_cache=True)`` ignores them and
overwrites the entry with the fresh result (last write wins per key).
"""

import threading
import time
from collections.abc import Callable
from typing import Protocol, runtime_checkable

DEFAULT_TTL = 3600.0


@runtime_checkable
class DriverCache(Protocol):
    """Storage for cached driver identifiers."""

    def get(self, key: str) -> str | None: ...
    def put(self, key: str, value: str, ttl: float) -> None: ...
    def expire(self, key: str) -> None: ...


class MemoryDriverCache:
    """Process-local TTL cache. Safe to share between worker threads.

    Expired entries are dropped lazily on read. Keys are independent:
    there is no ordering between writes to different sites.
    """

    __slots__ = ("_clock", "_entries", "_lock")

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        # key -> (value, expires_at)
        self._entries: dict[str, tuple[str, float]] = {}

    def get(self, key: str) -> str | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at <= now:
                del self._entries[key]
                return None
            return value

    def put(self, key: str, value: str, ttl: float = DEFAULT_TTL) -> None:
        expires_at = self._clock() + ttl
        with self._lock:
            self._entries[key] = (value, expires_at)

    def expire(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        now = self._clock()
        with self._lock:
            return sum(1 for _, expires_at in self._entries.values() if expires_at > now)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None
