from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

logger = logging.getLogger("weatherdesk.cache")


class TTLCache:
    """In-process key/value cache with a per-entry time to live.

    An entry is visible to ``get`` while ``now - stored_at <= ttl``. ``sweep``
    removes expired entries that are never read again; the scheduler calls it
    on a fixed interval, so an unread entry may outlive its TTL by up to one
    sweep interval.
    """

    def __init__(self, default_ttl_s: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.default_ttl_s = max(0.001, float(default_ttl_s))
        self._clock = clock
        self._data: dict[str, tuple[float, float, object]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _expired(now: float, stored_at: float, ttl_s: float) -> bool:
        return now - stored_at > ttl_s

    def get(self, key: str) -> object | None:
        now = self._clock()
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                logger.debug("cache_miss", extra={"extra_fields": {"key": key}})
                return None
            stored_at, ttl_s, value = entry
            if self._expired(now, stored_at, ttl_s):
                self._data.pop(key, None)
                logger.debug("cache_expired", extra={"extra_fields": {"key": key}})
                return None
        logger.debug("cache_hit", extra={"extra_fields": {"key": key, "age_s": round(now - stored_at, 3)}})
        return value

    def set(self, key: str, value: object, ttl_s: float | None = None) -> None:
        ttl_value = self.default_ttl_s if ttl_s is None else max(0.001, float(ttl_s))
        with self._lock:
            self._data[key] = (self._clock(), ttl_value, value)
        logger.debug("cache_set", extra={"extra_fields": {"key": key, "ttl_s": ttl_value}})

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
        logger.debug("cache_cleared")

    def sweep(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [key for key, (stored_at, ttl_s, _) in self._data.items() if self._expired(now, stored_at, ttl_s)]
            for key in expired:
                del self._data[key]
            remaining = len(self._data)
        if expired:
            logger.debug("cache_sweep", extra={"extra_fields": {"removed": len(expired), "remaining": remaining}})
        return len(expired)

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._data)

    def get_or_set(self, key: str, ttl_s: float, fn: Callable[[], object]) -> object:
        """Return the cached value for ``key`` or compute it with ``fn``.

        ``fn`` runs without the lock held, so a slow computation never stalls
        reads of other keys. Concurrent misses on the same key may each call ``fn``.
        """
        with self._lock:
            now = self._clock()
            entry = self._data.get(key)
            if entry is not None:
                stored_at, entry_ttl_s, value = entry
                if not self._expired(now, stored_at, entry_ttl_s):
                    return value
                self._data.pop(key, None)

        value = fn()
        with self._lock:
            self._data[key] = (self._clock(), max(0.001, float(ttl_s)), value)
        return value
