"""Time-bounded cache of normalized document text."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from observability.prometheus_metrics import record_cache_lookup

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30 * 60


@dataclass
class CacheEntry:
    key: str
    value: str
    stored_at: float


class DocCache:
    """Key -> text store with lazy, access-time expiry.

    Expired entries are dropped when a ``get`` finds them; nothing sweeps
    keys that are never read again.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError("Cache TTL must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        """Return the cached value, or None when absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._clock() - entry.stored_at > self.ttl_seconds:
                del self._entries[key]
                entry = None

        record_cache_lookup(entry is not None)
        if entry is None:
            return None

        logger.debug(f"Cache hit: {key}")
        return entry.value

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous entry."""
        entry = CacheEntry(key=key, value=value, stored_at=self._clock())
        with self._lock:
            self._entries[key] = entry

    def invalidate(self, key: str) -> bool:
        """Remove an entry; returns whether one was present."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.info("Document cache cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
