"""In-memory TTL cache shared by the fetch-and-parse operations.

Expiry is checked lazily on read. A stale entry stays in the store until it is
overwritten or invalidated; the key space is a finite set of titles and slugs.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CacheEntry:
    value: Any
    timestamp: float
    ttl: float

    def is_valid(self, now: float) -> bool:
        return now - self.timestamp < self.ttl


class TTLCache:
    def __init__(self, default_ttl: float = 600.0, clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._store: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            entry = self._store.get(key)
        if entry is None or not entry.is_valid(self._clock()):
            logger.debug("Cache MISS: %s", key)
            return default
        logger.debug("Cache HIT: %s", key)
        return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        entry = CacheEntry(value=value, timestamp=self._clock(), ttl=self.default_ttl if ttl is None else ttl)
        with self._lock:
            self._store[key] = entry
        logger.debug("Cache SET: %s (ttl=%ss)", key, entry.ttl)

    def invalidate(self, prefix: str) -> int:
        with self._lock:
            keys = [k for k in self._store if k.startswith(prefix)]
            for k in keys:
                del self._store[k]
        return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            entry = self._store.get(key)
        return entry is not None and entry.is_valid(self._clock())

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
