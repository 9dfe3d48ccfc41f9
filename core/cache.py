# core/cache.py
import datetime
import os
import threading
import time
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from .logger import get_logger

logger = get_logger(__name__)

CACHE_TTL_SECONDS = float(os.getenv("CACHE_TTL_SECONDS", "3600"))

Ttl = Union[int, float, datetime.timedelta, None]


def _ttl_seconds(ttl: Ttl, default: float) -> float:
    if ttl is None:
        return default
    if isinstance(ttl, datetime.timedelta):
        return ttl.total_seconds()
    return float(ttl)


class ItemCache:
    """
    Process-local key -> value store with per-entry expiry.

    Expired and missing entries look the same to callers: get() returns None.
    There is no size bound and no iteration API; entries only leave the cache
    when they expire or are overwritten.
    """

    def __init__(
        self,
        default_ttl: Ttl = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl = _ttl_seconds(default_ttl, CACHE_TTL_SECONDS)
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: Dict[str, Tuple[Any, float]] = {}

    def set(self, key: str, value: Any, ttl: Ttl = None) -> None:
        expires_at = self._clock() + _ttl_seconds(ttl, self.default_ttl)
        with self._lock:
            self._entries[key] = (value, expires_at)

    def set_all(self, items: Mapping[str, Any], ttl: Ttl = None) -> None:
        expires_at = self._clock() + _ttl_seconds(ttl, self.default_ttl)
        with self._lock:
            for key, value in items.items():
                self._entries[key] = (value, expires_at)
        logger.debug("Cached %d entries (ttl=%s).", len(items), ttl)

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value


# Shared by the sync service (writer) and read paths (readers).
item_cache = ItemCache()
