"""
Report caching layer.

Keeps assembled report payloads in memory, keyed by a fingerprint of the full
input (every trade field that can reach a payload, plus the filter), with
TTL-based invalidation and least-recently-used eviction. The cache is an
explicit object handed to whoever needs it; there is no module-level instance.
"""

from collections import OrderedDict
from typing import Any, Callable, Iterable, Optional
import copy
import hashlib
import json
import logging
import threading
import time

from fxjournal.config import settings

logger = logging.getLogger(__name__)


def fingerprint(kind: str, trades: Iterable[Any], extra: Optional[dict[str, Any]] = None) -> str:
    """
    Content-addressed cache key.

    Args:
        kind: Payload type ("report", "dashboard", ...)
        trades: Trade objects (must provide to_dict()); the record id is left
                out since it never reaches a payload and is random unless ingested
        extra: Further inputs that shape the payload (filter, server clock)

    Returns:
        Hex SHA-256 digest of the canonical JSON of all inputs
    """
    payload = {
        "kind": kind,
        "trades": [{k: v for k, v in t.to_dict().items() if k != "id"} for t in trades],
        "extra": extra or {},
    }
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class ReportCache:
    """
    In-memory cache for report payloads.

    Entries expire ttl_seconds after they were stored; when max_entries is
    reached the least recently used entry is dropped.
    """

    def __init__(
        self,
        ttl_seconds: float | None = None,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = settings.cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self.max_entries = settings.cache_max_entries if max_entries is None else max_entries
        if self.ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {self.ttl_seconds}")
        if self.max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {self.max_entries}")

        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, Any]] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[Any]:
        """Return a copy of the cached value, or None if missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None

            stored_at, value = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                self.misses += 1
                logger.debug(f"Cache entry expired: {key[:12]}")
                return None

            self._entries.move_to_end(key)
            self.hits += 1
            return copy.deepcopy(value)

    def set(self, key: str, value: Any) -> None:
        """Store a copy of value under key, evicting the least recently used entry if full."""
        with self._lock:
            self._entries[key] = (self._clock(), copy.deepcopy(value))
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Cache evicted: {evicted[:12]}")

    def get_or_compute(self, key: str, compute: Callable[[], Any]) -> Any:
        """Return the cached value for key, computing and storing it on a miss."""
        cached = self.get(key)
        if cached is not None:
            return cached
        value = compute()
        self.set(key, value)
        return value

    def invalidate(self) -> int:
        """
        Drop every entry.

        Returns:
            Number of entries removed
        """
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info(f"Invalidated {count} cached reports")
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_cache_stats(self) -> dict:
        """Get statistics about the cache."""
        with self._lock:
            return {
                "entries": len(self._entries),
                "max_entries": self.max_entries,
                "ttl_seconds": self.ttl_seconds,
                "hits": self.hits,
                "misses": self.misses,
            }
