from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional

from .monitoring import RequestMetrics


_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class CacheEntry:
    value: Any
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at


@dataclass(slots=True)
class _PendingLoad:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    callers: int = 0


class TtlCache:
    """Per-key TTL cache that coalesces concurrent loads of the same key.

    A key's lock lives only while some caller is inside ``get_or_load`` for it.
    """

    def __init__(
        self,
        *,
        default_ttl: float,
        metrics: Optional[RequestMetrics] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        self._default_ttl = default_ttl
        self._metrics = metrics
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._pending: Dict[str, _PendingLoad] = {}
        self._hits = 0
        self._misses = 0

    def _fresh(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_fresh(self._clock()):
            return entry
        self._entries.pop(key, None)
        return None

    def _hit(self) -> None:
        self._hits += 1
        if self._metrics is not None:
            self._metrics.record_cache_hit()

    def _miss(self) -> None:
        self._misses += 1
        if self._metrics is not None:
            self._metrics.record_cache_miss()

    def get(self, key: str) -> Optional[Any]:
        entry = self._fresh(key)
        return None if entry is None else entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        self._entries[key] = CacheEntry(value, self._clock() + (ttl or self._default_ttl))

    async def get_or_load(
        self,
        key: str,
        loader: Callable[[], Awaitable[Any]],
        *,
        ttl: Optional[float] = None,
    ) -> Any:
        """Return the cached value or await ``loader`` once for all waiters.

        Loader failures are not cached and propagate to the caller.
        """

        entry = self._fresh(key)
        if entry is not None:
            self._hit()
            return entry.value

        pending = self._pending.get(key)
        if pending is None:
            pending = self._pending[key] = _PendingLoad()
        pending.callers += 1
        try:
            async with pending.lock:
                entry = self._fresh(key)
                if entry is not None:
                    self._hit()
                    return entry.value
                self._miss()
                value = await loader()
                self.set(key, value, ttl)
                return value
        finally:
            pending.callers -= 1
            if not pending.callers and self._pending.get(key) is pending:
                del self._pending[key]

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if not entry.is_fresh(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def stats(self) -> Dict[str, Any]:
        total = self._hits + self._misses
        return {
            "entries": len(self._entries),
            "pending_loads": len(self._pending),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate_percent": round(self._hits / total * 100.0, 2) if total else 0.0,
        }


__all__ = ["CacheEntry", "TtlCache"]
