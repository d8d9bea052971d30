from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import Optional

from .cache import TtlCache
from .ratelimit import FixedWindowRateLimiter


_LOGGER = logging.getLogger(__name__)


class MaintenanceScheduler:
    """Background housekeeping for the rate limiter and the response cache."""

    def __init__(
        self,
        *,
        rate_limiter: FixedWindowRateLimiter,
        cache: Optional[TtlCache] = None,
        cleanup_interval: float = 1800.0,
        idle_seconds: float = 3600.0,
        stats_interval: float = 3600.0,
    ) -> None:
        if cleanup_interval <= 0 or stats_interval <= 0:
            raise ValueError("intervals must be positive")
        self._rate_limiter = rate_limiter
        self._cache = cache
        self._cleanup_interval = cleanup_interval
        self._idle_seconds = idle_seconds
        self._stats_interval = stats_interval
        self._task: Optional[asyncio.Task[None]] = None
        self._stop_event = asyncio.Event()
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        async with self._lock:
            if self._task is not None:
                return
            self._stop_event.clear()
            self._task = asyncio.create_task(self._run_loop(), name="maintenance-scheduler")

    async def stop(self) -> None:
        async with self._lock:
            if self._task is None:
                return
            self._stop_event.set()
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    def run_cleanup(self) -> int:
        removed = self._rate_limiter.cleanup_expired(self._idle_seconds)
        if self._cache is not None:
            removed += self._cache.purge_expired()
        return removed

    def log_cache_stats(self) -> None:
        if self._cache is not None:
            _LOGGER.info("Cache statistics: %s", self._cache.stats())

    async def _run_loop(self) -> None:
        next_cleanup = time.monotonic() + self._cleanup_interval
        next_stats = time.monotonic() + self._stats_interval
        while not self._stop_event.is_set():
            wait_for = max(0.0, min(next_cleanup, next_stats) - time.monotonic())
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=wait_for)
                break
            except asyncio.TimeoutError:
                pass
            now = time.monotonic()
            if now >= next_cleanup:
                try:
                    removed = self.run_cleanup()
                    _LOGGER.debug("Maintenance cleanup removed %d entries", removed)
                except Exception:
                    _LOGGER.exception("Maintenance cleanup failed")
                next_cleanup = now + self._cleanup_interval
            if now >= next_stats:
                try:
                    self.log_cache_stats()
                except Exception:
                    _LOGGER.exception("Logging cache statistics failed")
                next_stats = now + self._stats_interval


__all__ = ["MaintenanceScheduler"]
