from __future__ import annotations

import contextlib
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Dict


_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class MetricsSnapshot:
    uptime_seconds: float
    total_requests: int
    successful_requests: int
    failed_requests: int
    rate_limit_hits: int
    cache_hits: int
    cache_misses: int
    active_connections: int
    average_response_ms: float
    failure_rate_percent: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uptime_seconds": round(self.uptime_seconds, 3),
            "total_requests": self.total_requests,
            "successful_requests": self.successful_requests,
            "failed_requests": self.failed_requests,
            "rate_limit_hits": self.rate_limit_hits,
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "active_connections": self.active_connections,
            "average_response_ms": round(self.average_response_ms, 3),
            "failure_rate_percent": round(self.failure_rate_percent, 2),
        }


class RequestMetrics:
    """Process-wide request counters shared by the gateway and the health checks."""

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._started = clock()
        self._lock = threading.Lock()
        self._total = 0
        self._successful = 0
        self._failed = 0
        self._rate_limited = 0
        self._cache_hits = 0
        self._cache_misses = 0
        self._active = 0
        self._response_seconds = 0.0

    def record_request(self) -> None:
        with self._lock:
            self._total += 1

    def record_success(self, duration: float = 0.0) -> None:
        with self._lock:
            self._successful += 1
            self._response_seconds += max(0.0, duration)

    def record_failure(self) -> None:
        with self._lock:
            self._failed += 1

    def record_rate_limited(self) -> None:
        with self._lock:
            self._rate_limited += 1

    def record_cache_hit(self) -> None:
        with self._lock:
            self._cache_hits += 1

    def record_cache_miss(self) -> None:
        with self._lock:
            self._cache_misses += 1

    def connection_opened(self) -> None:
        with self._lock:
            self._active += 1

    def connection_closed(self) -> None:
        with self._lock:
            self._active = max(0, self._active - 1)

    @property
    def uptime_seconds(self) -> float:
        return max(0.0, self._clock() - self._started)

    @property
    def total_requests(self) -> int:
        return self._total

    @property
    def successful_requests(self) -> int:
        return self._successful

    @property
    def active_connections(self) -> int:
        return self._active

    @property
    def failure_rate_percent(self) -> float:
        with self._lock:
            if self._total == 0:
                return 0.0
            return self._failed / self._total * 100.0

    def snapshot(self) -> MetricsSnapshot:
        uptime = self.uptime_seconds
        with self._lock:
            average_ms = self._response_seconds / self._successful * 1000.0 if self._successful else 0.0
            failure_rate = self._failed / self._total * 100.0 if self._total else 0.0
            return MetricsSnapshot(
                uptime_seconds=uptime,
                total_requests=self._total,
                successful_requests=self._successful,
                failed_requests=self._failed,
                rate_limit_hits=self._rate_limited,
                cache_hits=self._cache_hits,
                cache_misses=self._cache_misses,
                active_connections=self._active,
                average_response_ms=average_ms,
                failure_rate_percent=failure_rate,
            )

    @contextlib.asynccontextmanager
    async def track(self, operation: str) -> AsyncIterator[None]:
        """Count one upstream call and its outcome."""

        self.record_request()
        self.connection_opened()
        start = self._clock()
        try:
            yield
        except BaseException:
            self.record_failure()
            _LOGGER.debug("%s failed after %.3fs", operation, self._clock() - start)
            raise
        else:
            duration = self._clock() - start
            self.record_success(duration)
            _LOGGER.debug("%s completed in %.3fs", operation, duration)
        finally:
            self.connection_closed()


__all__ = ["MetricsSnapshot", "RequestMetrics"]
