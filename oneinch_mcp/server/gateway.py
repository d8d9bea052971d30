from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional

from ..config import CacheConfig
from ..infra.cache import TtlCache
from ..infra.monitoring import RequestMetrics
from ..infra.ratelimit import FixedWindowRateLimiter, RateLimitExceeded
from ..sdk.client import OneInchClient


_LOGGER = logging.getLogger(__name__)


class OneInchGateway:
    """Admission control, caching and metrics around every SDK call made by the server."""

    def __init__(
        self,
        client: OneInchClient,
        *,
        rate_limiter: FixedWindowRateLimiter,
        metrics: RequestMetrics,
        cache: Optional[TtlCache] = None,
        cache_config: Optional[CacheConfig] = None,
    ) -> None:
        self._client = client
        self._rate_limiter = rate_limiter
        self._metrics = metrics
        self._cache = cache
        self.cache_config = cache_config or CacheConfig()

    @property
    def client(self) -> OneInchClient:
        return self._client

    @property
    def rate_limiter(self) -> FixedWindowRateLimiter:
        return self._rate_limiter

    @property
    def metrics(self) -> RequestMetrics:
        return self._metrics

    @property
    def cache(self) -> Optional[TtlCache]:
        return self._cache

    def is_ready(self) -> bool:
        return self._client.is_ready

    def admit(self, operation: str, client_id: Optional[str] = None) -> None:
        try:
            self._rate_limiter.acquire(client_id or operation)
        except RateLimitExceeded:
            self._metrics.record_rate_limited()
            raise

    async def call(
        self,
        operation: str,
        factory: Callable[[OneInchClient], Awaitable[Any]],
        *,
        client_id: Optional[str] = None,
        cache_key: Optional[str] = None,
        ttl: Optional[float] = None,
    ) -> Any:
        """Run ``factory(client)`` once admitted, serving from cache when possible."""

        self.admit(operation, client_id)

        async def _load() -> Any:
            async with self._metrics.track(operation):
                return await factory(self._client)

        if cache_key is None or self._cache is None:
            return await _load()
        return await self._cache.get_or_load(f"{operation}:{cache_key}", _load, ttl=ttl)


__all__ = ["OneInchGateway"]
