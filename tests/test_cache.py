import asyncio

import pytest

from oneinch_mcp.infra.cache import TtlCache
from oneinch_mcp.infra.monitoring import RequestMetrics
from oneinch_mcp.infra.ratelimit import FixedWindowRateLimiter
from oneinch_mcp.infra.scheduler import MaintenanceScheduler


@pytest.mark.asyncio
async def test_get_or_load_caches_until_expiry(clock):
    cache = TtlCache(default_ttl=30, clock=clock)
    calls = []

    async def loader():
        calls.append(1)
        return len(calls)

    assert await cache.get_or_load("k", loader) == 1
    assert await cache.get_or_load("k", loader) == 1

    clock.advance(31)
    assert await cache.get_or_load("k", loader) == 2
    assert cache.stats()["hits"] == 1
    assert cache.stats()["misses"] == 2


@pytest.mark.asyncio
async def test_concurrent_loads_are_coalesced(clock):
    metrics = RequestMetrics(clock=clock)
    cache = TtlCache(default_ttl=30, metrics=metrics, clock=clock)
    calls = 0
    release = asyncio.Event()

    async def loader():
        nonlocal calls
        calls += 1
        await release.wait()
        return "value"

    waiters = [asyncio.create_task(cache.get_or_load("k", loader)) for _ in range(5)]
    await asyncio.sleep(0)
    release.set()

    assert await asyncio.gather(*waiters) == ["value"] * 5
    assert calls == 1
    snapshot = metrics.snapshot()
    assert snapshot.cache_misses == 1
    assert snapshot.cache_hits == 4


@pytest.mark.asyncio
async def test_loader_failure_is_not_cached(clock):
    cache = TtlCache(default_ttl=30, clock=clock)

    async def failing():
        raise RuntimeError("upstream")

    async def working():
        return "ok"

    with pytest.raises(RuntimeError):
        await cache.get_or_load("k", failing)

    assert cache.get("k") is None
    assert await cache.get_or_load("k", working) == "ok"


@pytest.mark.asyncio
async def test_failed_loads_do_not_retain_locks(clock):
    cache = TtlCache(default_ttl=30, clock=clock)

    async def failing():
        raise RuntimeError("unknown token")

    for index in range(1000):
        with pytest.raises(RuntimeError):
            await cache.get_or_load(f"addr-{index}", failing)

    assert cache.purge_expired() == 0
    assert cache.stats()["pending_loads"] == 0
    assert cache.stats()["entries"] == 0


@pytest.mark.asyncio
async def test_locks_released_after_expiry_and_waiters(clock):
    cache = TtlCache(default_ttl=30, clock=clock)
    release = asyncio.Event()

    async def slow():
        await release.wait()
        return "value"

    waiters = [asyncio.create_task(cache.get_or_load("k", slow)) for _ in range(3)]
    await asyncio.sleep(0)
    assert cache.stats()["pending_loads"] == 1

    waiters[1].cancel()
    release.set()
    results = await asyncio.gather(*waiters, return_exceptions=True)

    assert results[0] == results[2] == "value"
    assert isinstance(results[1], asyncio.CancelledError)
    assert cache.stats()["pending_loads"] == 0

    clock.advance(31)
    assert await cache.get_or_load("k", slow) == "value"
    assert cache.stats()["pending_loads"] == 0


def test_set_invalidate_and_purge(clock):
    cache = TtlCache(default_ttl=10, clock=clock)
    cache.set("short", 1)
    cache.set("long", 2, ttl=100)

    clock.advance(11)
    assert cache.purge_expired() == 1
    assert cache.get("long") == 2

    cache.invalidate("long")
    assert cache.get("long") is None
    assert cache.stats()["entries"] == 0


def test_invalid_ttl():
    with pytest.raises(ValueError):
        TtlCache(default_ttl=0)


def test_scheduler_cleanup_drops_idle_entries(clock):
    limiter = FixedWindowRateLimiter(5, 60, clock=clock)
    cache = TtlCache(default_ttl=10, clock=clock)
    limiter.allow("idle")
    cache.set("stale", "x")
    clock.advance(4000)
    limiter.allow("active")

    scheduler = MaintenanceScheduler(rate_limiter=limiter, cache=cache, idle_seconds=3600)

    assert scheduler.run_cleanup() == 2
    assert limiter.tracked_clients == 1


@pytest.mark.asyncio
async def test_scheduler_start_stop():
    limiter = FixedWindowRateLimiter(5, 60)
    scheduler = MaintenanceScheduler(rate_limiter=limiter, cleanup_interval=0.01, stats_interval=0.01)

    await scheduler.start()
    await scheduler.start()
    assert scheduler.running
    await asyncio.sleep(0.05)

    await scheduler.stop()
    assert not scheduler.running
    await scheduler.stop()


def test_scheduler_rejects_bad_intervals():
    with pytest.raises(ValueError):
        MaintenanceScheduler(rate_limiter=FixedWindowRateLimiter(1, 1), cleanup_interval=0)
