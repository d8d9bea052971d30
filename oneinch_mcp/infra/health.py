"""Readiness and liveness reporting.

Readiness answers "should traffic be routed here": configuration is valid,
the SDK client is usable, the rate limiter responds and the recent failure
rate is below a threshold. Liveness answers "should the process be
restarted" and only looks at process memory and thread count.

Every probe runs on its own; an exception inside one probe marks that probe
as failed and is reported under ``<probe>_error`` instead of escaping.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

import psutil

from .monitoring import RequestMetrics


_LOGGER = logging.getLogger(__name__)

Probe = Callable[[], bool]

READINESS_CHECK_NAME = "mcp-application"
LIVENESS_CHECK_NAME = "mcp-liveness"


class HealthStatus(str, Enum):
    UP = "up"
    DOWN = "down"


@dataclass(slots=True)
class HealthReport:
    name: str
    status: HealthStatus
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_up(self) -> bool:
        return self.status is HealthStatus.UP

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "status": self.status.value, "data": dict(self.data)}


def format_duration(seconds: float) -> str:
    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def _evaluate(name: str, probe: Probe) -> Tuple[bool, Optional[str]]:
    try:
        return bool(probe()), None
    except Exception as exc:
        _LOGGER.warning("Health probe %s raised: %s", name, exc)
        return False, f"{type(exc).__name__}: {exc}"


class HealthAggregator:
    """Combine dependency probes and request metrics into a readiness report."""

    def __init__(
        self,
        *,
        config_probe: Probe,
        client_probe: Probe,
        rate_limiter_probe: Probe,
        metrics: RequestMetrics,
        max_failure_rate_percent: float = 25.0,
        version: str = "1.0.0",
    ) -> None:
        self._probes: Tuple[Tuple[str, Probe], ...] = (
            ("configuration_valid", config_probe),
            ("sdk_client_ready", client_probe),
            ("rate_limiting_operational", rate_limiter_probe),
        )
        self._metrics = metrics
        self._max_failure_rate = max_failure_rate_percent
        self._version = version

    def check(self) -> HealthReport:
        data: Dict[str, Any] = {}
        healthy = True

        for name, probe in self._probes:
            ok, error = _evaluate(name, probe)
            data[name] = ok
            if error is not None:
                data[f"{name}_error"] = error
            healthy = healthy and ok

        try:
            snapshot = self._metrics.snapshot()
        except Exception as exc:
            _LOGGER.warning("Request metrics unavailable for health check: %s", exc)
            data["metrics_error"] = f"{type(exc).__name__}: {exc}"
            healthy = False
        else:
            failure_rate = snapshot.failure_rate_percent
            data.update(
                {
                    "uptime_seconds": int(snapshot.uptime_seconds),
                    "uptime_formatted": format_duration(snapshot.uptime_seconds),
                    "total_requests": snapshot.total_requests,
                    "successful_requests": snapshot.successful_requests,
                    "failure_rate_percent": round(failure_rate, 2),
                    "active_connections": snapshot.active_connections,
                }
            )
            if failure_rate >= self._max_failure_rate:
                healthy = False

        data["version"] = self._version
        status = HealthStatus.UP if healthy else HealthStatus.DOWN
        data["status"] = status.value
        return HealthReport(READINESS_CHECK_NAME, status, data)

    readiness = check


class LivenessProbe:
    """Process level liveness based on memory and thread usage."""

    def __init__(
        self,
        *,
        max_memory_percent: float = 90.0,
        min_free_memory_mb: float = 50.0,
        max_threads: int = 100,
        process: Optional[psutil.Process] = None,
        virtual_memory: Callable[[], Any] = psutil.virtual_memory,
    ) -> None:
        self._max_memory_percent = max_memory_percent
        self._min_free_memory_mb = min_free_memory_mb
        self._max_threads = max_threads
        self._process = process or psutil.Process()
        self._virtual_memory = virtual_memory

    def _memory_ok(self, data: Dict[str, Any]) -> bool:
        memory = self._virtual_memory()
        free_mb = memory.available / (1024 * 1024)
        rss_mb = self._process.memory_info().rss / (1024 * 1024)
        data["memory_used_percent"] = round(float(memory.percent), 2)
        data["memory_free_mb"] = round(free_mb, 1)
        data["process_rss_mb"] = round(rss_mb, 1)
        return memory.percent < self._max_memory_percent and free_mb >= self._min_free_memory_mb

    def _threads_ok(self, data: Dict[str, Any]) -> bool:
        threads = self._process.num_threads()
        data["thread_count"] = threads
        return threads <= self._max_threads

    def check(self) -> HealthReport:
        data: Dict[str, Any] = {}
        healthy = True
        for name, probe in (("memory_ok", lambda: self._memory_ok(data)), ("threads_ok", lambda: self._threads_ok(data))):
            ok, error = _evaluate(name, probe)
            data[name] = ok
            if error is not None:
                data[f"{name}_error"] = error
            healthy = healthy and ok
        status = HealthStatus.UP if healthy else HealthStatus.DOWN
        data["status"] = status.value
        return HealthReport(LIVENESS_CHECK_NAME, status, data)


__all__ = [
    "HealthAggregator",
    "HealthReport",
    "HealthStatus",
    "LivenessProbe",
    "format_duration",
]
