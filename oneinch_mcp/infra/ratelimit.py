from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple


_LOGGER = logging.getLogger(__name__)


class RateLimitExceeded(RuntimeError):
    """Raised when a client has used up its admissions for the current window."""

    def __init__(self, client_id: str, wait_seconds: int) -> None:
        super().__init__(
            f"Rate limit exceeded for {client_id}. "
            f"Please wait {wait_seconds} seconds before retrying."
        )
        self.client_id = client_id
        self.wait_seconds = wait_seconds


@dataclass(slots=True)
class RateLimitWindow:
    """Admission counter for one client within a fixed window."""

    window_start: float
    count: int = 0
    last_seen: float = 0.0
    _lock: threading.Lock = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._lock = threading.Lock()
        if not self.last_seen:
            self.last_seen = self.window_start


class FixedWindowRateLimiter:
    """Fixed-window admission control keyed by client identifier.

    Each identifier owns a :class:`RateLimitWindow` guarded by its own lock,
    so callers for different identifiers never contend. The registry lock is
    only held while an entry is looked up or created.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if limit <= 0:
            raise ValueError("limit must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self._limit = limit
        self._window = float(window_seconds)
        self._clock = clock
        self._windows: Dict[str, RateLimitWindow] = {}
        self._registry_lock = threading.Lock()

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window

    @property
    def tracked_clients(self) -> int:
        with self._registry_lock:
            return len(self._windows)

    def _entry(self, client_id: str, now: float) -> RateLimitWindow:
        with self._registry_lock:
            entry = self._windows.get(client_id)
            if entry is None:
                entry = RateLimitWindow(window_start=now)
                self._windows[client_id] = entry
            return entry

    def _roll_locked(self, entry: RateLimitWindow, now: float) -> None:
        if now - entry.window_start >= self._window:
            entry.window_start = now
            entry.count = 0

    def _wait_locked(self, entry: RateLimitWindow, now: float) -> int:
        remaining = self._window - (now - entry.window_start)
        return max(1, math.ceil(remaining)) if remaining > 0 else 0

    def try_acquire(self, client_id: str) -> Tuple[bool, int]:
        """Admit one call; return ``(allowed, wait_seconds)``."""

        now = self._clock()
        while True:
            entry = self._entry(client_id, now)
            with entry._lock:
                with self._registry_lock:
                    registered = self._windows.get(client_id) is entry
                if not registered:
                    # dropped by reset or cleanup after lookup
                    continue
                self._roll_locked(entry, now)
                entry.last_seen = now
                if entry.count >= self._limit:
                    return False, self._wait_locked(entry, now)
                entry.count += 1
                return True, 0

    def allow(self, client_id: str) -> bool:
        allowed, _ = self.try_acquire(client_id)
        return allowed

    def acquire(self, client_id: str) -> None:
        allowed, wait_seconds = self.try_acquire(client_id)
        if not allowed:
            _LOGGER.warning("Rate limit exceeded for %s; retry in %ss", client_id, wait_seconds)
            raise RateLimitExceeded(client_id, wait_seconds)

    def seconds_until_reset(self, client_id: str) -> int:
        """Seconds until ``client_id`` is admitted again; 0 when it already would be."""

        with self._registry_lock:
            entry = self._windows.get(client_id)
        if entry is None:
            return 0
        now = self._clock()
        with entry._lock:
            if now - entry.window_start >= self._window or entry.count < self._limit:
                return 0
            return self._wait_locked(entry, now)

    def remaining(self, client_id: str) -> int:
        with self._registry_lock:
            entry = self._windows.get(client_id)
        if entry is None:
            return self._limit
        now = self._clock()
        with entry._lock:
            if now - entry.window_start >= self._window:
                return self._limit
            return max(0, self._limit - entry.count)

    def usage(self, client_id: str) -> int:
        return self._limit - self.remaining(client_id)

    def reset(self, client_id: Optional[str] = None) -> None:
        with self._registry_lock:
            if client_id is None:
                self._windows.clear()
            else:
                self._windows.pop(client_id, None)

    def cleanup_expired(self, max_idle_seconds: float) -> int:
        """Forget clients idle for longer than ``max_idle_seconds``."""

        now = self._clock()
        with self._registry_lock:
            stale = [
                client_id
                for client_id, entry in self._windows.items()
                if now - entry.last_seen > max_idle_seconds
            ]
            for client_id in stale:
                del self._windows[client_id]
        if stale:
            _LOGGER.debug("Dropped %d idle rate limit entries", len(stale))
        return len(stale)

    def is_operational(self) -> bool:
        acquired = self._registry_lock.acquire(timeout=1.0)
        if acquired:
            self._registry_lock.release()
        return acquired


__all__ = ["FixedWindowRateLimiter", "RateLimitExceeded", "RateLimitWindow"]
