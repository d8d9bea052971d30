"""Blocking and future-returning views over the coroutine-based services.

Every service method is implemented once, as a coroutine. The wrappers in
this module schedule that coroutine on a private event loop running in a
daemon thread, so results and exceptions are the very objects produced by
the async implementation.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import functools
import inspect
import logging
import threading
from typing import Any, Awaitable, Callable, Coroutine, Optional, TypeVar

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class EventLoopThread:
    """Run an asyncio loop in a background thread and hand work to it."""

    def __init__(self, *, name: str = "oneinch-sdk-loop") -> None:
        self._loop = asyncio.new_event_loop()
        self._started = threading.Event()
        self._closed = False
        self._lock = threading.Lock()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()
        self._started.wait()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    @property
    def closed(self) -> bool:
        return self._closed

    def in_loop_thread(self) -> bool:
        return threading.current_thread() is self._thread

    def _run(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.call_soon(self._started.set)
        try:
            self._loop.run_forever()
        finally:
            pending = asyncio.all_tasks(self._loop)
            for task in pending:
                task.cancel()
            if pending:
                self._loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            self._loop.run_until_complete(self._loop.shutdown_asyncgens())
            self._loop.close()

    def submit(self, coro: Coroutine[Any, Any, T]) -> "concurrent.futures.Future[T]":
        """Schedule ``coro`` and return a future; cancelling it cancels the task."""

        with self._lock:
            if self._closed:
                coro.close()
                raise RuntimeError("SDK event loop is closed")
            return asyncio.run_coroutine_threadsafe(coro, self._loop)

    def run(self, coro: Coroutine[Any, Any, T], *, timeout: Optional[float] = None) -> T:
        if self.in_loop_thread():
            coro.close()
            raise RuntimeError("Blocking SDK call made from the SDK event loop thread")
        return self.submit(coro).result(timeout)

    def close(self, *, timeout: float = 5.0) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._loop.call_soon_threadsafe(self._loop.stop)
        if not self.in_loop_thread():
            self._thread.join(timeout)
            if self._thread.is_alive():  # pragma: no cover - depends on stuck tasks
                _LOGGER.warning("SDK event loop thread did not stop within %.1fs", timeout)


class _ServiceProxy:
    def __init__(self, service: Any, loop_thread: EventLoopThread) -> None:
        self._service = service
        self._loop_thread = loop_thread

    def __getattr__(self, name: str) -> Any:
        attr = getattr(self._service, name)
        if name.startswith("_") or not inspect.iscoroutinefunction(attr):
            return attr
        wrapped = self._wrap(attr)
        # cache so later lookups skip __getattr__
        setattr(self, name, wrapped)
        return wrapped

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | {n for n in dir(self._service) if not n.startswith("_")})

    def __repr__(self) -> str:
        return f"{type(self).__name__}({type(self._service).__name__})"

    def _wrap(self, method: Callable[..., Awaitable[Any]]) -> Callable[..., Any]:
        raise NotImplementedError


class BlockingService(_ServiceProxy):
    """Expose each coroutine method as a call that blocks until it completes."""

    def _wrap(self, method: Callable[..., Awaitable[Any]]) -> Callable[..., Any]:
        loop_thread = self._loop_thread

        @functools.wraps(method)
        def call(*args: Any, **kwargs: Any) -> Any:
            return loop_thread.run(method(*args, **kwargs))

        return call


class FutureService(_ServiceProxy):
    """Expose each coroutine method as a call returning ``concurrent.futures.Future``."""

    def _wrap(self, method: Callable[..., Awaitable[Any]]) -> Callable[..., Any]:
        loop_thread = self._loop_thread

        @functools.wraps(method)
        def call(*args: Any, **kwargs: Any) -> "concurrent.futures.Future[Any]":
            return loop_thread.submit(method(*args, **kwargs))

        return call


__all__ = ["BlockingService", "EventLoopThread", "FutureService"]
