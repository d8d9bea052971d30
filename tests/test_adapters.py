import asyncio
import concurrent.futures
import threading

import httpx
import pytest

from oneinch_mcp.config import ConfigError
from oneinch_mcp.sdk.adapters import BlockingService, EventLoopThread, FutureService
from oneinch_mcp.sdk.client import BlockingOneInchClient
from oneinch_mcp.sdk.errors import GenericApiError, OneInchHttpError


def _handler(request):
    if request.url.path == "/swap/v6.1/1/approve/spender":
        return httpx.Response(200, json={"address": "0xspender"})
    if request.url.path == "/swap/v6.1/1/approve/allowance":
        return httpx.Response(401, json={"message": "Unauthorized", "statusCode": 401})
    return httpx.Response(502, content=b"upstream down")


@pytest.fixture
def blocking_client():
    sdk = BlockingOneInchClient("blocking-key-123456", base_url="https://api.test", transport=httpx.MockTransport(_handler))
    yield sdk
    sdk.close()


@pytest.fixture
def loop_thread():
    runner = EventLoopThread(name="test-loop")
    yield runner
    runner.close()


def test_blocking_call_returns_result(blocking_client):
    assert blocking_client.swap.get_spender(1) == "0xspender"


def test_future_call_resolves_to_same_result(blocking_client):
    future = blocking_client.futures.swap.get_spender(1)

    assert isinstance(future, concurrent.futures.Future)
    assert future.result(timeout=5) == blocking_client.swap.get_spender(1)


def test_blocking_and_future_raise_same_error_type(blocking_client):
    with pytest.raises(GenericApiError) as blocking_error:
        blocking_client.swap.get_allowance(1, "0xtoken", "0xwallet")

    future = blocking_client.futures.swap.get_allowance(1, "0xtoken", "0xwallet")
    with pytest.raises(GenericApiError) as future_error:
        future.result(timeout=5)

    assert type(blocking_error.value) is type(future_error.value)
    assert blocking_error.value.status_code == future_error.value.status_code == 401


def test_async_view_matches_blocking(blocking_client):
    async_client = blocking_client.async_client
    expected = blocking_client.swap.get_spender(1)

    # the async view runs on the client's own loop
    future = asyncio.run_coroutine_threadsafe(
        async_client.swap.get_spender(1),
        blocking_client._loop_thread.loop,
    )

    assert future.result(timeout=5) == expected


def test_unknown_body_surfaces_verbatim(blocking_client):
    with pytest.raises(OneInchHttpError) as excinfo:
        blocking_client.token.get_tokens(1)

    assert excinfo.value.status_code == 502
    assert excinfo.value.body == "upstream down"


def test_close_is_idempotent(blocking_client):
    assert blocking_client.is_ready

    blocking_client.close()
    blocking_client.close()

    assert not blocking_client.is_ready


def test_context_manager_closes():
    with BlockingOneInchClient("blocking-key-123456", transport=httpx.MockTransport(_handler)) as sdk:
        assert sdk.is_ready

    assert not sdk.is_ready


def test_missing_api_key_raises_config_error():
    with pytest.raises(ConfigError):
        BlockingOneInchClient()


def test_cancelling_future_cancels_task(loop_thread):
    started = threading.Event()
    cancelled = threading.Event()

    async def slow():
        started.set()
        try:
            await asyncio.sleep(60)
        except asyncio.CancelledError:
            cancelled.set()
            raise

    future = loop_thread.submit(slow())
    assert started.wait(5)

    assert future.cancel()
    assert cancelled.wait(5)


def test_run_from_loop_thread_is_rejected(loop_thread):
    async def nested():
        try:
            loop_thread.run(asyncio.sleep(0))
        except RuntimeError as exc:
            return str(exc)
        return None

    message = loop_thread.run(nested(), timeout=5)

    assert message is not None
    assert "event loop thread" in message


def test_submit_after_close_fails(loop_thread):
    loop_thread.close()

    with pytest.raises(RuntimeError):
        loop_thread.submit(asyncio.sleep(0))


class _Service:
    label = "demo"

    async def double(self, value):
        return value * 2

    def plain(self):
        return "plain"


def test_service_proxies_wrap_only_coroutines(loop_thread):
    blocking = BlockingService(_Service(), loop_thread)
    futures = FutureService(_Service(), loop_thread)

    assert blocking.double(4) == 8
    assert futures.double(4).result(timeout=5) == 8
    assert blocking.plain() == "plain"
    assert blocking.label == "demo"
    assert "double" in dir(blocking)
