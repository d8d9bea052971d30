import json

import httpx
import pytest
import pytest_asyncio

from oneinch_mcp.config import API_KEY_ENV_NAMES
from oneinch_mcp.sdk.client import OneInchClient


TEST_API_KEY = "test-api-key-123456"
BASE_URL = "https://api.test"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in API_KEY_ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    for name in (
        "ONEINCH_BASE_URL",
        "ONEINCH_TIMEOUT",
        "MCP_RATE_LIMIT_REQUESTS",
        "MCP_RATE_LIMIT_WINDOW",
        "MCP_RATE_LIMIT_IDLE_SECONDS",
        "MCP_SERVER_NAME",
        "MCP_TRANSPORT",
        "MCP_HOST",
        "MCP_PORT",
        "CACHE_PRICE_TTL",
        "CACHE_TOKEN_TTL",
        "CACHE_PORTFOLIO_TTL",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


class Recorder:
    """Route table for ``httpx.MockTransport`` that also records requests."""

    def __init__(self):
        self.requests = []
        self.routes = {}

    def add(self, method, path, status=200, body=None, raw=None):
        self.routes[(method, path)] = (status, body, raw)

    def __call__(self, request):
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, json={"message": f"no route for {request.url.path}", "statusCode": 404})
        status, body, raw = self.routes[key]
        if raw is not None:
            return httpx.Response(status, content=raw)
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, content=json.dumps(body).encode())

    @property
    def last(self):
        return self.requests[-1]


@pytest.fixture
def recorder():
    return Recorder()


@pytest_asyncio.fixture
async def client(recorder):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    sdk = OneInchClient(TEST_API_KEY, base_url=BASE_URL, http_client=http_client)
    yield sdk
    await sdk.close()
    await http_client.aclose()
