import json

import httpx
import pytest

from oneinch_mcp.sdk.errors import OneInchHttpError, OneInchTransportError, QuoteRequestError
from oneinch_mcp.sdk.http import HttpClient, encode_params


def test_encode_params_drops_none_and_formats_values():
    encoded = encode_params(
        {"a": None, "flag": True, "off": False, "amount": 10, "ids": ["x", None, "y"], "empty": []}
    )

    assert encoded == {"flag": "true", "off": "false", "amount": "10", "ids": ["x", "y"]}


@pytest.mark.asyncio
async def test_request_sends_auth_headers_and_query(recorder):
    recorder.add("GET", "/swap/v6.1/1/quote", body={"dstAmount": "1"})
    transport = httpx.MockTransport(recorder)
    async with httpx.AsyncClient(transport=transport) as raw:
        http = HttpClient("secret-key", base_url="https://api.test/", http_client=raw)
        result = await http.get("swap/v6.1/1/quote", params={"src": "0xa", "ids": ["1", "2"], "skip": None})

    assert result == {"dstAmount": "1"}
    request = recorder.last
    assert request.headers["Authorization"] == "Bearer secret-key"
    assert request.headers["Accept"] == "application/json"
    assert request.url.params.get_list("ids") == ["1", "2"]
    assert request.url.params["src"] == "0xa"
    assert "skip" not in request.url.params


@pytest.mark.asyncio
async def test_post_sends_json_body(recorder):
    recorder.add("POST", "/price/v1.1/1", body={"0xa": "1"})
    async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as raw:
        http = HttpClient("k", base_url="https://api.test", http_client=raw)
        await http.post("price/v1.1/1", json={"tokens": ["0xa"]})

    assert recorder.last.method == "POST"
    assert json.loads(recorder.last.content) == {"tokens": ["0xa"]}


@pytest.mark.asyncio
async def test_empty_body_returns_none(recorder):
    recorder.add("POST", "/fusion/relayer/v2.0/1/order/submit", status=201)
    async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as raw:
        http = HttpClient("k", base_url="https://api.test", http_client=raw)
        assert await http.post("fusion/relayer/v2.0/1/order/submit", json={}) is None


@pytest.mark.asyncio
async def test_error_response_is_classified(recorder):
    recorder.add(
        "GET",
        "/swap/v6.1/1/quote",
        status=400,
        body={"error": "Bad Request", "description": "bad amount", "statusCode": 400},
    )
    async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as raw:
        http = HttpClient("k", base_url="https://api.test", http_client=raw)
        with pytest.raises(QuoteRequestError) as excinfo:
            await http.get("swap/v6.1/1/quote")

    assert excinfo.value.description == "bad amount"


@pytest.mark.asyncio
async def test_unparseable_success_body_raises(recorder):
    recorder.add("GET", "/token/v1.3/1", raw=b"not json")
    async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as raw:
        http = HttpClient("k", base_url="https://api.test", http_client=raw)
        with pytest.raises(OneInchHttpError) as excinfo:
            await http.get("token/v1.3/1")

    assert excinfo.value.body == "not json"


@pytest.mark.asyncio
async def test_network_failure_raises_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as raw:
        http = HttpClient("k", base_url="https://api.test", http_client=raw)
        with pytest.raises(OneInchTransportError):
            await http.get("anything")


@pytest.mark.asyncio
async def test_close_leaves_injected_client_open():
    async with httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200))) as raw:
        http = HttpClient("k", http_client=raw)
        await http.close()

        assert http.closed
        assert not raw.is_closed


@pytest.mark.asyncio
async def test_close_owned_client():
    http = HttpClient("k")
    async with http:
        assert not http.closed

    assert http.closed
