import json

import httpx
import pytest

from oneinch_mcp.config import CacheConfig, SdkConfig, ServerConfig
from oneinch_mcp.infra.cache import TtlCache
from oneinch_mcp.infra.health import HealthAggregator, LivenessProbe
from oneinch_mcp.infra.monitoring import RequestMetrics
from oneinch_mcp.infra.ratelimit import FixedWindowRateLimiter
from oneinch_mcp.server.gateway import OneInchGateway
from oneinch_mcp.server.prompts import market_report_prompt, portfolio_review_prompt, swap_analysis_prompt
from oneinch_mcp.server.server import create_mcp_server


EXPECTED_TOOLS = {
    "get_swap_quote",
    "get_quick_quote",
    "get_swap_transaction",
    "check_allowance",
    "search_tokens",
    "get_token_info",
    "analyze_token",
    "get_token_prices",
    "get_wallet_balances",
    "get_portfolio_value",
    "calculate_portfolio_metrics",
    "compare_portfolios",
    "compare_token_prices",
    "get_history",
    "get_limit_orders",
    "get_fusion_quote",
    "get_cross_chain_quote",
    "health_check",
}


class _Process:
    def num_threads(self):
        return 4

    def memory_info(self):
        return type("Mem", (), {"rss": 1024})()


def _virtual_memory():
    return type("VMem", (), {"percent": 10.0, "available": 8 * 1024**3})()


def _build(client, *, ready=True):
    metrics = RequestMetrics()
    limiter = FixedWindowRateLimiter(100, 60)
    gateway = OneInchGateway(
        client,
        rate_limiter=limiter,
        metrics=metrics,
        cache=TtlCache(default_ttl=30, metrics=metrics),
        cache_config=CacheConfig(),
    )
    health = HealthAggregator(
        config_probe=lambda: ready,
        client_probe=gateway.is_ready,
        rate_limiter_probe=limiter.is_operational,
        metrics=metrics,
    )
    liveness = LivenessProbe(process=_Process(), virtual_memory=_virtual_memory)
    config = ServerConfig(sdk=SdkConfig(api_key="server-key-123456"), name="test-server")
    return create_mcp_server(config, gateway=gateway, health=health, liveness=liveness)


@pytest.mark.asyncio
async def test_registers_tools_prompts_and_resources(client):
    mcp = _build(client)

    tools = {tool.name for tool in await mcp.list_tools()}
    prompts = {prompt.name for prompt in await mcp.list_prompts()}
    resources = {str(resource.uri) for resource in await mcp.list_resources()}
    templates = {template.uriTemplate for template in await mcp.list_resource_templates()}

    assert tools == EXPECTED_TOOLS
    assert prompts == {"swap_analysis", "portfolio_review", "market_report"}
    assert resources == {
        "oneinch://tokens/multi-chain",
        "oneinch://health/readiness",
        "oneinch://health/liveness",
    }
    assert templates == {
        "oneinch://tokens/{chain_id}",
        "oneinch://prices/{chain_id}",
        "oneinch://prices/{chain_id}/{token_address}",
        "oneinch://currencies/{chain_id}",
        "oneinch://swap-routes/{chain_id}/spender",
        "oneinch://swap-routes/{chain_id}/{src}/{dst}/{amount}",
        "oneinch://swap-routes/{chain_id}/{src}/{dst}/{amount}/fee/{fee}",
        "oneinch://swap-routes/{chain_id}/{src}/{dst}/{amount}/analysis",
        "oneinch://portfolio/{address}",
        "oneinch://balances/{chain_id}/{address}",
        "oneinch://history/{address}",
    }


@pytest.mark.asyncio
async def test_price_resource_reads_through_gateway(client, recorder):
    recorder.add("GET", "/price/v1.1/137", body={"0xabc": "12"})
    mcp = _build(client)

    contents = list(await mcp.read_resource("oneinch://prices/137"))
    payload = json.loads(contents[0].content)

    assert payload["chain_name"] == "Polygon"
    assert payload["prices"] == {"0xabc": "12"}
    assert recorder.last.url.params["currency"] == "USD"


ETH = "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"
USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"


async def _read(mcp, uri):
    contents = list(await mcp.read_resource(uri))
    return json.loads(contents[0].content)


@pytest.mark.asyncio
async def test_swap_route_resources(client, recorder):
    recorder.add(
        "GET",
        "/swap/v6.1/1/quote",
        body={
            "dstAmount": "3500000000",
            "srcToken": {"address": ETH, "symbol": "ETH", "name": "Ether", "decimals": 18},
            "dstToken": {"address": USDC, "symbol": "USDC", "name": "USD Coin", "decimals": 6},
            "gas": 180000,
            "protocols": [[[{"name": "UNISWAP_V3", "part": 100}]], [[{"name": "CURVE", "part": 100}]]],
        },
    )
    recorder.add("GET", "/swap/v6.1/1/approve/spender", body={"address": "0x111111125421ca6dc452d289314280a0f8842a65"})
    mcp = _build(client)

    quote = await _read(mcp, f"oneinch://swap-routes/1/{ETH}/{USDC}/{10**18}")
    assert quote["quote"]["dst_amount"] == "3500000000"
    assert "fee" not in recorder.last.url.params

    with_fee = await _read(mcp, f"oneinch://swap-routes/1/{ETH}/{USDC}/{10**18}/fee/1.5")
    assert with_fee["fee_percent"] == 1.5
    assert recorder.last.url.params["fee"] == "1.5"

    analysis = await _read(mcp, f"oneinch://swap-routes/1/{ETH}/{USDC}/{10**18}/analysis")
    assert analysis["analysis"]["protocols"] == ["UNISWAP_V3", "CURVE"]
    assert analysis["analysis"]["split_route"] is True
    assert analysis["analysis"]["rate"] == "3500"

    spender = await _read(mcp, "oneinch://swap-routes/1/spender")
    assert spender["spender"] == "0x111111125421ca6dc452d289314280a0f8842a65"


@pytest.mark.asyncio
async def test_swap_quote_resource_rejects_large_fee(client, recorder):
    mcp = _build(client)

    payload = await _read(mcp, f"oneinch://swap-routes/1/{ETH}/{USDC}/1000/fee/9")

    assert payload["success"] is False
    assert payload["error_type"] == "invalid_argument"
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_token_price_and_currency_resources(client, recorder):
    recorder.add("GET", f"/price/v1.1/1/{USDC}", body={USDC: "0.9998"})
    recorder.add("GET", "/price/v1.1/1/currencies", body={"codes": ["USD", "EUR"]})
    mcp = _build(client)

    price = await _read(mcp, f"oneinch://prices/1/{USDC}")
    assert price["price"] == "0.9998"
    assert price["found"] is True
    assert recorder.last.url.params["currency"] == "USD"

    currencies = await _read(mcp, "oneinch://currencies/1")
    assert currencies["currencies"] == ["USD", "EUR"]


@pytest.mark.asyncio
async def test_readiness_resource(client):
    mcp = _build(client)

    contents = list(await mcp.read_resource("oneinch://health/readiness"))
    payload = json.loads(contents[0].content)

    assert payload["name"] == "mcp-application"
    assert payload["status"] == "up"


@pytest.mark.asyncio
async def test_health_routes(client):
    mcp = _build(client, ready=False)
    transport = httpx.ASGITransport(app=mcp.sse_app())

    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        ready = await http.get("/health/ready")
        live = await http.get("/health/live")

    assert ready.status_code == 503
    assert ready.json()["data"]["configuration_valid"] is False
    assert live.status_code == 200
    assert live.json()["name"] == "mcp-liveness"


@pytest.mark.asyncio
async def test_prompt_rendering(client):
    mcp = _build(client)

    result = await mcp.get_prompt("swap_analysis", {"src_token": "ETH", "dst_token": "USDC", "amount": "1"})

    text = result.messages[0].content.text
    assert "swap 1 ETH to USDC on Ethereum (Chain ID: 1)" in text


def test_prompt_texts():
    assert "on Base (Chain ID: 8453)" in swap_analysis_prompt("ETH", "USDC", "2", "8453")
    assert "across all supported chains" in portfolio_review_prompt("0xabc")
    assert "over 7d on Arbitrum" in portfolio_review_prompt("0xabc", "7d", "42161")
    assert "the most liquid tokens" in market_report_prompt()
    assert "WETH, USDC" in market_report_prompt("1", "WETH, USDC")
