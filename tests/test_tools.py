import httpx
import pytest

from oneinch_mcp.config import CacheConfig
from oneinch_mcp.infra.cache import TtlCache
from oneinch_mcp.infra.health import HealthAggregator
from oneinch_mcp.infra.monitoring import RequestMetrics
from oneinch_mcp.infra.ratelimit import FixedWindowRateLimiter, RateLimitExceeded
from oneinch_mcp.sdk.client import OneInchClient
from oneinch_mcp.server.formatting import (
    chain_name,
    chart_metrics,
    error_payload,
    exchange_rate,
    format_units,
    parse_amount,
    price_spread,
    protocol_names,
)
from oneinch_mcp.server.gateway import OneInchGateway
from oneinch_mcp.server.tools import OneInchTools


ETH = "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"
USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
WALLET = "0x1111111111111111111111111111111111111111"
OTHER_WALLET = "0x2222222222222222222222222222222222222222"
THIRD_WALLET = "0x3333333333333333333333333333333333333333"
USDC_POLYGON = "0x3c499c542cef5e3811e1192ce70d8cc03d5c3359"


@pytest.fixture
def gateway(client):
    metrics = RequestMetrics()
    return OneInchGateway(
        client,
        rate_limiter=FixedWindowRateLimiter(3, 60),
        metrics=metrics,
        cache=TtlCache(default_ttl=30, metrics=metrics),
        cache_config=CacheConfig(),
    )


@pytest.fixture
def tools(gateway):
    health = HealthAggregator(
        config_probe=lambda: True,
        client_probe=gateway.is_ready,
        rate_limiter_probe=gateway.rate_limiter.is_operational,
        metrics=gateway.metrics,
    )
    return OneInchTools(gateway, health=health)


def _quote_body():
    return {
        "dstAmount": "3500000000",
        "srcToken": {"address": ETH, "symbol": "ETH", "name": "Ether", "decimals": 18},
        "dstToken": {"address": USDC, "symbol": "USDC", "name": "USD Coin", "decimals": 6},
        "gas": 180000,
        "protocols": [],
    }


@pytest.mark.asyncio
async def test_swap_quote_analysis(tools, recorder):
    recorder.add("GET", "/swap/v6.1/1/quote", body=_quote_body())

    result = await tools.get_swap_quote(1, ETH, USDC, str(10**18))

    assert result["success"] is True
    assert result["chain_name"] == "Ethereum"
    assert result["quote"]["dst_amount"] == "3500000000"
    assert result["analysis"]["input_formatted"] == "1 ETH"
    assert result["analysis"]["output_formatted"] == "3500 USDC"
    assert result["analysis"]["rate"] == "3500"
    assert recorder.last.url.params["includeTokensInfo"] == "true"


@pytest.mark.asyncio
async def test_invalid_amount_is_reported(tools, recorder):
    result = await tools.get_quick_quote(1, ETH, USDC, "one ether")

    assert result["success"] is False
    assert result["error_type"] == "invalid_argument"
    assert result["message"] == "Amount must be a valid integer in wei"
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_api_error_is_reported(tools, recorder):
    recorder.add(
        "GET",
        "/swap/v6.1/1/quote",
        status=400,
        body={"error": "Bad Request", "description": "insufficient liquidity", "statusCode": 400},
    )

    result = await tools.get_quick_quote(1, ETH, USDC, "100")

    assert result["error_type"] == "api_error"
    assert result["details"]["schema"] == "quote"
    assert result["details"]["description"] == "insufficient liquidity"


@pytest.mark.asyncio
async def test_rate_limit_is_reported_with_wait(tools, gateway, recorder):
    recorder.add("GET", "/swap/v6.1/1/approve/spender", body={"address": "0xspender"})
    recorder.add("GET", "/swap/v6.1/1/approve/allowance", body={"allowance": "0"})

    for _ in range(3):
        result = await tools.check_allowance(1, USDC, WALLET)
        assert result["success"] is True
        assert result["approval_required"] is True

    result = await tools.check_allowance(1, USDC, WALLET)

    assert result["error_type"] == "rate_limit_exceeded"
    assert 0 < result["wait_seconds"] <= 60
    assert gateway.metrics.snapshot().rate_limit_hits == 1


@pytest.mark.asyncio
async def test_token_prices_are_cached(tools, gateway, recorder):
    recorder.add("GET", f"/price/v1.1/1/{USDC},{ETH}", body={ETH: "3500", USDC: "1"})

    first = await tools.get_token_prices(1, [USDC.upper().replace("0X", "0x"), ETH])
    second = await tools.get_token_prices(1, [ETH, USDC])

    assert first["prices"] == second["prices"] == {ETH: "3500", USDC: "1"}
    assert len(recorder.requests) == 1
    assert gateway.cache.stats()["hits"] == 1


@pytest.mark.asyncio
async def test_token_prices_need_addresses(tools):
    result = await tools.get_token_prices(1, ["", "  "])

    assert result["error_type"] == "invalid_argument"


@pytest.mark.asyncio
async def test_wallet_balances_hide_zero(tools, recorder):
    recorder.add("GET", f"/balance/v1.2/1/balances/{WALLET}", body={ETH: "5", USDC: "0"})

    result = await tools.get_wallet_balances(1, WALLET)
    assert result["balances"] == {ETH: "5"}

    result = await tools.get_wallet_balances(1, WALLET, include_zero=True)
    assert result["token_count"] == 2


@pytest.mark.asyncio
async def test_wallet_balances_keep_unparseable_amounts(tools, recorder):
    recorder.add("GET", f"/balance/v1.2/1/balances/{WALLET}", body={ETH: "5", USDC: "0", "0xodd": "1e18"})

    result = await tools.get_wallet_balances(1, WALLET)

    assert result["balances"] == {ETH: "5", "0xodd": "1e18"}


def _token(address, symbol, decimals):
    return {"address": address, "symbol": symbol, "name": symbol, "decimals": decimals}


@pytest.mark.asyncio
async def test_compare_token_prices_across_chains(tools, recorder):
    recorder.add("GET", "/token/v1.3/1/search", body=[_token(USDC, "USDC", 6)])
    recorder.add(
        "GET",
        "/token/v1.3/137/search",
        body=[_token("0x9999999999999999999999999999999999999999", "USDC.e", 6), _token(USDC_POLYGON, "USDC", 6)],
    )
    recorder.add("GET", f"/price/v1.1/1/{USDC}", body={USDC: "1.002"})
    recorder.add("GET", f"/price/v1.1/137/{USDC_POLYGON}", body={USDC_POLYGON: "0.998"})

    result = await tools.compare_token_prices("usdc", [1, 137, 56, 1])

    assert result["success"] is True
    assert [entry["chain_id"] for entry in result["chains"]] == [1, 137, 56]
    assert result["chains"][1]["address"] == USDC_POLYGON
    assert result["chains"][2]["found"] is False
    assert "error" in result["chains"][2]
    comparison = result["comparison"]
    assert comparison["lowest"] == {"chain_id": 137, "chain_name": "Polygon", "price": "0.998"}
    assert comparison["highest"]["chain_id"] == 1
    assert comparison["spread_percent"] == "0.40"


@pytest.mark.asyncio
async def test_compare_token_prices_needs_two_chains(tools, recorder):
    result = await tools.compare_token_prices("USDC", [1, 1])

    assert result["error_type"] == "invalid_argument"
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_portfolio_metrics_from_chart_and_report(tools, recorder):
    recorder.add("GET", "/portfolio/v5.0/general/current_value", body={"result": {"total": 1500.5}})
    recorder.add(
        "GET",
        "/portfolio/v5.0/general/chart",
        body={
            "result": [
                {"timestamp": 1, "value_usd": 1000},
                {"timestamp": 2, "value_usd": 1200},
                {"timestamp": 3, "value_usd": 900},
                {"timestamp": 4, "value_usd": 1500},
            ]
        },
    )
    recorder.add("GET", "/portfolio/v5.0/general/report", body={"result": [{"chain_id": 1, "abs_profit_usd": 500}]})

    result = await tools.calculate_portfolio_metrics([WALLET, " ", WALLET], timeframe="30d")

    assert result["success"] is True
    assert result["addresses"] == [WALLET]
    assert result["timerange"] == "1month"
    assert result["total_value_usd"] == 1500.5
    assert result["metrics"] == {
        "points": 4,
        "start_value_usd": "1000",
        "end_value_usd": "1500",
        "change_usd": "500",
        "change_percent": "50.00",
        "max_value_usd": "1500",
        "min_value_usd": "900",
        "max_drawdown_percent": "25.00",
    }
    assert result["report"] == [{"chain_id": 1, "abs_profit_usd": 500}]
    chart_request = next(request for request in recorder.requests if request.url.path.endswith("/chart"))
    assert chart_request.url.params["timerange"] == "1month"


@pytest.mark.asyncio
async def test_portfolio_metrics_rejects_unknown_timeframe(tools, recorder):
    result = await tools.calculate_portfolio_metrics([WALLET], timeframe="fortnight")

    assert result["error_type"] == "invalid_argument"
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_compare_portfolios_ranks_by_value():
    totals = {WALLET: 100.0, OTHER_WALLET: 250.0, THIRD_WALLET: 50.0}

    def handler(request):
        wallets = request.url.params.get_list("addresses")
        return httpx.Response(200, json={"result": {"total": sum(totals[wallet] for wallet in wallets)}})

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = OneInchClient("test-api-key-123456", base_url="https://api.test", http_client=http_client)
    metrics = RequestMetrics()
    tools = OneInchTools(
        OneInchGateway(client, rate_limiter=FixedWindowRateLimiter(3, 60), metrics=metrics, cache_config=CacheConfig())
    )
    try:
        result = await tools.compare_portfolios([[WALLET], [OTHER_WALLET, THIRD_WALLET], [THIRD_WALLET]], chain_id=1)
    finally:
        await client.close()
        await http_client.aclose()

    assert result["success"] is True
    assert [item["total_value_usd"] for item in result["portfolios"]] == [100.0, 300.0, 50.0]
    assert [item["rank"] for item in result["portfolios"]] == [2, 1, 3]
    assert result["highest_value"] == 2
    assert result["lowest_value"] == 3
    assert result["combined_value_usd"] == 450.0


@pytest.mark.asyncio
async def test_compare_portfolios_needs_two_groups(tools):
    result = await tools.compare_portfolios([[WALLET]])

    assert result["error_type"] == "invalid_argument"
    assert "Between 2 and" in result["message"]


@pytest.mark.asyncio
async def test_search_tokens_rejects_blank_query(tools):
    result = await tools.search_tokens("   ")

    assert result["error_type"] == "invalid_argument"


@pytest.mark.asyncio
async def test_cross_chain_quote_same_chain(tools, recorder):
    result = await tools.get_cross_chain_quote(1, 1, ETH, USDC, "10", WALLET)

    assert result["error_type"] == "invalid_argument"
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_unstructured_error_is_reported(tools, recorder):
    recorder.add("GET", "/history/v2.0/history/0xabc/events", status=503, raw=b"Service Unavailable")

    result = await tools.get_history("0xabc")

    assert result["error_type"] == "http_error"
    assert result["status_code"] == 503


@pytest.mark.asyncio
async def test_health_check(tools):
    result = tools.health_check()

    assert result["success"] is True
    assert result["readiness"]["status"] == "up"
    assert "metrics" in result
    assert "cache" in result


@pytest.mark.asyncio
async def test_gateway_counts_calls(gateway):
    async def factory(client):
        return "done"

    assert await gateway.call("op", factory) == "done"
    assert gateway.metrics.snapshot().successful_requests == 1

    with pytest.raises(RateLimitExceeded):
        for _ in range(3):
            await gateway.call("op", factory)


def test_formatting_helpers():
    assert chain_name(8453) == "Base"
    assert chain_name(999999) == "Chain 999999"
    assert chain_name(None) == "all chains"
    assert parse_amount(" 42 ") == 42
    with pytest.raises(ValueError, match="positive"):
        parse_amount("0")
    assert format_units(1_234_500, 6) == "1.2345"
    assert exchange_rate(0, 18, 5, 6) is None


def test_route_and_price_helpers():
    route = [
        [[{"name": "UNISWAP_V3", "part": 100}], [{"name": "CURVE", "part": 100}]],
        [[{"name": "UNISWAP_V3", "part": 100}]],
    ]
    assert protocol_names(route) == ["UNISWAP_V3", "CURVE"]
    assert protocol_names(None) == []

    assert price_spread({}) is None
    assert price_spread({1: "abc"}) is None
    single = price_spread({10: "2.5"})
    assert single["lowest"] == single["highest"]
    assert single["spread_percent"] == "0.00"

    assert chart_metrics([]) == {"points": 0}
    assert chart_metrics([{"value_usd": 0}, {"value_usd": 5}])["change_percent"] is None


def test_error_payload_keeps_context():
    payload = error_payload("demo", RateLimitExceeded("demo", 12), chain_id=1, address=None)

    assert payload == {
        "tool": "demo",
        "success": False,
        "chain_id": 1,
        "error_type": "rate_limit_exceeded",
        "message": "Rate limit exceeded for demo. Please wait 12 seconds before retrying.",
        "client_id": "demo",
        "wait_seconds": 12,
    }
