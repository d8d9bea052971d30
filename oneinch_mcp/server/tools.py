"""Agent-callable tools backed by the 1inch SDK.

Every tool goes through :class:`~oneinch_mcp.server.gateway.OneInchGateway`
so it is rate limited and counted. SDK failures, rate-limit rejections and
bad arguments come back as ``{"success": false, "error_type": ...}`` payloads
rather than protocol errors, which lets the calling agent react to them.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence

from mcp.server.fastmcp import FastMCP

from ..infra.health import HealthAggregator, LivenessProbe
from ..infra.ratelimit import RateLimitExceeded
from ..sdk.errors import OneInchError
from ..sdk.models import QuoteRequest, SwapRequest, TokenSearchRequest
from ..sdk.services import CrossChainQuoteRequest, FusionQuoteRequest, OrderFilter
from .formatting import (
    amount_text,
    chain_name,
    chart_metrics,
    error_payload,
    exchange_rate,
    format_units,
    parse_amount,
    price_spread,
)
from .gateway import OneInchGateway


_LOGGER = logging.getLogger(__name__)

# failures reported to the agent as payloads; anything else propagates
HANDLED_ERRORS = (RateLimitExceeded, OneInchError, ValueError)

PORTFOLIO_TIMERANGES = ("1day", "1week", "1month", "1year", "3years")
_TIMERANGE_ALIASES = {"1d": "1day", "24h": "1day", "7d": "1week", "30d": "1month", "1y": "1year", "365d": "1year"}
MAX_COMPARED_PORTFOLIOS = 10


def _clean_addresses(addresses: Sequence[str]) -> List[str]:
    cleaned = list(dict.fromkeys(item.strip() for item in addresses if item and item.strip()))
    if not cleaned:
        raise ValueError("At least one wallet address is required")
    return cleaned


def _timerange(value: str) -> str:
    text = (value or "").strip().lower()
    text = _TIMERANGE_ALIASES.get(text, text)
    if text not in PORTFOLIO_TIMERANGES:
        raise ValueError(f"Unsupported timeframe '{value}' (use one of {', '.join(PORTFOLIO_TIMERANGES)})")
    return text


def _result(payload: Any) -> Any:
    if isinstance(payload, Mapping) and "result" in payload:
        return payload["result"]
    return payload


def _total_value(payload: Any) -> Optional[float]:
    result = _result(payload)
    if isinstance(result, Mapping):
        total = result.get("total")
        if isinstance(total, (int, float)) and not isinstance(total, bool):
            return total
    return None


class OneInchTools:
    """Tool implementations, independent of the MCP registration."""

    def __init__(
        self,
        gateway: OneInchGateway,
        *,
        health: Optional[HealthAggregator] = None,
        liveness: Optional[LivenessProbe] = None,
    ) -> None:
        self._gateway = gateway
        self._health = health
        self._liveness = liveness

    async def _guard(
        self,
        tool: str,
        action: Callable[[], Awaitable[Dict[str, Any]]],
        **context: Any,
    ) -> Dict[str, Any]:
        try:
            result = await action()
        except HANDLED_ERRORS as exc:
            _LOGGER.warning("Tool %s failed: %s", tool, exc)
            return error_payload(tool, exc, **context)
        return {"tool": tool, "success": True, **result}

    async def get_swap_quote(
        self,
        chain_id: int,
        src_token: str,
        dst_token: str,
        amount: str,
        protocols: str = "",
        parts: int = 1,
        fee: float = 0.0,
    ) -> Dict[str, Any]:
        async def action() -> Dict[str, Any]:
            amount_wei = parse_amount(amount)
            request = QuoteRequest(
                chain_id=chain_id,
                src=src_token,
                dst=dst_token,
                amount=amount_wei,
                protocols=protocols.strip() or None,
                parts=parts if parts and parts > 0 else None,
                fee=fee if 0.0 < fee <= 3.0 else None,
                include_tokens_info=True,
                include_protocols=True,
                include_gas=True,
            )
            quote = await self._gateway.call("get_swap_quote", lambda client: client.swap.get_quote(request))
            analysis: Dict[str, Any] = {
                "estimated_gas": quote.gas,
                "route_count": len(quote.protocols),
            }
            if quote.src_token and quote.dst_token:
                analysis["input_formatted"] = f"{format_units(amount_wei, quote.src_token.decimals)} {quote.src_token.symbol}"
                analysis["output_formatted"] = f"{format_units(quote.dst_amount, quote.dst_token.decimals)} {quote.dst_token.symbol}"
                analysis["rate"] = exchange_rate(
                    amount_wei,
                    quote.src_token.decimals,
                    quote.dst_amount,
                    quote.dst_token.decimals,
                )
            return {
                "chain_id": chain_id,
                "chain_name": chain_name(chain_id),
                "input_amount": str(amount_wei),
                "quote": quote.to_dict(),
                "analysis": analysis,
            }

        return await self._guard(
            "get_swap_quote", action, chain_id=chain_id, src_token=src_token, dst_token=dst_token, amount=amount
        )

    async def get_quick_quote(self, chain_id: int, src_token: str, dst_token: str, amount: str) -> Dict[str, Any]:
        async def action() -> Dict[str, Any]:
            request = QuoteRequest(chain_id=chain_id, src=src_token, dst=dst_token, amount=parse_amount(amount))
            quote = await self._gateway.call("get_quick_quote", lambda client: client.swap.get_quote(request))
            return {
                "chain_id": chain_id,
                "src_token": src_token,
                "dst_token": dst_token,
                "input_amount": str(request.amount),
                "expected_output": str(quote.dst_amount),
                "estimated_gas": quote.gas,
            }

        return await self._guard("get_quick_quote", action, chain_id=chain_id, amount=amount)

    async def get_swap_transaction(
        self,
        chain_id: int,
        src_token: str,
        dst_token: str,
        amount: str,
        from_address: str,
        slippage: float = 1.0,
    ) -> Dict[str, Any]:
        async def action() -> Dict[str, Any]:
            request = SwapRequest(
                chain_id=chain_id,
                src=src_token,
                dst=dst_token,
                amount=parse_amount(amount),
                from_address=from_address,
                slippage=slippage,
                include_tokens_info=True,
            )
            swap = await self._gateway.call("get_swap_transaction", lambda client: client.swap.get_swap(request))
            return {"chain_id": chain_id, "swap": swap.to_dict()}

        return await self._guard("get_swap_transaction", action, chain_id=chain_id, from_address=from_address)

    async def check_allowance(self, chain_id: int, token_address: str, wallet_address: str) -> Dict[str, Any]:
        async def action() -> Dict[str, Any]:
            async def _load(client: Any) -> Dict[str, Any]:
                spender, allowance = await asyncio.gather(
                    client.swap.get_spender(chain_id),
                    client.swap.get_allowance(chain_id, token_address, wallet_address),
                )
                return {"spender": spender, "allowance": str(allowance), "approval_required": allowance == 0}

            result = await self._gateway.call("check_allowance", _load)
            return {"chain_id": chain_id, "token_address": token_address, "wallet_address": wallet_address, **result}

        return await self._guard("check_allowance", action, chain_id=chain_id, token_address=token_address)

    async def search_tokens(
        self,
        query: str,
        chain_id: Optional[int] = None,
        limit: int = 10,
        only_positive_rating: bool = False,
    ) -> Dict[str, Any]:
        async def action() -> Dict[str, Any]:
            if not query.strip():
                raise ValueError("Search query must not be empty")
            request = TokenSearchRequest(
                query=query.strip(),
                chain_id=chain_id,
                limit=max(1, min(limit, 100)),
                only_positive_rating=only_positive_rating or None,
            )
            tokens = await self._gateway.call("search_tokens", lambda client: client.token.search(request))
            return {
                "query": request.query,
                "chain_id": chain_id,
                "count": len(tokens),
                "tokens": [token.to_dict() for token in tokens],
            }

        return await self._guard("search_tokens", action, query=query, chain_id=chain_id)

    async def compare_token_prices(
        self,
        symbol: str,
        chain_ids: List[int],
        currency: str = "USD",
    ) -> Dict[str, Any]:
        async def action() -> Dict[str, Any]:
            wanted = symbol.strip()
            if not wanted:
                raise ValueError("Token symbol must not be empty")
            chains = list(dict.fromkeys(chain_ids))
            if len(chains) < 2:
                raise ValueError("At least two distinct chain ids are required")

            async def _on_chain(client: Any, chain: int) -> Dict[str, Any]:
                entry: Dict[str, Any] = {"chain_id": chain, "chain_name": chain_name(chain)}
                try:
                    tokens = await client.token.search(TokenSearchRequest(query=wanted, chain_id=chain, limit=10))
                    match = next((token for token in tokens if token.symbol.upper() == wanted.upper()), None)
                    if match is None:
                        return {**entry, "found": False}
                    prices = await client.price.get_prices(chain, [match.address], currency=currency or None)
                except OneInchError as exc:
                    _LOGGER.warning("Price lookup for %s on chain %s failed: %s", wanted, chain, exc)
                    return {**entry, "found": False, "error": str(exc)}
                price = prices.get(match.address, prices.get(match.address.lower()))
                return {**entry, "found": True, "address": match.address, "price": price}

            async def _load(client: Any) -> List[Dict[str, Any]]:
                return list(await asyncio.gather(*(_on_chain(client, chain) for chain in chains)))

            results = await self._gateway.call("compare_token_prices", _load)
            found = {item["chain_id"]: item.get("price") for item in results if item["found"]}
            return {
                "symbol": wanted,
                "currency": currency,
                "chains": results,
                "comparison": price_spread(found),
            }

        return await self._guard("compare_token_prices", action, symbol=symbol)

    async def get_token_info(self, chain_id: int, address: str) -> Dict[str, Any]:
        async def action() -> Dict[str, Any]:
            token = await self._gateway.call(
                "get_token_info",
                lambda client: client.token.get_custom_token(chain_id, address),
                cache_key=f"{chain_id}:{address.lower()}",
                ttl=self._gateway.cache_config.token_ttl,
            )
            return {"chain_id": chain_id, "token": token.to_dict()}

        return await self._guard("get_token_info", action, chain_id=chain_id, address=address)

    async def analyze_token(self, chain_id: int, address: str, interval: str = "24h") -> Dict[str, Any]:
        async def action() -> Dict[str, Any]:
            async def _load(client: Any) -> Dict[str, Any]:
                token, details, change = await asyncio.gather(
                    client.token.get_custom_token(chain_id, address),
                    client.token_details.get_token_details(chain_id, address),
                    client.token_details.get_token_price_change(chain_id, address, interval),
                )
                return {"token": token.to_dict(), "details": details, "price_change": change}

            result = await self._gateway.call("analyze_token", _load)
            return {"chain_id": chain_id, "chain_name": chain_name(chain_id), "interval": interval, **result}

        return await self._guard("analyze_token", action, chain_id=chain_id, address=address)

    async def get_token_prices(
        self,
        chain_id: int,
        addresses: List[str],
        currency: str = "USD",
    ) -> Dict[str, Any]:
        async def action() -> Dict[str, Any]:
            cleaned = sorted({item.strip().lower() for item in addresses if item and item.strip()})
            if not cleaned:
                raise ValueError("At least one token address is required")
            prices = await self._gateway.call(
                "get_token_prices",
                lambda client: client.price.get_prices(chain_id, cleaned, currency=currency or None),
                cache_key=f"{chain_id}:{currency}:{','.join(cleaned)}",
                ttl=self._gateway.cache_config.price_ttl,
            )
            return {"chain_id": chain_id, "currency": currency, "prices": prices}

        return await self._guard("get_token_prices", action, chain_id=chain_id)

    async def get_wallet_balances(
        self,
        chain_id: int,
        wallet_address: str,
        include_zero: bool = False,
    ) -> Dict[str, Any]:
        async def action() -> Dict[str, Any]:
            balances = await self._gateway.call(
                "get_wallet_balances",
                lambda client: client.balance.get_balances(chain_id, wallet_address),
            )
            if not include_zero:
                balances = {token: amount for token, amount in balances.items() if amount != 0}
            return {
                "chain_id": chain_id,
                "wallet_address": wallet_address,
                "token_count": len(balances),
                "balances": {token: amount_text(amount) for token, amount in balances.items()},
            }

        return await self._guard("get_wallet_balances", action, chain_id=chain_id, wallet_address=wallet_address)

    async def get_portfolio_value(self, address: str, chain_id: Optional[int] = None) -> Dict[str, Any]:
        async def action() -> Dict[str, Any]:
            value = await self._gateway.call(
                "get_portfolio_value",
                lambda client: client.portfolio.get_current_value(address, chain_id=chain_id),
                cache_key=f"{address.lower()}:{chain_id}",
                ttl=self._gateway.cache_config.portfolio_ttl,
            )
            return {"address": address, "chain_id": chain_id, "scope": chain_name(chain_id), "value": value}

        return await self._guard("get_portfolio_value", action, address=address, chain_id=chain_id)

    async def calculate_portfolio_metrics(
        self,
        addresses: List[str],
        chain_id: Optional[int] = None,
        timeframe: str = "1month",
    ) -> Dict[str, Any]:
        async def action() -> Dict[str, Any]:
            wallets = _clean_addresses(addresses)
            timerange = _timerange(timeframe)

            async def _load(client: Any) -> Dict[str, Any]:
                value, chart, report = await asyncio.gather(
                    client.portfolio.get_current_value(wallets, chain_id=chain_id),
                    client.portfolio.get_general_chart(wallets, chain_id=chain_id, timerange=timerange),
                    client.portfolio.get_general_report(wallets, chain_id=chain_id, timerange=timerange),
                )
                return {"value": value, "chart": chart, "report": report}

            data = await self._gateway.call(
                "calculate_portfolio_metrics",
                _load,
                cache_key=f"{','.join(sorted(wallet.lower() for wallet in wallets))}:{chain_id}:{timerange}",
                ttl=self._gateway.cache_config.portfolio_ttl,
            )
            points = _result(data["chart"])
            return {
                "addresses": wallets,
                "chain_id": chain_id,
                "scope": chain_name(chain_id),
                "timerange": timerange,
                "total_value_usd": _total_value(data["value"]),
                "metrics": chart_metrics(points if isinstance(points, list) else []),
                "report": _result(data["report"]),
            }

        return await self._guard("calculate_portfolio_metrics", action, chain_id=chain_id, timeframe=timeframe)

    async def compare_portfolios(
        self,
        address_groups: List[List[str]],
        chain_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        async def action() -> Dict[str, Any]:
            groups = [_clean_addresses(group) for group in address_groups]
            if not 2 <= len(groups) <= MAX_COMPARED_PORTFOLIOS:
                raise ValueError(f"Between 2 and {MAX_COMPARED_PORTFOLIOS} portfolios can be compared")

            async def _load(client: Any) -> List[Any]:
                return await asyncio.gather(
                    *(client.portfolio.get_current_value(group, chain_id=chain_id) for group in groups)
                )

            values = await self._gateway.call("compare_portfolios", _load)
            portfolios = [
                {"portfolio": index, "addresses": group, "total_value_usd": _total_value(value)}
                for index, (group, value) in enumerate(zip(groups, values), start=1)
            ]
            ranked = sorted(
                (item for item in portfolios if isinstance(item["total_value_usd"], (int, float))),
                key=lambda item: item["total_value_usd"],
                reverse=True,
            )
            for rank, item in enumerate(ranked, start=1):
                item["rank"] = rank
            return {
                "chain_id": chain_id,
                "scope": chain_name(chain_id),
                "portfolios": portfolios,
                "highest_value": ranked[0]["portfolio"] if ranked else None,
                "lowest_value": ranked[-1]["portfolio"] if ranked else None,
                "combined_value_usd": sum(item["total_value_usd"] for item in ranked),
            }

        return await self._guard("compare_portfolios", action, chain_id=chain_id)

    async def get_history(self, address: str, chain_id: Optional[int] = None, limit: int = 20) -> Dict[str, Any]:
        async def action() -> Dict[str, Any]:
            events = await self._gateway.call(
                "get_history",
                lambda client: client.history.get_history_events(
                    address, chain_id=chain_id, limit=max(1, min(limit, 100))
                ),
            )
            return {"address": address, "chain_id": chain_id, "count": len(events), "events": events}

        return await self._guard("get_history", action, address=address, chain_id=chain_id)

    async def get_limit_orders(self, chain_id: int, maker_address: str, limit: int = 20) -> Dict[str, Any]:
        async def action() -> Dict[str, Any]:
            filters = OrderFilter(limit=max(1, min(limit, 500)))
            orders = await self._gateway.call(
                "get_limit_orders",
                lambda client: client.orderbook.get_orders_by_maker(chain_id, maker_address, filters),
            )
            return {"chain_id": chain_id, "maker_address": maker_address, "count": len(orders), "orders": orders}

        return await self._guard("get_limit_orders", action, chain_id=chain_id, maker_address=maker_address)

    async def get_fusion_quote(
        self,
        chain_id: int,
        src_token: str,
        dst_token: str,
        amount: str,
        wallet_address: str,
    ) -> Dict[str, Any]:
        async def action() -> Dict[str, Any]:
            request = FusionQuoteRequest(
                chain_id=chain_id,
                from_token_address=src_token,
                to_token_address=dst_token,
                amount=parse_amount(amount),
                wallet_address=wallet_address,
            )
            quote = await self._gateway.call("get_fusion_quote", lambda client: client.fusion_quoter.get_quote(request))
            return {"chain_id": chain_id, "quote": quote}

        return await self._guard("get_fusion_quote", action, chain_id=chain_id, amount=amount)

    async def get_cross_chain_quote(
        self,
        src_chain: int,
        dst_chain: int,
        src_token: str,
        dst_token: str,
        amount: str,
        wallet_address: str,
    ) -> Dict[str, Any]:
        async def action() -> Dict[str, Any]:
            request = CrossChainQuoteRequest(
                src_chain=src_chain,
                dst_chain=dst_chain,
                src_token_address=src_token,
                dst_token_address=dst_token,
                amount=parse_amount(amount),
                wallet_address=wallet_address,
            )
            quote = await self._gateway.call(
                "get_cross_chain_quote",
                lambda client: client.fusion_plus_quoter.get_quote(request),
            )
            return {
                "src_chain": src_chain,
                "dst_chain": dst_chain,
                "route": f"{chain_name(src_chain)} -> {chain_name(dst_chain)}",
                "quote": quote,
            }

        return await self._guard("get_cross_chain_quote", action, src_chain=src_chain, dst_chain=dst_chain)

    def health_check(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"tool": "health_check", "success": True}
        if self._health is not None:
            result["readiness"] = self._health.check().to_dict()
        if self._liveness is not None:
            result["liveness"] = self._liveness.check().to_dict()
        result["metrics"] = self._gateway.metrics.snapshot().to_dict()
        if self._gateway.cache is not None:
            result["cache"] = self._gateway.cache.stats()
        return result


def register_tools(mcp: FastMCP, tools: OneInchTools) -> None:
    mcp.add_tool(
        tools.get_swap_quote,
        name="get_swap_quote",
        description="Swap quote with route analysis; amount is in the source token's base units (wei)",
    )
    mcp.add_tool(
        tools.get_quick_quote,
        name="get_quick_quote",
        description="Quick swap quote with the expected output and gas only",
    )
    mcp.add_tool(
        tools.get_swap_transaction,
        name="get_swap_transaction",
        description="Build swap transaction data for a wallet, ready to be signed",
    )
    mcp.add_tool(
        tools.check_allowance,
        name="check_allowance",
        description="Check the router allowance of a token for a wallet",
    )
    mcp.add_tool(
        tools.search_tokens,
        name="search_tokens",
        description="Search tokens by name or symbol, optionally on one chain",
    )
    mcp.add_tool(
        tools.compare_token_prices,
        name="compare_token_prices",
        description="Compare a token's price across chains by symbol and report the spread",
    )
    mcp.add_tool(
        tools.get_token_info,
        name="get_token_info",
        description="Token metadata for a contract address",
    )
    mcp.add_tool(
        tools.analyze_token,
        name="analyze_token",
        description="Token metadata, details and price change over an interval",
    )
    mcp.add_tool(
        tools.get_token_prices,
        name="get_token_prices",
        description="Spot prices for token addresses in a currency",
    )
    mcp.add_tool(
        tools.get_wallet_balances,
        name="get_wallet_balances",
        description="Token balances of a wallet on one chain",
    )
    mcp.add_tool(
        tools.get_portfolio_value,
        name="get_portfolio_value",
        description="Current portfolio value of a wallet",
    )
    mcp.add_tool(
        tools.calculate_portfolio_metrics,
        name="calculate_portfolio_metrics",
        description="Value change, drawdown and report for wallets over a timeframe (1day, 1week, 1month, 1year, 3years)",
    )
    mcp.add_tool(
        tools.compare_portfolios,
        name="compare_portfolios",
        description="Compare the current value of several groups of wallet addresses",
    )
    mcp.add_tool(
        tools.get_history,
        name="get_history",
        description="Recent transaction history events of a wallet",
    )
    mcp.add_tool(
        tools.get_limit_orders,
        name="get_limit_orders",
        description="Limit orders created by a maker address",
    )
    mcp.add_tool(
        tools.get_fusion_quote,
        name="get_fusion_quote",
        description="Gasless Fusion quote for a same-chain swap",
    )
    mcp.add_tool(
        tools.get_cross_chain_quote,
        name="get_cross_chain_quote",
        description="Fusion+ quote for a cross-chain swap",
    )
    mcp.add_tool(
        tools.health_check,
        name="health_check",
        description="Server readiness, liveness and request metrics",
    )


__all__ = ["HANDLED_ERRORS", "OneInchTools", "register_tools"]
