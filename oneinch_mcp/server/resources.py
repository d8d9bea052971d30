"""Read-only MCP resources exposing 1inch data and server health as JSON documents."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional, Tuple

from mcp.server.fastmcp import FastMCP

from ..infra.health import HealthAggregator, LivenessProbe
from ..sdk.models import QuoteRequest, QuoteResponse
from .formatting import (
    amount_text,
    chain_name,
    error_payload,
    exchange_rate,
    format_units,
    parse_amount,
    parse_chain_id,
    protocol_names,
)
from .gateway import OneInchGateway
from .tools import HANDLED_ERRORS

_TOKEN_PREVIEW = 100


def _dump(payload: Any) -> str:
    return json.dumps(payload, indent=2, default=str)


class OneInchResources:
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

    async def tokens(self, chain_id: str) -> Dict[str, Any]:
        try:
            chain = parse_chain_id(chain_id)
            tokens = await self._gateway.call(
                "tokens_resource",
                lambda client: client.token.get_tokens(chain),
                cache_key=str(chain),
                ttl=self._gateway.cache_config.token_ttl,
            )
        except HANDLED_ERRORS as exc:
            return error_payload("tokens_resource", exc, chain_id=chain_id)
        listed = list(tokens.values())
        return {
            "chain_id": chain,
            "chain_name": chain_name(chain),
            "token_count": len(listed),
            "tokens": [token.to_dict() for token in listed[:_TOKEN_PREVIEW]],
            "truncated": len(listed) > _TOKEN_PREVIEW,
        }

    async def multi_chain_tokens(self) -> Dict[str, Any]:
        try:
            tokens = await self._gateway.call(
                "multi_chain_tokens_resource",
                lambda client: client.token.get_multi_chain_tokens(),
                cache_key="all",
                ttl=self._gateway.cache_config.token_ttl,
            )
        except HANDLED_ERRORS as exc:
            return error_payload("multi_chain_tokens_resource", exc)
        return {
            "token_count": len(tokens),
            "tokens": [token.to_dict() for token in tokens[:_TOKEN_PREVIEW]],
            "truncated": len(tokens) > _TOKEN_PREVIEW,
        }

    async def prices(self, chain_id: str) -> Dict[str, Any]:
        try:
            chain = parse_chain_id(chain_id)
            prices = await self._gateway.call(
                "prices_resource",
                lambda client: client.price.get_whitelist_prices(chain, currency="USD"),
                cache_key=str(chain),
                ttl=self._gateway.cache_config.price_ttl,
            )
        except HANDLED_ERRORS as exc:
            return error_payload("prices_resource", exc, chain_id=chain_id)
        return {"chain_id": chain, "chain_name": chain_name(chain), "currency": "USD", "prices": prices}

    async def token_price(self, chain_id: str, token_address: str, currency: str = "USD") -> Dict[str, Any]:
        try:
            chain = parse_chain_id(chain_id)
            prices = await self._gateway.call(
                "token_price_resource",
                lambda client: client.price.get_prices(chain, [token_address], currency=currency),
                cache_key=f"{chain}:{currency}:{token_address.lower()}",
                ttl=self._gateway.cache_config.price_ttl,
            )
        except HANDLED_ERRORS as exc:
            return error_payload("token_price_resource", exc, chain_id=chain_id, token_address=token_address)
        price = prices.get(token_address, prices.get(token_address.lower()))
        return {
            "chain_id": chain,
            "chain_name": chain_name(chain),
            "token_address": token_address,
            "currency": currency,
            "price": price,
            "found": price is not None,
        }

    async def currencies(self, chain_id: str) -> Dict[str, Any]:
        try:
            chain = parse_chain_id(chain_id)
            codes = await self._gateway.call(
                "currencies_resource",
                lambda client: client.price.get_supported_currencies(chain),
                cache_key=str(chain),
                ttl=self._gateway.cache_config.token_ttl,
            )
        except HANDLED_ERRORS as exc:
            return error_payload("currencies_resource", exc, chain_id=chain_id)
        return {"chain_id": chain, "chain_name": chain_name(chain), "count": len(codes), "currencies": codes}

    async def spender(self, chain_id: str) -> Dict[str, Any]:
        try:
            chain = parse_chain_id(chain_id)
            address = await self._gateway.call(
                "spender_resource",
                lambda client: client.swap.get_spender(chain),
                cache_key=str(chain),
                ttl=self._gateway.cache_config.token_ttl,
            )
        except HANDLED_ERRORS as exc:
            return error_payload("spender_resource", exc, chain_id=chain_id)
        return {"chain_id": chain, "chain_name": chain_name(chain), "spender": address}

    async def _quote(
        self,
        resource: str,
        chain_id: str,
        src: str,
        dst: str,
        amount: str,
        fee: Optional[str] = None,
    ) -> Tuple[QuoteRequest, QuoteResponse]:
        chain = parse_chain_id(chain_id)
        fee_percent: Optional[float] = None
        if fee is not None:
            try:
                fee_percent = float(fee)
            except ValueError as exc:
                raise ValueError(f"Fee must be a number (got '{fee}')") from exc
            if not 0.0 <= fee_percent <= 3.0:
                raise ValueError("Fee must be between 0 and 3 percent")
        request = QuoteRequest(
            chain_id=chain,
            src=src,
            dst=dst,
            amount=parse_amount(amount),
            fee=fee_percent,
            include_tokens_info=True,
            include_protocols=True,
            include_gas=True,
        )
        return request, await self._gateway.call(resource, lambda client: client.swap.get_quote(request))

    async def swap_quote(
        self,
        chain_id: str,
        src: str,
        dst: str,
        amount: str,
        fee: Optional[str] = None,
    ) -> Dict[str, Any]:
        resource = "swap_quote_resource" if fee is None else "swap_quote_fee_resource"
        try:
            request, quote = await self._quote(resource, chain_id, src, dst, amount, fee)
        except HANDLED_ERRORS as exc:
            return error_payload(resource, exc, chain_id=chain_id, src=src, dst=dst, amount=amount, fee=fee)
        payload = {
            "chain_id": request.chain_id,
            "chain_name": chain_name(request.chain_id),
            "src_token": src,
            "dst_token": dst,
            "input_amount": str(request.amount),
            "quote": quote.to_dict(),
        }
        if fee is not None:
            payload["fee_percent"] = request.fee
        return payload

    async def route_analysis(self, chain_id: str, src: str, dst: str, amount: str) -> Dict[str, Any]:
        try:
            request, quote = await self._quote("route_analysis_resource", chain_id, src, dst, amount)
        except HANDLED_ERRORS as exc:
            return error_payload("route_analysis_resource", exc, chain_id=chain_id, src=src, dst=dst, amount=amount)
        protocols = protocol_names(quote.protocols)
        analysis: Dict[str, Any] = {
            "expected_output": str(quote.dst_amount),
            "estimated_gas": quote.gas,
            "route_count": len(quote.protocols),
            "protocols": protocols,
            "split_route": len(quote.protocols) > 1,
        }
        if quote.src_token and quote.dst_token:
            analysis["input_formatted"] = f"{format_units(request.amount, quote.src_token.decimals)} {quote.src_token.symbol}"
            analysis["output_formatted"] = f"{format_units(quote.dst_amount, quote.dst_token.decimals)} {quote.dst_token.symbol}"
            analysis["rate"] = exchange_rate(
                request.amount,
                quote.src_token.decimals,
                quote.dst_amount,
                quote.dst_token.decimals,
            )
        return {
            "chain_id": request.chain_id,
            "chain_name": chain_name(request.chain_id),
            "src_token": src,
            "dst_token": dst,
            "input_amount": str(request.amount),
            "analysis": analysis,
        }

    async def portfolio(self, address: str) -> Dict[str, Any]:
        try:
            value = await self._gateway.call(
                "portfolio_resource",
                lambda client: client.portfolio.get_current_value(address),
                cache_key=address.lower(),
                ttl=self._gateway.cache_config.portfolio_ttl,
            )
        except HANDLED_ERRORS as exc:
            return error_payload("portfolio_resource", exc, address=address)
        return {"address": address, "value": value}

    async def balances(self, chain_id: str, address: str) -> Dict[str, Any]:
        try:
            chain = parse_chain_id(chain_id)
            balances = await self._gateway.call(
                "balances_resource",
                lambda client: client.balance.get_balances(chain, address),
            )
        except HANDLED_ERRORS as exc:
            return error_payload("balances_resource", exc, chain_id=chain_id, address=address)
        non_zero = {token: amount_text(amount) for token, amount in balances.items() if amount != 0}
        return {"chain_id": chain, "address": address, "token_count": len(non_zero), "balances": non_zero}

    async def history(self, address: str) -> Dict[str, Any]:
        try:
            events = await self._gateway.call(
                "history_resource",
                lambda client: client.history.get_history_events(address, limit=50),
            )
        except HANDLED_ERRORS as exc:
            return error_payload("history_resource", exc, address=address)
        return {"address": address, "count": len(events), "events": events}

    def readiness(self) -> Dict[str, Any]:
        if self._health is None:
            return {"status": "unknown"}
        return self._health.check().to_dict()

    def liveness(self) -> Dict[str, Any]:
        if self._liveness is None:
            return {"status": "unknown"}
        return self._liveness.check().to_dict()


def register_resources(mcp: FastMCP, resources: OneInchResources) -> None:
    @mcp.resource("oneinch://tokens/multi-chain", name="multi_chain_tokens", mime_type="application/json")
    async def multi_chain_tokens() -> str:
        return _dump(await resources.multi_chain_tokens())

    @mcp.resource("oneinch://tokens/{chain_id}", name="chain_tokens", mime_type="application/json")
    async def chain_tokens(chain_id: str) -> str:
        return _dump(await resources.tokens(chain_id))

    @mcp.resource("oneinch://prices/{chain_id}", name="chain_prices", mime_type="application/json")
    async def chain_prices(chain_id: str) -> str:
        return _dump(await resources.prices(chain_id))

    @mcp.resource("oneinch://prices/{chain_id}/{token_address}", name="token_price", mime_type="application/json")
    async def token_price(chain_id: str, token_address: str) -> str:
        return _dump(await resources.token_price(chain_id, token_address))

    @mcp.resource("oneinch://currencies/{chain_id}", name="supported_currencies", mime_type="application/json")
    async def supported_currencies(chain_id: str) -> str:
        return _dump(await resources.currencies(chain_id))

    @mcp.resource("oneinch://swap-routes/{chain_id}/spender", name="swap_spender", mime_type="application/json")
    async def swap_spender(chain_id: str) -> str:
        return _dump(await resources.spender(chain_id))

    @mcp.resource(
        "oneinch://swap-routes/{chain_id}/{src}/{dst}/{amount}",
        name="swap_quote",
        mime_type="application/json",
    )
    async def swap_quote(chain_id: str, src: str, dst: str, amount: str) -> str:
        return _dump(await resources.swap_quote(chain_id, src, dst, amount))

    @mcp.resource(
        "oneinch://swap-routes/{chain_id}/{src}/{dst}/{amount}/fee/{fee}",
        name="swap_quote_with_fee",
        mime_type="application/json",
    )
    async def swap_quote_with_fee(chain_id: str, src: str, dst: str, amount: str, fee: str) -> str:
        return _dump(await resources.swap_quote(chain_id, src, dst, amount, fee))

    @mcp.resource(
        "oneinch://swap-routes/{chain_id}/{src}/{dst}/{amount}/analysis",
        name="swap_route_analysis",
        mime_type="application/json",
    )
    async def swap_route_analysis(chain_id: str, src: str, dst: str, amount: str) -> str:
        return _dump(await resources.route_analysis(chain_id, src, dst, amount))

    @mcp.resource("oneinch://portfolio/{address}", name="portfolio", mime_type="application/json")
    async def portfolio(address: str) -> str:
        return _dump(await resources.portfolio(address))

    @mcp.resource("oneinch://balances/{chain_id}/{address}", name="wallet_balances", mime_type="application/json")
    async def wallet_balances(chain_id: str, address: str) -> str:
        return _dump(await resources.balances(chain_id, address))

    @mcp.resource("oneinch://history/{address}", name="wallet_history", mime_type="application/json")
    async def wallet_history(address: str) -> str:
        return _dump(await resources.history(address))

    @mcp.resource("oneinch://health/readiness", name="readiness", mime_type="application/json")
    def readiness() -> str:
        return _dump(resources.readiness())

    @mcp.resource("oneinch://health/liveness", name="liveness", mime_type="application/json")
    def liveness() -> str:
        return _dump(resources.liveness())


__all__ = ["OneInchResources", "register_resources"]
