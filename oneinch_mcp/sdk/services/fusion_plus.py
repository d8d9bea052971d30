"""Fusion+ cross-chain swap endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence

from .base import ApiService


@dataclass(slots=True)
class CrossChainQuoteRequest:
    src_chain: int
    dst_chain: int
    src_token_address: str
    dst_token_address: str
    amount: int
    wallet_address: str
    enable_estimate: bool = False
    fee: Optional[int] = None
    is_permit2: Optional[str] = None
    permit: Optional[str] = None

    def __post_init__(self) -> None:
        if self.src_chain == self.dst_chain:
            raise ValueError("Cross-chain quotes need different source and destination chains")

    def to_params(self) -> Dict[str, Any]:
        return {
            "srcChain": self.src_chain,
            "dstChain": self.dst_chain,
            "srcTokenAddress": self.src_token_address,
            "dstTokenAddress": self.dst_token_address,
            "amount": str(self.amount),
            "walletAddress": self.wallet_address,
            "enableEstimate": self.enable_estimate,
            "fee": self.fee,
            "isPermit2": self.is_permit2,
            "permit": self.permit,
        }


class FusionPlusOrdersService(ApiService):
    prefix = "fusion-plus/orders/v1.0"

    async def get_active_orders(
        self,
        *,
        src_chain: Optional[int] = None,
        dst_chain: Optional[int] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        params = {"srcChain": src_chain, "dstChain": dst_chain, "page": page, "limit": limit}
        return await self._get("get_active_orders", self._path("order", "active"), params)

    async def get_escrow_factory(self, chain_id: int) -> Dict[str, Any]:
        return await self._get("get_escrow_factory", self._path("order", "escrow"), {"chainId": chain_id})

    async def get_orders_by_maker(
        self,
        address: str,
        *,
        src_chain: Optional[int] = None,
        dst_chain: Optional[int] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        params = {"srcChain": src_chain, "dstChain": dst_chain, "page": page, "limit": limit}
        return await self._get("get_orders_by_maker", self._path("order", "maker", address), params)

    async def get_secrets(self, order_hash: str) -> Dict[str, Any]:
        return await self._get("get_secrets", self._path("order", "secrets", order_hash))

    async def get_ready_to_accept_fills(self, order_hash: str) -> Dict[str, Any]:
        return await self._get(
            "get_ready_to_accept_fills",
            self._path("order", "ready-to-accept-secret-fills", order_hash),
        )

    async def get_order_status(self, order_hash: str) -> Dict[str, Any]:
        return await self._get("get_order_status", self._path("order", "status", order_hash))


class FusionPlusQuoterService(ApiService):
    prefix = "fusion-plus/quoter/v1.0"

    async def get_quote(self, request: CrossChainQuoteRequest) -> Dict[str, Any]:
        return await self._get("get_quote", self._path("quote", "receive"), request.to_params())

    async def get_quote_with_custom_preset(
        self,
        request: CrossChainQuoteRequest,
        preset: Mapping[str, Any],
    ) -> Dict[str, Any]:
        return await self._post(
            "get_quote_with_custom_preset",
            self._path("quote", "receive"),
            dict(preset),
            request.to_params(),
        )

    async def build_order(
        self,
        request: CrossChainQuoteRequest,
        quote: Mapping[str, Any],
        secrets_hash_list: Sequence[str],
        *,
        preset: Optional[str] = None,
        source: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = request.to_params()
        params.pop("enableEstimate", None)
        params.update({"preset": preset, "source": source})
        body = {"quote": dict(quote), "secretsHashList": list(secrets_hash_list)}
        return await self._post("build_order", self._path("quote", "build"), body, params)


class FusionPlusRelayerService(ApiService):
    prefix = "fusion-plus/relayer/v1.0"

    async def submit_order(self, signed_order: Mapping[str, Any]) -> None:
        await self._post("submit_order", self._path("submit"), dict(signed_order))

    async def submit_orders(self, signed_orders: Sequence[Mapping[str, Any]]) -> None:
        await self._post("submit_orders", self._path("submit", "many"), [dict(order) for order in signed_orders])

    async def submit_secret(self, order_hash: str, secret: str) -> None:
        await self._post("submit_secret", self._path("submit", "secret"), {"orderHash": order_hash, "secret": secret})

