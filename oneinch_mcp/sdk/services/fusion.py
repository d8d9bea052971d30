"""Fusion (intent based, gasless) same-chain order endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .base import ApiService


@dataclass(slots=True)
class FusionQuoteRequest:
    chain_id: int
    from_token_address: str
    to_token_address: str
    amount: int
    wallet_address: str
    enable_estimate: bool = False
    fee: Optional[int] = None
    show_dest_amount_minus_fee: Optional[bool] = None
    is_permit2: Optional[str] = None
    surplus: Optional[bool] = None
    permit: Optional[str] = None
    slippage: Optional[float] = None
    source: Optional[str] = None

    def to_params(self) -> Dict[str, Any]:
        return {
            "fromTokenAddress": self.from_token_address,
            "toTokenAddress": self.to_token_address,
            "amount": str(self.amount),
            "walletAddress": self.wallet_address,
            "enableEstimate": self.enable_estimate,
            "fee": self.fee,
            "showDestAmountMinusFee": self.show_dest_amount_minus_fee,
            "isPermit2": self.is_permit2,
            "surplus": self.surplus,
            "permit": self.permit,
            "slippage": self.slippage,
            "source": self.source,
        }


class FusionOrdersService(ApiService):
    prefix = "fusion/orders/v2.0"

    async def get_active_orders(
        self,
        chain_id: int,
        *,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        version: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = {"page": page, "limit": limit, "version": version}
        return await self._get("get_active_orders", self._path(chain_id, "order", "active"), params)

    async def get_settlement_contract(self, chain_id: int) -> Dict[str, Any]:
        return await self._get("get_settlement_contract", self._path(chain_id, "order", "settlement"))

    async def get_order_status(self, chain_id: int, order_hash: str) -> Dict[str, Any]:
        return await self._get("get_order_status", self._path(chain_id, "order", "status", order_hash))

    async def get_orders_status(self, chain_id: int, order_hashes: Sequence[str]) -> List[Dict[str, Any]]:
        payload = await self._post(
            "get_orders_status",
            self._path(chain_id, "order", "status"),
            {"orderHashes": list(order_hashes)},
        )
        return list(payload or [])

    async def get_orders_by_maker(
        self,
        chain_id: int,
        address: str,
        *,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        timestamp_from: Optional[int] = None,
        timestamp_to: Optional[int] = None,
        maker_token: Optional[str] = None,
        taker_token: Optional[str] = None,
        with_token: Optional[str] = None,
        version: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params = {
            "page": page,
            "limit": limit,
            "timestampFrom": timestamp_from,
            "timestampTo": timestamp_to,
            "makerToken": maker_token,
            "takerToken": taker_token,
            "withToken": with_token,
            "version": version,
        }
        payload = await self._get("get_orders_by_maker", self._path(chain_id, "order", "maker", address), params)
        return list(payload or [])


class FusionQuoterService(ApiService):
    prefix = "fusion/quoter/v2.0"

    async def get_quote(self, request: FusionQuoteRequest) -> Dict[str, Any]:
        return await self._get(
            "get_quote",
            self._path(request.chain_id, "quote", "receive"),
            request.to_params(),
        )

    async def get_quote_with_custom_preset(
        self,
        request: FusionQuoteRequest,
        preset: Mapping[str, Any],
    ) -> Dict[str, Any]:
        params = request.to_params()
        params.pop("slippage", None)
        return await self._post(
            "get_quote_with_custom_preset",
            self._path(request.chain_id, "quote", "receive"),
            dict(preset),
            params,
        )


class FusionRelayerService(ApiService):
    prefix = "fusion/relayer/v2.0"

    async def submit_order(self, chain_id: int, signed_order: Mapping[str, Any]) -> None:
        await self._post("submit_order", self._path(chain_id, "order", "submit"), dict(signed_order))

    async def submit_orders(self, chain_id: int, signed_orders: Sequence[Mapping[str, Any]]) -> None:
        await self._post(
            "submit_orders",
            self._path(chain_id, "order", "submit", "many"),
            [dict(order) for order in signed_orders],
        )
