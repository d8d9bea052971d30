"""Classic swap (aggregation protocol) endpoints."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..models import (
    ApproveCallData,
    QuoteRequest,
    QuoteResponse,
    SwapRequest,
    SwapResponse,
    TokenInfo,
    parse_token_map,
)
from .base import ApiService


class SwapService(ApiService):
    prefix = "swap/v6.1"

    async def get_quote(self, request: QuoteRequest) -> QuoteResponse:
        payload = await self._get("get_quote", self._path(request.chain_id, "quote"), request.to_params())
        return QuoteResponse.from_dict(payload or {})

    async def get_swap(self, request: SwapRequest) -> SwapResponse:
        payload = await self._get("get_swap", self._path(request.chain_id, "swap"), request.to_params())
        return SwapResponse.from_dict(payload or {})

    async def get_spender(self, chain_id: int) -> str:
        payload = await self._get("get_spender", self._path(chain_id, "approve", "spender"))
        return str((payload or {}).get("address") or "")

    async def get_approve_transaction(
        self,
        chain_id: int,
        token_address: str,
        amount: Optional[int] = None,
    ) -> ApproveCallData:
        params = {
            "tokenAddress": token_address,
            "amount": None if amount is None else str(amount),
        }
        payload = await self._get(
            "get_approve_transaction",
            self._path(chain_id, "approve", "transaction"),
            params,
        )
        return ApproveCallData.from_dict(payload or {})

    async def get_allowance(self, chain_id: int, token_address: str, wallet_address: str) -> int:
        params = {"tokenAddress": token_address, "walletAddress": wallet_address}
        payload = await self._get("get_allowance", self._path(chain_id, "approve", "allowance"), params)
        return int((payload or {}).get("allowance") or 0)

    async def get_liquidity_sources(self, chain_id: int) -> List[Dict[str, Any]]:
        payload = await self._get("get_liquidity_sources", self._path(chain_id, "liquidity-sources"))
        return list((payload or {}).get("protocols") or [])

    async def get_tokens(self, chain_id: int) -> Dict[str, TokenInfo]:
        payload = await self._get("get_tokens", self._path(chain_id, "tokens"))
        return parse_token_map(payload)
