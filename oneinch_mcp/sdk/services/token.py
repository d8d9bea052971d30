"""Token metadata endpoints."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from ..models import TokenInfo, TokenSearchRequest, parse_token_list, parse_token_map
from .base import ApiService


class TokenService(ApiService):
    prefix = "token/v1.3"

    async def get_multi_chain_tokens(
        self,
        *,
        provider: Optional[str] = None,
        country: Optional[str] = None,
    ) -> List[TokenInfo]:
        payload = await self._get(
            "get_multi_chain_tokens",
            self._path("multi-chain"),
            {"provider": provider, "country": country},
        )
        return parse_token_list(payload)

    async def get_multi_chain_token_list(
        self,
        *,
        provider: Optional[str] = None,
        country: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self._get(
            "get_multi_chain_token_list",
            self._path("multi-chain", "token-list"),
            {"provider": provider, "country": country},
        )

    async def get_tokens(
        self,
        chain_id: int,
        *,
        provider: Optional[str] = None,
        country: Optional[str] = None,
    ) -> Dict[str, TokenInfo]:
        payload = await self._get(
            "get_tokens",
            self._path(chain_id),
            {"provider": provider, "country": country},
        )
        return parse_token_map(payload)

    async def get_token_list(
        self,
        chain_id: int,
        *,
        provider: Optional[str] = None,
        country: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self._get(
            "get_token_list",
            self._path(chain_id, "token-list"),
            {"provider": provider, "country": country},
        )

    async def search_multi_chain(self, request: TokenSearchRequest) -> List[TokenInfo]:
        payload = await self._get("search_multi_chain", self._path("search"), request.to_params())
        return parse_token_list(payload)

    async def search(self, request: TokenSearchRequest) -> List[TokenInfo]:
        if request.chain_id is None:
            return await self.search_multi_chain(request)
        payload = await self._get("search", self._path(request.chain_id, "search"), request.to_params())
        return parse_token_list(payload)

    async def get_custom_tokens(self, chain_id: int, addresses: Sequence[str]) -> Dict[str, TokenInfo]:
        payload = await self._get(
            "get_custom_tokens",
            self._path(chain_id, "custom"),
            {"addresses": list(addresses)},
        )
        return parse_token_map(payload)

    async def get_custom_token(self, chain_id: int, address: str) -> TokenInfo:
        payload = await self._get("get_custom_token", self._path(chain_id, "custom", address))
        return TokenInfo.from_dict(payload or {})
