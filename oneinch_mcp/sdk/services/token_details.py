from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from .base import ApiService


class TokenDetailsService(ApiService):
    """Token details, charts and price change endpoints."""

    prefix = "token-details/v1.0"

    async def get_native_details(self, chain_id: int, *, provider: Optional[str] = None) -> Dict[str, Any]:
        return await self._get("get_native_details", self._path("details", chain_id), {"provider": provider})

    async def get_token_details(
        self,
        chain_id: int,
        contract_address: str,
        *,
        provider: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self._get(
            "get_token_details",
            self._path("details", chain_id, contract_address),
            {"provider": provider},
        )

    async def get_native_chart_by_range(
        self,
        chain_id: int,
        *,
        start: int,
        end: int,
        provider: Optional[str] = None,
        from_time: Optional[int] = None,
    ) -> Dict[str, Any]:
        params = {"from": start, "to": end, "provider": provider, "from_time": from_time}
        return await self._get("get_native_chart_by_range", self._path("charts", "range", chain_id), params)

    async def get_token_chart_by_range(
        self,
        chain_id: int,
        token_address: str,
        *,
        start: int,
        end: int,
        provider: Optional[str] = None,
        from_time: Optional[int] = None,
    ) -> Dict[str, Any]:
        params = {"from": start, "to": end, "provider": provider, "from_time": from_time}
        return await self._get(
            "get_token_chart_by_range",
            self._path("charts", "range", chain_id, token_address),
            params,
        )

    async def get_native_chart_by_interval(
        self,
        chain_id: int,
        interval: str,
        *,
        provider: Optional[str] = None,
        from_time: Optional[int] = None,
    ) -> Dict[str, Any]:
        params = {"interval": interval, "provider": provider, "from_time": from_time}
        return await self._get(
            "get_native_chart_by_interval",
            self._path("charts", "interval", chain_id),
            params,
        )

    async def get_token_chart_by_interval(
        self,
        chain_id: int,
        token_address: str,
        interval: str,
        *,
        provider: Optional[str] = None,
        from_time: Optional[int] = None,
    ) -> Dict[str, Any]:
        params = {"interval": interval, "provider": provider, "from_time": from_time}
        return await self._get(
            "get_token_chart_by_interval",
            self._path("charts", "interval", chain_id, token_address),
            params,
        )

    async def get_native_price_change(self, chain_id: int, interval: str) -> Dict[str, Any]:
        return await self._get(
            "get_native_price_change",
            self._path("prices", "change", chain_id),
            {"interval": interval},
        )

    async def get_token_price_change(self, chain_id: int, token_address: str, interval: str) -> Dict[str, Any]:
        return await self._get(
            "get_token_price_change",
            self._path("prices", "change", chain_id, token_address),
            {"interval": interval},
        )

    async def get_token_list_price_change(
        self,
        chain_id: int,
        token_addresses: Sequence[str],
        interval: str,
    ) -> List[Dict[str, Any]]:
        body = {"tokenAddresses": list(token_addresses), "interval": interval}
        payload = await self._post("get_token_list_price_change", self._path("prices", "change", chain_id), body)
        return list(payload or [])
