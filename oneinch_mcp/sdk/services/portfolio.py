"""Portfolio v5 endpoints.

Every call accepts one or more wallet addresses and an optional chain id;
responses are returned as decoded JSON envelopes (``{"result": ...}``).
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from .base import ApiService


def _addresses(addresses: Sequence[str] | str) -> list[str]:
    if isinstance(addresses, str):
        return [addresses]
    return list(addresses)


class PortfolioService(ApiService):
    prefix = "portfolio/v5.0"

    async def get_service_status(self) -> Dict[str, Any]:
        return await self._get("get_service_status", self._path("general", "status"))

    async def check_addresses(
        self,
        addresses: Sequence[str] | str,
        *,
        chain_id: Optional[int] = None,
        use_cache: Optional[bool] = None,
    ) -> Dict[str, Any]:
        params = {"addresses": _addresses(addresses), "chain_id": chain_id, "use_cache": use_cache}
        return await self._get("check_addresses", self._path("general", "address_check"), params)

    async def get_supported_chains(self) -> Dict[str, Any]:
        return await self._get("get_supported_chains", self._path("general", "supported_chains"))

    async def get_supported_protocols(self) -> Dict[str, Any]:
        return await self._get("get_supported_protocols", self._path("general", "supported_protocols"))

    async def get_current_value(
        self,
        addresses: Sequence[str] | str,
        *,
        chain_id: Optional[int] = None,
        use_cache: Optional[bool] = None,
    ) -> Dict[str, Any]:
        params = {"addresses": _addresses(addresses), "chain_id": chain_id, "use_cache": use_cache}
        return await self._get("get_current_value", self._path("general", "current_value"), params)

    async def get_general_chart(
        self,
        addresses: Sequence[str] | str,
        *,
        chain_id: Optional[int] = None,
        timerange: Optional[str] = None,
        use_cache: Optional[bool] = None,
    ) -> Dict[str, Any]:
        params = {
            "addresses": _addresses(addresses),
            "chain_id": chain_id,
            "timerange": timerange,
            "use_cache": use_cache,
        }
        return await self._get("get_general_chart", self._path("general", "chart"), params)

    async def get_general_report(
        self,
        addresses: Sequence[str] | str,
        *,
        chain_id: Optional[int] = None,
        timerange: Optional[str] = None,
        closed: Optional[bool] = None,
        closed_threshold: Optional[float] = None,
    ) -> Dict[str, Any]:
        params = {
            "addresses": _addresses(addresses),
            "chain_id": chain_id,
            "timerange": timerange,
            "closed": closed,
            "closed_threshold": closed_threshold,
        }
        return await self._get("get_general_report", self._path("general", "report"), params)

    async def get_protocols_snapshot(
        self,
        addresses: Sequence[str] | str,
        *,
        chain_id: Optional[int] = None,
        timestamp: Optional[int] = None,
        use_cache: Optional[bool] = None,
    ) -> Dict[str, Any]:
        params = {
            "addresses": _addresses(addresses),
            "chain_id": chain_id,
            "timestamp": timestamp,
            "use_cache": use_cache,
        }
        return await self._get("get_protocols_snapshot", self._path("protocols", "snapshot"), params)

    async def get_protocols_metrics(
        self,
        addresses: Sequence[str] | str,
        *,
        chain_id: Optional[int] = None,
        protocol_group_id: Optional[str] = None,
        contract_address: Optional[str] = None,
        token_id: Optional[int] = None,
        use_cache: Optional[bool] = None,
    ) -> Dict[str, Any]:
        params = {
            "addresses": _addresses(addresses),
            "chain_id": chain_id,
            "protocol_group_id": protocol_group_id,
            "contract_address": contract_address,
            "token_id": token_id,
            "use_cache": use_cache,
        }
        return await self._get("get_protocols_metrics", self._path("protocols", "metrics"), params)

    async def get_tokens_snapshot(
        self,
        addresses: Sequence[str] | str,
        *,
        chain_id: Optional[int] = None,
        timestamp: Optional[int] = None,
        use_cache: Optional[bool] = None,
    ) -> Dict[str, Any]:
        params = {
            "addresses": _addresses(addresses),
            "chain_id": chain_id,
            "timestamp": timestamp,
            "use_cache": use_cache,
        }
        return await self._get("get_tokens_snapshot", self._path("tokens", "snapshot"), params)

    async def get_tokens_metrics(
        self,
        addresses: Sequence[str] | str,
        *,
        chain_id: Optional[int] = None,
        timerange: Optional[str] = None,
        use_cache: Optional[bool] = None,
    ) -> Dict[str, Any]:
        params = {
            "addresses": _addresses(addresses),
            "chain_id": chain_id,
            "timerange": timerange,
            "use_cache": use_cache,
        }
        return await self._get("get_tokens_metrics", self._path("tokens", "metrics"), params)
