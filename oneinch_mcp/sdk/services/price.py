from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from .base import ApiService


def _price_map(payload: Any) -> Dict[str, str]:
    # prices are wei-denominated integers unless a fiat currency is requested
    if not isinstance(payload, Mapping):
        return {}
    return {str(address): str(price) for address, price in payload.items()}


class PriceService(ApiService):
    """Spot price endpoints."""

    prefix = "price/v1.1"

    async def get_whitelist_prices(self, chain_id: int, *, currency: Optional[str] = None) -> Dict[str, str]:
        payload = await self._get("get_whitelist_prices", self._path(chain_id), {"currency": currency})
        return _price_map(payload)

    async def get_prices(
        self,
        chain_id: int,
        addresses: Sequence[str],
        *,
        currency: Optional[str] = None,
    ) -> Dict[str, str]:
        if not addresses:
            raise ValueError("At least one token address is required")
        joined = ",".join(addresses)
        payload = await self._get("get_prices", self._path(chain_id, joined), {"currency": currency})
        return _price_map(payload)

    async def get_prices_post(
        self,
        chain_id: int,
        addresses: Sequence[str],
        *,
        currency: Optional[str] = None,
    ) -> Dict[str, str]:
        body: Dict[str, Any] = {"tokens": list(addresses)}
        if currency:
            body["currency"] = currency
        payload = await self._post("get_prices_post", self._path(chain_id), body)
        return _price_map(payload)

    async def get_supported_currencies(self, chain_id: int) -> List[str]:
        payload = await self._get("get_supported_currencies", self._path(chain_id, "currencies"))
        if isinstance(payload, Mapping):
            return [str(item) for item in payload.get("codes") or []]
        return [str(item) for item in payload or []]
