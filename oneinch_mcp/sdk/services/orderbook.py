"""Limit order protocol (orderbook v4) endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .base import ApiService


@dataclass(slots=True)
class OrderFilter:
    page: Optional[int] = None
    limit: Optional[int] = None
    statuses: Optional[Sequence[int]] = None
    sort_by: Optional[str] = None
    taker_asset: Optional[str] = None
    maker_asset: Optional[str] = None

    def to_params(self) -> Dict[str, Any]:
        statuses = ",".join(str(item) for item in self.statuses) if self.statuses else None
        return {
            "page": self.page,
            "limit": self.limit,
            "statuses": statuses,
            "sortBy": self.sort_by,
            "takerAsset": self.taker_asset,
            "makerAsset": self.maker_asset,
        }


class OrderbookService(ApiService):
    prefix = "orderbook/v4.0"

    async def create_order(self, chain_id: int, order: Mapping[str, Any]) -> Dict[str, Any]:
        return await self._post("create_order", self._path(chain_id), dict(order))

    async def get_orders_by_maker(
        self,
        chain_id: int,
        address: str,
        filters: Optional[OrderFilter] = None,
    ) -> List[Dict[str, Any]]:
        params = (filters or OrderFilter()).to_params()
        payload = await self._get("get_orders_by_maker", self._path(chain_id, "address", address), params)
        return list(payload or [])

    async def get_order(self, chain_id: int, order_hash: str) -> Dict[str, Any]:
        return await self._get("get_order", self._path(chain_id, "order", order_hash))

    async def get_all_orders(
        self,
        chain_id: int,
        filters: Optional[OrderFilter] = None,
    ) -> List[Dict[str, Any]]:
        params = (filters or OrderFilter()).to_params()
        payload = await self._get("get_all_orders", self._path(chain_id, "all"), params)
        return list(payload or [])

    async def get_orders_count(
        self,
        chain_id: int,
        *,
        statuses: Optional[Sequence[int]] = None,
        taker_asset: Optional[str] = None,
        maker_asset: Optional[str] = None,
    ) -> int:
        params = OrderFilter(statuses=statuses, taker_asset=taker_asset, maker_asset=maker_asset).to_params()
        payload = await self._get("get_orders_count", self._path(chain_id, "count"), params)
        return int((payload or {}).get("count") or 0)

    async def get_events(self, chain_id: int, order_hash: str) -> Dict[str, Any]:
        return await self._get("get_events", self._path(chain_id, "events", order_hash))

    async def get_all_events(self, chain_id: int, *, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        payload = await self._get("get_all_events", self._path(chain_id, "events"), {"limit": limit})
        return list(payload or [])

    async def has_active_orders_with_permit(self, chain_id: int, wallet_address: str, token: str) -> bool:
        payload = await self._get(
            "has_active_orders_with_permit",
            self._path(chain_id, "has-active-orders-with-permit", wallet_address, token),
        )
        return bool((payload or {}).get("result"))

    async def get_unique_active_pairs(
        self,
        chain_id: int,
        *,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        return await self._get(
            "get_unique_active_pairs",
            self._path(chain_id, "unique-active-pairs"),
            {"page": page, "limit": limit},
        )
