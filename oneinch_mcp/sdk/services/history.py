from __future__ import annotations

from typing import Any, Dict, List, Optional

from .base import ApiService


class HistoryService(ApiService):
    prefix = "history/v2.0"

    async def get_history_events(
        self,
        address: str,
        *,
        limit: Optional[int] = None,
        token_address: Optional[str] = None,
        chain_id: Optional[int] = None,
        from_timestamp_ms: Optional[int] = None,
        to_timestamp_ms: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        params = {
            "limit": limit,
            "tokenAddress": token_address,
            "chainId": chain_id,
            "fromTimestampMs": from_timestamp_ms,
            "toTimestampMs": to_timestamp_ms,
        }
        payload = await self._get("get_history_events", self._path("history", address, "events"), params)
        if isinstance(payload, dict):
            return list(payload.get("items") or [])
        return list(payload or [])
