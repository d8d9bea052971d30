"""Wallet balance and allowance endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .base import ApiService


_LOGGER = logging.getLogger(__name__)


def _int_map(payload: Any) -> Dict[str, Any]:
    """Decode ``{token: amount}``; amounts that are not integers keep their raw value."""

    if not isinstance(payload, Mapping):
        return {}
    result: Dict[str, Any] = {}
    for key, value in payload.items():
        try:
            result[str(key)] = int(value)
        except (TypeError, ValueError):
            _LOGGER.warning("Unparseable amount %r for token %s", value, key)
            result[str(key)] = value
    return result


class BalanceService(ApiService):
    prefix = "balance/v1.2"

    async def get_balances(self, chain_id: int, wallet_address: str) -> Dict[str, Any]:
        payload = await self._get("get_balances", self._path(chain_id, "balances", wallet_address))
        return _int_map(payload)

    async def get_custom_balances(
        self,
        chain_id: int,
        wallet_address: str,
        tokens: Sequence[str],
    ) -> Dict[str, Any]:
        payload = await self._post(
            "get_custom_balances",
            self._path(chain_id, "balances", wallet_address),
            {"tokens": list(tokens)},
        )
        return _int_map(payload)

    async def get_allowances(self, chain_id: int, spender: str, wallet_address: str) -> Dict[str, Any]:
        payload = await self._get("get_allowances", self._path(chain_id, "allowances", spender, wallet_address))
        return _int_map(payload)

    async def get_custom_allowances(
        self,
        chain_id: int,
        spender: str,
        wallet_address: str,
        tokens: Sequence[str],
    ) -> Dict[str, Any]:
        payload = await self._post(
            "get_custom_allowances",
            self._path(chain_id, "allowances", spender, wallet_address),
            {"tokens": list(tokens)},
        )
        return _int_map(payload)

    async def get_allowances_and_balances(
        self,
        chain_id: int,
        spender: str,
        wallet_address: str,
    ) -> Dict[str, Dict[str, Any]]:
        return await self._get(
            "get_allowances_and_balances",
            self._path(chain_id, "allowancesAndBalances", spender, wallet_address),
        )

    async def get_custom_allowances_and_balances(
        self,
        chain_id: int,
        spender: str,
        wallet_address: str,
        tokens: Sequence[str],
    ) -> Dict[str, Dict[str, Any]]:
        return await self._post(
            "get_custom_allowances_and_balances",
            self._path(chain_id, "allowancesAndBalances", spender, wallet_address),
            {"tokens": list(tokens)},
        )

    async def get_aggregated_balances_and_allowances(
        self,
        chain_id: int,
        spender: str,
        wallets: Sequence[str],
        *,
        filter_empty: Optional[bool] = None,
    ) -> List[Dict[str, Any]]:
        payload = await self._get(
            "get_aggregated_balances_and_allowances",
            self._path(chain_id, "aggregatedBalancesAndAllowances", spender),
            {"wallets": list(wallets), "filterEmpty": filter_empty},
        )
        return list(payload or [])

    async def get_balances_by_multiple_wallets(
        self,
        chain_id: int,
        wallets: Sequence[str],
        tokens: Sequence[str],
    ) -> Dict[str, Dict[str, Any]]:
        payload = await self._post(
            "get_balances_by_multiple_wallets",
            self._path(chain_id, "balances", "multiple", "walletsAndTokens"),
            {"wallets": list(wallets), "tokens": list(tokens)},
        )
        if not isinstance(payload, Mapping):
            return {}
        return {str(wallet): _int_map(balances) for wallet, balances in payload.items()}
