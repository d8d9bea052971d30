"""Entry points for the 1inch SDK."""

from __future__ import annotations

import logging
from types import SimpleNamespace
from typing import Dict, Optional, Tuple

import httpx

from ..config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, SdkConfig, mask_api_key, resolve_api_key
from .adapters import BlockingService, EventLoopThread, FutureService
from .http import HttpClient
from .services import (
    ApiService,
    BalanceService,
    FusionOrdersService,
    FusionPlusOrdersService,
    FusionPlusQuoterService,
    FusionPlusRelayerService,
    FusionQuoterService,
    FusionRelayerService,
    HistoryService,
    OrderbookService,
    PortfolioService,
    PriceService,
    SwapService,
    TokenDetailsService,
    TokenService,
)


_LOGGER = logging.getLogger(__name__)

SERVICE_TYPES: Tuple[Tuple[str, type], ...] = (
    ("swap", SwapService),
    ("token", TokenService),
    ("token_details", TokenDetailsService),
    ("orderbook", OrderbookService),
    ("history", HistoryService),
    ("portfolio", PortfolioService),
    ("balance", BalanceService),
    ("price", PriceService),
    ("fusion_orders", FusionOrdersService),
    ("fusion_quoter", FusionQuoterService),
    ("fusion_relayer", FusionRelayerService),
    ("fusion_plus_orders", FusionPlusOrdersService),
    ("fusion_plus_quoter", FusionPlusQuoterService),
    ("fusion_plus_relayer", FusionPlusRelayerService),
)
SERVICE_NAMES: Tuple[str, ...] = tuple(name for name, _ in SERVICE_TYPES)


class OneInchClient:
    """Async facade wiring one authenticated transport into every API service.

    The API key is resolved eagerly: an explicit ``api_key`` wins, otherwise
    the first non-empty variable from :data:`~oneinch_mcp.config.API_KEY_ENV_NAMES`
    is used. A missing key raises :class:`~oneinch_mcp.config.ConfigError`.
    """

    swap: SwapService
    token: TokenService
    token_details: TokenDetailsService
    orderbook: OrderbookService
    history: HistoryService
    portfolio: PortfolioService
    balance: BalanceService
    price: PriceService
    fusion_orders: FusionOrdersService
    fusion_quoter: FusionQuoterService
    fusion_relayer: FusionRelayerService
    fusion_plus_orders: FusionPlusOrdersService
    fusion_plus_quoter: FusionPlusQuoterService
    fusion_plus_relayer: FusionPlusRelayerService

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        resolved_key = resolve_api_key(api_key)
        self._http = HttpClient(resolved_key, base_url=base_url, timeout=timeout, http_client=http_client)
        for name, service_type in SERVICE_TYPES:
            setattr(self, name, service_type(self._http))
        _LOGGER.info(
            "1inch client initialised (base_url=%s, api_key=%s)",
            self._http.base_url,
            mask_api_key(resolved_key),
        )

    @classmethod
    def from_config(
        cls,
        config: SdkConfig,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "OneInchClient":
        return cls(config.api_key, base_url=config.base_url, timeout=config.timeout, http_client=http_client)

    @property
    def services(self) -> Dict[str, ApiService]:
        return {name: getattr(self, name) for name in SERVICE_NAMES}

    @property
    def is_ready(self) -> bool:
        return not self._http.closed

    async def close(self) -> None:
        await self._http.close()

    async def __aenter__(self) -> "OneInchClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


class BlockingOneInchClient:
    """Synchronous facade; ``client.futures.<service>`` returns futures instead.

    All calls run on one private event loop owned by this object, so a single
    instance can be shared between threads.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        resolved_key = resolve_api_key(api_key)
        self._loop_thread = EventLoopThread()
        self._http_client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._client = OneInchClient(
            resolved_key,
            base_url=base_url,
            timeout=timeout,
            http_client=self._http_client,
        )
        futures: Dict[str, FutureService] = {}
        for name in SERVICE_NAMES:
            service = getattr(self._client, name)
            setattr(self, name, BlockingService(service, self._loop_thread))
            futures[name] = FutureService(service, self._loop_thread)
        self.futures = SimpleNamespace(**futures)

    @property
    def async_client(self) -> OneInchClient:
        return self._client

    @property
    def is_ready(self) -> bool:
        return not self._loop_thread.closed and self._client.is_ready

    def close(self) -> None:
        if self._loop_thread.closed:
            return
        try:
            self._loop_thread.run(self._close_async())
        finally:
            self._loop_thread.close()

    async def _close_async(self) -> None:
        await self._client.close()
        await self._http_client.aclose()

    def __enter__(self) -> "BlockingOneInchClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["BlockingOneInchClient", "OneInchClient", "SERVICE_NAMES"]
