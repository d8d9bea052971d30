"""Per-resource 1inch API services."""

from .balance import BalanceService
from .base import ApiService
from .fusion import FusionOrdersService, FusionQuoteRequest, FusionQuoterService, FusionRelayerService
from .fusion_plus import (
    CrossChainQuoteRequest,
    FusionPlusOrdersService,
    FusionPlusQuoterService,
    FusionPlusRelayerService,
)
from .history import HistoryService
from .orderbook import OrderbookService, OrderFilter
from .portfolio import PortfolioService
from .price import PriceService
from .swap import SwapService
from .token import TokenService
from .token_details import TokenDetailsService

__all__ = [
    "ApiService",
    "BalanceService",
    "CrossChainQuoteRequest",
    "FusionOrdersService",
    "FusionPlusOrdersService",
    "FusionPlusQuoterService",
    "FusionPlusRelayerService",
    "FusionQuoteRequest",
    "FusionQuoterService",
    "FusionRelayerService",
    "HistoryService",
    "OrderFilter",
    "OrderbookService",
    "PortfolioService",
    "PriceService",
    "SwapService",
    "TokenDetailsService",
    "TokenService",
]
