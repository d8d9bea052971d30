"""Typed async client for the 1inch developer API."""

from .adapters import BlockingService, EventLoopThread, FutureService
from .client import SERVICE_NAMES, BlockingOneInchClient, OneInchClient
from .errors import (
    ERROR_SCHEMAS,
    GenericApiError,
    OneInchApiError,
    OneInchError,
    OneInchHttpError,
    OneInchTransportError,
    QuoteRequestError,
    SwapRequestError,
    classify,
)
from .http import HttpClient
from .models import (
    ApproveCallData,
    QuoteRequest,
    QuoteResponse,
    SwapRequest,
    SwapResponse,
    TokenInfo,
    TokenSearchRequest,
    TransactionData,
)

__all__ = [
    "ApproveCallData",
    "BlockingOneInchClient",
    "BlockingService",
    "ERROR_SCHEMAS",
    "EventLoopThread",
    "FutureService",
    "GenericApiError",
    "HttpClient",
    "OneInchApiError",
    "OneInchClient",
    "OneInchError",
    "OneInchHttpError",
    "OneInchTransportError",
    "QuoteRequest",
    "QuoteRequestError",
    "QuoteResponse",
    "SERVICE_NAMES",
    "SwapRequest",
    "SwapRequestError",
    "SwapResponse",
    "TokenInfo",
    "TokenSearchRequest",
    "TransactionData",
    "classify",
]
