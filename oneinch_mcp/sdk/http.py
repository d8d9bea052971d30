"""Authenticated HTTP transport shared by every 1inch API service."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

import httpx

from ..config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from .errors import OneInchTransportError, classify


_LOGGER = logging.getLogger(__name__)


def _encode_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _encode_param(value: Any) -> Optional[Union[str, List[str]]]:
    if value is None:
        return None
    if isinstance(value, (list, tuple, set, frozenset)):
        # sequences become repeated query keys
        items = [_encode_scalar(item) for item in value if item is not None]
        return items or None
    return _encode_scalar(value)


def encode_params(params: Optional[Mapping[str, Any]]) -> Dict[str, Union[str, List[str]]]:
    """Drop unset values and render the rest the way the API expects them."""

    encoded: Dict[str, Union[str, List[str]]] = {}
    for key, value in (params or {}).items():
        rendered = _encode_param(value)
        if rendered is not None:
            encoded[key] = rendered
    return encoded


class HttpClient:
    """Thin wrapper around :class:`httpx.AsyncClient` with bearer authentication."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None
        self._closed = False

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def closed(self) -> bool:
        return self._closed or self._client.is_closed

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        url = f"{self._base_url}/{path.lstrip('/')}"
        query = encode_params(params)
        _LOGGER.debug("%s %s params=%s", method, url, query)
        try:
            response = await self._client.request(
                method,
                url,
                params=query or None,
                json=json,
                headers=self._headers,
            )
        except httpx.TransportError as exc:
            _LOGGER.warning("Network error calling %s %s: %s", method, url, exc)
            raise OneInchTransportError(f"Network error: {exc}") from exc

        if response.is_error:
            error = classify(response.content, response.status_code)
            _LOGGER.warning("%s %s failed: %s", method, url, error)
            raise error

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise classify(response.content, response.status_code) from exc

    async def get(self, path: str, *, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(
        self,
        path: str,
        *,
        json: Any = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        return await self.request("POST", path, params=params, json=json)


__all__ = ["HttpClient", "encode_params"]
