from __future__ import annotations

import logging
from typing import Any, Mapping, Optional
from urllib.parse import quote

from ..http import HttpClient


_LOGGER = logging.getLogger(__name__)


def _segment(value: Any) -> str:
    return quote(str(value), safe=",")


class ApiService:
    """Base class for a group of endpoints sharing a path prefix."""

    prefix: str = ""

    def __init__(self, http: HttpClient) -> None:
        self._http = http

    def _path(self, *parts: Any) -> str:
        segments = [self.prefix.strip("/")] if self.prefix else []
        segments.extend(_segment(part) for part in parts)
        return "/".join(segments)

    async def _get(
        self,
        operation: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        _LOGGER.info("%s.%s request", type(self).__name__, operation)
        result = await self._http.get(path, params=params)
        _LOGGER.debug("%s.%s succeeded", type(self).__name__, operation)
        return result

    async def _post(
        self,
        operation: str,
        path: str,
        body: Any = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        _LOGGER.info("%s.%s request", type(self).__name__, operation)
        result = await self._http.post(path, json=body, params=params)
        _LOGGER.debug("%s.%s succeeded", type(self).__name__, operation)
        return result
