"""Error types raised by the 1inch SDK and the classifier for failed responses.

A failed HTTP response is turned into exactly one exception. The body is
matched against ``ERROR_SCHEMAS`` in order and the first schema that decodes
wins:

1. ``quote``   -- ``error``, ``description`` and ``statusCode`` all present
2. ``swap``    -- ``error`` and ``statusCode`` present, description optional
3. ``generic`` -- a ``message`` string (or list of strings)

A payload that satisfies several schemas is classified by the earliest one.
When nothing decodes the status code and raw body are wrapped verbatim in
:class:`OneInchHttpError`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Type

import httpx


class OneInchError(RuntimeError):
    """Base class for every error surfaced by the SDK."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class OneInchHttpError(OneInchError):
    """Non-2xx response whose body matched none of the known error schemas."""

    def __init__(self, status_code: int, body: str, *, raw_body: bytes = b"") -> None:
        super().__init__(f"HTTP {status_code}: {body}", status_code=status_code, body=body)
        self.raw_body = raw_body


class OneInchTransportError(OneInchError):
    """The request never produced an HTTP response."""


class OneInchApiError(OneInchError):
    """Structured error returned by the 1inch API."""

    schema = "api"

    def __init__(
        self,
        *,
        error: str,
        description: Optional[str],
        status_code: int,
        request_id: Optional[str] = None,
        meta: Optional[Mapping[str, str]] = None,
        body: Optional[str] = None,
    ) -> None:
        message = (
            f"API Error [{status_code}]: {error} - {description or ''} "
            f"(Request ID: {request_id or 'n/a'})"
        )
        super().__init__(message, status_code=status_code, body=body)
        self.error = error
        self.description = description
        self.request_id = request_id
        self.meta: Dict[str, str] = dict(meta or {})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema": self.schema,
            "error": self.error,
            "description": self.description,
            "status_code": self.status_code,
            "request_id": self.request_id,
            "meta": dict(self.meta),
        }


class QuoteRequestError(OneInchApiError):
    schema = "quote"


class SwapRequestError(OneInchApiError):
    schema = "swap"


class GenericApiError(OneInchApiError):
    schema = "generic"


@dataclass(slots=True, frozen=True)
class ErrorSchema:
    name: str
    error_type: Type[OneInchApiError]
    decode: Callable[[Mapping[str, Any]], Optional[Dict[str, Any]]]


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _as_int(value: Any) -> Optional[int]:
    # bool is an int subclass; a boolean statusCode is not a status
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _decode_meta(value: Any) -> Optional[Dict[str, str]]:
    """Turn ``[{type, value}, ...]`` into a mapping; ``None`` on a bad shape."""

    if value is None:
        return {}
    if not isinstance(value, list):
        return None
    meta: Dict[str, str] = {}
    for item in value:
        if not isinstance(item, Mapping):
            return None
        key = _as_str(item.get("type"))
        if key is None:
            return None
        entry = item.get("value")
        meta[key] = "" if entry is None else str(entry)
    return meta


def _optional_str(payload: Mapping[str, Any], key: str) -> Tuple[bool, Optional[str]]:
    value = payload.get(key)
    if value is None:
        return True, None
    text = _as_str(value)
    return text is not None, text


def _decode_quote(payload: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    error = _as_str(payload.get("error"))
    description = _as_str(payload.get("description"))
    status = _as_int(payload.get("statusCode"))
    if error is None or description is None or status is None:
        return None
    ok, request_id = _optional_str(payload, "requestId")
    meta = _decode_meta(payload.get("meta"))
    if not ok or meta is None:
        return None
    return {
        "error": error,
        "description": description,
        "status_code": status,
        "request_id": request_id,
        "meta": meta,
    }


def _decode_swap(payload: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    error = _as_str(payload.get("error"))
    status = _as_int(payload.get("statusCode"))
    if error is None or status is None:
        return None
    ok_description, description = _optional_str(payload, "description")
    ok_request, request_id = _optional_str(payload, "requestId")
    meta = _decode_meta(payload.get("meta"))
    if not (ok_description and ok_request) or meta is None:
        return None
    return {
        "error": error,
        "description": description,
        "status_code": status,
        "request_id": request_id,
        "meta": meta,
    }


def _decode_generic(payload: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    message = payload.get("message")
    if isinstance(message, list):
        if not message or not all(isinstance(item, str) for item in message):
            return None
        description = "; ".join(message)
    else:
        description = _as_str(message)
        if description is None:
            return None
    status_raw = payload.get("statusCode")
    status = _as_int(status_raw)
    if status_raw is not None and status is None:
        return None
    ok_error, error = _optional_str(payload, "error")
    if not ok_error:
        return None
    return {
        "error": error or "Error",
        "description": description,
        "status_code": status,
        "request_id": _as_str(payload.get("requestId")),
        "meta": {},
    }


ERROR_SCHEMAS: Tuple[ErrorSchema, ...] = (
    ErrorSchema("quote", QuoteRequestError, _decode_quote),
    ErrorSchema("swap", SwapRequestError, _decode_swap),
    ErrorSchema("generic", GenericApiError, _decode_generic),
)


def _body_text(body: bytes | str) -> str:
    if isinstance(body, str):
        return body
    return body.decode("utf-8", errors="replace")


def classify(
    body: bytes | str,
    status_code: int,
    *,
    schemas: Tuple[ErrorSchema, ...] = ERROR_SCHEMAS,
) -> OneInchError:
    """Map a failed response body to a single typed error."""

    text = _body_text(body)
    raw = body if isinstance(body, bytes) else body.encode("utf-8")
    try:
        payload = json.loads(text) if text.strip() else None
    except ValueError:
        payload = None

    if isinstance(payload, Mapping):
        for schema in schemas:
            fields = schema.decode(payload)
            if fields is None:
                continue
            if fields["status_code"] is None:
                fields["status_code"] = status_code
            return schema.error_type(body=text, **fields)

    return OneInchHttpError(status_code, text, raw_body=raw)


def wrap_exception(exc: BaseException) -> OneInchError:
    """Translate a failure raised while talking to the API into a SDK error."""

    if isinstance(exc, OneInchError):
        return exc
    if isinstance(exc, httpx.HTTPStatusError):
        return classify(exc.response.content, exc.response.status_code)
    if isinstance(exc, httpx.TransportError):
        return OneInchTransportError(f"Network error: {exc}")
    return OneInchError(f"Unexpected error: {exc}")


__all__ = [
    "ERROR_SCHEMAS",
    "ErrorSchema",
    "GenericApiError",
    "OneInchApiError",
    "OneInchError",
    "OneInchHttpError",
    "OneInchTransportError",
    "QuoteRequestError",
    "SwapRequestError",
    "classify",
    "wrap_exception",
]
