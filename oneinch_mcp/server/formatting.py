"""Helpers for turning SDK results and failures into tool payloads."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..infra.ratelimit import RateLimitExceeded
from ..sdk.errors import OneInchApiError, OneInchError, OneInchHttpError, OneInchTransportError

CHAIN_NAMES: Mapping[int, str] = {
    1: "Ethereum",
    10: "Optimism",
    56: "BNB Chain",
    100: "Gnosis",
    130: "Unichain",
    137: "Polygon",
    146: "Sonic",
    324: "zkSync Era",
    8453: "Base",
    42161: "Arbitrum",
    43114: "Avalanche",
    59144: "Linea",
}


def chain_name(chain_id: Optional[int]) -> str:
    if chain_id is None:
        return "all chains"
    return CHAIN_NAMES.get(chain_id, f"Chain {chain_id}")


def parse_chain_id(value: Any, default: Optional[int] = None) -> Optional[int]:
    if value is None:
        return default
    text = str(value).strip()
    if not text:
        return default
    try:
        return int(text)
    except ValueError as exc:
        raise ValueError(f"Chain id must be an integer (got '{value}')") from exc


def parse_amount(value: Any) -> int:
    """Parse an integer amount in base units (wei)."""

    text = str(value).strip()
    try:
        amount = int(text)
    except ValueError as exc:
        raise ValueError("Amount must be a valid integer in wei") from exc
    if amount <= 0:
        raise ValueError("Amount must be positive")
    return amount


def amount_text(amount: Any) -> Optional[str]:
    # integers and unparsed upstream values alike are rendered as text
    return None if amount is None else str(amount)


def to_units(amount: int, decimals: int) -> Decimal:
    return Decimal(amount) / (Decimal(10) ** decimals)


def format_units(amount: int, decimals: int, *, places: int = 6) -> str:
    value = to_units(amount, decimals)
    try:
        quantized = value.quantize(Decimal(1).scaleb(-places)) if value else Decimal(0)
    except InvalidOperation:
        quantized = value
    text = f"{quantized:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def exchange_rate(src_amount: int, src_decimals: int, dst_amount: int, dst_decimals: int) -> Optional[str]:
    try:
        source = to_units(src_amount, src_decimals)
        if not source:
            return None
        rate = to_units(dst_amount, dst_decimals) / source
    except (InvalidOperation, ZeroDivisionError):
        return None
    return f"{rate.normalize():f}"


def _decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def _percent(part: Decimal, whole: Decimal) -> Optional[str]:
    if not whole:
        return None
    return f"{(part / whole * 100).quantize(Decimal('0.01'))}"


def price_spread(prices: Mapping[int, Any]) -> Optional[Dict[str, Any]]:
    """Lowest and highest of per-chain prices, with the spread relative to the lowest."""

    parsed = [(chain_id, _decimal(price)) for chain_id, price in prices.items()]
    valid = [(chain_id, price) for chain_id, price in parsed if price is not None]
    if not valid:
        return None
    low_chain, low = min(valid, key=lambda item: item[1])
    high_chain, high = max(valid, key=lambda item: item[1])
    return {
        "lowest": {"chain_id": low_chain, "chain_name": chain_name(low_chain), "price": f"{low:f}"},
        "highest": {"chain_id": high_chain, "chain_name": chain_name(high_chain), "price": f"{high:f}"},
        "spread_percent": _percent(high - low, low),
    }


def chart_metrics(points: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
    """Value change and drawdown over a portfolio value chart ordered by time."""

    values = [
        value
        for value in (_decimal(point.get("value_usd", point.get("value"))) for point in points)
        if value is not None
    ]
    if not values:
        return {"points": 0}
    start, end = values[0], values[-1]
    peak = values[0]
    drawdown = Decimal(0)
    for value in values:
        peak = max(peak, value)
        if peak:
            drawdown = max(drawdown, (peak - value) / peak)
    return {
        "points": len(values),
        "start_value_usd": f"{start:f}",
        "end_value_usd": f"{end:f}",
        "change_usd": f"{end - start:f}",
        "change_percent": _percent(end - start, start),
        "max_value_usd": f"{max(values):f}",
        "min_value_usd": f"{min(values):f}",
        "max_drawdown_percent": f"{(drawdown * 100).quantize(Decimal('0.01'))}",
    }


def protocol_names(protocols: Any) -> List[str]:
    """Distinct protocol names in a (nested) quote route, in route order."""

    names: List[str] = []

    def _walk(node: Any) -> None:
        if isinstance(node, Mapping):
            name = node.get("name")
            if isinstance(name, str) and name not in names:
                names.append(name)
        elif isinstance(node, (list, tuple)):
            for item in node:
                _walk(item)

    _walk(protocols)
    return names


def error_payload(tool: str, exc: BaseException, **context: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"tool": tool, "success": False}
    payload.update({key: value for key, value in context.items() if value is not None})

    if isinstance(exc, RateLimitExceeded):
        payload.update(
            error_type="rate_limit_exceeded",
            message=str(exc),
            client_id=exc.client_id,
            wait_seconds=exc.wait_seconds,
        )
    elif isinstance(exc, OneInchApiError):
        payload.update(error_type="api_error", message=str(exc), details=exc.to_dict())
    elif isinstance(exc, OneInchHttpError):
        payload.update(error_type="http_error", message=str(exc), status_code=exc.status_code)
    elif isinstance(exc, OneInchTransportError):
        payload.update(error_type="network_error", message=str(exc))
    elif isinstance(exc, OneInchError):
        payload.update(error_type="sdk_error", message=str(exc))
    elif isinstance(exc, ValueError):
        payload.update(error_type="invalid_argument", message=str(exc))
    else:
        payload.update(error_type="unexpected_error", message=str(exc))
    return payload


__all__ = [
    "CHAIN_NAMES",
    "amount_text",
    "chain_name",
    "chart_metrics",
    "error_payload",
    "exchange_rate",
    "format_units",
    "parse_amount",
    "parse_chain_id",
    "price_spread",
    "protocol_names",
]
