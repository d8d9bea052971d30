"""Request and response shapes for the swap and token endpoints.

Endpoints with large or frequently changing payloads return decoded JSON
(``Dict[str, Any]``) instead of a dataclass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple


def _to_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return None


def _join(values: Optional[Sequence[str] | str]) -> Optional[str]:
    if values is None:
        return None
    if isinstance(values, str):
        return values or None
    joined = ",".join(str(item) for item in values if item)
    return joined or None


@dataclass(slots=True)
class TokenInfo:
    address: str
    symbol: str
    name: str
    decimals: int
    chain_id: Optional[int] = None
    logo_uri: Optional[str] = None
    tags: Tuple[str, ...] = ()
    eip2612: Optional[bool] = None
    is_fot: Optional[bool] = None
    providers: Tuple[str, ...] = ()
    rating: Optional[int] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TokenInfo":
        raw_tags = payload.get("tags") or ()
        tags: List[str] = []
        for tag in raw_tags:
            if isinstance(tag, Mapping):
                value = tag.get("value") or tag.get("provider")
                if value:
                    tags.append(str(value))
            elif tag:
                tags.append(str(tag))
        return cls(
            address=str(payload.get("address") or ""),
            symbol=str(payload.get("symbol") or ""),
            name=str(payload.get("name") or ""),
            decimals=_to_int(payload.get("decimals")) or 0,
            chain_id=_to_int(payload.get("chainId")),
            logo_uri=payload.get("logoURI") or payload.get("logoUri"),
            tags=tuple(tags),
            eip2612=payload.get("eip2612"),
            is_fot=payload.get("isFoT"),
            providers=tuple(str(item) for item in payload.get("providers") or ()),
            rating=_to_int(payload.get("rating")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "symbol": self.symbol,
            "name": self.name,
            "decimals": self.decimals,
            "chain_id": self.chain_id,
            "logo_uri": self.logo_uri,
            "tags": list(self.tags),
        }


def _token_or_none(value: Any) -> Optional[TokenInfo]:
    if isinstance(value, Mapping):
        return TokenInfo.from_dict(value)
    return None


@dataclass(slots=True)
class TransactionData:
    from_address: str
    to: str
    data: str
    value: int
    gas_price: Optional[int] = None
    gas: Optional[int] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TransactionData":
        return cls(
            from_address=str(payload.get("from") or ""),
            to=str(payload.get("to") or ""),
            data=str(payload.get("data") or ""),
            value=_to_int(payload.get("value")) or 0,
            gas_price=_to_int(payload.get("gasPrice")),
            gas=_to_int(payload.get("gas")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.from_address,
            "to": self.to,
            "data": self.data,
            "value": str(self.value),
            "gas_price": None if self.gas_price is None else str(self.gas_price),
            "gas": self.gas,
        }


@dataclass(slots=True)
class QuoteRequest:
    chain_id: int
    src: str
    dst: str
    amount: int
    protocols: Optional[Sequence[str] | str] = None
    fee: Optional[float] = None
    gas_price: Optional[int] = None
    complexity_level: Optional[int] = None
    parts: Optional[int] = None
    main_route_parts: Optional[int] = None
    gas_limit: Optional[int] = None
    include_tokens_info: Optional[bool] = None
    include_protocols: Optional[bool] = None
    include_gas: Optional[bool] = None
    connector_tokens: Optional[Sequence[str] | str] = None
    excluded_protocols: Optional[Sequence[str] | str] = None

    def to_params(self) -> Dict[str, Any]:
        return {
            "src": self.src,
            "dst": self.dst,
            "amount": str(self.amount),
            "protocols": _join(self.protocols),
            "fee": self.fee,
            "gasPrice": self.gas_price,
            "complexityLevel": self.complexity_level,
            "parts": self.parts,
            "mainRouteParts": self.main_route_parts,
            "gasLimit": self.gas_limit,
            "includeTokensInfo": self.include_tokens_info,
            "includeProtocols": self.include_protocols,
            "includeGas": self.include_gas,
            "connectorTokens": _join(self.connector_tokens),
            "excludedProtocols": _join(self.excluded_protocols),
        }


@dataclass(slots=True)
class SwapRequest:
    chain_id: int
    src: str
    dst: str
    amount: int
    from_address: str
    slippage: float
    origin: Optional[str] = None
    protocols: Optional[Sequence[str] | str] = None
    fee: Optional[float] = None
    gas_price: Optional[int] = None
    complexity_level: Optional[int] = None
    parts: Optional[int] = None
    main_route_parts: Optional[int] = None
    gas_limit: Optional[int] = None
    include_tokens_info: Optional[bool] = None
    include_protocols: Optional[bool] = None
    include_gas: Optional[bool] = None
    connector_tokens: Optional[Sequence[str] | str] = None
    excluded_protocols: Optional[Sequence[str] | str] = None
    permit: Optional[str] = None
    receiver: Optional[str] = None
    referrer: Optional[str] = None
    allow_partial_fill: Optional[bool] = None
    disable_estimate: Optional[bool] = None
    use_permit2: Optional[bool] = None

    def __post_init__(self) -> None:
        if not 0 <= self.slippage <= 50:
            raise ValueError("slippage must be between 0 and 50 percent")

    def to_params(self) -> Dict[str, Any]:
        return {
            "src": self.src,
            "dst": self.dst,
            "amount": str(self.amount),
            "from": self.from_address,
            "origin": self.origin,
            "slippage": self.slippage,
            "protocols": _join(self.protocols),
            "fee": self.fee,
            "gasPrice": self.gas_price,
            "complexityLevel": self.complexity_level,
            "parts": self.parts,
            "mainRouteParts": self.main_route_parts,
            "gasLimit": self.gas_limit,
            "includeTokensInfo": self.include_tokens_info,
            "includeProtocols": self.include_protocols,
            "includeGas": self.include_gas,
            "connectorTokens": _join(self.connector_tokens),
            "excludedProtocols": _join(self.excluded_protocols),
            "permit": self.permit,
            "receiver": self.receiver,
            "referrer": self.referrer,
            "allowPartialFill": self.allow_partial_fill,
            "disableEstimate": self.disable_estimate,
            "usePermit2": self.use_permit2,
        }


@dataclass(slots=True)
class QuoteResponse:
    dst_amount: int
    src_token: Optional[TokenInfo] = None
    dst_token: Optional[TokenInfo] = None
    gas: Optional[int] = None
    protocols: List[Any] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "QuoteResponse":
        return cls(
            dst_amount=_to_int(payload.get("dstAmount")) or 0,
            src_token=_token_or_none(payload.get("srcToken")),
            dst_token=_token_or_none(payload.get("dstToken")),
            gas=_to_int(payload.get("gas")),
            protocols=list(payload.get("protocols") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dst_amount": str(self.dst_amount),
            "src_token": self.src_token.to_dict() if self.src_token else None,
            "dst_token": self.dst_token.to_dict() if self.dst_token else None,
            "gas": self.gas,
            "protocols": self.protocols,
        }


@dataclass(slots=True)
class SwapResponse:
    dst_amount: int
    tx: TransactionData
    src_token: Optional[TokenInfo] = None
    dst_token: Optional[TokenInfo] = None
    protocols: List[Any] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "SwapResponse":
        return cls(
            dst_amount=_to_int(payload.get("dstAmount")) or 0,
            tx=TransactionData.from_dict(payload.get("tx") or {}),
            src_token=_token_or_none(payload.get("srcToken")),
            dst_token=_token_or_none(payload.get("dstToken")),
            protocols=list(payload.get("protocols") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dst_amount": str(self.dst_amount),
            "tx": self.tx.to_dict(),
            "src_token": self.src_token.to_dict() if self.src_token else None,
            "dst_token": self.dst_token.to_dict() if self.dst_token else None,
            "protocols": self.protocols,
        }


@dataclass(slots=True)
class ApproveCallData:
    data: str
    to: str
    value: int
    gas_price: Optional[int] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ApproveCallData":
        return cls(
            data=str(payload.get("data") or ""),
            to=str(payload.get("to") or ""),
            value=_to_int(payload.get("value")) or 0,
            gas_price=_to_int(payload.get("gasPrice")),
        )


@dataclass(slots=True)
class TokenSearchRequest:
    query: str
    chain_id: Optional[int] = None
    ignore_listed: Optional[bool] = None
    only_positive_rating: Optional[bool] = None
    limit: Optional[int] = None

    def to_params(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "ignore_listed": self.ignore_listed,
            "only_positive_rating": self.only_positive_rating,
            "limit": self.limit,
        }


def parse_token_map(payload: Any) -> Dict[str, TokenInfo]:
    """Decode ``{address: token}`` maps, including the ``{"tokens": {...}}`` envelope."""

    if isinstance(payload, Mapping) and isinstance(payload.get("tokens"), Mapping):
        payload = payload["tokens"]
    if not isinstance(payload, Mapping):
        return {}
    return {
        str(address): TokenInfo.from_dict(token)
        for address, token in payload.items()
        if isinstance(token, Mapping)
    }


def parse_token_list(payload: Any) -> List[TokenInfo]:
    if isinstance(payload, Mapping):
        payload = payload.get("tokens") or payload.get("items") or []
    if not isinstance(payload, Sequence) or isinstance(payload, (str, bytes)):
        return []
    return [TokenInfo.from_dict(item) for item in payload if isinstance(item, Mapping)]


__all__ = [
    "ApproveCallData",
    "QuoteRequest",
    "QuoteResponse",
    "SwapRequest",
    "SwapResponse",
    "TokenInfo",
    "TokenSearchRequest",
    "TransactionData",
    "parse_token_list",
    "parse_token_map",
]
