"""Configuration loading for the 1inch SDK and MCP server."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Final, Mapping, Optional, Tuple

DEFAULT_BASE_URL: Final[str] = "https://api.1inch.dev"
DEFAULT_TIMEOUT: Final[float] = 30.0
DEFAULT_SERVER_NAME: Final[str] = "1inch-mcp-server"
DEFAULT_SERVER_VERSION: Final[str] = "1.0.0"

# Checked in order, the first non-empty value wins
API_KEY_ENV_NAMES: Final[Tuple[str, ...]] = (
    "ONEINCH_API_KEY",
    "ONE_INCH_API_KEY",
    "1INCH_API_KEY",
)

TRANSPORT_STDIO = "stdio"
TRANSPORT_SSE = "sse"
TRANSPORT_STREAMABLE_HTTP = "streamable-http"
TRANSPORTS: Final[Tuple[str, ...]] = (TRANSPORT_STDIO, TRANSPORT_SSE, TRANSPORT_STREAMABLE_HTTP)
LOG_LEVELS: Final[Tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


@dataclass(slots=True)
class SdkConfig:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT


@dataclass(slots=True)
class RateLimitConfig:
    requests_per_window: int = 60
    window_seconds: int = 60
    cleanup_idle_seconds: float = 3600.0


@dataclass(slots=True)
class HealthConfig:
    max_failure_rate_percent: float = 25.0
    max_memory_percent: float = 90.0
    min_free_memory_mb: int = 50
    max_threads: int = 100


@dataclass(slots=True)
class CacheConfig:
    price_ttl: float = 30.0
    token_ttl: float = 3600.0
    portfolio_ttl: float = 300.0


@dataclass(slots=True)
class ServerConfig:
    sdk: SdkConfig
    name: str = DEFAULT_SERVER_NAME
    version: str = DEFAULT_SERVER_VERSION
    transport: str = TRANSPORT_STDIO
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    health: HealthConfig = field(default_factory=HealthConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)


@dataclass(slots=True)
class ConfigValidation:
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.errors


def resolve_api_key(
    explicit: Optional[str] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """Return the explicit key, else the first non-empty key from the environment."""

    if explicit is not None and explicit.strip():
        return explicit.strip()
    env = os.environ if environ is None else environ
    for name in API_KEY_ENV_NAMES:
        value = env.get(name)
        if value and value.strip():
            return value.strip()
    raise ConfigError(
        "1inch API key is required; pass it explicitly or set one of: "
        + ", ".join(API_KEY_ENV_NAMES)
    )


def mask_api_key(api_key: Optional[str]) -> str:
    if not api_key or len(api_key) < 8:
        return "***"
    return f"{api_key[:4]}***{api_key[-4:]}"


def validate_config(config: ServerConfig) -> ConfigValidation:
    errors: list[str] = []
    warnings: list[str] = []

    api_key = config.sdk.api_key
    if not api_key or not api_key.strip():
        errors.append("1inch API key is required")
    elif len(api_key.strip()) < 10:
        warnings.append("1inch API key looks unusually short")

    base_url = config.sdk.base_url or ""
    if not base_url.startswith(("http://", "https://")):
        errors.append(f"Base URL must start with http:// or https:// (got '{base_url}')")

    if config.sdk.timeout <= 0:
        errors.append("HTTP timeout must be positive")

    rate_limit = config.rate_limit
    if rate_limit.requests_per_window <= 0:
        errors.append("Rate limit requests per window must be positive")
    elif rate_limit.requests_per_window > 1000:
        warnings.append("Rate limit above 1000 requests per window may exceed upstream quotas")
    if rate_limit.window_seconds <= 0:
        errors.append("Rate limit window must be positive")

    if config.transport not in TRANSPORTS:
        errors.append(f"Unsupported transport '{config.transport}'")
    if config.log_level not in LOG_LEVELS:
        errors.append(f"Unsupported log level '{config.log_level}'")

    return ConfigValidation(errors=tuple(errors), warnings=tuple(warnings))


def _parse_positive_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return max(default, minimum)
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"Environment variable '{name}' must be an integer") from exc
    if value < minimum:
        raise ConfigError(f"Environment variable '{name}' must be >= {minimum}")
    return value


def _parse_positive_float(name: str, default: float, minimum: float = 0.0) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return max(default, minimum)
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"Environment variable '{name}' must be a float") from exc
    if value < minimum:
        raise ConfigError(f"Environment variable '{name}' must be >= {minimum}")
    return value


def _parse_transport(name: str, default: str) -> str:
    value = (os.getenv(name) or default).strip().lower()
    if value == "http":
        value = TRANSPORT_STREAMABLE_HTTP
    if value not in TRANSPORTS:
        raise ConfigError(f"Environment variable '{name}' must be one of {', '.join(TRANSPORTS)}")
    return value


def _parse_log_level(name: str, default: str) -> str:
    value = (os.getenv(name) or default).strip().upper()
    if value not in LOG_LEVELS:
        raise ConfigError(f"Environment variable '{name}' must be one of {', '.join(LOG_LEVELS)}")
    return value


def load_sdk_config(api_key: Optional[str] = None) -> SdkConfig:
    base_url = (os.getenv("ONEINCH_BASE_URL") or DEFAULT_BASE_URL).strip().rstrip("/")
    return SdkConfig(
        api_key=resolve_api_key(api_key),
        base_url=base_url,
        timeout=_parse_positive_float("ONEINCH_TIMEOUT", DEFAULT_TIMEOUT, minimum=0.1),
    )


def load_config() -> ServerConfig:
    sdk = load_sdk_config()

    rate_limit = RateLimitConfig(
        requests_per_window=_parse_positive_int("MCP_RATE_LIMIT_REQUESTS", 60, minimum=1),
        window_seconds=_parse_positive_int("MCP_RATE_LIMIT_WINDOW", 60, minimum=1),
        cleanup_idle_seconds=_parse_positive_float("MCP_RATE_LIMIT_IDLE_SECONDS", 3600.0, minimum=1.0),
    )
    health = HealthConfig(
        max_failure_rate_percent=_parse_positive_float("HEALTH_MAX_FAILURE_RATE", 25.0),
        max_memory_percent=_parse_positive_float("HEALTH_MAX_MEMORY_PERCENT", 90.0),
        min_free_memory_mb=_parse_positive_int("HEALTH_MIN_FREE_MEMORY_MB", 50),
        max_threads=_parse_positive_int("HEALTH_MAX_THREADS", 100, minimum=1),
    )
    cache = CacheConfig(
        price_ttl=_parse_positive_float("CACHE_PRICE_TTL", 30.0, minimum=0.1),
        token_ttl=_parse_positive_float("CACHE_TOKEN_TTL", 3600.0, minimum=0.1),
        portfolio_ttl=_parse_positive_float("CACHE_PORTFOLIO_TTL", 300.0, minimum=0.1),
    )

    return ServerConfig(
        sdk=sdk,
        name=(os.getenv("MCP_SERVER_NAME") or DEFAULT_SERVER_NAME).strip(),
        version=DEFAULT_SERVER_VERSION,
        transport=_parse_transport("MCP_TRANSPORT", TRANSPORT_STDIO),
        host=(os.getenv("MCP_HOST") or "127.0.0.1").strip(),
        port=_parse_positive_int("MCP_PORT", 8000, minimum=1),
        log_level=_parse_log_level("LOG_LEVEL", "INFO"),
        rate_limit=rate_limit,
        health=health,
        cache=cache,
    )
