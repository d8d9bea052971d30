"""Application entrypoint for the 1inch MCP server."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from contextlib import suppress
from dataclasses import dataclass, replace
from typing import Optional, Sequence

import httpx
from mcp.server.fastmcp import FastMCP

from .config import TRANSPORT_SSE, TRANSPORT_STREAMABLE_HTTP, TRANSPORTS, ConfigError, ServerConfig, load_config, validate_config
from .infra.cache import TtlCache
from .infra.health import HealthAggregator, LivenessProbe
from .infra.monitoring import RequestMetrics
from .infra.ratelimit import FixedWindowRateLimiter
from .infra.scheduler import MaintenanceScheduler
from .sdk.client import OneInchClient
from .server.gateway import OneInchGateway
from .server.server import create_mcp_server


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_LOGGER = logging.getLogger(__name__)


def configure_logging(level_name: Optional[str] = None) -> None:
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        # StreamHandler writes to stderr, stdout belongs to the stdio transport
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(handler)

    name = (level_name or os.getenv("LOG_LEVEL", "INFO")).upper().strip()
    root_logger.setLevel(getattr(logging, name, logging.INFO))
    logging.captureWarnings(True)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="oneinch-mcp", description="MCP server for the 1inch DeFi APIs")
    parser.add_argument("--transport", choices=TRANSPORTS, help="Transport to serve (default: MCP_TRANSPORT or stdio)")
    parser.add_argument("--host", help="Bind address for the HTTP transports")
    parser.add_argument("--port", type=int, help="Bind port for the HTTP transports")
    parser.add_argument("--log-level", help="Root log level (default: LOG_LEVEL or INFO)")
    return parser.parse_args(argv)


@dataclass(slots=True)
class Application:
    config: ServerConfig
    client: OneInchClient
    gateway: OneInchGateway
    health: HealthAggregator
    liveness: LivenessProbe
    scheduler: MaintenanceScheduler
    mcp: FastMCP


def build_application(config: ServerConfig, *, http_client: Optional[httpx.AsyncClient] = None) -> Application:
    validation = validate_config(config)
    for warning in validation.warnings:
        _LOGGER.warning("Configuration warning: %s", warning)
    if not validation.valid:
        raise ConfigError("; ".join(validation.errors))

    client = OneInchClient.from_config(config.sdk, http_client=http_client)
    metrics = RequestMetrics()
    rate_limiter = FixedWindowRateLimiter(
        config.rate_limit.requests_per_window,
        config.rate_limit.window_seconds,
    )
    cache = TtlCache(default_ttl=config.cache.price_ttl, metrics=metrics)
    gateway = OneInchGateway(
        client,
        rate_limiter=rate_limiter,
        metrics=metrics,
        cache=cache,
        cache_config=config.cache,
    )
    health = HealthAggregator(
        config_probe=lambda: validate_config(config).valid,
        client_probe=gateway.is_ready,
        rate_limiter_probe=rate_limiter.is_operational,
        metrics=metrics,
        max_failure_rate_percent=config.health.max_failure_rate_percent,
        version=config.version,
    )
    liveness = LivenessProbe(
        max_memory_percent=config.health.max_memory_percent,
        min_free_memory_mb=config.health.min_free_memory_mb,
        max_threads=config.health.max_threads,
    )
    scheduler = MaintenanceScheduler(
        rate_limiter=rate_limiter,
        cache=cache,
        idle_seconds=config.rate_limit.cleanup_idle_seconds,
    )
    mcp = create_mcp_server(config, gateway=gateway, health=health, liveness=liveness)
    return Application(
        config=config,
        client=client,
        gateway=gateway,
        health=health,
        liveness=liveness,
        scheduler=scheduler,
        mcp=mcp,
    )


async def serve(app: Application) -> None:
    transport = app.config.transport
    await app.scheduler.start()
    _LOGGER.info("Serving %s over %s", app.config.name, transport)
    try:
        if transport == TRANSPORT_SSE:
            await app.mcp.run_sse_async()
        elif transport == TRANSPORT_STREAMABLE_HTTP:
            await app.mcp.run_streamable_http_async()
        else:
            await app.mcp.run_stdio_async()
    finally:
        with suppress(Exception):
            await app.scheduler.stop()
        with suppress(Exception):
            await app.client.close()
        _LOGGER.info("1inch MCP server stopped")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = load_config()
        overrides = {
            key: value
            for key, value in (
                ("transport", args.transport),
                ("host", args.host),
                ("port", args.port),
                ("log_level", args.log_level.upper() if args.log_level else None),
            )
            if value is not None
        }
        if overrides:
            config = replace(config, **overrides)
        app = build_application(config)
    except ConfigError as exc:
        _LOGGER.error("Configuration error: %s", exc)
        return 2

    try:
        asyncio.run(serve(app))
    except KeyboardInterrupt:
        _LOGGER.info("Interrupted")
    return 0


__all__ = ["Application", "LOG_FORMAT", "build_application", "configure_logging", "main", "parse_args", "serve"]
