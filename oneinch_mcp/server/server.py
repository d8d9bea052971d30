from __future__ import annotations

import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from ..config import ServerConfig
from ..infra.health import HealthAggregator, HealthReport, LivenessProbe
from .gateway import OneInchGateway
from .prompts import register_prompts
from .resources import OneInchResources, register_resources
from .tools import OneInchTools, register_tools


_LOGGER = logging.getLogger(__name__)

INSTRUCTIONS = (
    "Tools, resources and prompts for the 1inch DeFi APIs: swap quotes and transactions, "
    "token search and analysis, prices, wallet balances, portfolio value, transaction history, "
    "limit orders and Fusion quotes. Amounts are integers in the token's base units (wei). "
    "Failed calls return an object with success=false and an error_type; when error_type is "
    "rate_limit_exceeded, wait wait_seconds before retrying."
)


def _health_response(report: HealthReport) -> JSONResponse:
    return JSONResponse(report.to_dict(), status_code=200 if report.is_up else 503)


def create_mcp_server(
    config: ServerConfig,
    *,
    gateway: OneInchGateway,
    health: Optional[HealthAggregator] = None,
    liveness: Optional[LivenessProbe] = None,
) -> FastMCP:
    """Build the FastMCP server with every tool, resource, prompt and health route registered."""

    mcp = FastMCP(
        config.name,
        instructions=INSTRUCTIONS,
        host=config.host,
        port=config.port,
        log_level=config.log_level,
    )

    register_tools(mcp, OneInchTools(gateway, health=health, liveness=liveness))
    register_resources(mcp, OneInchResources(gateway, health=health, liveness=liveness))
    register_prompts(mcp)

    @mcp.custom_route("/health/ready", methods=["GET"])
    async def ready(request: Request) -> JSONResponse:
        if health is None:
            return JSONResponse({"status": "unknown"}, status_code=503)
        return _health_response(health.check())

    @mcp.custom_route("/health/live", methods=["GET"])
    async def live(request: Request) -> JSONResponse:
        if liveness is None:
            return JSONResponse({"status": "unknown"}, status_code=503)
        return _health_response(liveness.check())

    _LOGGER.info("MCP server %s v%s configured (transport=%s)", config.name, config.version, config.transport)
    return mcp


__all__ = ["INSTRUCTIONS", "create_mcp_server"]
