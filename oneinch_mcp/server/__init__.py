"""MCP surface: tools, resources, prompts and health routes."""

from .gateway import OneInchGateway
from .server import create_mcp_server

__all__ = ["OneInchGateway", "create_mcp_server"]
