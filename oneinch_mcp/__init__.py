"""Typed client for the 1inch DeFi APIs and an MCP server built on it."""

from .config import ConfigError, ServerConfig, SdkConfig
from .sdk import BlockingOneInchClient, OneInchClient

__version__ = "1.0.0"

__all__ = [
    "BlockingOneInchClient",
    "ConfigError",
    "OneInchClient",
    "SdkConfig",
    "ServerConfig",
    "__version__",
]
