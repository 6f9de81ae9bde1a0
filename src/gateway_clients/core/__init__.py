"""
Core client components.
"""

from .interface import AbstractClient, ClientCapability
from .transport import HTTPTransport
from .debug import DebugTrace, debug_enabled
from .config import (
    ClientsConfig,
    GatewayClientConfig,
    ChatClientConfig,
    config_from_env,
    load_config,
)
from .errors import (
    GatewayError,
    GatewayConfigError,
    GatewayEncodingError,
    GatewayConnectionError,
    GatewayStreamError,
    GatewayRequestError,
    GatewayDecodeError,
    GatewayEmptyResponseError,
    GatewayInvalidRequestError,
)

__all__ = [
    "AbstractClient",
    "ClientCapability",
    "HTTPTransport",
    "DebugTrace",
    "debug_enabled",
    "ClientsConfig",
    "GatewayClientConfig",
    "ChatClientConfig",
    "config_from_env",
    "load_config",
    "GatewayError",
    "GatewayConfigError",
    "GatewayEncodingError",
    "GatewayConnectionError",
    "GatewayStreamError",
    "GatewayRequestError",
    "GatewayDecodeError",
    "GatewayEmptyResponseError",
    "GatewayInvalidRequestError",
]
