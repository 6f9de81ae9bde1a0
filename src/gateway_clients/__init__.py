"""
Gateway Clients

Client-side integration layer for two kinds of remote HTTP services:
- A generic tool gateway reached with API-key authenticated JSON or
  multipart requests
- The OpenAI chat-completions API, including tool calls and streamed
  (server-sent event) output
"""

from .core.interface import AbstractClient, ClientCapability
from .core.config import ClientsConfig, load_config, config_from_env
from .core.debug import DebugTrace
from .core.errors import (
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
from .clients import GatewayClient, ChatClient, ToolCatalog, create_clients
from .models.request import Message, Tool, FunctionDefinition, ToolCall
from .models.gateway import GatewayCall, GatewayResponse, MultipartFile, MultipartPayload

__all__ = [
    "AbstractClient",
    "ClientCapability",
    "ClientsConfig",
    "load_config",
    "config_from_env",
    "DebugTrace",
    "GatewayError",
    "GatewayConfigError",
    "GatewayEncodingError",
    "GatewayConnectionError",
    "GatewayStreamError",
    "GatewayRequestError",
    "GatewayDecodeError",
    "GatewayEmptyResponseError",
    "GatewayInvalidRequestError",
    "GatewayClient",
    "ChatClient",
    "ToolCatalog",
    "create_clients",
    "Message",
    "Tool",
    "FunctionDefinition",
    "ToolCall",
    "GatewayCall",
    "GatewayResponse",
    "MultipartFile",
    "MultipartPayload",
]
