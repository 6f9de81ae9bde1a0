"""
HTTP integration clients.
"""

from .gateway_client import GatewayClient
from .chat_client import ChatClient
from .tool_catalog import ToolCatalog, match_openapi_path
from .factory import create_clients

__all__ = [
    "GatewayClient",
    "ChatClient",
    "ToolCatalog",
    "match_openapi_path",
    "create_clients",
]
