"""
Client construction from configuration.
"""

import logging
from typing import Optional, Tuple

import httpx

from ..core.config import ClientsConfig
from ..core.debug import DebugTrace
from .chat_client import ChatClient
from .gateway_client import GatewayClient

logger = logging.getLogger(__name__)


def create_clients(
    config: ClientsConfig,
    http_client: Optional[httpx.Client] = None,
) -> Tuple[GatewayClient, ChatClient]:
    """
    Create both clients sharing one debug trace and, optionally, one HTTP client.

    Args:
        config: Loaded configuration
        http_client: Client used for both; each gets a private one if omitted

    Returns:
        Gateway client and chat client
    """
    debug = DebugTrace(enabled=config.debug)
    gateway = GatewayClient.from_config(config.gateway, http_client=http_client, debug=debug)
    chat = ChatClient.from_config(config.chat, http_client=http_client, debug=debug)

    logger.info(f"Created clients (tool_gateway={config.gateway.base_url}, model={config.chat.model})")
    return gateway, chat
