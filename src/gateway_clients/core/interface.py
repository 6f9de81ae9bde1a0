"""
Base client definition.

Defines what the gateway and chat clients have in common: a name, a
capability set and ownership of one :class:`HTTPTransport`.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Set

from .transport import HTTPTransport


class ClientCapability(str, Enum):
    """Capabilities that a client may support."""
    JSON_REQUESTS = "json_requests"
    MULTIPART_UPLOADS = "multipart_uploads"
    CHAT_COMPLETION = "chat_completion"
    STREAMING = "streaming"
    TOOL_USE = "tool_use"


class AbstractClient(ABC):
    """
    Abstract base class for the HTTP integration clients.

    Subclasses build requests and decode responses; sending, error
    mapping and tracing go through :attr:`transport`.
    """

    def __init__(self, transport: HTTPTransport):
        self._transport = transport

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Unique name of this client instance.

        Returns:
            Client name (e.g., "tool-gateway", "openai")
        """
        pass

    @property
    @abstractmethod
    def capabilities(self) -> Set[ClientCapability]:
        """
        Set of capabilities this client supports.

        Returns:
            Set of ClientCapability values
        """
        pass

    @property
    def transport(self) -> HTTPTransport:
        return self._transport

    def supports(self, capability: ClientCapability) -> bool:
        """
        Check if client supports a capability.

        Args:
            capability: Capability to check

        Returns:
            True if supported
        """
        return capability in self.capabilities

    def close(self) -> None:
        """Release the underlying HTTP client if this instance owns it."""
        self._transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
