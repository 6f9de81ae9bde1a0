"""
OpenAI chat-completion client.

Plain, tool-augmented and streamed completions against the public
chat-completions endpoint. Each call is one round trip; nothing is
retried or cached.
"""

import json
import logging
from typing import Optional, Set, Dict, Any, Sequence

import httpx
from pydantic import ValidationError

from ..core.config import ChatClientConfig, DEFAULT_CHAT_MODEL
from ..core.debug import DebugTrace
from ..core.errors import (
    GatewayDecodeError,
    GatewayEmptyResponseError,
    GatewayRequestError,
    GatewayStreamError,
)
from ..core.interface import AbstractClient, ClientCapability
from ..core.transport import HTTPTransport, DEFAULT_TIMEOUT
from ..models.request import ChatRequest, Message, Tool
from ..models.response import ChatResponse
from ..wire.sse import TokenSink, TokenStreamDecoder

logger = logging.getLogger(__name__)


class ChatClient(AbstractClient):
    """
    Direct OpenAI chat-completions client.

    Authenticates with a bearer token and always targets
    :attr:`CHAT_COMPLETIONS_URL`.
    """

    CHAT_COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_CHAT_MODEL,
        http_client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT,
        debug: Optional[DebugTrace] = None,
        name: str = "openai",
    ):
        """
        Initialize chat client.

        Args:
            api_key: OpenAI API key
            model: Model identifier sent with every request
            http_client: Shared ``httpx.Client``. A private one is created if omitted.
            timeout: Request timeout in seconds for the private client
            debug: Request trace hook. Resolved from ``GO_LOG`` if omitted.
            name: Name used in logs and errors
        """
        super().__init__(HTTPTransport(name, http_client=http_client, timeout=timeout, debug=debug))
        self._name = name
        self._api_key = api_key or ""
        self._model = model

    @classmethod
    def from_config(
        cls,
        config: ChatClientConfig,
        http_client: Optional[httpx.Client] = None,
        debug: Optional[DebugTrace] = None,
    ) -> "ChatClient":
        return cls(
            api_key=config.api_key,
            model=config.model,
            http_client=http_client,
            timeout=config.timeout,
            debug=debug,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def model(self) -> str:
        return self._model

    @property
    def capabilities(self) -> Set[ClientCapability]:
        return {
            ClientCapability.CHAT_COMPLETION,
            ClientCapability.STREAMING,
            ClientCapability.TOOL_USE,
        }

    def _headers(self, accept: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "Accept": accept,
        }

    def _encode(self, request: ChatRequest) -> bytes:
        return json.dumps(request.to_openai_format()).encode("utf-8")

    def _request_failed(self, status_code: int, body: str) -> GatewayRequestError:
        return GatewayRequestError(
            f"openai request failed: status={status_code} body={body.strip()}",
            gateway=self._name,
            status_code=status_code,
            body=body,
        )

    def _complete(self, request: ChatRequest) -> Message:
        """Send a non-streaming request and return the first choice's message."""
        response = self.transport.send(
            "POST",
            self.CHAT_COMPLETIONS_URL,
            self._headers("application/json"),
            self._encode(request),
        )

        if not response.is_success:
            raise self._request_failed(response.status_code, response.text)

        try:
            completion = ChatResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise GatewayDecodeError(f"openai invalid json: {e}", gateway=self._name) from e

        message = completion.first_message()
        if message is None:
            raise GatewayEmptyResponseError("openai: empty choices", gateway=self._name)
        return message

    def chat(self, messages: Sequence[Message]) -> str:
        """
        Create a chat completion.

        Args:
            messages: Conversation so far

        Returns:
            Text of the first choice

        Raises:
            GatewayConnectionError: If the exchange did not complete
            GatewayRequestError: On a non-2xx status
            GatewayDecodeError: If the body is not a completion
            GatewayEmptyResponseError: If the completion has no choices
        """
        request = ChatRequest.build(self._model, messages)
        return self._complete(request).content

    def chat_with_tools(self, messages: Sequence[Message], tools: Sequence[Tool]) -> Message:
        """Create a completion the model may answer with tool calls."""
        return self.chat_with_tools_choice(messages, tools, "auto")

    def chat_with_tools_choice(
        self,
        messages: Sequence[Message],
        tools: Sequence[Tool],
        tool_choice: Any,
    ) -> Message:
        """
        Create a completion with tools and an explicit tool-choice directive.

        Args:
            messages: Conversation so far
            tools: Tool definitions offered to the model
            tool_choice: Passed through as-is, e.g. "auto", "required" or
                {"type": "function", "function": {"name": ...}}

        Returns:
            The first choice's message, tool calls included
        """
        request = ChatRequest.build(self._model, messages, tools=tools, tool_choice=tool_choice)
        return self._complete(request)

    def chat_stream(self, messages: Sequence[Message], on_token: Optional[TokenSink] = None) -> str:
        """
        Create a streaming chat completion.

        Tokens are passed to ``on_token`` as they arrive, on this thread,
        so a slow sink slows the read loop down.

        Args:
            messages: Conversation so far
            on_token: Called with each non-empty content delta, in order

        Returns:
            All tokens concatenated. A stream that ends without ``[DONE]``
            still counts as complete.

        Raises:
            GatewayConnectionError: If the exchange did not start
            GatewayRequestError: On a non-2xx status
            GatewayStreamError: If reading the body fails; carries the
                text received so far in ``partial_text``
        """
        request = ChatRequest.build(self._model, messages, stream=True)
        response = self.transport.open_stream(
            "POST",
            self.CHAT_COMPLETIONS_URL,
            self._headers("text/event-stream"),
            self._encode(request),
        )

        decoder = TokenStreamDecoder(on_token)
        try:
            if not response.is_success:
                try:
                    response.read()
                except httpx.HTTPError as e:
                    logger.debug(f"Could not read error body from {self._name}: {e}")
                    raise self._request_failed(response.status_code, "") from e
                raise self._request_failed(response.status_code, response.text)

            try:
                for line in response.iter_lines():
                    decoder.feed(line)
                    if decoder.done:
                        break
            except httpx.HTTPError as e:
                raise GatewayStreamError(
                    f"openai stream read failed: {e}",
                    gateway=self._name,
                    partial_text=decoder.text,
                ) from e
        finally:
            response.close()

        return decoder.text
