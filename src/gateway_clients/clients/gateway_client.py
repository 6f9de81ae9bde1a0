"""
Tool gateway client.

Sends API-key authenticated JSON and multipart requests to one
configurable backend. Responses are returned as status code plus raw
body; a non-2xx status is not an error here because the gateway is a
generic proxy whose success codes are defined by the caller.
"""

import json
import logging
from typing import Optional, Set, Dict, Any, Mapping

import httpx

from ..core.config import GatewayClientConfig
from ..core.debug import DebugTrace
from ..core.errors import (
    GatewayConfigError,
    GatewayConnectionError,
    GatewayDecodeError,
    GatewayEncodingError,
    GatewayRequestError,
)
from ..core.interface import AbstractClient, ClientCapability
from ..core.transport import HTTPTransport, DEFAULT_TIMEOUT
from ..models.gateway import GatewayCall, GatewayResponse, MultipartPayload
from ..wire.multipart import encode_multipart
from .tool_catalog import ToolCatalog

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"


class GatewayClient(AbstractClient):
    """
    Client for the tool gateway.

    Every request carries ``X-API-Key`` and ``Accept: application/json``.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        http_client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT,
        debug: Optional[DebugTrace] = None,
        name: str = "tool-gateway",
    ):
        """
        Initialize gateway client.

        Args:
            base_url: Gateway base URL; paths are joined onto it
            api_key: Static API key sent as ``X-API-Key``
            http_client: Shared ``httpx.Client``. A private one is created if omitted.
            timeout: Request timeout in seconds for the private client
            debug: Request trace hook. Resolved from ``GO_LOG`` if omitted.
            name: Name used in logs and errors
        """
        super().__init__(HTTPTransport(name, http_client=http_client, timeout=timeout, debug=debug))
        self._name = name
        self._base_url = base_url or ""
        self._api_key = api_key or ""

    @classmethod
    def from_config(
        cls,
        config: GatewayClientConfig,
        http_client: Optional[httpx.Client] = None,
        debug: Optional[DebugTrace] = None,
    ) -> "GatewayClient":
        return cls(
            base_url=config.base_url,
            api_key=config.api_key,
            http_client=http_client,
            timeout=config.timeout,
            debug=debug,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def capabilities(self) -> Set[ClientCapability]:
        return {
            ClientCapability.JSON_REQUESTS,
            ClientCapability.MULTIPART_UPLOADS,
        }

    def build_url(self, path: str) -> str:
        """
        Join ``path`` onto the base URL with exactly one slash between them.

        Raises:
            GatewayConfigError: If the base URL is empty or blank
        """
        base = self._base_url.strip().rstrip("/")
        if not base:
            raise GatewayConfigError("tool gateway base url is empty", gateway=self._name)
        if not path.startswith("/"):
            path = "/" + path
        return base + path

    def _request_url(self, path: str, query: Optional[Mapping[str, str]]) -> httpx.URL:
        """Build the URL and merge ``query`` over any query string it already has."""
        raw = self.build_url(path)
        try:
            url = httpx.URL(raw)
            if query:
                url = url.copy_merge_params(dict(query))
        except httpx.InvalidURL as e:
            raise GatewayConnectionError(f"invalid request url {raw!r}: {e}", gateway=self._name) from e
        return url

    def _headers(self, content_type: Optional[str] = None) -> Dict[str, str]:
        headers = {
            API_KEY_HEADER: self._api_key,
            "Accept": "application/json",
        }
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    def _send(
        self,
        method: str,
        url: httpx.URL,
        headers: Dict[str, str],
        content: Optional[bytes] = None,
    ) -> GatewayResponse:
        response = self.transport.send(method, url, headers, content)
        return GatewayResponse(status_code=response.status_code, content=response.content)

    def get(self, path: str) -> GatewayResponse:
        """
        Issue an authenticated GET.

        Returns:
            Status code and raw body, whatever the status

        Raises:
            GatewayConfigError: If the base URL is empty
            GatewayConnectionError: If the exchange did not complete
        """
        url = self._request_url(path, None)
        return self._send("GET", url, self._headers())

    def do_json(
        self,
        method: str,
        path: str,
        query: Optional[Mapping[str, str]] = None,
        body: Any = None,
    ) -> GatewayResponse:
        """
        Issue an authenticated request with an optional JSON body.

        Args:
            method: HTTP method, case-insensitive
            path: Path joined onto the base URL
            query: Query parameters, overwriting same-named ones in the URL
            body: JSON-serializable body. Nothing is sent when None.

        Raises:
            GatewayConfigError: If the base URL is empty
            GatewayEncodingError: If ``body`` cannot be serialized
            GatewayConnectionError: If the exchange did not complete
        """
        url = self._request_url(path, query)

        content = None
        content_type = None
        if body is not None:
            try:
                content = json.dumps(body).encode("utf-8")
            except (TypeError, ValueError) as e:
                raise GatewayEncodingError(f"request body is not JSON serializable: {e}", gateway=self._name) from e
            content_type = "application/json"

        return self._send(method.strip().upper(), url, self._headers(content_type), content)

    def do_multipart(
        self,
        method: str,
        path: str,
        query: Optional[Mapping[str, str]] = None,
        payload: Optional[MultipartPayload] = None,
    ) -> GatewayResponse:
        """
        Issue an authenticated multipart/form-data request.

        The body is fully encoded before anything is sent; an invalid file
        means no request is made.

        Raises:
            GatewayConfigError: If the base URL is empty
            GatewayEncodingError: If a file's base64 content is invalid
            GatewayConnectionError: If the exchange did not complete
        """
        url = self._request_url(path, query)

        try:
            encoded = encode_multipart(payload or MultipartPayload())
        except GatewayEncodingError as e:
            e.gateway = self._name
            raise

        return self._send(method.strip().upper(), url, self._headers(encoded.content_type), encoded.body)

    def dispatch(self, call: GatewayCall) -> GatewayResponse:
        """
        Send a request described by tool-call arguments.

        Multipart payloads take precedence over a JSON body.

        Raises:
            GatewayInvalidRequestError: If method or path is missing
        """
        call = call.normalized()
        if call.multipart is not None:
            return self.do_multipart(call.method, call.path, call.query, call.multipart)
        return self.do_json(call.method, call.path, call.query, call.body)

    def fetch_catalog(self, path: str = "/openapi.json") -> ToolCatalog:
        """
        Fetch the gateway's OpenAPI document as a tool allowlist.

        Raises:
            GatewayRequestError: If the gateway answers with a non-2xx status
            GatewayDecodeError: If the document is not valid JSON
        """
        response = self.get(path)
        if not response.ok:
            raise GatewayRequestError(
                f"openapi fetch failed: status={response.status_code}",
                gateway=self._name,
                status_code=response.status_code,
                body=response.text,
            )

        try:
            document = response.json()
        except ValueError as e:
            raise GatewayDecodeError(f"openapi invalid json: {e}", gateway=self._name) from e

        catalog = ToolCatalog.from_openapi(document)
        logger.info(f"Loaded {len(catalog)} gateway operations from {path}")
        return catalog
