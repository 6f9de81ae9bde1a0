"""
Shared HTTP execution for the gateway and chat clients.

Wraps a synchronous ``httpx.Client``: issues exactly one request per
call, maps I/O failures to :class:`GatewayConnectionError` and feeds the
debug trace. Timeouts and cancellation belong to the injected client.
"""

import logging
from typing import Mapping, Optional, Union

import httpx

from .debug import DebugTrace
from .errors import GatewayConnectionError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

URLTypes = Union[str, httpx.URL]


class HTTPTransport:
    """
    Single-shot request executor.

    When no ``http_client`` is given a private ``httpx.Client`` is created
    up front and closed by :meth:`close`. An injected client is never
    closed here; its owner manages it.
    """

    def __init__(
        self,
        label: str,
        http_client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT,
        debug: Optional[DebugTrace] = None,
    ):
        """
        Initialize the transport.

        Args:
            label: Name used in trace lines and error attribution
            http_client: Client to send requests with
            timeout: Timeout for the private client, ignored when one is injected
            debug: Trace hook. Resolved from ``GO_LOG`` when omitted.
        """
        self.label = label
        self.debug = debug if debug is not None else DebugTrace.from_env()
        self._owns_client = http_client is None
        self._client = http_client if http_client is not None else httpx.Client(timeout=timeout)

    @property
    def client(self) -> httpx.Client:
        return self._client

    def send(
        self,
        method: str,
        url: URLTypes,
        headers: Mapping[str, str],
        content: Optional[bytes] = None,
    ) -> httpx.Response:
        """
        Send a request and read the whole response body.

        Returns:
            The response, whatever its status code

        Raises:
            GatewayConnectionError: If the exchange did not complete
        """
        self.debug.request(self.label, method, str(url))
        try:
            response = self._client.request(method, url, headers=headers, content=content)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            self.debug.failure(self.label, method, str(url), e)
            raise GatewayConnectionError(str(e), gateway=self.label) from e

        self.debug.response(self.label, method, str(url), response.status_code, len(response.content))
        return response

    def open_stream(
        self,
        method: str,
        url: URLTypes,
        headers: Mapping[str, str],
        content: Optional[bytes] = None,
    ) -> httpx.Response:
        """
        Send a request and return as soon as the response headers arrive.

        The caller owns the returned response and must close it.

        Raises:
            GatewayConnectionError: If the exchange did not start
        """
        self.debug.request(self.label, method, str(url))
        try:
            request = self._client.build_request(method, url, headers=headers, content=content)
            response = self._client.send(request, stream=True)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            self.debug.failure(self.label, method, str(url), e)
            raise GatewayConnectionError(str(e), gateway=self.label) from e

        self.debug.response(self.label, method, str(url), response.status_code, None)
        return response

    def close(self) -> None:
        """Close the private HTTP client, if this transport created it."""
        if self._owns_client:
            self._client.close()
            logger.debug(f"Closed HTTP client for {self.label}")
