"""
Gateway client error types.
"""

from typing import Optional


class GatewayError(Exception):
    """Base exception for gateway client errors."""

    def __init__(self, message: str, gateway: str = None):
        self.message = message
        self.gateway = gateway
        super().__init__(message)


class GatewayConfigError(GatewayError):
    """Raised when client configuration is missing or unusable."""
    pass


class GatewayEncodingError(GatewayError):
    """Raised when a request body cannot be encoded."""
    pass


class GatewayConnectionError(GatewayError):
    """Raised when the request could not be sent or the connection failed."""
    pass


class GatewayStreamError(GatewayConnectionError):
    """
    Raised when reading a streamed response body fails part way.

    Carries the text decoded before the failure in ``partial_text``.
    """

    def __init__(self, message: str, gateway: str = None, partial_text: str = ""):
        super().__init__(message, gateway)
        self.partial_text = partial_text


class GatewayRequestError(GatewayError):
    """Raised when a call that requires success gets a non-2xx status."""

    def __init__(
        self,
        message: str,
        gateway: str = None,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message, gateway)
        self.status_code = status_code
        self.body = body


class GatewayDecodeError(GatewayError):
    """Raised when a response body is not valid JSON of the expected shape."""
    pass


class GatewayEmptyResponseError(GatewayError):
    """Raised when a well-formed completion carries no choices."""
    pass


class GatewayInvalidRequestError(GatewayError):
    """Raised when tool-call arguments do not describe a usable request."""
    pass
