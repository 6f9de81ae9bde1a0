"""
Tool gateway request and response models.
"""

import json
from dataclasses import dataclass
from typing import Optional, List, Dict, Any
from urllib.parse import parse_qsl, urlsplit

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..core.errors import GatewayDecodeError, GatewayInvalidRequestError
from .request import ToolCall


class MultipartFile(BaseModel):
    """
    File attachment for a multipart request.

    Blank names and content type are defaulted by the encoder. The
    content travels as base64 text under the ``base64`` key.
    """
    model_config = ConfigDict(populate_by_name=True)

    field_name: str = ""
    file_name: str = ""
    content_type: str = ""
    base64_data: str = Field(default="", alias="base64")


class MultipartPayload(BaseModel):
    """Form fields (a field may repeat) plus ordered file attachments."""
    fields: Dict[str, List[str]] = Field(default_factory=dict)
    files: List[MultipartFile] = Field(default_factory=list)

    @field_validator("fields", mode="before")
    @classmethod
    def _listify_fields(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {
                k: v if isinstance(v, (list, tuple)) else [v]
                for k, v in value.items()
            }
        return value

    @field_validator("files", mode="before")
    @classmethod
    def _null_files(cls, value: Any) -> Any:
        return [] if value is None else value


class GatewayCall(BaseModel):
    """
    Gateway request described by a model-issued tool call.

    Arguments look like ``{"method": "GET", "path": "/pop/stats",
    "query": {...}, "body": {...}}`` or carry a ``multipart`` payload
    instead of a body.
    """
    method: str = ""
    path: str = ""
    query: Optional[Dict[str, str]] = None
    body: Optional[Any] = None
    multipart: Optional[MultipartPayload] = None

    @field_validator("query", mode="before")
    @classmethod
    def _stringify_query(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {
                str(k): v if isinstance(v, str) else json.dumps(v)
                for k, v in value.items()
                if v is not None
            }
        return value

    @classmethod
    def from_arguments(cls, arguments: str) -> "GatewayCall":
        """
        Decode a tool call's serialized arguments.

        Raises:
            GatewayDecodeError: If the arguments are not a JSON object of the expected shape
        """
        try:
            return cls.model_validate_json(arguments or "{}")
        except ValidationError as e:
            raise GatewayDecodeError(f"invalid gateway call arguments: {e}") from e

    @classmethod
    def from_tool_call(cls, tool_call: ToolCall) -> "GatewayCall":
        return cls.from_arguments(tool_call.function.arguments)

    def normalized(self) -> "GatewayCall":
        """
        Return a copy ready to send.

        Upper-cases the method, trims the path and moves a query string
        embedded in the path into ``query``. Values given explicitly in
        ``query`` win over the embedded ones.

        Raises:
            GatewayInvalidRequestError: If method or path is blank
        """
        method = self.method.strip().upper()
        path = self.path.strip()
        if not method or not path:
            raise GatewayInvalidRequestError("gateway call needs both method and path")

        query = dict(self.query) if self.query else None
        if "?" in path:
            parts = urlsplit(path)
            embedded = parse_qsl(parts.query, keep_blank_values=True)
            if embedded:
                query = query or {}
                for key, value in embedded:
                    query.setdefault(key, value)
            if parts.path.strip():
                path = parts.path

        return self.model_copy(update={"method": method, "path": path, "query": query})


@dataclass(frozen=True)
class GatewayResponse:
    """Status code and raw body of a completed gateway exchange."""
    status_code: int
    content: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.content)
