"""
multipart/form-data encoding for gateway uploads.
"""

import base64
import binascii
from dataclasses import dataclass
from typing import List, Optional, Tuple
from uuid import uuid4

from ..core.errors import GatewayEncodingError
from ..models.gateway import MultipartFile, MultipartPayload

DEFAULT_FIELD_NAME = "files"
DEFAULT_FILE_NAME = "upload"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

_CRLF = b"\r\n"


@dataclass(frozen=True)
class EncodedMultipart:
    boundary: str
    content_type: str
    body: bytes


def _or_default(value: str, default: str) -> str:
    value = (value or "").strip()
    return value or default


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def decode_file_content(file: MultipartFile) -> bytes:
    """
    Decode a file's base64 text.

    Line breaks are ignored; anything else outside the base64 alphabet,
    or bad padding, is an error.

    Raises:
        GatewayEncodingError: If the content is not valid base64
    """
    text = (file.base64_data or "").strip().replace("\r", "").replace("\n", "")
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        name = _or_default(file.file_name, DEFAULT_FILE_NAME)
        raise GatewayEncodingError(f"invalid base64 content for file {name!r}: {e}") from e


def encode_multipart(payload: MultipartPayload, boundary: Optional[str] = None) -> EncodedMultipart:
    """
    Encode fields and files into a multipart/form-data body.

    All files are decoded before anything is written, so an invalid file
    leaves no partial body behind.

    Args:
        payload: Fields and files to encode
        boundary: Part boundary. A random one is generated if omitted.

    Returns:
        Boundary, matching Content-Type header value and body bytes

    Raises:
        GatewayEncodingError: If any file content is not valid base64
    """
    decoded: List[Tuple[MultipartFile, bytes]] = [
        (f, decode_file_content(f)) for f in payload.files
    ]

    boundary = boundary or uuid4().hex
    delimiter = b"--" + boundary.encode("ascii") + _CRLF
    parts: List[bytes] = []

    for name, values in payload.fields.items():
        for value in values:
            parts.append(
                delimiter
                + f'Content-Disposition: form-data; name="{_quote(name)}"'.encode("utf-8")
                + _CRLF
                + _CRLF
                + value.encode("utf-8")
                + _CRLF
            )

    for f, data in decoded:
        field = _or_default(f.field_name, DEFAULT_FIELD_NAME)
        filename = _or_default(f.file_name, DEFAULT_FILE_NAME)
        content_type = _or_default(f.content_type, DEFAULT_CONTENT_TYPE)
        parts.append(
            delimiter
            + f'Content-Disposition: form-data; name="{_quote(field)}"; filename="{_quote(filename)}"'.encode("utf-8")
            + _CRLF
            + f"Content-Type: {content_type}".encode("utf-8")
            + _CRLF
            + _CRLF
            + data
            + _CRLF
        )

    parts.append(b"--" + boundary.encode("ascii") + b"--" + _CRLF)

    return EncodedMultipart(
        boundary=boundary,
        content_type=f"multipart/form-data; boundary={boundary}",
        body=b"".join(parts),
    )
