"""
Wire formats: multipart request bodies and SSE response streams.
"""

from .multipart import EncodedMultipart, encode_multipart, decode_file_content
from .sse import TokenStreamDecoder, decode_token_stream, parse_token

__all__ = [
    "EncodedMultipart",
    "encode_multipart",
    "decode_file_content",
    "TokenStreamDecoder",
    "decode_token_stream",
    "parse_token",
]
