"""
Server-sent-event decoding for streamed chat completions.

Works on any iterable of text lines, so it can be driven by
``httpx.Response.iter_lines()`` or by a canned list in tests.
"""

import logging
from typing import Callable, Iterable, List, Optional

from pydantic import ValidationError

from ..models.response import StreamChunk

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"

TokenSink = Callable[[str], None]


def data_payload(line: str) -> Optional[str]:
    """Payload of a ``data:`` line, or None for any other line."""
    line = line.strip()
    if not line or not line.startswith(DATA_PREFIX):
        return None
    return line[len(DATA_PREFIX):].strip()


def parse_token(payload: str) -> str:
    """
    Extract the content delta from one chunk payload.

    Malformed JSON and chunks of the wrong shape yield an empty token.
    """
    try:
        chunk = StreamChunk.model_validate_json(payload)
    except ValidationError:
        logger.debug(f"Skipping malformed stream chunk: {payload[:200]!r}")
        return ""
    return chunk.content_delta()


class TokenStreamDecoder:
    """
    Incremental decoder that turns SSE lines into text tokens.

    Tokens are accumulated in arrival order and handed to ``on_token``
    as soon as they are parsed, on the caller's thread.
    """

    def __init__(self, on_token: Optional[TokenSink] = None):
        self._on_token = on_token
        self._tokens: List[str] = []
        self._done = False

    @property
    def done(self) -> bool:
        """True once the ``[DONE]`` sentinel has been seen."""
        return self._done

    @property
    def tokens(self) -> List[str]:
        return list(self._tokens)

    @property
    def text(self) -> str:
        return "".join(self._tokens)

    def feed(self, line: str) -> Optional[str]:
        """
        Process one line of the stream.

        Returns:
            The token the line carried, or None
        """
        if self._done:
            return None

        payload = data_payload(line)
        if payload is None:
            return None
        if payload == DONE_SENTINEL:
            self._done = True
            return None

        token = parse_token(payload)
        if not token:
            return None

        self._tokens.append(token)
        if self._on_token is not None:
            self._on_token(token)
        return token


def decode_token_stream(lines: Iterable[str], on_token: Optional[TokenSink] = None) -> str:
    """
    Decode a whole SSE stream into text.

    Stops at ``[DONE]`` or when ``lines`` is exhausted.

    Returns:
        Concatenation of every token, in arrival order
    """
    decoder = TokenStreamDecoder(on_token)
    for line in lines:
        decoder.feed(line)
        if decoder.done:
            break
    return decoder.text
