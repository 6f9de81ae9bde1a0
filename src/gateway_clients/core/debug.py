"""
Opt-in request tracing.

Tracing is switched on by the ``GO_LOG`` environment variable
(``debug``, ``1`` or ``true``). The toggle is resolved once, when a
:class:`DebugTrace` is built, and the trace object is handed to the
transport rather than re-reading the environment per request.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEBUG_ENV_VAR = "GO_LOG"
_ENABLED_VALUES = frozenset({"debug", "1", "true"})


def debug_enabled(environ: Optional[Mapping[str, str]] = None) -> bool:
    """
    Check whether request tracing is enabled.

    Args:
        environ: Environment mapping to read. Defaults to ``os.environ``.

    Returns:
        True if ``GO_LOG`` is set to an enabling value
    """
    env = os.environ if environ is None else environ
    value = (env.get(DEBUG_ENV_VAR) or "").strip().lower()
    return value in _ENABLED_VALUES


@dataclass(frozen=True)
class DebugTrace:
    """Emits one line before and one summary line after each request."""

    enabled: bool = False
    sink: logging.Logger = field(default=logger, compare=False, repr=False)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DebugTrace":
        return cls(enabled=debug_enabled(environ))

    def request(self, label: str, method: str, url: str) -> None:
        if self.enabled:
            self.sink.info(f"{label} {method} {url}")

    def response(self, label: str, method: str, url: str, status_code: int, size: Optional[int]) -> None:
        if not self.enabled:
            return
        if size is None:
            self.sink.info(f"{label} {method} {url} -> status={status_code} streaming")
        else:
            self.sink.info(f"{label} {method} {url} -> status={status_code} bytes={size}")

    def failure(self, label: str, method: str, url: str, error: BaseException) -> None:
        if self.enabled:
            self.sink.info(f"{label} {method} {url} -> err={error}")
