"""
OpenAPI-backed allowlist of gateway operations.
"""

from typing import Any, Dict, List, Mapping, Tuple

HTTP_METHODS = frozenset({"get", "put", "post", "delete", "options", "head", "patch", "trace"})


def match_openapi_path(spec_path: str, actual_path: str) -> bool:
    """
    Match a request path against an OpenAPI path template.

    ``{param}`` segments match any non-blank segment; all other segments
    must be equal and the segment counts must agree.
    """
    sp = spec_path.strip()
    ap = actual_path.strip()
    if sp == ap:
        return True

    sp = sp.strip("/")
    ap = ap.strip("/")
    if not sp or not ap:
        return sp == ap

    spec_segments = sp.split("/")
    actual_segments = ap.split("/")
    if len(spec_segments) != len(actual_segments):
        return False

    for seg, actual in zip(spec_segments, actual_segments):
        if seg.startswith("{") and seg.endswith("}"):
            if not actual.strip():
                return False
            continue
        if seg != actual:
            return False
    return True


class ToolCatalog:
    """
    Operations the gateway publishes in its OpenAPI document.

    A catalog is a snapshot; fetch a new one to pick up changes.
    """

    def __init__(self, paths: Mapping[str, Mapping[str, Any]]):
        self._paths: Dict[str, frozenset] = {
            path: frozenset(str(m).lower() for m in (ops or {}))
            for path, ops in paths.items()
        }

    @classmethod
    def from_openapi(cls, document: Mapping[str, Any]) -> "ToolCatalog":
        paths = document.get("paths") if isinstance(document, Mapping) else None
        if not isinstance(paths, Mapping):
            paths = {}
        return cls({p: ops for p, ops in paths.items() if isinstance(ops, Mapping)})

    def __len__(self) -> int:
        return len(self.operations())

    def operations(self) -> List[Tuple[str, str]]:
        """List ``(METHOD, path)`` pairs, sorted by path."""
        return [
            (method.upper(), path)
            for path in sorted(self._paths)
            for method in sorted(self._paths[path])
            if method in HTTP_METHODS
        ]

    def is_allowed(self, method: str, path: str) -> bool:
        """
        Check whether ``method`` on ``path`` is a published operation.

        An exact path entry decides on its own; otherwise any matching
        path template that lists the method allows it.
        """
        m = method.strip().lower()
        p = path.strip()

        if p in self._paths:
            return m in self._paths[p]

        for spec_path, methods in self._paths.items():
            if m in methods and match_openapi_path(spec_path, p):
                return True
        return False
