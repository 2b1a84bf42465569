"""Exception types shared by the translation engine and the HTTP layer."""
from __future__ import annotations

from typing import Iterable


class CursorProxyError(RuntimeError):
    """Base class for all proxy failures."""


class AuthConfigError(CursorProxyError):
    """Raised when no usable credential can be resolved."""


class UnsupportedTool(CursorProxyError):
    """Raised when a tool name has no capability id on the remote side."""

    def __init__(self, name: str, supported: Iterable[str]) -> None:
        self.name = name
        self.supported = sorted(set(supported))
        super().__init__(
            f"Unsupported tool: {name}. Available tools: {', '.join(self.supported)}"
        )


class InvalidEnvelope(CursorProxyError):
    """Raised when the outbound request does not pass schema validation."""


class MalformedFrame(CursorProxyError):
    """Raised internally for a frame that cannot be decoded; never escapes the decoder."""


class UpstreamError(CursorProxyError):
    """Raised when the remote service answers with a non-success status."""

    def __init__(self, status: int, detail: str) -> None:
        self.status = status
        self.detail = detail
        super().__init__(f"Upstream {status}: {detail}")


class UpstreamTimeout(CursorProxyError):
    """Raised when the remote service does not answer in time."""


class UpstreamDisconnect(CursorProxyError):
    """Raised when the connection to the remote service fails or drops."""
