"""Exception hierarchy shared by the config store, transport and codec."""

from __future__ import annotations

from typing import Optional


class ChatError(Exception):
    """Base class for every failure the chat loop knows how to report."""

    kind = "Error"


# ---------------------------------------------------------------------------
# Config store
# ---------------------------------------------------------------------------


class ConfigError(ChatError):
    kind = "ConfigError"


class ConfigNotFoundError(ConfigError):
    """No usable credential on disk yet (expected on first run)."""

    kind = "NotFound"


class ConfigIOError(ConfigError):
    kind = "IOFailure"


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------


class TransportError(ChatError):
    kind = "TransportError"


class NetworkUnreachableError(TransportError):
    kind = "NetworkUnreachable"


class TransportTimeoutError(TransportError):
    kind = "Timeout"


class HTTPStatusError(TransportError):
    """The server answered, but not with a 2xx status.

    The raw response body is kept so the caller can show the provider's
    own error message.
    """

    kind = "HTTPError"

    def __init__(self, status: int, body: bytes = b"", message: Optional[str] = None):
        self.status = status
        self.body = body
        super().__init__(message or f"server responded with HTTP {status}")


# ---------------------------------------------------------------------------
# Payload codec
# ---------------------------------------------------------------------------


class DecodeError(ChatError):
    kind = "DecodeError"


class MalformedResponseError(DecodeError):
    kind = "Malformed"


class EmptyCandidatesError(DecodeError):
    kind = "EmptyCandidates"


class RequestTooLargeError(ChatError):
    """The newest turn alone does not fit the configured history budget."""

    kind = "RequestTooLarge"
