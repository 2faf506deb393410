"""Error taxonomy for the Helix client.

Every failure surfaced to a caller is a subclass of :class:`HelixError`.
Only :class:`RefreshError` is recovered internally by the execution loop.
"""

from __future__ import annotations


class HelixError(Exception):
    """Base class for all client errors."""


class ConfigurationError(HelixError, ValueError):
    """Raised when a client configuration is missing required values."""


class EncodingError(HelixError):
    """Raised when a parameter value cannot be encoded into a request."""


class TransportError(HelixError):
    """Raised when a request could not be dispatched or its body read."""


class RequestTimeoutError(TransportError):
    """Raised when the transport or the request deadline timed out."""


class NetworkError(TransportError):
    """Raised on connection-level failures."""


class RequestCancelledError(TransportError):
    """Raised when the request context was cancelled before dispatch."""


class DecodeError(HelixError):
    """Raised when a response body does not match the expected shape."""

    def __init__(self, message: str, *, status_code: int, body: bytes) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class RefreshError(HelixError):
    """Raised when exchanging a refresh token fails.

    ``status_code`` is ``-1`` when no response was obtained.
    """

    def __init__(self, status_code: int, message: str = "") -> None:
        super().__init__(f"failed to refresh token: ({status_code}: {message})")
        self.status_code = status_code
        self.message = message


class RateLimitAbort(HelixError):
    """Raise from a rate-limit hook to stop the request before it is sent."""
