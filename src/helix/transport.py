"""Pluggable HTTP transport.

The execution loop hands a fully prepared request to a :class:`Transport`
and receives a ``requests.Response`` back. Any failure to dispatch is raised
as a :class:`~helix.errors.TransportError`.
"""

from __future__ import annotations

from typing import Protocol

import requests

from .config import TransportConfig
from .errors import NetworkError, RequestTimeoutError, TransportError

Timeout = float | tuple[float, float] | None


class Transport(Protocol):
    """Anything able to send a prepared request."""

    def send(
        self, request: requests.PreparedRequest, *, timeout: Timeout
    ) -> requests.Response: ...


class SessionTransport:
    """Default transport backed by a ``requests.Session``."""

    def __init__(self, config: TransportConfig | None = None) -> None:
        """Create a new SessionTransport.

        Args:
            config: Timeouts, TLS verification and default headers.
        """
        self._config = config or TransportConfig()
        self._session = requests.Session()
        self._session.headers.update(self._config.default_headers)

    def _get_timeout(self, override: float | None) -> Timeout:
        """Resolve timeout preference."""
        if override is not None:
            if override <= 0:
                raise RequestTimeoutError("request deadline already exceeded")
            configured = self._configured_timeout()
            if isinstance(configured, tuple):
                return (min(configured[0], override), min(configured[1], override))
            if configured is not None:
                return min(configured, override)
            return override
        return self._configured_timeout()

    def _configured_timeout(self) -> Timeout:
        if (
            self._config.connect_timeout_seconds is not None
            and self._config.read_timeout_seconds is not None
        ):
            return (
                self._config.connect_timeout_seconds,
                self._config.read_timeout_seconds,
            )
        return self._config.timeout_seconds

    def send(
        self, request: requests.PreparedRequest, *, timeout: Timeout = None
    ) -> requests.Response:
        if isinstance(timeout, tuple):
            resolved: Timeout = timeout
        else:
            resolved = self._get_timeout(timeout)
        for name, value in self._session.headers.items():
            request.headers.setdefault(name, value)
        try:
            return self._session.send(
                request,
                timeout=resolved,
                verify=self._config.verify_tls,
                allow_redirects=True,
            )
        except requests.exceptions.RequestException as exc:
            raise map_request_exception(exc) from exc

    def close(self) -> None:
        self._session.close()


def map_request_exception(
    error: requests.exceptions.RequestException,
) -> TransportError:
    """Map requests exceptions to client errors."""
    if isinstance(error, requests.exceptions.Timeout):
        return RequestTimeoutError(str(error))

    if isinstance(error, requests.exceptions.ConnectionError):
        return NetworkError(str(error))

    # Generic fallback for other request exceptions
    return TransportError(str(error))
