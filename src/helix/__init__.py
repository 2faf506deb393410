"""Client for the Twitch Helix API request pipeline."""

from __future__ import annotations

from .client import Client
from .config import (
    AUTH_BASE_URL,
    DEFAULT_API_BASE_URL,
    ClientConfig,
    ExtensionOptions,
    TransportConfig,
)
from .context import RequestContext
from .errors import (
    ConfigurationError,
    DecodeError,
    EncodingError,
    HelixError,
    NetworkError,
    RateLimitAbort,
    RefreshError,
    RequestCancelledError,
    RequestTimeoutError,
    TransportError,
)
from .models import (
    AccessCredentials,
    AuthorizationURLParams,
    DateRange,
    ErrorBody,
    Pagination,
    ValidateTokenResponse,
)
from .params import ParamKind, param
from .transport import SessionTransport, Transport
from .types import BodyMode, Failure, Response, Success

__all__ = [
    "AUTH_BASE_URL",
    "DEFAULT_API_BASE_URL",
    "AccessCredentials",
    "AuthorizationURLParams",
    "BodyMode",
    "Client",
    "ClientConfig",
    "ConfigurationError",
    "DateRange",
    "DecodeError",
    "EncodingError",
    "ErrorBody",
    "ExtensionOptions",
    "Failure",
    "HelixError",
    "NetworkError",
    "Pagination",
    "ParamKind",
    "RateLimitAbort",
    "RefreshError",
    "RequestCancelledError",
    "RequestContext",
    "RequestTimeoutError",
    "Response",
    "SessionTransport",
    "Success",
    "Transport",
    "TransportConfig",
    "TransportError",
    "ValidateTokenResponse",
    "param",
]
