"""Configuration models for the Helix client and its transport."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping

from .errors import ConfigurationError
from .types import RateLimitHook

if TYPE_CHECKING:
    from .context import RequestContext
    from .transport import Transport

DEFAULT_API_BASE_URL = "https://api.twitch.tv/helix"
AUTH_BASE_URL = "https://id.twitch.tv/oauth2"


def _default_headers() -> Mapping[str, str]:
    """Return immutable empty default headers mapping."""

    return MappingProxyType({})


@dataclass(frozen=True)
class TransportConfig:
    """Configuration for the default requests-backed transport."""

    default_headers: Mapping[str, str] = field(default_factory=_default_headers)
    verify_tls: bool = True
    connect_timeout_seconds: float | None = None
    read_timeout_seconds: float | None = None
    timeout_seconds: float | None = None

    def __post_init__(self) -> None:
        has_connect_timeout = self.connect_timeout_seconds is not None
        has_read_timeout = self.read_timeout_seconds is not None
        if has_connect_timeout != has_read_timeout:
            raise ConfigurationError(
                "connect_timeout_seconds and read_timeout_seconds "
                "must be set together"
            )
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ConfigurationError("timeout_seconds must be > 0 when provided")
        if (
            self.connect_timeout_seconds is not None
            and self.connect_timeout_seconds <= 0
        ):
            raise ConfigurationError(
                "connect_timeout_seconds must be > 0 when provided"
            )
        if (
            self.read_timeout_seconds is not None
            and self.read_timeout_seconds <= 0
        ):
            raise ConfigurationError(
                "read_timeout_seconds must be > 0 when provided"
            )

        # Freeze copied headers to avoid post-init mutation side effects.
        object.__setattr__(
            self,
            "default_headers",
            MappingProxyType(dict(self.default_headers)),
        )


@dataclass(frozen=True)
class ExtensionOptions:
    """Credentials used when calling the API on behalf of an extension."""

    owner_user_id: str = ""
    secret: str = ""
    signed_jwt_token: str = ""


@dataclass(frozen=True)
class ClientConfig:
    """Options accepted by :class:`helix.client.Client`.

    Tokens, the user agent and the redirect URI are only initial values;
    the client keeps their live copies in its credential store.
    """

    client_id: str
    client_secret: str = ""
    app_access_token: str = ""
    user_access_token: str = ""
    refresh_token: str = ""
    user_agent: str = ""
    redirect_uri: str = ""
    api_base_url: str = DEFAULT_API_BASE_URL
    rate_limit_hook: RateLimitHook | None = None
    extension: ExtensionOptions = field(default_factory=ExtensionOptions)
    transport: Transport | None = None
    transport_config: TransportConfig = field(default_factory=TransportConfig)
    context: RequestContext | None = None

    def __post_init__(self) -> None:
        if not self.client_id:
            raise ConfigurationError(
                "A client ID was not provided but is required"
            )
        if not self.api_base_url:
            object.__setattr__(self, "api_base_url", DEFAULT_API_BASE_URL)
        object.__setattr__(
            self, "api_base_url", self.api_base_url.rstrip("/")
        )
