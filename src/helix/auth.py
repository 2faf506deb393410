"""Realm selection and auth header resolution."""

from __future__ import annotations

from .config import AUTH_BASE_URL
from .credentials import Credentials

AUTH_PATHS = {
    "authorize": "/authorize",
    "token": "/token",
    "revoke": "/revoke",
    "validate": "/validate",
}

# Paths served by the auth realm; "/authorize" is only opened in a browser.
_AUTH_REALM_PATHS = (
    AUTH_PATHS["token"],
    AUTH_PATHS["revoke"],
    AUTH_PATHS["validate"],
)

VALIDATE_URL = AUTH_BASE_URL + AUTH_PATHS["validate"]


def base_url_for(path: str, api_base_url: str) -> str:
    """Return the realm base URL that serves ``path``."""
    for auth_path in _AUTH_REALM_PATHS:
        if auth_path in path:
            return AUTH_BASE_URL
    return api_base_url


def resolve_bearer_token(
    credentials: Credentials, override: str | None = None
) -> str:
    if override:
        return override

    token = ""
    if credentials.app_access_token:
        token = credentials.app_access_token
    if credentials.user_access_token:
        token = credentials.user_access_token
    if credentials.extension_signed_token:
        token = credentials.extension_signed_token
    return token


def resolve_headers(
    url: str,
    credentials: Credentials,
    *,
    bearer_token: str | None = None,
) -> dict[str, str]:
    """Build the identity and authorization headers for ``url``.

    Args:
        url: Fully qualified target URL without its query string.
        credentials: Snapshot taken from the credential store.
        bearer_token: Optional token that takes precedence over the store.
    """
    headers = {"Client-ID": credentials.client_id}

    if credentials.user_agent:
        headers["User-Agent"] = credentials.user_agent

    token = resolve_bearer_token(credentials, bearer_token)
    if token:
        # Token validation requires a different auth scheme.
        scheme = "OAuth" if url == VALIDATE_URL else "Bearer"
        headers["Authorization"] = f"{scheme} {token}"

    return headers
