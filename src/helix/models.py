"""Payload shapes shared by the pipeline and the auth-realm operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .params import param


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ErrorBody(_Payload):
    """The provider's common ``{error, status, message}`` body."""

    error: str = ""
    status: int = 0
    message: str = ""


class AccessCredentials(_Payload):
    access_token: str
    refresh_token: str = ""
    expires_in: int = 0
    scope: list[str] = Field(default_factory=list)
    token_type: str = ""


class ValidateTokenResponse(_Payload):
    client_id: str = ""
    login: str = ""
    scopes: list[str] = Field(default_factory=list)
    user_id: str = ""
    expires_in: int = 0


class Pagination(_Payload):
    cursor: str = ""


class DateRange(_Payload):
    started_at: datetime | None = None
    ended_at: datetime | None = None


@dataclass
class RefreshTokenParams:
    grant_type: str = param(form="grant_type")
    refresh_token: str = param(form="refresh_token")
    client_id: str = param(form="client_id")
    client_secret: str = param(form="client_secret")


@dataclass
class AppAccessTokenParams:
    client_id: str = param(form="client_id")
    client_secret: str = param(form="client_secret")
    grant_type: str = param(form="grant_type")
    scope: str = param(form="scope")


@dataclass
class UserAccessTokenParams:
    client_id: str = param(form="client_id")
    client_secret: str = param(form="client_secret")
    code: str = param(form="code")
    grant_type: str = param(form="grant_type")
    redirect_uri: str = param(form="redirect_uri")


@dataclass
class RevokeAccessTokenParams:
    client_id: str = param(form="client_id")
    token: str = param(form="token")


@dataclass
class AuthorizationURLParams:
    """Options for the browser authorization URL.

    ``client_id`` and ``redirect_uri`` are filled in from the client.
    """

    response_type: str = param(query="response_type")
    scopes: list[str] = field(default_factory=list)
    state: str = param(query="state")
    force_verify: bool = param(query="force_verify")


@dataclass
class AuthorizationQuery:
    response_type: str = param(query="response_type")
    client_id: str = param(query="client_id")
    redirect_uri: str = param(query="redirect_uri")
    scope: str = param(query="scope")
    state: str = param(query="state")
    force_verify: str = param(query="force_verify")
