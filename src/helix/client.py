"""Helix API client.

The client composes the request pipeline: parameters are encoded by
:mod:`helix.params`, sent by :class:`helix.executor.RequestExecutor` with
headers resolved from the :class:`helix.credentials.CredentialStore`, and
decoded into a :class:`helix.types.Response`.

Usage
-----

.. code-block:: python

    from helix import Client, ClientConfig

    client = Client(ClientConfig(client_id="abc", app_access_token="token"))
    response = client.get("/users", UsersParams(logins=["twitch"]), into=Users)
    if response.ok:
        print(response.data)

Per-endpoint wrappers only need to supply a path, a parameter dataclass and
a success shape.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence
from urllib.parse import urlencode

from .auth import AUTH_PATHS
from .config import AUTH_BASE_URL, ClientConfig
from .context import RequestContext
from .credentials import Credentials, CredentialStore, RefreshListener
from .errors import (
    DecodeError,
    RefreshError,
    RequestCancelledError,
    TransportError,
)
from .executor import RequestExecutor, build_request
from .models import (
    AccessCredentials,
    AppAccessTokenParams,
    AuthorizationQuery,
    AuthorizationURLParams,
    RefreshTokenParams,
    RevokeAccessTokenParams,
    UserAccessTokenParams,
    ValidateTokenResponse,
)
from .params import encode_query
from .transport import SessionTransport, Transport
from .types import BodyMode, Response

logger = logging.getLogger(__name__)


class Client:
    """Concurrency-safe client for the Helix API.

    Construction fails with :class:`~helix.errors.ConfigurationError` (raised
    by :class:`~helix.config.ClientConfig`) when no client ID is provided.
    """

    def __init__(self, config: ClientConfig) -> None:
        self._config = config
        self._credentials = CredentialStore(
            Credentials(
                client_id=config.client_id,
                client_secret=config.client_secret,
                app_access_token=config.app_access_token,
                user_access_token=config.user_access_token,
                refresh_token=config.refresh_token,
                extension_signed_token=config.extension.signed_jwt_token,
                user_agent=config.user_agent,
                redirect_uri=config.redirect_uri,
            )
        )
        self._owns_transport = config.transport is None
        self._transport: Transport = config.transport or SessionTransport(
            config.transport_config
        )
        self._executor = RequestExecutor(
            credentials=self._credentials,
            transport=self._transport,
            refresher=self._refresh_token,
            rate_limit_hook=config.rate_limit_hook,
            context=config.context,
        )

    # -- context manager -----------------------------------------------------

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._credentials.close()
        if self._owns_transport and isinstance(self._transport, SessionTransport):
            self._transport.close()

    # -- configuration -------------------------------------------------------

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def last_response(self) -> Response[Any] | None:
        """Most recent response observed while a rate-limit hook is set."""
        return self._executor.last_response

    # -- request pipeline ----------------------------------------------------

    def send_request(
        self,
        method: str,
        path: str,
        params: Any = None,
        into: Any = None,
        mode: BodyMode = BodyMode.QUERY,
        *,
        context: RequestContext | None = None,
        bearer_token: str | None = None,
        allow_refresh: bool = True,
    ) -> Response[Any]:
        request = build_request(
            method, path, params, mode, self._config.api_base_url
        )
        return self._executor.execute(
            request,
            into,
            context=context,
            bearer_token=bearer_token,
            allow_refresh=allow_refresh,
        )

    def get(
        self,
        path: str,
        params: Any = None,
        into: Any = None,
        *,
        context: RequestContext | None = None,
    ) -> Response[Any]:
        return self.send_request("GET", path, params, into, context=context)

    def post(
        self,
        path: str,
        params: Any = None,
        into: Any = None,
        *,
        context: RequestContext | None = None,
    ) -> Response[Any]:
        return self.send_request("POST", path, params, into, context=context)

    def put(
        self,
        path: str,
        params: Any = None,
        into: Any = None,
        *,
        context: RequestContext | None = None,
    ) -> Response[Any]:
        return self.send_request("PUT", path, params, into, context=context)

    def delete(
        self,
        path: str,
        params: Any = None,
        into: Any = None,
        *,
        context: RequestContext | None = None,
    ) -> Response[Any]:
        return self.send_request("DELETE", path, params, into, context=context)

    def patch_as_json(
        self,
        path: str,
        params: Any = None,
        into: Any = None,
        *,
        context: RequestContext | None = None,
    ) -> Response[Any]:
        return self.send_request(
            "PATCH", path, params, into, BodyMode.JSON, context=context
        )

    def post_as_json(
        self,
        path: str,
        params: Any = None,
        into: Any = None,
        *,
        context: RequestContext | None = None,
    ) -> Response[Any]:
        return self.send_request(
            "POST", path, params, into, BodyMode.JSON, context=context
        )

    def put_as_json(
        self,
        path: str,
        params: Any = None,
        into: Any = None,
        *,
        context: RequestContext | None = None,
    ) -> Response[Any]:
        return self.send_request(
            "PUT", path, params, into, BodyMode.JSON, context=context
        )

    def post_as_form(
        self,
        path: str,
        params: Any = None,
        into: Any = None,
        *,
        context: RequestContext | None = None,
    ) -> Response[Any]:
        return self.send_request(
            "POST", path, params, into, BodyMode.FORM, context=context
        )

    # -- authentication ------------------------------------------------------

    def get_authorization_url(self, params: AuthorizationURLParams) -> str:
        """Build the URL a user opens to authorize this application."""
        credentials = self._credentials.snapshot()
        query = AuthorizationQuery(
            response_type=params.response_type,
            client_id=credentials.client_id,
            redirect_uri=credentials.redirect_uri,
            scope=" ".join(params.scopes),
            state=params.state,
            force_verify="true" if params.force_verify else "",
        )
        return (
            AUTH_BASE_URL
            + AUTH_PATHS["authorize"]
            + "?"
            + urlencode(encode_query(query))
        )

    def request_app_access_token(
        self,
        scopes: Sequence[str] = (),
        *,
        context: RequestContext | None = None,
    ) -> Response[AccessCredentials]:
        credentials = self._credentials.snapshot()
        params = AppAccessTokenParams(
            client_id=credentials.client_id,
            client_secret=credentials.client_secret,
            grant_type="client_credentials",
            scope=" ".join(scopes),
        )
        return self.send_request(
            "POST",
            AUTH_PATHS["token"],
            params,
            AccessCredentials,
            BodyMode.FORM,
            context=context,
            allow_refresh=False,
        )

    def request_user_access_token(
        self,
        code: str,
        *,
        context: RequestContext | None = None,
    ) -> Response[AccessCredentials]:
        credentials = self._credentials.snapshot()
        params = UserAccessTokenParams(
            client_id=credentials.client_id,
            client_secret=credentials.client_secret,
            code=code,
            grant_type="authorization_code",
            redirect_uri=credentials.redirect_uri,
        )
        return self.send_request(
            "POST",
            AUTH_PATHS["token"],
            params,
            AccessCredentials,
            BodyMode.FORM,
            context=context,
            allow_refresh=False,
        )

    def refresh_user_access_token(
        self,
        refresh_token: str,
        *,
        context: RequestContext | None = None,
    ) -> Response[AccessCredentials]:
        """Exchange ``refresh_token`` for a new token pair.

        The credential store is not modified; see the automatic refresh
        performed on 401 responses for that.
        """
        credentials = self._credentials.snapshot()
        params = RefreshTokenParams(
            grant_type="refresh_token",
            refresh_token=refresh_token,
            client_id=credentials.client_id,
            client_secret=credentials.client_secret,
        )
        return self.send_request(
            "POST",
            AUTH_PATHS["token"],
            params,
            AccessCredentials,
            BodyMode.FORM,
            context=context,
            allow_refresh=False,
        )

    def revoke_user_access_token(
        self,
        access_token: str,
        *,
        context: RequestContext | None = None,
    ) -> Response[None]:
        params = RevokeAccessTokenParams(
            client_id=self._credentials.snapshot().client_id,
            token=access_token,
        )
        return self.send_request(
            "POST",
            AUTH_PATHS["revoke"],
            params,
            None,
            BodyMode.FORM,
            context=context,
            allow_refresh=False,
        )

    def validate_token(
        self,
        access_token: str,
        *,
        context: RequestContext | None = None,
    ) -> tuple[bool, Response[ValidateTokenResponse]]:
        """Validate ``access_token`` without touching stored credentials."""
        response = self.send_request(
            "GET",
            AUTH_PATHS["validate"],
            None,
            ValidateTokenResponse,
            context=context,
            bearer_token=access_token,
            allow_refresh=False,
        )
        return response.status_code == 200, response

    def _refresh_token(self, context: RequestContext) -> None:
        refresh_token = self._credentials.get_refresh_token()
        try:
            response = self.refresh_user_access_token(
                refresh_token, context=context
            )
        except RequestCancelledError:
            raise
        except TransportError as exc:
            raise RefreshError(-1, str(exc)) from exc
        except DecodeError as exc:
            raise RefreshError(exc.status_code, str(exc)) from exc

        data = response.data
        if response.status_code != 200 or data is None:
            message = response.error.message if response.error else ""
            raise RefreshError(response.status_code, message)

        self._credentials.store_refreshed_tokens(
            data.access_token, data.refresh_token
        )
        logger.info("Refreshed helix user access token")

    # -- credentials ---------------------------------------------------------

    def get_app_access_token(self) -> str:
        return self._credentials.get_app_access_token()

    def set_app_access_token(self, access_token: str) -> None:
        self._credentials.set_app_access_token(access_token)

    def get_user_access_token(self) -> str:
        return self._credentials.get_user_access_token()

    def set_user_access_token(self, access_token: str) -> None:
        self._credentials.set_user_access_token(access_token)

    def get_refresh_token(self) -> str:
        return self._credentials.get_refresh_token()

    def set_refresh_token(self, refresh_token: str) -> None:
        self._credentials.set_refresh_token(refresh_token)

    def get_extension_signed_jwt_token(self) -> str:
        return self._credentials.get_extension_signed_token()

    def set_extension_signed_jwt_token(self, jwt: str) -> None:
        self._credentials.set_extension_signed_token(jwt)

    def get_user_agent(self) -> str:
        return self._credentials.get_user_agent()

    def set_user_agent(self, user_agent: str) -> None:
        self._credentials.set_user_agent(user_agent)

    def get_redirect_uri(self) -> str:
        return self._credentials.get_redirect_uri()

    def set_redirect_uri(self, uri: str) -> None:
        self._credentials.set_redirect_uri(uri)

    def on_user_access_token_refreshed(self, listener: RefreshListener) -> None:
        """Register ``listener(access_token, refresh_token)`` for refreshes.

        The listener runs on a worker thread; use
        :meth:`wait_for_notifications` to wait for it.
        """
        self._credentials.on_user_access_token_refreshed(listener)

    def wait_for_notifications(self, timeout: float | None = None) -> None:
        self._credentials.wait_for_notifications(timeout)
