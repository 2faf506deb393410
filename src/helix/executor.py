"""Request building and the execution loop.

One call to :meth:`RequestExecutor.execute` runs the loop::

    rate-limit check -> send -> classify -> (resend | done)

A 401 triggers at most one token refresh per call, after which the request
is resent with re-resolved headers. When a rate-limit hook is configured the
classified response becomes the snapshot handed to the hook before the next
send, and a 429 is resent after the hook has had a chance to react.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable
from urllib.parse import urlencode

import requests
from requests.structures import CaseInsensitiveDict

from .auth import base_url_for, resolve_headers
from .context import RequestContext
from .credentials import CredentialStore
from .decoding import decode_failure, decode_success
from .errors import RefreshError, RequestCancelledError
from .params import QueryPairs, encode_form, encode_json, encode_query
from .transport import Transport, map_request_exception
from .types import BodyMode, Outcome, RateLimitHook, Response, Success

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"

Refresher = Callable[[RequestContext], None]


@dataclass(frozen=True)
class OutgoingRequest:
    """Transport-level request without auth headers."""

    method: str
    url: str
    query: QueryPairs = field(default_factory=list)
    body: bytes | None = None
    content_type: str | None = None

    def prepare(self, auth_headers: dict[str, str]) -> requests.PreparedRequest:
        headers = dict(auth_headers)
        if self.content_type is not None:
            headers["Content-Type"] = self.content_type
        return requests.Request(
            method=self.method,
            url=self.url,
            params=self.query or None,
            data=self.body,
            headers=headers,
        ).prepare()


def build_request(
    method: str,
    path: str,
    params: Any,
    mode: BodyMode,
    api_base_url: str,
) -> OutgoingRequest:
    """Encode ``params`` according to ``mode`` and pick the target realm."""
    url = base_url_for(path, api_base_url) + path
    query = encode_query(params)

    if mode is BodyMode.FORM:
        form = encode_form(params)
        if params is None or not form:
            return OutgoingRequest(method.upper(), url, query)
        return OutgoingRequest(
            method.upper(),
            url,
            query,
            body=urlencode(form).encode("utf-8"),
            content_type=FORM_CONTENT_TYPE,
        )

    if mode is BodyMode.JSON:
        payload = encode_json(params)
        if payload is None:
            return OutgoingRequest(method.upper(), url, query)
        return OutgoingRequest(
            method.upper(),
            url,
            query,
            body=json.dumps(payload).encode("utf-8"),
            content_type=JSON_CONTENT_TYPE,
        )

    return OutgoingRequest(method.upper(), url, query)


class RequestExecutor:
    """Sends requests and owns the most recent rate-limit snapshot.

    The snapshot is read and written under the credential store's lock so
    that concurrent calls see a consistent value.
    """

    def __init__(
        self,
        *,
        credentials: CredentialStore,
        transport: Transport,
        refresher: Refresher,
        rate_limit_hook: RateLimitHook | None = None,
        context: RequestContext | None = None,
    ) -> None:
        self._credentials = credentials
        self._transport = transport
        self._refresher = refresher
        self._rate_limit_hook = rate_limit_hook
        self._context = context or RequestContext.background()
        self._last_response: Response[Any] | None = None

    @property
    def last_response(self) -> Response[Any] | None:
        with self._credentials.lock:
            return self._last_response

    def _record(self, response: Response[Any]) -> None:
        with self._credentials.lock:
            self._last_response = response

    def execute(
        self,
        request: OutgoingRequest,
        into: Any = None,
        *,
        context: RequestContext | None = None,
        bearer_token: str | None = None,
        allow_refresh: bool = True,
    ) -> Response[Any]:
        """Run the loop for ``request`` and return the final response.

        Args:
            request: The encoded request.
            into: Shape to decode successful bodies into, or None.
            context: Cancellation/deadline context; defaults to the client's.
            bearer_token: Token that overrides the credential store.
            allow_refresh: Whether a 401 may trigger a token refresh.

        Raises:
            TransportError: The request could not be sent or read.
            DecodeError: A body did not match the expected shape.
            Exception: Whatever the rate-limit hook raised, unchanged.
        """
        context = context or self._context
        hook = self._rate_limit_hook
        refreshed = False
        attempt = 0

        while True:
            if hook is not None:
                snapshot = self.last_response
                if snapshot is not None:
                    hook(snapshot)

            attempt += 1
            status_code, headers, body = self._send(
                request, context, bearer_token, attempt
            )

            if (
                status_code == 401
                and allow_refresh
                and not refreshed
                and self._credentials.snapshot().can_refresh()
            ):
                # https://dev.twitch.tv/docs/authentication/refresh-tokens/
                refreshed = True
                if self._try_refresh(context):
                    continue

            response: Response[Any] = Response(
                status_code=status_code,
                headers=headers,
                outcome=self._classify(status_code, body, into),
            )
            logger.debug(
                "%s %s -> %d (attempt %d)",
                request.method,
                request.url,
                status_code,
                attempt,
            )

            if hook is None:
                return response

            self._record(response)
            if status_code == 429:
                # Let the hook react to the 429 before resubmitting.
                continue
            return response

    def _send(
        self,
        request: OutgoingRequest,
        context: RequestContext,
        bearer_token: str | None,
        attempt: int,
    ) -> tuple[int, CaseInsensitiveDict[str], bytes]:
        context.check()
        auth_headers = resolve_headers(
            request.url,
            self._credentials.snapshot(),
            bearer_token=bearer_token,
        )
        prepared = request.prepare(auth_headers)
        logger.debug("Sending %s %s (attempt %d)", request.method, request.url, attempt)

        try:
            response = self._transport.send(prepared, timeout=context.remaining())
        except requests.exceptions.RequestException as exc:
            raise map_request_exception(exc) from exc

        try:
            body = response.content or b""
        except requests.exceptions.RequestException as exc:
            raise map_request_exception(exc) from exc
        finally:
            response.close()

        return response.status_code, CaseInsensitiveDict(response.headers), body

    def _try_refresh(self, context: RequestContext) -> bool:
        try:
            self._refresher(context)
        except RequestCancelledError:
            raise
        except RefreshError as exc:
            logger.warning(
                "Failed to refresh helix auth token: status=%d message=%s",
                exc.status_code,
                exc.message,
            )
            return False
        return True

    @staticmethod
    def _classify(status_code: int, body: bytes, into: Any) -> Outcome[Any] | None:
        if status_code >= 500 or not body:
            return None
        if status_code < 400 and into is not None:
            return decode_success(body, into, status_code)
        failure = decode_failure(body, status_code)
        if status_code < 400 and not (failure.error or failure.message):
            return Success(None)
        return failure

