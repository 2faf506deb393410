"""Thread-safe holder of the client's mutable credentials."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Callable

logger = logging.getLogger(__name__)

RefreshListener = Callable[[str, str], None]


@dataclass(frozen=True)
class Credentials:
    """Immutable snapshot of everything used to build auth headers."""

    client_id: str
    client_secret: str = ""
    app_access_token: str = ""
    user_access_token: str = ""
    refresh_token: str = ""
    extension_signed_token: str = ""
    user_agent: str = ""
    redirect_uri: str = ""

    def can_refresh(self) -> bool:
        return bool(
            self.client_id
            and self.client_secret
            and self.user_access_token
            and self.refresh_token
        )


class CredentialStore:
    """Guards the tokens, user agent and redirect URI behind one lock.

    Writes replace the whole snapshot under the lock, so readers never see a
    half-applied update. Refresh listeners run on a single worker thread and
    never while the lock is held.
    """

    def __init__(self, initial: Credentials) -> None:
        self._lock = threading.Lock()
        self._credentials = initial
        self._listener: RefreshListener | None = None
        self._notifier: ThreadPoolExecutor | None = None
        self._pending: list[Future[None]] = []

    @property
    def lock(self) -> threading.Lock:
        return self._lock

    def snapshot(self) -> Credentials:
        with self._lock:
            return self._credentials

    def _update(self, **changes: str) -> None:
        with self._lock:
            self._credentials = replace(self._credentials, **changes)

    def get_app_access_token(self) -> str:
        return self.snapshot().app_access_token

    def set_app_access_token(self, token: str) -> None:
        self._update(app_access_token=token)

    def get_user_access_token(self) -> str:
        return self.snapshot().user_access_token

    def set_user_access_token(self, token: str) -> None:
        self._update(user_access_token=token)

    def get_refresh_token(self) -> str:
        return self.snapshot().refresh_token

    def set_refresh_token(self, token: str) -> None:
        self._update(refresh_token=token)

    def get_extension_signed_token(self) -> str:
        return self.snapshot().extension_signed_token

    def set_extension_signed_token(self, token: str) -> None:
        self._update(extension_signed_token=token)

    def get_user_agent(self) -> str:
        return self.snapshot().user_agent

    def set_user_agent(self, user_agent: str) -> None:
        self._update(user_agent=user_agent)

    def get_redirect_uri(self) -> str:
        return self.snapshot().redirect_uri

    def set_redirect_uri(self, uri: str) -> None:
        self._update(redirect_uri=uri)

    def on_user_access_token_refreshed(self, listener: RefreshListener) -> None:
        """Register the listener notified after each successful refresh."""
        with self._lock:
            self._listener = listener

    def store_refreshed_tokens(
        self, access_token: str, refresh_token: str
    ) -> Future[None] | None:
        """Atomically swap in a refreshed token pair and notify the listener.

        Returns the notification future, or None when no listener is set.
        """
        with self._lock:
            self._credentials = replace(
                self._credentials,
                user_access_token=access_token,
                refresh_token=refresh_token,
            )
            listener = self._listener
            if listener is None:
                return None
            if self._notifier is None:
                self._notifier = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="helix-refresh"
                )
            notifier = self._notifier

        future = notifier.submit(_notify, listener, access_token, refresh_token)
        with self._lock:
            self._pending = [f for f in self._pending if not f.done()]
            self._pending.append(future)
        return future

    def wait_for_notifications(self, timeout: float | None = None) -> None:
        """Block until every submitted refresh notification has run."""
        with self._lock:
            pending = list(self._pending)
        for future in pending:
            future.result(timeout=timeout)

    def close(self) -> None:
        with self._lock:
            notifier = self._notifier
            self._notifier = None
        if notifier is not None:
            notifier.shutdown(wait=True)


def _notify(listener: RefreshListener, access_token: str, refresh_token: str) -> None:
    try:
        listener(access_token, refresh_token)
    except Exception:
        logger.warning("User access token refresh listener failed", exc_info=True)
