"""Response envelope and outcome types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Generic, Mapping, TypeVar, Union

from requests.structures import CaseInsensitiveDict

T = TypeVar("T")

RATE_LIMIT_HEADER = "RateLimit-Limit"
RATE_LIMIT_REMAINING_HEADER = "RateLimit-Remaining"
RATE_LIMIT_RESET_HEADER = "RateLimit-Reset"


class BodyMode(str, Enum):
    """How a parameter value is attached to an outgoing request."""

    QUERY = "query"
    FORM = "form"
    JSON = "json"


@dataclass(frozen=True)
class Success(Generic[T]):
    """Decoded payload of a response with status below 400."""

    data: T | None = None


@dataclass(frozen=True)
class Failure:
    """The provider's common error body."""

    error: str = ""
    status: int = 0
    message: str = ""


Outcome = Union[Success[T], Failure]


def _empty_headers() -> Mapping[str, str]:
    return CaseInsensitiveDict()


def _header_int(headers: Mapping[str, str], name: str) -> int:
    try:
        return int(headers.get(name, ""))
    except (TypeError, ValueError):
        return 0


@dataclass
class Response(Generic[T]):
    """Status, headers and the outcome of one API call.

    ``outcome`` is ``None`` when the body was not decoded, which happens for
    5xx responses and empty bodies.
    """

    status_code: int = 0
    headers: Mapping[str, str] = field(default_factory=_empty_headers)
    outcome: Outcome[T] | None = None

    @property
    def ok(self) -> bool:
        return 0 < self.status_code < 400

    @property
    def data(self) -> T | None:
        if isinstance(self.outcome, Success):
            return self.outcome.data
        return None

    @property
    def error(self) -> Failure | None:
        if isinstance(self.outcome, Failure):
            return self.outcome
        return None

    def get_rate_limit(self) -> int:
        """Return the ``RateLimit-Limit`` header as an int (0 if unusable)."""
        return _header_int(self.headers, RATE_LIMIT_HEADER)

    def get_rate_limit_remaining(self) -> int:
        """Return the ``RateLimit-Remaining`` header as an int (0 if unusable)."""
        return _header_int(self.headers, RATE_LIMIT_REMAINING_HEADER)

    def get_rate_limit_reset(self) -> int:
        """Return the ``RateLimit-Reset`` header as an int (0 if unusable)."""
        return _header_int(self.headers, RATE_LIMIT_RESET_HEADER)

    def hydrate_common(self, target: Response[Any]) -> None:
        """Copy status, headers and any failure onto ``target``."""
        target.status_code = self.status_code
        target.headers = self.headers
        if isinstance(self.outcome, Failure):
            target.outcome = self.outcome


RateLimitHook = Callable[[Response[Any]], None]
