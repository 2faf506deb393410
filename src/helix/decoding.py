"""Status-driven decoding of response bodies."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import PydanticUserError, TypeAdapter, ValidationError

from .errors import DecodeError
from .models import ErrorBody
from .types import Failure, Success


@lru_cache(maxsize=256)
def _cached_adapter(shape: Any) -> TypeAdapter[Any]:
    return TypeAdapter(shape)


def _adapter(shape: Any, status_code: int, body: bytes) -> TypeAdapter[Any]:
    try:
        hash(shape)
    except TypeError:
        cacheable = False
    else:
        cacheable = True

    try:
        if cacheable:
            return _cached_adapter(shape)
        return TypeAdapter(shape)
    except (PydanticUserError, TypeError) as exc:
        raise DecodeError(
            f"Cannot decode API response into {shape!r}: {exc}",
            status_code=status_code,
            body=body,
        ) from exc


def decode_success(body: bytes, shape: Any, status_code: int) -> Success[Any]:
    """Decode ``body`` into the caller's success shape.

    Shapes that cannot be hashed are accepted but not cached.
    """
    adapter = _adapter(shape, status_code, body)
    try:
        return Success(adapter.validate_json(body))
    except ValidationError as exc:
        raise DecodeError(
            f"Failed to decode API response: {exc}",
            status_code=status_code,
            body=body,
        ) from exc


def decode_failure(body: bytes, status_code: int) -> Failure:
    """Decode ``body`` into the common error shape."""
    try:
        payload = ErrorBody.model_validate_json(body)
    except ValidationError as exc:
        raise DecodeError(
            f"Failed to decode API error response: {exc}",
            status_code=status_code,
            body=body,
        ) from exc
    return Failure(
        error=payload.error, status=payload.status, message=payload.message
    )
