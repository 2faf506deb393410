"""Declarative parameter encoding.

Request parameter types are plain dataclasses whose fields declare their wire
mapping through :func:`param`::

    @dataclass
    class StreamsParams:
        user_ids: list[str] = param(query="user_id", kind=ParamKind.SEQUENCE)
        first: int = param(query="first", default="20")
        started_at: datetime | None = param(
            query="started_at", kind=ParamKind.DATETIME
        )

Fields are visited in declaration order so that encoded output is
deterministic.
"""

from __future__ import annotations

import dataclasses
import re
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Iterator

from .errors import EncodingError

QueryPairs = list[tuple[str, str]]

_METADATA_KEY = "helix"
_MONOTONIC_SUFFIX = " m="
# Trailing zone abbreviation in "2006-01-02 15:04:05 +0000 UTC" style text.
_ZONE_ABBREVIATION = re.compile(r"(\s[+-]\d{4})\s[A-Z]{2,5}$")
_FRACTION = re.compile(r"\.(\d+)")
_TEXT_FORMATS = ("%Y-%m-%d %H:%M:%S%z", "%Y-%m-%d %H:%M:%S %z")


class ParamKind(str, Enum):
    SCALAR = "scalar"
    SEQUENCE = "sequence"
    DATETIME = "datetime"


@dataclasses.dataclass(frozen=True)
class ParamSpec:
    """Wire mapping of a single dataclass field."""

    query: str | None = None
    form: str | None = None
    json: str | None = None
    default: str | None = None
    kind: ParamKind = ParamKind.SCALAR
    omit_empty: bool = False

    @classmethod
    def from_tag(cls, tag: str, **kwargs: Any) -> ParamSpec:
        """Build a spec from a ``"key,default"`` query tag."""
        key, _, default = tag.partition(",")
        if default in ("", "omitempty"):
            return cls(query=key, **kwargs)
        return cls(query=key, default=default, **kwargs)


def param(
    *,
    query: str | None = None,
    form: str | None = None,
    json: str | None = None,
    default: str | None = None,
    kind: ParamKind = ParamKind.SCALAR,
    omit_empty: bool = False,
) -> Any:
    """Declare a dataclass field and how it is sent on the wire.

    ``query`` may carry a default after a comma (``"first,20"``). A default
    of ``omitempty`` means no default.
    """
    if query is not None and "," in query:
        if default is not None:
            raise ValueError("default given both in the query tag and as default=")
        spec = ParamSpec.from_tag(
            query, form=form, json=json, kind=kind, omit_empty=omit_empty
        )
    else:
        spec = ParamSpec(
            query=query,
            form=form,
            json=json,
            default=default,
            kind=kind,
            omit_empty=omit_empty,
        )

    metadata = {_METADATA_KEY: spec}
    if kind is ParamKind.SEQUENCE:
        return dataclasses.field(default_factory=list, metadata=metadata)
    return dataclasses.field(default=None, metadata=metadata)


def _spec_for(f: dataclasses.Field[Any]) -> ParamSpec | None:
    return f.metadata.get(_METADATA_KEY)


def _fields(value: Any) -> Iterator[tuple[dataclasses.Field[Any], Any]]:
    for f in dataclasses.fields(value):
        yield f, getattr(value, f.name)


def _is_zero_value(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        return value is False
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, (str, bytes, list, tuple, dict, set)):
        return len(value) == 0
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return all(_is_zero_value(v) for _, v in _fields(value))
    return False


def _is_numeric_zero(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and value == 0
    )


def is_zero(value: Any) -> bool:
    """Return True when ``value`` is absent and carries no parameters.

    Only ``None`` is absent. A dataclass instance whose fields all hold zero
    values is still encoded so that declared defaults and form keys are sent.

    Raises:
        EncodingError: ``value`` is not a dataclass instance, so it cannot
            be encoded as parameters.
    """
    if value is None:
        return True
    if not dataclasses.is_dataclass(value) or isinstance(value, type):
        raise EncodingError(
            f"type is not a parameter dataclass: {type(value).__name__}"
        )
    return False


def stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def parse_datetime(value: Any) -> datetime | None:
    """Normalise a datetime field value, returning None for the zero time."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        parsed = _parse_datetime_text(value)
        if parsed is None:
            return None
    else:
        raise EncodingError(
            f"unsupported datetime value of type {type(value).__name__}"
        )

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    if parsed.replace(tzinfo=None) == datetime.min:
        return None
    return parsed


def _parse_datetime_text(text: str) -> datetime | None:
    text = text.strip()
    if _MONOTONIC_SUFFIX in text:
        text = text.split(_MONOTONIC_SUFFIX, 1)[0]
    if not text:
        return None

    text = _ZONE_ABBREVIATION.sub(r"\1", text)
    # Sub-microsecond digits cannot be represented.
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in _TEXT_FORMATS:
        for candidate in (text, _FRACTION.sub("", text, count=1)):
            try:
                return datetime.strptime(candidate, fmt)
            except ValueError:
                continue
    raise EncodingError(f"cannot parse datetime {text!r}")


def format_rfc3339(value: datetime) -> str:
    """Format ``value`` as RFC 3339 without fractional seconds."""
    text = value.replace(microsecond=0).isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def encode_query(value: Any) -> QueryPairs:
    """Encode the query-mapped fields of ``value`` as ordered pairs."""
    if is_zero(value):
        return []

    pairs: QueryPairs = []
    for f, field_value in _fields(value):
        spec = _spec_for(f)
        if spec is None or spec.query is None:
            continue

        if spec.kind is ParamKind.SEQUENCE:
            for item in field_value or ():
                pairs.append((spec.query, stringify(item)))
        elif spec.kind is ParamKind.DATETIME:
            parsed = parse_datetime(field_value)
            if parsed is not None:
                pairs.append((spec.query, format_rfc3339(parsed)))
        else:
            text = stringify(field_value)
            if text in ("", "0") or _is_numeric_zero(field_value):
                if not spec.default:
                    continue
                text = spec.default
            pairs.append((spec.query, text))

    return pairs


def encode_form(value: Any) -> QueryPairs:
    """Encode every form-mapped field of ``value``, zero values included."""
    if is_zero(value):
        return []

    pairs: QueryPairs = []
    for f, field_value in _fields(value):
        spec = _spec_for(f)
        if spec is None or spec.form is None:
            continue
        pairs.append((spec.form, stringify(field_value)))
    return pairs


def encode_json(value: Any) -> Any:
    """Convert ``value`` into a JSON-compatible structure, or None if absent."""
    if is_zero(value):
        return None
    return _to_json(value)


def _to_json(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        payload: dict[str, Any] = {}
        for f, field_value in _fields(value):
            spec = _spec_for(f)
            if spec is None:
                key = f.name
            elif spec.json is not None:
                key = spec.json
            elif spec.query is None and spec.form is None:
                key = f.name
            else:
                continue
            if spec is not None and spec.omit_empty and _is_zero_value(field_value):
                continue
            if spec is not None and spec.kind is ParamKind.DATETIME:
                parsed = parse_datetime(field_value)
                payload[key] = format_rfc3339(parsed) if parsed else None
                continue
            payload[key] = _to_json(field_value)
        return payload
    if isinstance(value, (list, tuple)):
        return [_to_json(item) for item in value]
    if isinstance(value, dict):
        return {str(k): _to_json(v) for k, v in value.items()}
    if isinstance(value, datetime):
        parsed = parse_datetime(value)
        return format_rfc3339(parsed) if parsed else None
    if isinstance(value, Enum):
        return value.value
    return value
