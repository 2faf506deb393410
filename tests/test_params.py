from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qsl, urlencode

import pytest

from helix.errors import EncodingError
from helix.params import (
    ParamKind,
    ParamSpec,
    encode_form,
    encode_json,
    encode_query,
    format_rfc3339,
    is_zero,
    param,
    parse_datetime,
)


@dataclass
class StreamsParams:
    after: str = param(query="after")
    before: str = param(query="before")
    first: int = param(query="first,20")
    game_ids: list[str] = param(query="game_id", kind=ParamKind.SEQUENCE)
    language: list[str] = param(query="language", kind=ParamKind.SEQUENCE)
    user_ids: list[str] = param(query="user_id", kind=ParamKind.SEQUENCE)


@dataclass
class ClipsParams:
    broadcaster_id: str = param(query="broadcaster_id")
    first: int = param(query="first", default="20")
    started_at: object = param(query="started_at", kind=ParamKind.DATETIME)
    ended_at: object = param(query="ended_at", kind=ParamKind.DATETIME)


@dataclass
class TokenParams:
    client_id: str = param(form="client_id")
    grant_type: str = param(form="grant_type")
    scope: str = param(form="scope")
    force: bool = param(form="force")


@dataclass
class Setting:
    key: str = ""
    value: int = 0


@dataclass
class UpdateParams:
    broadcaster_id: str = param(query="broadcaster_id")
    title: str = param(json="title")
    tags: list[str] = field(default_factory=list)
    delay: int = param(json="delay", omit_empty=True)
    scheduled_at: object = param(json="scheduled_at", kind=ParamKind.DATETIME)
    settings: list[Setting] = field(default_factory=list)


class NotADataclass:
    first = 20


def test_none_params_encode_to_nothing():
    assert encode_query(None) == []
    assert encode_form(None) == []
    assert encode_json(None) is None


def test_zero_dataclass_is_still_encoded():
    assert not is_zero(StreamsParams())
    assert encode_query(StreamsParams()) == [("first", "20")]
    assert encode_query(ClipsParams()) == [("first", "20")]


def test_zero_form_dataclass_sends_every_form_key():
    @dataclass
    class ToggleParams:
        is_enabled: bool = param(form="is_enabled")
        count: int = param(form="count")

    zero = ToggleParams(is_enabled=False, count=0)

    assert encode_form(zero) == [("is_enabled", "false"), ("count", "0")]
    assert [k for k, _ in encode_form(TokenParams())] == [
        "client_id",
        "grant_type",
        "scope",
        "force",
    ]


def test_zero_json_dataclass_still_produces_a_body():
    assert encode_json(UpdateParams()) == {
        "title": None,
        "tags": [],
        "scheduled_at": None,
        "settings": [],
    }


def test_non_dataclass_value_raises_encoding_error():
    with pytest.raises(EncodingError):
        encode_query(NotADataclass())
    with pytest.raises(EncodingError):
        encode_query({"first": 20})
    with pytest.raises(EncodingError):
        is_zero(StreamsParams)


def test_scalar_default_substituted_for_zero_value():
    pairs = encode_query(StreamsParams(after="abc"))

    assert pairs == [("after", "abc"), ("first", "20")]


def test_scalar_without_default_is_omitted_when_empty():
    pairs = encode_query(ClipsParams(broadcaster_id="1234"))

    assert pairs == [("broadcaster_id", "1234"), ("first", "20")]
    assert "after" not in dict(encode_query(StreamsParams(before="x")))


def test_scalar_value_overrides_default():
    pairs = encode_query(StreamsParams(first=100))

    assert pairs == [("first", "100")]


def test_sequence_emits_one_entry_per_element_in_order():
    params = StreamsParams(user_ids=["3", "1", "2"], language=["en"])

    pairs = encode_query(params)

    assert [v for k, v in pairs if k == "user_id"] == ["3", "1", "2"]
    assert [v for k, v in pairs if k == "language"] == ["en"]


def test_output_follows_declaration_order():
    params = StreamsParams(
        user_ids=["9"], game_ids=["33214"], before="b", after="a"
    )

    keys = [k for k, _ in encode_query(params)]

    assert keys == ["after", "before", "first", "game_id", "user_id"]


def test_datetime_is_formatted_rfc3339():
    started = datetime(2024, 5, 1, 12, 30, 45, 123456, tzinfo=timezone.utc)

    pairs = dict(encode_query(ClipsParams(broadcaster_id="1", started_at=started)))

    assert pairs["started_at"] == "2024-05-01T12:30:45Z"
    assert "ended_at" not in pairs


def test_datetime_keeps_non_utc_offset():
    started = datetime(2024, 5, 1, 12, 0, tzinfo=timezone(timedelta(hours=-7)))

    pairs = dict(encode_query(ClipsParams(broadcaster_id="1", started_at=started)))

    assert pairs["started_at"] == "2024-05-01T12:00:00-07:00"


def test_naive_datetime_is_treated_as_utc():
    pairs = dict(
        encode_query(ClipsParams(broadcaster_id="1", started_at=datetime(2024, 1, 2)))
    )

    assert pairs["started_at"] == "2024-01-02T00:00:00Z"


@pytest.mark.parametrize(
    "text",
    [
        "2024-05-01 12:30:45 +0000 UTC",
        "2024-05-01 12:30:45.123456789 +0000 UTC m=+0.000012345",
        "2024-05-01 12:30:45.5 +0000 UTC m=-1.5",
        "2024-05-01T12:30:45Z",
        "2024-05-01 12:30:45+00:00",
    ],
)
def test_datetime_text_forms_are_parsed(text):
    pairs = dict(encode_query(ClipsParams(broadcaster_id="1", started_at=text)))

    assert pairs["started_at"] == "2024-05-01T12:30:45Z"


@pytest.mark.parametrize(
    "zero",
    [
        None,
        "",
        "0001-01-01 00:00:00 +0000 UTC",
        datetime.min,
        datetime.min.replace(tzinfo=timezone.utc),
    ],
)
def test_zero_datetime_is_never_emitted(zero):
    pairs = encode_query(ClipsParams(broadcaster_id="1", ended_at=zero))

    assert "ended_at" not in dict(pairs)


def test_unparseable_datetime_raises_encoding_error():
    with pytest.raises(EncodingError):
        encode_query(ClipsParams(broadcaster_id="1", started_at="yesterday"))


def test_unsupported_datetime_type_raises_encoding_error():
    with pytest.raises(EncodingError):
        parse_datetime(12345)


def test_format_rfc3339_drops_fraction():
    value = datetime(2021, 3, 4, 5, 6, 7, 890, tzinfo=timezone.utc)

    assert format_rfc3339(value) == "2021-03-04T05:06:07Z"


def test_form_includes_zero_values():
    pairs = encode_form(TokenParams(client_id="abc"))

    assert pairs == [
        ("client_id", "abc"),
        ("grant_type", ""),
        ("scope", ""),
        ("force", ""),
    ]
    assert dict(encode_form(TokenParams(client_id="abc", force=False)))["force"] == "false"


def test_form_stringifies_booleans():
    pairs = dict(encode_form(TokenParams(client_id="abc", force=True)))

    assert pairs["force"] == "true"


def test_json_body_uses_json_keys_and_field_names():
    params = UpdateParams(
        broadcaster_id="1234",
        title="speedrun",
        tags=["English"],
        settings=[Setting(key="a", value=1)],
    )

    payload = encode_json(params)

    assert payload == {
        "title": "speedrun",
        "tags": ["English"],
        "scheduled_at": None,
        "settings": [{"key": "a", "value": 1}],
    }


def test_json_body_omits_empty_when_requested():
    payload = encode_json(UpdateParams(title="x", delay=0))

    assert "delay" not in payload
    assert encode_json(UpdateParams(title="x", delay=5))["delay"] == 5


def test_json_body_formats_datetimes():
    when = datetime(2024, 6, 1, 18, 0, tzinfo=timezone.utc)

    payload = encode_json(UpdateParams(title="x", scheduled_at=when))

    assert payload["scheduled_at"] == "2024-06-01T18:00:00Z"


def test_json_mode_query_is_derived_from_query_keys():
    params = UpdateParams(broadcaster_id="1234", title="speedrun")

    assert encode_query(params) == [("broadcaster_id", "1234")]


def test_query_round_trip_recovers_field_values():
    params = StreamsParams(
        after="cursor", first=50, game_ids=["1", "2"], user_ids=["u1"]
    )

    parsed = parse_qsl(urlencode(encode_query(params)))

    assert parsed == [
        ("after", "cursor"),
        ("first", "50"),
        ("game_id", "1"),
        ("game_id", "2"),
        ("user_id", "u1"),
    ]


def test_param_spec_from_tag_handles_omitempty():
    assert ParamSpec.from_tag("first,omitempty") == ParamSpec(query="first")
    assert ParamSpec.from_tag("first,20") == ParamSpec(query="first", default="20")
    assert ParamSpec.from_tag("first") == ParamSpec(query="first")


def test_param_rejects_default_given_twice():
    with pytest.raises(ValueError):
        param(query="first,20", default="10")
