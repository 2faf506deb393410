import pytest
from requests.structures import CaseInsensitiveDict

from helix.types import Failure, Response, Success


def _response(headers: dict[str, str]) -> Response[None]:
    return Response(status_code=200, headers=CaseInsensitiveDict(headers))


def test_rate_limit_headers_parse_exact_integers():
    response = _response(
        {
            "RateLimit-Limit": "120",
            "RateLimit-Remaining": "119",
            "RateLimit-Reset": "1700000000",
        }
    )

    assert response.get_rate_limit() == 120
    assert response.get_rate_limit_remaining() == 119
    assert response.get_rate_limit_reset() == 1700000000


def test_rate_limit_headers_are_case_insensitive():
    response = _response({"ratelimit-limit": "800"})

    assert response.get_rate_limit() == 800


@pytest.mark.parametrize("value", ["", "abc", "12.5", "1e3"])
def test_non_numeric_rate_limit_headers_are_zero(value):
    response = _response(
        {
            "RateLimit-Limit": value,
            "RateLimit-Remaining": value,
            "RateLimit-Reset": value,
        }
    )

    assert response.get_rate_limit() == 0
    assert response.get_rate_limit_remaining() == 0
    assert response.get_rate_limit_reset() == 0


def test_missing_rate_limit_headers_are_zero():
    response = Response()

    assert response.get_rate_limit() == 0
    assert response.get_rate_limit_remaining() == 0
    assert response.get_rate_limit_reset() == 0


def test_outcome_accessors():
    success = Response(status_code=200, outcome=Success({"id": "1"}))
    failure = Response(
        status_code=401,
        outcome=Failure(error="Unauthorized", status=401, message="Invalid token"),
    )

    assert success.ok and success.data == {"id": "1"} and success.error is None
    assert not failure.ok and failure.data is None
    assert failure.error.message == "Invalid token"


def test_hydrate_common_copies_status_headers_and_failure():
    source = Response(
        status_code=400,
        headers=CaseInsensitiveDict({"RateLimit-Remaining": "3"}),
        outcome=Failure(error="Bad Request", status=400, message="missing id"),
    )
    target: Response[list[str]] = Response()

    source.hydrate_common(target)

    assert target.status_code == 400
    assert target.get_rate_limit_remaining() == 3
    assert target.error == source.error


def test_hydrate_common_keeps_target_success():
    source = Response(status_code=200, outcome=Success({"raw": True}))
    target = Response(outcome=Success(["typed"]))

    source.hydrate_common(target)

    assert target.data == ["typed"]
