"""Tests for app.errors - failure kinds and their HTTP mapping."""

import pytest

from app.errors import _BOUNDARY, CheckError, ErrorKind, FATAL_KINDS, classify_status, describe


@pytest.mark.parametrize("status,kind", [
    (429, ErrorKind.RATE_LIMITED),
    (500, ErrorKind.UPSTREAM_UNAVAILABLE),
    (503, ErrorKind.UPSTREAM_UNAVAILABLE),
    (400, ErrorKind.UPSTREAM_UNEXPECTED),
    (401, ErrorKind.UPSTREAM_UNEXPECTED),
    (404, ErrorKind.UPSTREAM_UNEXPECTED),
])
def test_classify_status(status, kind):
    assert classify_status(status) == kind


def test_fatal_kinds():
    assert FATAL_KINDS == {ErrorKind.RATE_LIMITED, ErrorKind.UPSTREAM_UNAVAILABLE}
    assert CheckError(ErrorKind.RATE_LIMITED, "x").is_fatal
    assert not CheckError(ErrorKind.UPSTREAM_UNEXPECTED, "x").is_fatal


@pytest.mark.parametrize("kind,status", [
    (ErrorKind.INVALID_INPUT, 400),
    (ErrorKind.RESOLUTION_FAILED, 400),
    (ErrorKind.RATE_LIMITED, 429),
    (ErrorKind.UPSTREAM_UNAVAILABLE, 503),
    (ErrorKind.UPSTREAM_UNEXPECTED, 502),
    (ErrorKind.CONFIGURATION, 500),
])
def test_every_kind_has_a_status(kind, status):
    assert describe(CheckError(kind, "detail"))[0] == status


def test_upstream_detail_is_replaced():
    _, message = describe(CheckError(ErrorKind.UPSTREAM_UNAVAILABLE, "GetSteamLevel HTTP 503."))
    assert message == "Steam is temporarily unavailable. Please retry in a minute."


def test_caller_errors_keep_their_text():
    _, message = describe(CheckError(ErrorKind.INVALID_INPUT, "Please paste a profile."))
    assert message == "Please paste a profile."


def test_boundary_table_covers_every_kind():
    assert set(_BOUNDARY) == set(ErrorKind)
    for kind in ErrorKind:
        status, message = describe(CheckError(kind, "detail"))
        assert 400 <= status < 600
        assert message
