"""Unit tests for the request-parsing helpers in api/routes/pages.py."""

import pytest

from api.routes.pages import clean_email, parse_int_cookie, split_page_path, validate_fields

INT64 = (-(2**63), 2**63 - 1)


@pytest.mark.parametrize(
    "path,expected",
    [
        ("index.json", ("index", "json")),
        ("login.JSON", ("login", "json")),
        ("index", ("index", None)),
        ("a.b.json", ("a.b", "json")),
    ],
)
def test_split_page_path(path, expected) -> None:
    assert split_page_path(path) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("42", 42),
        ("-7", -7),
        (" 9 ", 9),
        (None, None),
        ("", None),
        ("abc", None),
        ("1.5", None),
        ("1e3", None),
        (str(2**63), None),
    ],
)
def test_parse_int_cookie(raw, expected) -> None:
    assert parse_int_cookie(raw, *INT64) == expected


def test_parse_token_cookie_bounds() -> None:
    assert parse_int_cookie("-1", 0, 2**63 - 1) is None
    assert parse_int_cookie(str(2**63 - 1), 0, 2**63 - 1) == 2**63 - 1
    assert parse_int_cookie(str(2**63), 0, 2**63 - 1) is None
    assert parse_int_cookie(str(2**64 - 1), 0, 2**63 - 1) is None


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Alice@Example.COM", "alice@example.com"),
        ("  bob@example.com ", "bob@example.com"),
        ("no-at-sign", None),
        ("two@@example.com", None),
        ("spa ce@example.com", None),
        ("@example.com", None),
        ("a" * 250 + "@b.co", None),
        (42, None),
    ],
)
def test_clean_email(raw, expected) -> None:
    assert clean_email(raw) == expected


def test_validate_fields_drops_invalid_and_unknown() -> None:
    fields = validate_fields({"email": "bad", "pass": "secret", "role": "admin"})
    assert fields == {"pass": "secret"}


def test_validate_fields_rejects_non_string_values() -> None:
    assert validate_fields({"email": ["a@b.c"], "pass": 123}) == {}
