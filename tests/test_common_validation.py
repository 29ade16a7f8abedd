"""Tests for shared coercion helpers."""

import math

import pytest

from plexio.common.validation import (
    to_boolean,
    to_non_negative_int,
    to_number_from_unknown,
    to_string_or_null,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (True, True),
        (False, False),
        ("1", True),
        ("true", True),
        ("TRUE", True),
        ("True", True),
        ("0", False),
        ("false", False),
        ("False", False),
        (1, True),
        (0, False),
    ],
)
def test_to_boolean_accepts_known_forms(raw, expected) -> None:
    assert to_boolean(raw) is expected


@pytest.mark.parametrize("raw", [None, "", "yes", "no", " 1", 2, -1, 0.5, [], {}])
def test_to_boolean_rejects_everything_else(raw) -> None:
    assert to_boolean(raw) is None


def test_to_string_or_null() -> None:
    assert to_string_or_null("abc") == "abc"
    assert to_string_or_null("") == ""
    assert to_string_or_null(5) is None
    assert to_string_or_null(None) is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        (32400, 32400),
        (1.5, 1.5),
        ("32400", 32400),
        (" 443 ", 443),
        ("-1", -1),
        ("12.5", 12),
        ("32400abc", 32400),
        ("+8080", 8080),
        ("1_000", 1),
    ],
)
def test_to_number_from_unknown_parses_numbers(raw, expected) -> None:
    assert to_number_from_unknown(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["abc", "", "  ", "abc123", ".5", "\u0661\u0662", math.inf, math.nan, True, None],
)
def test_to_number_from_unknown_rejects_invalid_values(raw) -> None:
    assert to_number_from_unknown(raw) is None


def test_to_non_negative_int() -> None:
    assert to_non_negative_int("32400") == 32400
    assert to_non_negative_int(8080.0) == 8080
    assert isinstance(to_non_negative_int(8080.0), int)
    assert to_non_negative_int(0) == 0
    assert to_non_negative_int(-1) is None
    assert to_non_negative_int(1.5) is None
    assert to_non_negative_int("abc") is None
    assert to_non_negative_int("32400abc") == 32400
    assert to_non_negative_int("-5px") is None
