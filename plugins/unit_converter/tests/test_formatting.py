import math

import pytest

from plugins.unit_converter.core.formatting import format_result, parse_factor, parse_number


@pytest.mark.parametrize(
    "value, expected",
    [
        (3280.84, "3,280.84"),
        (16.4042, "16.4042"),
        (10.0, "10"),
        (-0.0, "0"),
        (0.1 + 0.2, "0.3"),
        (1234567.0, "1,234,567"),
        (-4500.125, "-4,500.125"),
        (999.5, "999.5"),
        (1e-10, "0"),
    ],
)
def test_format_result(value, expected):
    assert format_result(value) == expected


def test_format_result_limits_fraction_digits():
    assert format_result(1 / 3) == "0.33333333"
    assert format_result(2 / 3, fraction_digits=3) == "0.667"


def test_format_result_falls_back_when_grouping_fails():
    assert format_result(math.inf) == "inf"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("5", 5.0),
        ("  -2.5 ", -2.5),
        (".5", 0.5),
        ("1e3", 1000.0),
        ("12abc", 12.0),
        ("3,280.84", 3280.84),
        ("Infinity", math.inf),
    ],
)
def test_parse_number(text, expected):
    assert parse_number(text) == expected


@pytest.mark.parametrize("text", ["", "-", "abc", "e5", "."])
def test_parse_number_rejects_non_numeric(text):
    assert parse_number(text) is None


def test_parse_number_overflow_is_infinite():
    assert parse_number("1e999") == math.inf


def test_parse_factor_defaults_to_zero():
    assert parse_factor("") == 0
    assert parse_factor("abc") == 0
    assert parse_factor("1e999") == 0
    assert parse_factor("0.85") == 0.85


def test_parse_factor_keeps_commas_as_terminators():
    assert parse_factor("1,5") == 1.0
    assert parse_number("1,5") == 15.0
