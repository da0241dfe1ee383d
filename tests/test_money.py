import pytest

from household_finance.services.money import format_number, plain_number, round2


@pytest.mark.parametrize(
    "value,expected",
    [(1.005, 1.01), (2.675, 2.68), (-1.005, -1.01), (10, 10.0)],
)
def test_round2_half_up(value, expected):
    assert round2(value) == expected


def test_format_number_never_prints_negative_zero():
    assert format_number(-0.001, 2) == "0,00"


def test_format_number_negative_values_keep_sign():
    assert format_number(-1234.5, 2) == "-1.234,50"


def test_format_number_unknown_locale_uses_default():
    assert format_number(1234.5, 2, "xx-XX") == "1.234,50"


def test_plain_number():
    assert plain_number(3.0) == "3"
    assert plain_number(3.25) == "3.25"
    assert plain_number(7) == "7"


def test_format_number_beyond_default_decimal_precision():
    assert format_number(1e27, 2) == "1.000.000.000.000.000.000.000.000.000,00"
    assert format_number(123456789012345678901234567.0, 0, "en-US").startswith("123,456,789,012,345,6")


@pytest.mark.parametrize(
    "value,expected",
    [(float("inf"), "∞"), (float("-inf"), "-∞"), (float("nan"), "NaN")],
)
def test_format_number_non_finite(value, expected):
    assert format_number(value, 2) == expected


def test_round2_large_and_non_finite():
    assert round2(1e27) == 1e27
    assert round2(float("inf")) == float("inf")


def test_plain_number_large_integral_values_keep_digits():
    assert plain_number(1e16) == "10000000000000000"
    assert plain_number(1e20) == "100000000000000000000"
    assert plain_number(1e21) == "1e+21"
    assert plain_number(float("inf")) == "Infinity"
