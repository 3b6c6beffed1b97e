import math
import re

import pytest

from rxcalc.services.optics import (
    format_if_quarter,
    format_power,
    format_result_to_quarter,
    is_multiple_of_quarter,
    round_half_away,
    round_to_nearest_quarter,
    spherical_equivalent,
    to_number,
    vertex_compensate,
)

POWER_RX = re.compile(r"^[+-]\d{2}\.\d{2}$")


@pytest.mark.parametrize("value,expected", [
    (1.00, True),
    (1.25, True),
    (0.00, True),
    (-60.25, True),
    (-0.75, True),
    (1.30, False),
    (5.01, False),
    (0.1, False),
])
def test_is_multiple_of_quarter(value, expected):
    assert is_multiple_of_quarter(value) is expected


@pytest.mark.parametrize("value,expected", [
    (5.25, "+05.25"),
    (-9.75, "-09.75"),
    (12.00, "+12.00"),
    (-0.50, "-00.50"),
    (0.00, "+00.00"),
    (-0.0, "+00.00"),
    (9.999, "+10.00"),
    (-6.880733944954128, "-06.88"),
])
def test_format_power(value, expected):
    assert format_power(value) == expected


def test_format_power_matches_pattern_over_range():
    for hundredths in range(-9999, 10000, 37):
        assert POWER_RX.match(format_power(hundredths / 100))


def test_round_half_away_ties():
    assert round_half_away(0.5) == 1.0
    assert round_half_away(-0.5) == -1.0
    assert round_half_away(2.5) == 3.0
    assert round_half_away(0.125, 2) == 0.13


def test_round_to_nearest_quarter():
    assert round_to_nearest_quarter(5.12) == 5.00
    assert round_to_nearest_quarter(-1.60) == -1.50
    assert round_to_nearest_quarter(-1.63) == -1.75
    assert round_to_nearest_quarter(5.375) == 5.50
    assert round_to_nearest_quarter(-5.375) == -5.50


@pytest.mark.parametrize("value,expected", [
    (-5.25, -5.25),
    (3, 3.0),
    ("-5.25", -5.25),
    ("  12 ", 12.0),
    ("", None),
    ("   ", None),
    (None, None),
    ("abc", None),
    ("nan", None),
    (float("inf"), None),
    (True, None),
])
def test_to_number(value, expected):
    assert to_number(value) == expected


def test_format_if_quarter():
    assert format_if_quarter(2.0) == "+02.00"
    assert format_if_quarter(2.1) == ""
    assert format_result_to_quarter({"SPH": -4.75, "ADD": 1.1}) == {"SPH": "-04.75", "ADD": ""}


def test_spherical_equivalent():
    assert spherical_equivalent(-5.00, -1.00) == pytest.approx(-5.50)
    assert spherical_equivalent(2.00, 1.50) == pytest.approx(2.75)
    assert spherical_equivalent(-3.10, -0.20) == pytest.approx(-3.20)


def test_vertex_compensate_high_powers():
    assert vertex_compensate(-8.00, 12) == pytest.approx(-7.30, abs=0.005)
    assert vertex_compensate(6.00, 12) == pytest.approx(6.47, abs=0.005)
    assert vertex_compensate(-2.00, 12) == pytest.approx(-1.95, abs=0.005)


def test_vertex_compensate_zero_denominator():
    assert vertex_compensate(100.0, 10) == math.inf
    assert vertex_compensate(-100.0, -10) == -math.inf


@pytest.mark.parametrize("value", [1e27, -1e27, 1e30, 1e300])
def test_huge_finite_values_do_not_raise(value):
    assert isinstance(format_power(value), str)
    assert isinstance(is_multiple_of_quarter(value), bool)
    assert isinstance(format_if_quarter(value), str)
    assert round_half_away(value, 2) == value


def test_non_finite_values_pass_through_rounding():
    assert round_half_away(math.inf) == math.inf
    assert is_multiple_of_quarter(1e307) is False
    assert to_number(10 ** 400) is None
