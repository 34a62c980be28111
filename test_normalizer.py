#!/usr/bin/env python3
"""Tests for free-text numeric input handling."""

import math
import os
import sys
from types import SimpleNamespace

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src'))

from calculator import clamp, to_square_feet, parse_float, coerce_percent
from calculator.normalizer import SQFT_PER_SQM


@pytest.mark.parametrize("raw, expected", [
    ("abc", 1),
    ("0", 1),
    ("100001", 100000),
    ("12abc34", 1234),
    ("250", 250),
    ("1.2.3", 1),
    ("", 1),
    ("-20", 20),
    ("$1,500 sq ft", 1500),
    (50.5, 50.5),
])
def test_clamp_room_size(raw, expected):
    assert clamp(raw, 1, 100000) == expected


def test_clamp_without_bounds():
    assert clamp("abc") == 0.0
    assert clamp("42.5") == 42.5


def test_clamp_overflow_becomes_minimum():
    assert clamp("9" * 400, 1, 100000) == 1


def test_clamp_unwraps_event_like_values():
    event = SimpleNamespace(target=SimpleNamespace(value="250"))
    assert clamp(event, 1, 100000) == 250
    assert clamp({"target": {"value": "12abc"}}, 1, 100000) == 12


def test_clamp_ignores_non_text_values():
    assert clamp(None, 1, 10) == 1
    assert clamp(["5"], 1, 10) == 1


def test_to_square_feet():
    assert to_square_feet(250, "sqft") == 250.0
    assert to_square_feet(10, "sqm") == pytest.approx(10 * SQFT_PER_SQM)
    with pytest.raises(ValueError):
        to_square_feet(10, "acres")


def test_parse_float_prefix():
    assert parse_float("12.5 each") == 12.5
    assert parse_float("  7") == 7.0
    assert parse_float(".5") == 0.5
    assert parse_float(42) == 42.0
    assert math.isnan(parse_float("abc"))
    assert math.isnan(parse_float(None))


def test_coerce_percent():
    assert coerce_percent("7.5") == 7.5
    assert coerce_percent(12) == 12.0
    assert coerce_percent("abc") is None
    assert coerce_percent(None) is None
    assert coerce_percent(float("inf")) is None
    assert coerce_percent(True) is None


def test_clamp_numbers_are_not_stripped():
    assert clamp(1e16, 1, 100000) == 100000
    assert clamp(1e-05, 0, 1000) == 1e-05
    assert clamp(-20, 1, 100000) == 1
    assert clamp(10 ** 400, 1, 10) == 1
    assert clamp(float("nan"), 1, 10) == 1
    assert clamp(SimpleNamespace(target=SimpleNamespace(value=2.5e-7)), 0, 10) == 2.5e-7
