"""
Unit tests for the -time specification parser.

"""

import argparse

import pytest
from foam_to_numpy.times import TimeRange, parse_time_spec


# ──────────────────────────────────────────────────────────────
# Single values and lists
# ──────────────────────────────────────────────────────────────

def test_parse_time_spec_single():
    assert parse_time_spec("0.1") == [TimeRange(0.1, 0.1, single=True)]


def test_parse_time_spec_list():
    assert parse_time_spec("0.1,0.3") == [
        TimeRange(0.1, 0.1, single=True),
        TimeRange(0.3, 0.3, single=True),
    ]


def test_parse_time_spec_whitespace_separated():
    assert parse_time_spec(" 0 , 5  10") == [
        TimeRange(0.0, 0.0, single=True),
        TimeRange(5.0, 5.0, single=True),
        TimeRange(10.0, 10.0, single=True),
    ]


# ──────────────────────────────────────────────────────────────
# Ranges
# ──────────────────────────────────────────────────────────────

def test_parse_time_spec_range():
    assert parse_time_spec("0.1:0.5") == [TimeRange(0.1, 0.5)]


def test_parse_time_spec_open_ranges():
    assert parse_time_spec(":0.5") == [TimeRange(None, 0.5)]
    assert parse_time_spec("0.2:") == [TimeRange(0.2, None)]
    assert parse_time_spec(":") == [TimeRange(None, None)]


def test_parse_time_spec_mixed():
    assert parse_time_spec("0:10,20,40:70") == [
        TimeRange(0.0, 10.0),
        TimeRange(20.0, 20.0, single=True),
        TimeRange(40.0, 70.0),
    ]


def test_range_contains_bounds_inclusive():
    r = TimeRange(0.1, 0.3)
    assert r.contains(0.1)
    assert r.contains(0.3)
    assert r.contains(0.1 + 0.2)  # 0.30000000000000004
    assert not r.contains(0.05)
    assert not r.contains(0.31)


# ──────────────────────────────────────────────────────────────
# Invalid input
# ──────────────────────────────────────────────────────────────

@pytest.mark.parametrize("spec", ["", "   ", "abc", "0.1:abc", "0.5:0.1", "1:2:3"])
def test_parse_time_spec_invalid(spec):
    with pytest.raises(argparse.ArgumentTypeError):
        parse_time_spec(spec)
