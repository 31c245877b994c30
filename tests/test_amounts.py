"""
Tests for stroop/XLM conversion (horizon.amounts).
"""

from __future__ import annotations

import pytest

from stellar_explorer.horizon.amounts import format_xlm, parse_stroops, stroops_to_xlm


def test_stroops_to_xlm():
    assert stroops_to_xlm(10_000_000) == 1.0
    assert stroops_to_xlm("100") == pytest.approx(0.00001)
    assert stroops_to_xlm(None) == 0.0
    assert stroops_to_xlm("abc") == 0.0
    assert stroops_to_xlm(float("nan")) == 0.0


@pytest.mark.parametrize("n", [1, 100, 12345, 10_000_000, 987654321012])
def test_format_has_seven_decimals(n):
    text = format_xlm(stroops_to_xlm(n))
    assert len(text.split(".")[1]) == 7


@pytest.mark.parametrize("value", [None, float("nan"), 0, "x", float("inf")])
def test_format_zero_for_missing_or_invalid(value):
    assert format_xlm(value) == "0.0000000"


def test_parse_stroops():
    assert parse_stroops("250") == 250
    assert parse_stroops(7) == 7
    assert parse_stroops("1.5") is None
    assert parse_stroops(True) is None
