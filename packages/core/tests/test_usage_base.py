"""Tests for the shared usage client helpers."""

import pytest

from codexbar_core.usage_clients.base import format_number, percent_of, round_half_up


class TestRatioHelpers:
    """Tests for percent computation."""

    @pytest.mark.parametrize(
        "value, expected",
        [(0.5, 1), (1.5, 2), (2.5, 3), (2.49, 2), (0.0, 0)],
    )
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_half_percent_rounds_up(self):
        assert percent_of(1, 200) == 1

    def test_overage_is_not_capped(self):
        assert percent_of(150, 100) == 150

    def test_non_positive_total_is_zero(self):
        assert percent_of(5, 0) == 0
        assert percent_of(5, -10) == 0

    def test_negative_usage_is_floored(self):
        assert percent_of(-3, 10) == 0


class TestFormatNumber:
    """Tests for label number rendering."""

    def test_integral_and_fractional(self):
        assert format_number(5.0) == "5"
        assert format_number(2.5) == "2.5"
