"""Tests for goldpulse.core.formatting."""

import pytest

from goldpulse.core.formatting import format_number


class TestFormatNumber:
    def test_float_keeps_fraction(self):
        assert format_number(1234567.89) == "1,234,567.89"

    def test_int(self):
        assert format_number(5000000) == "5,000,000"

    def test_numeric_string_same_as_number(self):
        assert format_number("1234567.89") == format_number(1234567.89)
        assert format_number("82500000") == "82,500,000"

    @pytest.mark.parametrize(
        "value, expected",
        [
            (0, "0"),
            (999, "999"),
            (1000, "1,000"),
            ("100000", "100,000"),
            (-1234567, "-1,234,567"),
        ],
    )
    def test_grouping_boundaries(self, value, expected):
        assert format_number(value) == expected

    def test_long_fraction_untouched(self):
        assert format_number("2345.67891") == "2,345.67891"

    def test_custom_separator(self):
        assert format_number(1234567, sep=".") == "1.234.567"

    def test_none_is_empty(self):
        assert format_number(None) == ""

    def test_malformed_passthrough(self):
        assert format_number("") == ""
        assert format_number("N/A") == "N/A"
