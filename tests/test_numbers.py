# tests/test_numbers.py
"""
Number Tests - Unit Tests for Amount Parsing and Formatting

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- p2pex.shared.numbers (parse_amount, format_for_edit, format_for_display)
- pytest (testing framework)
"""
import math

import pytest  # Testing framework for writing and running tests

from p2pex.shared.numbers import format_for_display, format_for_edit, parse_amount


class TestParseAmount:
    @pytest.mark.parametrize("text,expected", [
        ("10 000", 10000.0),
        ("95,5", 95.5),
        ("1 234.56", 1234.56),
        ("$ 12.5 USDT", 12.5),
        ("1.2.3", 1.23),
        ("-5", -5.0),
        ("5-", 5.0),
    ])
    def test_parses_operator_text(self, text, expected):
        assert parse_amount(text) == pytest.approx(expected)

    @pytest.mark.parametrize("text", ["", None, "abc", ".", "-", "  "])
    def test_unparsable_is_zero(self, text):
        assert parse_amount(text) == 0.0


class TestFormatForEdit:
    def test_groups_thousands(self):
        assert format_for_edit("1234567") == "1 234 567"
        assert format_for_edit("1234567.8") == "1 234 567.8"

    def test_keeps_partial_input(self):
        assert format_for_edit("1234,") == "1 234."
        assert format_for_edit("0.0") == "0.0"

    def test_drops_letters_and_extra_dots(self):
        assert format_for_edit("12a34.5.6") == "1 234.56"

    @pytest.mark.parametrize("text", ["10 000", "95,5", "1.2.3", "-1234.5", "abc", "7 7 7,77"])
    def test_parse_is_stable_through_edit(self, text):
        assert parse_amount(format_for_edit(text)) == parse_amount(text)


class TestFormatForDisplay:
    def test_fraction_has_two_decimals(self):
        assert format_for_display(104.71204188) == "104.71"
        assert format_for_display(3685.863874) == "3 685.86"
        assert format_for_display(95.5) == "95.50"

    def test_whole_number_has_no_decimals(self):
        assert format_for_display(10000.0) == "10 000"
        assert format_for_display(42) == "42"

    def test_custom_decimals(self):
        assert format_for_display(1.234567, decimals=4) == "1.2346"

    @pytest.mark.parametrize("value", [None, 0, 0.0, math.nan, math.inf])
    def test_empty_for_missing_values(self, value):
        assert format_for_display(value) == ""
