"""
Unit tests for shared date and number parsing.
"""

from datetime import date, datetime

import pytest

from vetblood.utils.parsing import format_number, is_blank, parse_date, parse_number, to_number


class TestParseDate:
    """Test date parsing."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("2024-01-05", date(2024, 1, 5)),
            ("2024-1-5", date(2024, 1, 5)),
            ("2024-01-05 10:30:00", date(2024, 1, 5)),
            ("05/01/2024", date(2024, 1, 5)),
            ("5.1.2024", date(2024, 1, 5)),
            (datetime(2024, 1, 5, 9, 0), date(2024, 1, 5)),
            (date(2024, 1, 5), date(2024, 1, 5)),
        ],
    )
    def test_parses(self, value, expected):
        assert parse_date(value) == expected

    @pytest.mark.parametrize("value", ["", "   ", "garbage", "2024-02-31", None, 20240105])
    def test_unparseable(self, value):
        assert parse_date(value) is None


class TestNumbers:
    """Test number helpers."""

    @pytest.mark.parametrize(
        "value, expected",
        [("12", 12.0), ("4.5kg", 4.5), (" 7 ", 7.0), (3, 3.0), ("-2", -2.0)],
    )
    def test_parse_number(self, value, expected):
        assert parse_number(value) == expected

    @pytest.mark.parametrize("value", ["abc", "", None, True, float("nan")])
    def test_parse_number_invalid(self, value):
        assert parse_number(value) is None

    @pytest.mark.parametrize(
        "value, expected",
        [("₪1,234.50", 1234.5), ("$ 20", 20.0), ("abc", 0.0), (None, 0.0), (3, 3.0)],
    )
    def test_to_number(self, value, expected):
        assert to_number(value) == expected

    def test_format_number(self):
        assert format_number(2.0) == "2"
        assert format_number(2.5) == "2.5"

    def test_is_blank(self):
        assert is_blank(None) is True
        assert is_blank("  ") is True
        assert is_blank(float("nan")) is True
        assert is_blank(0) is False
        assert is_blank("x") is False
