"""Tests for date and time display formatting."""

from datetime import date, datetime, time

import pytest

from utils.datetime_format import (
    date_display_text,
    format_display_date,
    format_display_time,
    normalize_date_text,
    normalize_date_value,
    normalize_time_text,
    normalize_time_value,
    time_display_text,
)


class TestFormatDisplay:
    """Test formatting of temporal values."""

    def test_date_has_no_leading_zeros(self):
        assert format_display_date(date(2024, 9, 8)) == "8/9/2024"

    def test_date_two_digit_parts(self):
        assert format_display_date(datetime(2024, 12, 25, 10, 0)) == "25/12/2024"

    @pytest.mark.parametrize(
        "value,expected",
        [
            (time(0, 5, 9), "12:05:09 am"),
            (time(8, 5, 1), "8:05:01 am"),
            (time(12, 0, 0), "12:00:00 pm"),
            (time(13, 5, 0), "1:05:00 pm"),
            (time(23, 59, 59), "11:59:59 pm"),
        ],
    )
    def test_time_twelve_hour_clock(self, value, expected):
        assert format_display_time(value) == expected


class TestNormalizeDateText:
    """Test rewriting of stored date strings."""

    def test_strips_leading_zeros(self):
        assert normalize_date_text("08/09/2024") == "8/9/2024"

    def test_already_normalized_is_unchanged(self):
        assert normalize_date_text("8/9/2024") == "8/9/2024"

    def test_dash_separated(self):
        assert normalize_date_text("08-09-2024") == "8/9/2024"

    def test_iso_date(self):
        assert normalize_date_text("2024-09-08") == "8/9/2024"

    def test_iso_datetime(self):
        assert normalize_date_text("2024-09-08T13:05:07Z") == "8/9/2024"

    def test_unrecognised_text_is_kept(self):
        assert normalize_date_text("  yesterday ") == "yesterday"


class TestNormalizeTimeText:
    """Test rewriting of stored time strings."""

    def test_already_correct(self):
        assert normalize_time_text("8:05:01 am") == "8:05:01 am"

    def test_uppercase_meridiem_with_leading_zero(self):
        assert normalize_time_text("08:05:01 AM") == "8:05:01 am"

    def test_uppercase_pm(self):
        assert normalize_time_text("11:30:00 PM") == "11:30:00 pm"

    def test_dotted_meridiem(self):
        assert normalize_time_text("09:15:00 p.m.") == "9:15:00 pm"

    def test_24_hour_afternoon(self):
        assert normalize_time_text("13:05:00") == "1:5:00 pm"

    def test_24_hour_midnight(self):
        assert normalize_time_text("00:30:15") == "12:30:15 am"

    def test_24_hour_noon(self):
        assert normalize_time_text("12:45:00") == "12:45:00 pm"

    def test_24_hour_morning(self):
        assert normalize_time_text("09:10:11") == "9:10:11 am"

    def test_24_hour_without_seconds(self):
        assert normalize_time_text("18:20") == "6:20:00 pm"

    def test_unrecognised_text_is_kept(self):
        assert normalize_time_text("noon") == "noon"


class TestNormalizeValues:
    """Test normalization of raw cell values."""

    def test_none_becomes_empty(self):
        assert normalize_date_value(None) == ""
        assert normalize_time_value(None) == ""

    def test_temporal_values_untouched(self):
        moment = datetime(2024, 9, 8, 13, 5, 7)
        assert normalize_date_value(moment) is moment
        assert normalize_time_value(moment) is moment

    def test_display_text_for_datetime(self):
        moment = datetime(2024, 9, 8, 13, 5, 7)
        assert date_display_text(moment) == "8/9/2024"
        assert time_display_text(moment) == "1:05:07 pm"

    def test_display_text_for_strings(self):
        assert date_display_text("08/09/2024") == "8/9/2024"
        assert time_display_text("08:05:01 AM") == "8:05:01 am"
