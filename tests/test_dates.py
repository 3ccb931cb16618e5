"""
Tests for natural-language date and time parsing
"""

from datetime import date, datetime, time

import pytest

from src.utils.dates import (
    event_time_value,
    is_parseable_date,
    parse_date,
    parse_iso_datetime,
    parse_natural_date,
    parse_time,
)

TODAY = date(2025, 3, 1)
NOW = datetime(2025, 3, 1, 9, 0)


class TestParseDate:
    @pytest.mark.parametrize("text,expected", [
        ("2025-07-16", date(2025, 7, 16)),
        ("tomorrow", date(2025, 3, 2)),
        ("next week", date(2025, 3, 8)),
        ("16th July", date(2025, 7, 16)),
        ("July 16", date(2025, 7, 16)),
        ("july 16th, 2027", date(2027, 7, 16)),
        ("on the 3rd of august", date(2025, 8, 3)),
    ])
    def test_recognised_forms(self, text, expected):
        assert parse_date(text, today=TODAY) == expected

    def test_past_day_month_rolls_to_next_year(self):
        assert parse_date("January 5", today=TODAY) == date(2026, 1, 5)

    def test_explicit_past_year_is_kept(self):
        assert parse_date("January 5, 2024", today=TODAY) == date(2024, 1, 5)

    @pytest.mark.parametrize("text", ["", "whenever", "31st February"])
    def test_unrecognised(self, text):
        assert parse_date(text, today=TODAY) is None


class TestParseTime:
    @pytest.mark.parametrize("text,expected", [
        ("2pm", time(14, 0)),
        ("2:30 pm", time(14, 30)),
        ("12am", time(0, 0)),
        ("14:00", time(14, 0)),
        ("14", time(14, 0)),
        ("let's say 9am", time(9, 0)),
    ])
    def test_recognised_forms(self, text, expected):
        assert parse_time(text) == expected

    @pytest.mark.parametrize("text", [None, "", "25:00", "the 16th"])
    def test_unrecognised(self, text):
        assert parse_time(text) is None


class TestParseNaturalDate:
    def test_separate_time(self):
        assert parse_natural_date("July 16", "2pm", now=NOW) == datetime(2025, 7, 16, 14, 0)

    def test_time_inside_date_text(self):
        assert parse_natural_date("16th July at 3:15 pm", now=NOW) == datetime(2025, 7, 16, 15, 15)

    def test_defaults_to_noon(self):
        assert parse_natural_date("tomorrow", now=NOW) == datetime(2025, 3, 2, 12, 0)

    def test_iso_datetime_passes_through(self):
        assert parse_natural_date("2025-07-16T10:30:00Z", now=NOW) == datetime(2025, 7, 16, 10, 30)

    def test_no_date(self):
        assert parse_natural_date("sometime", "2pm", now=NOW) is None


def test_parse_iso_datetime():
    assert parse_iso_datetime("2025-07-16T10:00:00") == datetime(2025, 7, 16, 10, 0)
    assert parse_iso_datetime("not a date") is None
    assert parse_iso_datetime(None) is None


def test_is_parseable_date():
    assert is_parseable_date("2025-07-16T10:00:00")
    assert is_parseable_date("next week")
    assert not is_parseable_date("soonish")
    assert not is_parseable_date(42)
    assert is_parseable_date({"dateTime": "2025-07-16T10:00:00Z"})
    assert not is_parseable_date({"timeZone": "UTC"})


def test_event_time_value():
    assert event_time_value({"dateTime": "2025-07-16T10:00:00", "timeZone": "UTC"}) == "2025-07-16T10:00:00"
    assert event_time_value({"date": "2025-07-16"}) == "2025-07-16"
    assert event_time_value("tomorrow") == "tomorrow"
