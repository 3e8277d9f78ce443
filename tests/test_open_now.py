"""Opening-hours parsing and open-at-instant evaluation"""
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from vetfinder.services.open_now import (
    convert_range_to_display, format_opening_hours, is_open_at, is_open_now,
    parse_clock_time, parse_range, resolve_local_weekday, sanitize,
)
from conftest import berlin, week_of

TZ = "Europe/Berlin"

# 2024-06-03 is a Monday
MONDAY = (2024, 6, 3)


def monday(hour, minute=0):
    return berlin(*MONDAY, hour, minute)


class TestResolveLocalWeekday:
    def test_uses_local_date_not_utc(self):
        # Saturday 23:30 UTC is already Sunday 00:30 in Berlin (CET)
        now = datetime(2024, 3, 30, 23, 30, tzinfo=timezone.utc)
        assert resolve_local_weekday(now, TZ) == "Sunday"
        assert resolve_local_weekday(now, "UTC") == "Saturday"

    def test_honours_dst(self):
        # After the switch to CEST (+2) 22:30 UTC is the next day
        now = datetime(2024, 3, 31, 22, 30, tzinfo=timezone.utc)
        assert resolve_local_weekday(now, TZ) == "Monday"

    def test_naive_datetime_is_utc(self):
        assert resolve_local_weekday(datetime(2024, 3, 30, 23, 30), TZ) == "Sunday"


class TestParseClockTime:
    @pytest.mark.parametrize("token,expected", [
        ("9 AM", 540),
        ("9AM", 540),
        ("10:30 PM", 1350),
        ("12 AM", 0),
        ("12 PM", 720),
        ("12:30 am", 30),
        ("6 pm", 1080),
        ("9\u202fAM", 540),
        ("  9\u00a0  AM ", 540),
    ])
    def test_valid(self, token, expected):
        assert parse_clock_time(token) == expected

    @pytest.mark.parametrize("token", ["9", "10:30", "13 PM", "9:75 AM", "noon", "", "9 XM"])
    def test_invalid(self, token):
        assert parse_clock_time(token) is None

    def test_fallback_meridiem(self):
        assert parse_clock_time("9", "PM") == 1260
        assert parse_clock_time("12", "PM") == 720
        # an explicit marker wins over the fallback
        assert parse_clock_time("9 AM", "PM") == 540


class TestParseRange:
    def test_start_meridiem_inferred_from_end(self):
        assert parse_range("12 to 3 PM") == (720, 900)
        assert parse_range("8:30 to 11 AM") == (510, 660)

    def test_end_without_meridiem_fails(self):
        assert parse_range("9 AM to 6") is None

    def test_first_range_wins(self):
        assert parse_range("9 AM to 12 PM, 2 to 6 PM") == (540, 720)


class TestConvertRangeToDisplay:
    @pytest.mark.parametrize("text,expected", [
        ("9 AM to 3 PM", "09:00–15:00"),
        ("10 PM to 2 AM", "22:00–02:00 (next day)"),
        ("10:30\u202fAM to 8\u202fPM", "10:30–20:00"),
        ("12 to 3 PM", "12:00–15:00"),
        ("12 AM to 11:59 PM", "00:00–23:59"),
        ("open 24 HOURS", "Open 24 hours"),
        ("closed", "Closed"),
    ])
    def test_formats(self, text, expected):
        assert convert_range_to_display(text) == expected

    def test_unknown_format_unchanged(self):
        assert convert_range_to_display("garbage") == "garbage"
        assert convert_range_to_display("By appointment only") == "By appointment only"

    def test_empty(self):
        assert convert_range_to_display("") == ""
        assert convert_range_to_display(None) == ""


class TestIsOpenAt:
    def test_open_24_hours_always_open(self):
        hours = week_of("Open 24 hours")
        for h in (0, 3, 12, 23):
            assert is_open_at(hours, monday(h, 59), TZ) is True

    def test_closed_never_open(self):
        hours = week_of("Closed")
        for h in (0, 9, 12, 23):
            assert is_open_at(hours, monday(h), TZ) is False

    def test_end_is_inclusive(self):
        hours = week_of("9 AM to 6 PM")
        assert is_open_at(hours, monday(18, 0), TZ) is True
        assert is_open_at(hours, monday(18, 1), TZ) is False
        assert is_open_at(hours, monday(8, 59), TZ) is False
        assert is_open_at(hours, monday(9, 0), TZ) is True

    def test_overnight_span(self):
        hours = week_of("10 PM to 2 AM")
        assert is_open_at(hours, monday(23, 30), TZ) is True
        assert is_open_at(hours, monday(1, 0), TZ) is True
        assert is_open_at(hours, monday(15, 0), TZ) is False
        assert is_open_at(hours, monday(2, 0), TZ) is False

    def test_evaluated_in_business_timezone(self):
        hours = week_of("9 AM to 6 PM")
        # 15:30 UTC is 17:30 in Berlin (CEST), 16:30 UTC is 18:30
        assert is_open_at(hours, datetime(2024, 6, 3, 15, 30, tzinfo=timezone.utc), TZ) is True
        assert is_open_at(hours, datetime(2024, 6, 3, 16, 30, tzinfo=timezone.utc), TZ) is False

    def test_missing_weekday_is_closed(self):
        hours = [{"day": "Tuesday", "hours": "Open 24 hours"}]
        assert is_open_at(hours, monday(12), TZ) is False
        assert is_open_at(hours, berlin(2024, 6, 4, 12), TZ) is True

    def test_day_name_match_is_exact(self):
        hours = [{"day": "monday", "hours": "Open 24 hours"}]
        assert is_open_at(hours, monday(12), TZ) is False

    @pytest.mark.parametrize("hours", [None, [], [{"day": "Monday"}], [{"day": "Monday", "hours": ""}]])
    def test_no_hours(self, hours):
        assert is_open_at(hours, monday(12), TZ) is False

    @pytest.mark.parametrize("text", ["garbage", "9 to 6", "25 AM to 6 PM", "By appointment"])
    def test_malformed_fails_closed(self, text):
        assert is_open_at([{"day": "Monday", "hours": text}], monday(12), TZ) is False

    def test_narrow_spaces(self):
        hours = [{"day": "Monday", "hours": "8\u00a0AM to 8\u202fPM"}]
        assert is_open_at(hours, monday(19, 30), TZ) is True


def test_is_open_now_uses_listing_hours():
    listing = SimpleNamespace(opening_hours=week_of("9 AM to 6 PM"))
    assert is_open_now(listing, monday(10)) is True
    assert is_open_now(listing, monday(20)) is False
    assert is_open_now(SimpleNamespace(opening_hours=None), monday(10)) is False


def test_format_opening_hours():
    result = format_opening_hours([
        {"day": "Monday", "hours": "9 AM to 6 PM"},
        {"day": "Sunday", "hours": "Closed"},
        {"hours": "no day"},
    ])
    assert result == [
        {"day": "Monday", "hours": "9 AM to 6 PM", "display": "09:00–18:00"},
        {"day": "Sunday", "hours": "Closed", "display": "Closed"},
    ]


def test_sanitize():
    assert sanitize("  9\u00a0AM\u202f to   6 PM ") == "9 AM to 6 PM"
