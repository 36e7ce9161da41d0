from datetime import datetime, timezone

import pytest

from conftest import WEEKDAY_HOURS
from replyflow.services.schedule_service import in_schedule, parse_clock, resolve_timezone, schedule_for_mode

BERLIN = "Europe/Berlin"


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class TestHalfOpenWindow:
    # 2026-01-14 is a Wednesday; Berlin is UTC+1 in winter.
    def test_one_second_before_close_is_inside(self):
        assert in_schedule(WEEKDAY_HOURS, BERLIN, _utc(2026, 1, 14, 15, 59, 59)) is True

    def test_exactly_close_is_outside(self):
        assert in_schedule(WEEKDAY_HOURS, BERLIN, _utc(2026, 1, 14, 16, 0, 0)) is False

    def test_exactly_open_is_inside(self):
        assert in_schedule(WEEKDAY_HOURS, BERLIN, _utc(2026, 1, 14, 8, 0, 0)) is True

    def test_before_open_is_outside(self):
        assert in_schedule(WEEKDAY_HOURS, BERLIN, _utc(2026, 1, 14, 7, 59, 59)) is False


class TestDaylightSaving:
    def test_summer_offset_applied(self):
        # 2026-07-15 is a Wednesday; Berlin is UTC+2, so 15:00 UTC is 17:00 local.
        assert in_schedule(WEEKDAY_HOURS, BERLIN, _utc(2026, 7, 15, 14, 59, 59)) is True
        assert in_schedule(WEEKDAY_HOURS, BERLIN, _utc(2026, 7, 15, 15, 0, 0)) is False

    def test_day_of_spring_transition(self):
        # Clocks jump forward on Sunday 2026-03-29; Monday 09:00 local is 07:00 UTC.
        assert in_schedule(WEEKDAY_HOURS, BERLIN, _utc(2026, 3, 30, 7, 0, 0)) is True
        assert in_schedule(WEEKDAY_HOURS, BERLIN, _utc(2026, 3, 30, 6, 59, 59)) is False


class TestDayEntries:
    def test_disabled_day(self):
        assert in_schedule(WEEKDAY_HOURS, BERLIN, _utc(2026, 1, 17, 11, 0)) is False

    def test_missing_day(self):
        assert in_schedule(WEEKDAY_HOURS, BERLIN, _utc(2026, 1, 18, 11, 0)) is False

    def test_weekday_resolved_in_local_time(self):
        # Friday 23:30 UTC is already Saturday in Tokyo.
        schedule = {"saturday": {"enabled": True, "open": "08:00", "close": "12:00"}}
        assert in_schedule(schedule, "Asia/Tokyo", _utc(2026, 1, 16, 23, 30)) is True

    def test_malformed_times_are_closed(self):
        schedule = {"wednesday": {"enabled": True, "open": "nine", "close": "17:00"}}
        assert in_schedule(schedule, BERLIN, _utc(2026, 1, 14, 10, 0)) is False

    def test_null_schedule_is_unrestricted(self):
        assert in_schedule(None, BERLIN, _utc(2026, 1, 18, 3, 0)) is True


class TestHelpers:
    @pytest.mark.parametrize(
        "value,expected",
        [("09:00", (9, 0, 0)), ("17:30:15", (17, 30, 15)), ("25:00", None), ("", None), (None, None)],
    )
    def test_parse_clock(self, value, expected):
        parsed = parse_clock(value)
        if expected is None:
            assert parsed is None
        else:
            assert (parsed.hour, parsed.minute, parsed.second) == expected

    def test_unknown_timezone_falls_back_to_utc(self):
        assert resolve_timezone("Mars/Olympus").key == "UTC"
        assert resolve_timezone(None).key == "UTC"

    @pytest.mark.parametrize("name", ["America", "Europe", 42])
    def test_zone_directory_or_odd_value_falls_back_to_utc(self, name):
        assert resolve_timezone(name).key == "UTC"

    def test_zone_directory_does_not_break_evaluation(self):
        now = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)
        assert in_schedule(WEEKDAY_HOURS, "America", now) is True

    def test_schedule_for_mode(self):
        assert schedule_for_mode("business_hours", {"a": 1}, {"b": 2}) == {"a": 1}
        assert schedule_for_mode("custom", {"a": 1}, {"b": 2}) == {"b": 2}
        assert schedule_for_mode("custom", {"a": 1}, None) is None
