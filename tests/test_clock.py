"""Tests for time and duration literals."""

import pytest

from dayplan.core.clock import TimeStyle, format_duration, parse_clock, parse_duration, render_clock, render_default


class TestParseClock:
    @pytest.mark.parametrize(
        "text,hours,minutes,style",
        [
            ("9am", 9, 0, TimeStyle.MERIDIEM),
            ("9:30pm", 21, 30, TimeStyle.MERIDIEM),
            ("12am", 0, 0, TimeStyle.MERIDIEM),
            ("12pm", 12, 0, TimeStyle.MERIDIEM),
            ("14", 14, 0, TimeStyle.BARE_HOUR),
            ("9:30", 9, 30, TimeStyle.HOUR_MINUTE),
            ("09:30", 9, 30, TimeStyle.CLOCK24),
            ("23:45", 23, 45, TimeStyle.CLOCK24),
            ("noon", 12, 0, TimeStyle.WORD),
            ("Midnight", 0, 0, TimeStyle.WORD),
        ],
    )
    def test_valid(self, text, hours, minutes, style):
        clock = parse_clock(text)
        assert (clock.hours, clock.minutes, clock.style) == (hours, minutes, style)

    def test_remembers_upper_case_meridiem(self):
        assert parse_clock("9AM").upper
        assert not parse_clock("9am").upper

    @pytest.mark.parametrize("text", ["25:00", "9:75", "13pm", "0am", "nine"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_clock(text)

    @pytest.mark.parametrize("text,ambiguous", [("9", True), ("12", True), ("0", False), ("14", False), ("9am", False)])
    def test_ambiguity(self, text, ambiguous):
        assert parse_clock(text).is_ambiguous == ambiguous


class TestParseDuration:
    @pytest.mark.parametrize("text,minutes", [("30m", 30), ("1h", 60), ("1h30m", 90), ("90m", 90)])
    def test_valid(self, text, minutes):
        assert parse_duration(text) == minutes

    @pytest.mark.parametrize("text", ["", "0m", "0h", "30x", "h", "1h30"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_duration(text)


class TestRender:
    @pytest.mark.parametrize(
        "hours,minutes,style,expected",
        [
            (9, 15, TimeStyle.MERIDIEM, "9:15am"),
            (13, 0, TimeStyle.MERIDIEM, "1pm"),
            (0, 30, TimeStyle.MERIDIEM, "12:30am"),
            (0, 15, TimeStyle.CLOCK24, "00:15"),
            (10, 15, TimeStyle.HOUR_MINUTE, "10:15"),
            (15, 0, TimeStyle.BARE_HOUR, "15"),
            (14, 30, TimeStyle.BARE_HOUR, "14:30"),
            (12, 0, TimeStyle.WORD, "noon"),
            (0, 0, TimeStyle.WORD, "midnight"),
            (13, 0, TimeStyle.WORD, "1pm"),
        ],
    )
    def test_styles(self, hours, minutes, style, expected):
        assert render_clock(hours, minutes, style) == expected

    def test_upper_case_meridiem(self):
        assert render_clock(9, 30, TimeStyle.MERIDIEM, upper=True) == "9:30AM"

    def test_default_rendering(self):
        assert render_default(9, 45) == "9:45am"
        assert render_default(12, 0) == "noon"

    @pytest.mark.parametrize("minutes,expected", [(30, "30m"), (60, "1h"), (95, "1h35m")])
    def test_format_duration(self, minutes, expected):
        assert format_duration(minutes) == expected
