"""End-to-end tests of the cal command line against golden output."""

import sys
from datetime import date
from unittest.mock import patch

import pytest

import cal
from cal import ANSI_START, CalendarDate, run


class TestGoldenOutput:
    """Test full command output byte for byte, trailing spaces included."""

    @pytest.mark.parametrize(
        "args,golden_name",
        [
            (["-y", "2023", "-m", "0"], "january_2023.txt"),
            (["-y", "2015", "-m", "1"], "february_2015.txt"),
            (["-y", "2022", "-m", "9", "-w"], "october_2022_weeks.txt"),
            (["-y", "2023", "-m", "3", "-n", "3"], "april_june_2023.txt"),
            (["-y", "2015", "-m", "0", "-n", "2"], "january_february_2015.txt"),
            (["-y", "2023", "-m", "2", "-n", "5"], "march_july_2023.txt"),
            (["-y", "2023"], "year_2023.txt"),
            (["-y", "2024", "-w"], "year_2024_weeks.txt"),
        ],
    )
    def test_matches_golden(self, args, golden_name, golden, far_away_today):
        """Test the rendered calendar matches the stored output exactly."""
        assert run(args, today=far_away_today, environ={}) == golden(golden_name)

    def test_single_month_heading_and_first_row(self, far_away_today):
        """Test the first lines of a single month view."""
        lines = run(["-y", "2023", "-m", "0"], today=far_away_today, environ={}).split("\n")
        assert lines[0] == "    January 2023      "
        assert lines[1] == "Su Mo Tu We Th Fr Sa  "
        assert lines[2] == " 1  2  3  4  5  6  7 "

    @pytest.mark.parametrize(
        "args",
        [
            ["-y", "2023", "-n", "12"],
            ["-y", "2023", "-n", "2"],
            ["-y", "2023", "-m", "0", "-n", "12"],
        ],
    )
    def test_count_twelve_and_year_alone_match_year_view(self, args, golden, far_away_today):
        """Test every way of asking for the full year gives the same output."""
        assert run(args, today=far_away_today, environ={}) == golden("year_2023.txt")

    def test_no_arguments_prints_current_month(self):
        """Test running without arguments shows this month with its year and today highlighted."""
        today = CalendarDate(day=18, month=9, year=2026)
        output = run([], today=today, environ={})
        assert output.startswith("    October 2026      \n")
        assert ANSI_START in output

    def test_no_color_environment_disables_highlight(self):
        """Test NO_COLOR keeps escape codes out of the output."""
        today = CalendarDate(day=18, month=9, year=2026)
        output = run([], today=today, environ={"NO_COLOR": "1"})
        assert ANSI_START not in output
        assert "18 19 20 21 22 23 24 " in output

    def test_unparsable_numbers_count_as_zero(self):
        """Test a non-numeric year is treated as unset and falls back to today."""
        today = CalendarDate(day=1, month=5, year=2026)
        output = run(["-y", "abc", "-m", "0"], today=today, environ={})
        assert output.startswith("    January 2026      \n")

    def test_negative_month_falls_back_to_current_month(self):
        """Test a negative month on its own means the current month."""
        today = CalendarDate(day=1, month=5, year=2026)
        output = run(["-m", "-1"], today=today, environ={})
        assert output.startswith(" " * 5 + "June 2026" + " " * 8 + "\n")

    def test_negative_month_with_year_is_full_year(self, golden, far_away_today):
        """Test a year with an unset (negative) month renders the whole year."""
        output = run(["-y", "2023", "-m", "-1"], today=far_away_today, environ={})
        assert output == golden("year_2023.txt")

    @pytest.mark.parametrize("value,expected", [("7", 7), ("-3", -3), ("abc", 0), ("12abc", 0), ("", 0)])
    def test_int_or_zero(self, value, expected):
        """Test option values that are not whole integers count as 0."""
        assert cal.int_or_zero(value) == expected


class TestHelp:
    """Test that bad or help arguments print the help page and exit 0."""

    @pytest.mark.parametrize(
        "args",
        [
            ["-h"],
            ["--help"],
            ["-x"],
            ["stray"],
            ["-y"],
            ["-m", "3", "-n"],
            ["-y", "-w"],
            ["-m", "12"],
        ],
    )
    def test_prints_help_and_exits_zero(self, args, capsys):
        """Test the help page is printed to stdout with exit status 0."""
        with pytest.raises(SystemExit) as exc_info:
            run(args, environ={})

        assert exc_info.value.code == 0
        out = capsys.readouterr().out
        assert out.startswith("usage: cal")
        assert "-n <num>\tNumber of months to print" in out


class TestMain:
    """Test main() wiring to sys.argv and stdout."""

    def test_main_writes_calendar_and_exits_zero(self, capsys, golden):
        """Test main() prints the calendar for sys.argv and exits 0."""
        with patch.object(sys, "argv", ["cal", "-y", "2023", "-m", "0"]), patch.object(
            cal, "current_date", return_value=CalendarDate(1, 0, 1999)
        ):
            with pytest.raises(SystemExit) as exc_info:
                cal.main()

        assert exc_info.value.code == 0
        assert capsys.readouterr().out == golden("january_2023.txt")

    def test_current_date_uses_zero_based_month(self):
        """Test the clock reading is converted to a 0-indexed month."""
        fake = type("FakeDate", (), {"today": staticmethod(lambda: date(2024, 2, 29))})
        with patch.object(cal, "date", fake):
            assert cal.current_date() == CalendarDate(day=29, month=1, year=2024)
