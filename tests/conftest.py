"""Shared fixtures for the cal test suite."""

from pathlib import Path

import pytest

from cal import CalendarDate

GOLDEN_DIR = Path(__file__).parent / "golden"


@pytest.fixture
def far_away_today():
    """A 'today' that falls outside every golden calendar, so nothing is highlighted."""
    return CalendarDate(day=1, month=0, year=1999)


@pytest.fixture
def golden():
    """Return the exact text of a golden output file, trailing spaces included."""

    def _read(name):
        with open(GOLDEN_DIR / name, encoding="ascii", newline="") as f:
            return f.read()

    return _read
