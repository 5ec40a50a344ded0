#!/usr/bin/env python3
"""
Name: cal
Description: displays one or more months side by side, with optional week numbers
Author: Anton Sixtenson
License:
"""

import os
import sys
import argparse
from collections import namedtuple
from datetime import date

# --- Constants ---
MONTH_NAMES = ['January', 'February', 'March', 'April', 'May', 'June',
               'July', 'August', 'September', 'October', 'November', 'December']
DAY_NAMES = "Su Mo Tu We Th Fr Sa"
MONTH_DAYS = [31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]

CELL_WIDTH = 3        # "NN "
HEADING_WIDTH = 20    # month title field, before week-number padding
BLANK_CELL = " " * CELL_WIDTH
MAX_BATCH = 3
YEAR_WIDTH = 64
YEAR_WIDTH_WEEKS = 78

ANSI_START = "\033[30m\033[47m"
ANSI_RESET = "\033[0m"

# Month is 0-indexed everywhere (0=January).
CalendarDate = namedtuple('CalendarDate', ['day', 'month', 'year'])
MonthSpec = namedtuple('MonthSpec', ['year', 'month'])


def current_date() -> CalendarDate:
    """Reads the system clock once and returns today as a CalendarDate."""
    today = date.today()
    return CalendarDate(today.day, today.month - 1, today.year)


# --- Date Math ---

def is_leap_year(year: int) -> bool:
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0

def days_in_month(year: int, month: int) -> int:
    """Returns the number of days in a month, with February following the leap rule."""
    if month == 1 and is_leap_year(year):
        return 29
    return MONTH_DAYS[month]

def leap_days_before(year: int) -> int:
    """Counts the leap days in years 1 .. year-1."""
    y = year - 1
    return y // 4 + y // 400 - y // 100

def days_before_month(year: int, month: int) -> int:
    return sum(days_in_month(year, i) for i in range(month))

def start_weekday(year: int, month: int) -> int:
    """
    Returns the weekday (0=Sunday .. 6=Saturday) of the first day of a month.
    Day 1 of year 1 is taken to be a Monday and every day since is counted.
    """
    total_days = 1 + (year - 1) * 365 + leap_days_before(year)
    total_days += days_before_month(year, month)
    return total_days % 7

def start_week_number(year: int, month: int) -> int:
    """
    Returns the week number of the row holding the first day of a month.
    Weeks start on Sunday and the row holding January 1 is week 1, so the
    numbering restarts every year. This is not the ISO 8601 week.
    """
    total_days = start_weekday(year, 0) + days_before_month(year, month)
    return 1 + total_days // 7

def digit_count(n: int) -> int:
    """Number of decimal digits in a positive integer. 0 yields 0."""
    count = 0
    while n > 0:
        n //= 10
        count += 1
    return count


# --- Emphasis ---

class AnsiEmphasis:
    """Inverse video: black text on a white background."""
    def emphasize(self, text):
        return f"{ANSI_START}{text}{ANSI_RESET}"

class PlainEmphasis:
    """Leaves the text alone, for terminals that can't show escapes."""
    def emphasize(self, text):
        return text

def emphasis_from_environment(environ=None):
    """Picks the emphasis style; a non-empty NO_COLOR turns colors off."""
    environ = os.environ if environ is None else environ
    if environ.get('NO_COLOR'):
        return PlainEmphasis()
    return AnsiEmphasis()


# --- Layout ---

class LayoutConfig:
    """Options shared by every month in a row batch."""
    def __init__(self, show_week_numbers=False, show_year_in_heading=False, emphasis=None):
        self.show_week_numbers = show_week_numbers
        self.show_year_in_heading = show_year_in_heading
        self.emphasis = emphasis if emphasis is not None else AnsiEmphasis()

    @property
    def week_flag(self) -> int:
        return 1 if self.show_week_numbers else 0

    def with_year_in_heading(self, show_year_in_heading):
        return LayoutConfig(self.show_week_numbers, show_year_in_heading, self.emphasis)


def check_batch(batch: list):
    if not 1 <= len(batch) <= MAX_BATCH:
        raise ValueError(f"a row batch holds 1 to {MAX_BATCH} months, got {len(batch)}")
    for spec in batch:
        if not 0 <= spec.month <= 11:
            raise ValueError(f"invalid month: {spec.month}")

def format_heading(batch: list, config: LayoutConfig) -> str:
    """Centers each month title in its column, optionally followed by the year."""
    w = config.week_flag
    parts = []
    for spec in batch:
        name = MONTH_NAMES[spec.month]
        title_len = len(name)
        if config.show_year_in_heading:
            title_len += digit_count(spec.year) + 1
            name = f"{name} {spec.year}"
        # Long years can overflow the field; they just get no padding.
        left, remainder = divmod(max(HEADING_WIDTH - title_len, 0), 2)
        parts.append(" " * (left + CELL_WIDTH * w) + name + " " * (left + remainder + 2 + w))
    return "".join(parts)

def format_weekday_labels(batch: list, config: LayoutConfig) -> str:
    w = config.week_flag
    return "".join(BLANK_CELL * w + DAY_NAMES + " " * (2 + w) for _ in batch)


class MonthCursor:
    """
    Running state of one month while its day grid is written out one
    week-row at a time.
    """
    def __init__(self, spec: MonthSpec, show_week_numbers: bool):
        self.spec = spec
        self.show_week_numbers = show_week_numbers
        self.last_day = days_in_month(spec.year, spec.month)
        self.next_day = 1
        self.leading_blanks = start_weekday(spec.year, spec.month)
        self.next_week = start_week_number(spec.year, spec.month) if show_week_numbers else None
        self.row_count = -(-(self.leading_blanks + self.last_day) // 7)
        self.ends_on_saturday = (self.leading_blanks + self.last_day) % 7 == 0

    @property
    def exhausted(self) -> bool:
        return self.next_day > self.last_day

    def is_today(self, day, today) -> bool:
        return (self.spec.year, self.spec.month, day) == (today.year, today.month, today.day)

    def next_row(self, today, emphasis, trim=False) -> str:
        """
        Returns the next week-row: week number (if shown), blanks, days.
        With trim, the row stops right after the month's last day.
        """
        cells = []
        if self.show_week_numbers:
            if self.exhausted:
                cells.append(BLANK_CELL)
            else:
                cells.append(f"{self.next_week:2d} ")
                self.next_week += 1

        column = 0
        if self.leading_blanks:
            cells.append(BLANK_CELL * self.leading_blanks)
            column = self.leading_blanks
            self.leading_blanks = 0

        while column < 7 and not self.exhausted:
            text = f"{self.next_day:2d}"
            if self.is_today(self.next_day, today):
                text = emphasis.emphasize(text)
            cells.append(text + " ")
            self.next_day += 1
            column += 1

        if column < 7 and not trim:
            cells.append(BLANK_CELL * (7 - column))
        return "".join(cells)


def format_day_grid(batch: list, config: LayoutConfig, today: CalendarDate) -> list:
    """
    Interleaves the week-rows of every month in the batch, left to right.

    All lines are full width except the last, which ends right after the
    final day of the rightmost month with the most rows. When that day is
    a Saturday the gutter follows it, or an empty line if the month is the
    rightmost one in the batch.
    """
    cursors = [MonthCursor(spec, config.show_week_numbers) for spec in batch]
    gutter = " " * (1 + config.week_flag)
    row_count = max(c.row_count for c in cursors)
    last_index = max(i for i, c in enumerate(cursors) if c.row_count == row_count)

    lines = []
    for _ in range(row_count - 1):
        lines.append(gutter.join(c.next_row(today, config.emphasis) for c in cursors))

    final = [c.next_row(today, config.emphasis) for c in cursors[:last_index]]
    final.append(cursors[last_index].next_row(today, config.emphasis, trim=True))
    line = gutter.join(final)
    if cursors[last_index].ends_on_saturday:
        if last_index < len(cursors) - 1:
            line += gutter
        else:
            lines.append(line)
            line = ""
    lines.append(line)
    return lines


# --- Rendering ---

def render_row(batch: list, config: LayoutConfig, today: CalendarDate) -> str:
    """Heading, weekday labels and day grid for 1-3 months side by side."""
    check_batch(batch)
    lines = [format_heading(batch, config), format_weekday_labels(batch, config)]
    lines.extend(format_day_grid(batch, config, today))
    return "".join(line + "\n" for line in lines)

def render_year(year: int, config: LayoutConfig, today: CalendarDate) -> str:
    """The year centred over four rows of three months each."""
    width = YEAR_WIDTH_WEEKS if config.show_week_numbers else YEAR_WIDTH
    row_config = config.with_year_in_heading(False)
    output = ["\n", " " * ((width - digit_count(year)) // 2), str(year), "\n\n"]
    for first in range(0, 12, MAX_BATCH):
        batch = [MonthSpec(year, m) for m in range(first, first + MAX_BATCH)]
        output.append(render_row(batch, row_config, today))
        output.append("\n")
    return "".join(output)


# --- Range Resolution ---

# kind is 'year' or 'row'; batch is None for a year step.
RenderStep = namedtuple('RenderStep', ['kind', 'year', 'batch', 'show_year_in_heading', 'blank_before'])

def resolve_range(year, month, count, today: CalendarDate) -> list:
    """
    Turns the (year, month, count) options into an ordered list of render
    steps. None, a year below 1 or a negative month all mean "unset".
    """
    if year is not None and year < 1:
        year = None
    if month is not None and month < 0:
        month = None
    if month is not None and month > 11:
        raise ValueError(f"invalid month: {month}")

    if year is not None and month is None:
        return [RenderStep('year', year, None, False, False)]

    year = today.year if year is None else year
    month = today.month if month is None else month
    count = 0 if count is None else count

    if count == 12:
        return [RenderStep('year', year, None, False, False)]
    elif month + count > 12:
        count = 12 - month
    elif count < 1:
        count = 1

    def batch_of(first, size):
        return [MonthSpec(year, m) for m in range(first, first + size)]

    if count > MAX_BATCH:
        steps = []
        while count > MAX_BATCH:
            steps.append(RenderStep('row', year, batch_of(month, MAX_BATCH), False, True))
            month += MAX_BATCH
            count -= MAX_BATCH
        steps.append(RenderStep('row', year, batch_of(month, count), False, True))
        return steps

    return [RenderStep('row', year, batch_of(month, count), count == 1, False)]

def render_range(steps, config: LayoutConfig, today: CalendarDate) -> str:
    output = []
    for step in steps:
        if step.kind == 'year':
            output.append(render_year(step.year, config, today))
            continue
        if step.blank_before:
            output.append("\n")
        output.append(render_row(step.batch, config.with_year_in_heading(step.show_year_in_heading), today))
    return "".join(output)


# --- Command Line ---

HELP_TEXT = """usage: cal [-w] [-y year] [-m month] [-n count]

Running the program without arguments prints the current month.

Options:
 -y <num>\tYear to print
\t\t  Note: Prints whole year if -m is not specified
 -m <num>\tMonth to print
\t\t  Note: January = 0
 -w\t\tPrint week numbers
 -n <num>\tNumber of months to print
\t\t  Note: Will only print until end of year
\t\t\tStarts from current month if -m is not specified
\t\t\tPrints whole year if used with -y without -m
 -h\t\tDisplay this help page

Environment:
 NO_COLOR\tIf set, the current day is not highlighted"""

def usage(exit_code=0):
    """Prints the help page and exits. Bad arguments are not an error for cal."""
    print(HELP_TEXT)
    sys.exit(exit_code)

class HelpingArgumentParser(argparse.ArgumentParser):
    """An ArgumentParser that answers any parse problem with the help page."""
    def error(self, message):
        usage(0)

def int_or_zero(value: str) -> int:
    """Parses an integer option value; anything unparsable counts as 0."""
    try:
        return int(value)
    except ValueError:
        return 0

def build_parser():
    parser = HelpingArgumentParser(prog='cal', add_help=False)
    parser.add_argument('-h', '--help', action='store_true')
    parser.add_argument('-w', action='store_true', dest='week_numbers')
    parser.add_argument('-y', type=int_or_zero, dest='year')
    parser.add_argument('-m', type=int_or_zero, dest='month')
    parser.add_argument('-n', type=int_or_zero, dest='count')
    return parser

def run(args, today=None, environ=None) -> str:
    """Parses the arguments and returns the calendar text for them."""
    parser = build_parser()
    parsed_args = parser.parse_args(args)
    if parsed_args.help:
        usage(0)
    if parsed_args.month is not None and parsed_args.month > 11:
        parser.error("invalid month")

    today = current_date() if today is None else today
    config = LayoutConfig(show_week_numbers=parsed_args.week_numbers,
                          emphasis=emphasis_from_environment(environ))
    steps = resolve_range(parsed_args.year, parsed_args.month, parsed_args.count, today)
    return render_range(steps, config, today)

def main():
    """Prints the requested calendar. Always exits 0."""
    output = run(sys.argv[1:])
    try:
        sys.stdout.write(output)
        sys.stdout.flush()
    except BrokenPipeError:
        # Keep the interpreter from complaining again on shutdown.
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
    sys.exit(0)

if __name__ == "__main__":
    main()
