"""
Calendar quarter helpers.

Quarters are numbered 1-4 starting in January. Period boundaries are plain
calendar dates; a range is inclusive on both ends, so the end date of a
quarter covers that whole day.
"""

from datetime import date, datetime
from typing import Optional, Tuple, Union

from dateutil.relativedelta import relativedelta

from earn_tracker.errors import InvalidPeriod

QUARTERS = (1, 2, 3, 4)
MIN_YEAR = 1
MAX_YEAR = 9999


def validate_period(year: int, quarter: int) -> None:
    """Raise InvalidPeriod unless (year, quarter) names a real quarter."""
    if isinstance(year, bool) or not isinstance(year, int) or not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidPeriod(f'Invalid year: {year!r}')
    if isinstance(quarter, bool) or not isinstance(quarter, int) or quarter not in QUARTERS:
        raise InvalidPeriod(f'Quarter must be between 1 and 4, got {quarter!r}')


def parse_iso_date(value: Union[str, date]) -> date:
    """
    Parse a ``YYYY-MM-DD`` calendar date.

    ``date`` objects pass through unchanged; datetimes are rejected because
    period boundaries carry no time of day.
    """
    if isinstance(value, datetime):
        raise InvalidPeriod(f'Expected a calendar date, got a datetime: {value!r}')
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidPeriod(f'Expected an ISO date string, got {value!r}')
    try:
        return datetime.strptime(value.strip(), '%Y-%m-%d').date()
    except ValueError:
        raise InvalidPeriod(f'Malformed date {value!r}, expected YYYY-MM-DD')


def quarter_of(d: Union[str, date]) -> Tuple[int, int]:
    """Return the (year, quarter) containing the given date."""
    d = parse_iso_date(d)
    return d.year, (d.month - 1) // 3 + 1


def months_of(quarter: int) -> Tuple[int, int, int]:
    """Month numbers (1-12) belonging to a quarter."""
    validate_period(MIN_YEAR, quarter)
    first = (quarter - 1) * 3 + 1
    return first, first + 1, first + 2


def bounds_of(year: int, quarter: int) -> Tuple[date, date]:
    """
    Return the inclusive (start, end) dates of a quarter.

    The end is the last day of the quarter's final month; ``day=31`` clamps
    to the month length, so leap years need no special case and the
    computation never leaves the year.
    """
    validate_period(year, quarter)
    first, _, last = months_of(quarter)
    start = date(year, first, 1)
    end = date(year, last, 1) + relativedelta(day=31)
    return start, end


def year_bounds(year: int) -> Tuple[date, date]:
    validate_period(year, 1)
    return date(year, 1, 1), date(year, 12, 31)


def current_period(today: Optional[date] = None) -> Tuple[int, int]:
    return quarter_of(today or date.today())


def parse_range(start_date: Union[str, date], end_date: Union[str, date]) -> Tuple[date, date]:
    """Parse an inclusive date range, rejecting ranges that end before they start."""
    start = parse_iso_date(start_date)
    end = parse_iso_date(end_date)
    if end < start:
        raise InvalidPeriod(f'End date {end.isoformat()} is before start date {start.isoformat()}')
    return start, end


def is_quarter_aligned(start: date, end: date) -> bool:
    """True when [start, end] lies inside the quarter that contains start."""
    _, quarter_end = bounds_of(*quarter_of(start))
    return end <= quarter_end
