"""
Quarter resolution tests.
"""
import pytest
from datetime import date, datetime, timedelta

from earn_tracker.errors import InvalidPeriod
from earn_tracker.utils.period import (
    bounds_of, current_period, is_quarter_aligned, months_of, parse_iso_date,
    parse_range, quarter_of, validate_period, year_bounds
)


class TestQuarterOf:

    @pytest.mark.parametrize("month,quarter", [
        (1, 1), (2, 1), (3, 1),
        (4, 2), (5, 2), (6, 2),
        (7, 3), (8, 3), (9, 3),
        (10, 4), (11, 4), (12, 4),
    ])
    def test_month_to_quarter(self, month, quarter):
        assert quarter_of(date(2023, month, 15)) == (2023, quarter)

    def test_accepts_iso_string(self):
        assert quarter_of('2024-05-31') == (2024, 2)

    def test_leap_day_is_in_first_quarter(self):
        assert quarter_of(date(2024, 2, 29)) == (2024, 1)

    def test_malformed_string(self):
        with pytest.raises(InvalidPeriod):
            quarter_of('2024/05/31')

    def test_impossible_date(self):
        with pytest.raises(InvalidPeriod):
            quarter_of('2023-02-29')


class TestBoundsOf:

    @pytest.mark.parametrize("quarter,start,end", [
        (1, date(2023, 1, 1), date(2023, 3, 31)),
        (2, date(2023, 4, 1), date(2023, 6, 30)),
        (3, date(2023, 7, 1), date(2023, 9, 30)),
        (4, date(2023, 10, 1), date(2023, 12, 31)),
    ])
    def test_quarter_bounds(self, quarter, start, end):
        assert bounds_of(2023, quarter) == (start, end)

    def test_leap_year_first_quarter_contains_feb_29(self):
        start, end = bounds_of(2024, 1)
        assert start == date(2024, 1, 1)
        assert end == date(2024, 3, 31)
        assert start <= date(2024, 2, 29) <= end
        # 31 + 29 + 31 days
        assert (end - start).days + 1 == 91

    def test_non_leap_first_quarter_length(self):
        start, end = bounds_of(2023, 1)
        assert (end - start).days + 1 == 90

    @pytest.mark.parametrize("quarter", [0, 5, -1, 13])
    def test_invalid_quarter(self, quarter):
        with pytest.raises(InvalidPeriod):
            bounds_of(2024, quarter)

    def test_quarter_is_not_clamped(self):
        with pytest.raises(InvalidPeriod):
            bounds_of(2024, 4.5)

    def test_last_quarter_of_last_year(self):
        assert bounds_of(9999, 4) == (date(9999, 10, 1), date(9999, 12, 31))
        assert is_quarter_aligned(date(9999, 10, 1), date(9999, 12, 31))

    @pytest.mark.parametrize("year", [1, 1900, 2000, 2023, 2024, 2100, 9999])
    def test_every_day_round_trips(self, year):
        for quarter in (1, 2, 3, 4):
            start, end = bounds_of(year, quarter)
            day = start
            while day <= end:
                assert quarter_of(day) == (year, quarter)
                day += timedelta(days=1)
            # neighbouring days belong to other quarters
            if start > date.min:
                assert quarter_of(start - timedelta(days=1)) != (year, quarter)
            if end < date.max:
                assert quarter_of(end + timedelta(days=1)) != (year, quarter)


class TestHelpers:

    def test_months_of(self):
        assert months_of(3) == (7, 8, 9)

    def test_year_bounds(self):
        assert year_bounds(2024) == (date(2024, 1, 1), date(2024, 12, 31))

    def test_current_period(self):
        assert current_period(date(2025, 11, 3)) == (2025, 4)

    def test_validate_period_rejects_bool(self):
        with pytest.raises(InvalidPeriod):
            validate_period(2024, True)

    def test_parse_iso_date_rejects_datetime(self):
        with pytest.raises(InvalidPeriod):
            parse_iso_date(datetime(2024, 1, 1, 12, 0))

    def test_parse_range_inclusive_single_day(self):
        assert parse_range('2024-01-01', '2024-01-01') == (date(2024, 1, 1), date(2024, 1, 1))

    def test_parse_range_rejects_inverted(self):
        with pytest.raises(InvalidPeriod):
            parse_range('2024-03-31', '2024-01-01')

    def test_quarter_alignment(self):
        assert is_quarter_aligned(date(2024, 1, 1), date(2024, 3, 31))
        assert is_quarter_aligned(date(2024, 2, 1), date(2024, 2, 15))
        assert not is_quarter_aligned(date(2024, 3, 1), date(2024, 4, 1))
