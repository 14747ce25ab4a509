"""
Tax computations over a user's stored records.

TaxService ties the record store to the pure calculator: it resolves the
period a request refers to, fetches the matching income entries and tax
rules, and hands them to ``calculate_period_taxes``. It also owns the
quarter-to-quarter copy of tax rules.
"""

from datetime import date
from typing import Optional, Union
import logging

from earn_tracker.utils.period import (
    bounds_of, current_period, is_quarter_aligned, parse_range, quarter_of,
    validate_period, year_bounds, QUARTERS
)
from earn_tracker.utils.tax_calculator import (
    calculate_period_taxes, income_by_currency, income_by_month, normalize_income, ZERO
)

logger = logging.getLogger(__name__)

DateLike = Union[str, date]


class TaxService:
    """Period tax calculations and rule copying for one record store."""

    def __init__(self, store):
        self.store = store

    def compute_quarter_taxes(self, user_id: int, start_date: DateLike, end_date: DateLike) -> dict:
        """
        Tax liability for income dated within [start_date, end_date].

        Tax rules are taken from the quarter containing ``start_date``;
        income is taken from the whole range. A range running past the end
        of that quarter is still computed but logged, since its later
        income is taxed with the first quarter's rules.

        Args:
            user_id: owner of the records
            start_date: first day of the range (``YYYY-MM-DD`` or date)
            end_date: last day of the range, inclusive

        Returns:
            dict with ``total_income``, ``total_tax`` and ``taxes``, plus the
            ``year``/``quarter`` the rules were taken from.

        Raises:
            InvalidPeriod: malformed dates or end before start
            UnsupportedRuleKind: an active rule has an unknown kind
        """
        start, end = parse_range(start_date, end_date)
        year, quarter = quarter_of(start)

        if not is_quarter_aligned(start, end):
            logger.warning(
                "Range %s..%s for user %s extends past %sQ%s; applying that quarter's rules to the whole range",
                start, end, user_id, year, quarter
            )

        incomes = self.store.fetch_income(user_id, start, end)
        rules = self.store.fetch_active_tax_rules(user_id, year, quarter)

        logger.info("Calculating taxes for user %s, %sQ%s (%s..%s): %d incomes, %d rules",
                    user_id, year, quarter, start, end, len(incomes), len(rules))

        result = calculate_period_taxes(incomes, rules)
        result.update({
            'year': year,
            'quarter': quarter,
            'start_date': start.isoformat(),
            'end_date': end.isoformat(),
        })
        return result

    def compute_period_taxes(self, user_id: int, year: int, quarter: int) -> dict:
        """Tax liability for a whole calendar quarter."""
        start, end = bounds_of(year, quarter)
        return self.compute_quarter_taxes(user_id, start, end)

    def year_overview(self, user_id: int, year: int) -> dict:
        """Each quarter of a year computed with its own rules, plus yearly totals."""
        validate_period(year, 1)
        quarters = [self.compute_period_taxes(user_id, year, quarter) for quarter in QUARTERS]

        return {
            'year': year,
            'quarters': quarters,
            'total_income': sum((q['total_income'] for q in quarters), ZERO),
            'total_tax': sum((q['total_tax'] for q in quarters), ZERO),
        }

    def income_by_period(self, user_id: int, start_date: DateLike, end_date: DateLike) -> dict:
        """Income entries of a range with monthly and per-currency groupings."""
        start, end = parse_range(start_date, end_date)
        incomes = self.store.fetch_income(user_id, start, end)

        return {
            'start_date': start.isoformat(),
            'end_date': end.isoformat(),
            'incomes': incomes,
            'total_income': normalize_income(incomes),
            'by_month': income_by_month(incomes),
            'by_currency': income_by_currency(incomes),
        }

    def dashboard(self, user_id: int, today: Optional[date] = None, upcoming_limit: int = 5) -> dict:
        """All-time income, the current quarter's taxes and the next pending events."""
        today = today or date.today()
        year, quarter = current_period(today)
        start, end = year_bounds(year)

        all_income = self.store.list_income(user_id)

        return {
            'total_income': normalize_income(all_income),
            'income_count': len(all_income),
            'year_income': normalize_income(e for e in all_income if start <= e.date <= end),
            'current_quarter': self.compute_period_taxes(user_id, year, quarter),
            'upcoming_events': self.store.upcoming_events(user_id, limit=upcoming_limit, today=today),
        }

    def copy_tax_rules(self, user_id: int, source_year: int, source_quarter: int,
                       target_year: int, target_quarter: int) -> dict:
        """
        Copy every tax rule of one quarter into another, replacing the target.

        The source is read and detached before the target is cleared, so
        copying a quarter onto itself leaves its rules in place. An empty
        source clears the target.

        Raises:
            InvalidPeriod: either period is invalid
            TransactionFailure: the replacement was rolled back
        """
        validate_period(source_year, source_quarter)
        validate_period(target_year, target_quarter)

        snapshots = [rule.snapshot() for rule in
                     self.store.fetch_all_tax_rules(user_id, source_year, source_quarter)]

        count = self.store.replace_tax_rules(user_id, target_year, target_quarter, snapshots)

        logger.info("Copied %d tax rules for user %s from %sQ%s to %sQ%s",
                    count, user_id, source_year, source_quarter, target_year, target_quarter)
        return {'success': True, 'count': count}
