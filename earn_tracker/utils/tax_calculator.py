"""
Period tax calculator.

Turns a set of income entries and the tax rules active for a period into a
tax liability. Everything here is pure: callers are responsible for
scoping the inputs to one user and one period before calling in.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Any, Iterable, List

from earn_tracker.errors import UnsupportedRuleKind
from earn_tracker.models.tax_rule import TaxRuleKind

ZERO = Decimal('0')
HUNDRED = Decimal('100')


def to_decimal(value: Any) -> Decimal:
    """Convert a stored amount to Decimal without picking up float noise."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _field(record: Any, name: str) -> Any:
    # Rows come in as ORM objects, snapshots or plain dicts.
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name)


def normalized_amount(entry: Any) -> Decimal:
    return to_decimal(_field(entry, 'amount')) * to_decimal(_field(entry, 'exchange_rate'))


def normalize_income(entries: Iterable[Any]) -> Decimal:
    """Total income in the base currency; an empty iterable gives zero."""
    return sum((normalized_amount(entry) for entry in entries), ZERO)


def calculate_rule_amount(rule: Any, total_income: Decimal) -> Decimal:
    """
    Tax contributed by a single rule.

    Fixed rules contribute their value regardless of income; percentage
    rules contribute ``value`` percent of the normalized period income.

    Raises:
        UnsupportedRuleKind: for any kind other than fixed/percentage.
    """
    kind = _field(rule, 'kind')
    value = to_decimal(_field(rule, 'value'))

    if kind == TaxRuleKind.FIXED.value:
        return value
    if kind == TaxRuleKind.PERCENTAGE.value:
        return total_income * (value / HUNDRED)

    raise UnsupportedRuleKind(
        f'Unsupported tax rule kind {kind!r} for rule {_field(rule, "name")!r}',
        details={'kind': kind},
    )


def calculate_period_taxes(entries: Iterable[Any], rules: Iterable[Any]) -> dict:
    """
    Compute the tax breakdown for one period.

    Args:
        entries: income entries exposing ``amount`` and ``exchange_rate``
        rules: active tax rules exposing ``name``, ``kind`` and ``value``

    Returns:
        dict with ``total_income``, ``total_tax`` and ``taxes`` (a list of
        ``{'name', 'amount'}`` in the same order as ``rules``).

    A single unsupported rule fails the whole calculation; no partial
    breakdown is returned.
    """
    total_income = normalize_income(entries)

    taxes = [
        {'name': _field(rule, 'name'), 'amount': calculate_rule_amount(rule, total_income)}
        for rule in rules
    ]

    return {
        'total_income': total_income,
        'total_tax': sum((tax['amount'] for tax in taxes), ZERO),
        'taxes': taxes,
    }


def income_by_month(entries: Iterable[Any]) -> List[dict]:
    """Normalized income grouped by ``YYYY-MM``, oldest month first."""
    totals = defaultdict(lambda: ZERO)
    for entry in entries:
        totals[_field(entry, 'date').strftime('%Y-%m')] += normalized_amount(entry)
    return [{'month': month, 'total': totals[month]} for month in sorted(totals)]


def income_by_currency(entries: Iterable[Any]) -> List[dict]:
    """Raw and normalized sums per currency code, alphabetically."""
    raw = defaultdict(lambda: ZERO)
    normalized = defaultdict(lambda: ZERO)
    for entry in entries:
        currency = _field(entry, 'currency')
        raw[currency] += to_decimal(_field(entry, 'amount'))
        normalized[currency] += normalized_amount(entry)
    return [
        {'currency': currency, 'amount': raw[currency], 'normalized': normalized[currency]}
        for currency in sorted(raw)
    ]
