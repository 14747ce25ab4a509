"""
Helpers for turning service results into JSON-ready dicts.
"""

from decimal import Decimal


def money(value: Decimal) -> float:
    """Round a Decimal amount to cents for display."""
    return float(round(value, 2))


def tax_result_to_dict(result: dict) -> dict:
    payload = {
        'total_income': money(result['total_income']),
        'total_tax': money(result['total_tax']),
        'taxes': [{'name': tax['name'], 'amount': money(tax['amount'])} for tax in result['taxes']],
    }
    for key in ('year', 'quarter', 'start_date', 'end_date'):
        if key in result:
            payload[key] = result[key]
    return payload


def income_period_to_dict(result: dict) -> dict:
    return {
        'start_date': result['start_date'],
        'end_date': result['end_date'],
        'incomes': [entry.to_dict() for entry in result['incomes']],
        'total_income': money(result['total_income']),
        'by_month': [{'month': row['month'], 'total': money(row['total'])} for row in result['by_month']],
        'by_currency': [
            {'currency': row['currency'], 'amount': money(row['amount']), 'normalized': money(row['normalized'])}
            for row in result['by_currency']
        ],
    }


def year_overview_to_dict(result: dict) -> dict:
    return {
        'year': result['year'],
        'quarters': [tax_result_to_dict(quarter) for quarter in result['quarters']],
        'total_income': money(result['total_income']),
        'total_tax': money(result['total_tax']),
    }


def dashboard_to_dict(result: dict) -> dict:
    return {
        'total_income': money(result['total_income']),
        'income_count': result['income_count'],
        'year_income': money(result['year_income']),
        'current_quarter': tax_result_to_dict(result['current_quarter']),
        'upcoming_events': [event.to_dict() for event in result['upcoming_events']],
    }
