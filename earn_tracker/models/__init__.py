"""
Model package initialization.
"""

from earn_tracker.models.user import User
from earn_tracker.models.income import IncomeEntry
from earn_tracker.models.tax_rule import TaxRule, TaxRuleKind, TaxRuleSnapshot
from earn_tracker.models.event import Event, EventKind

__all__ = [
    'User',
    'IncomeEntry',
    'TaxRule',
    'TaxRuleKind',
    'TaxRuleSnapshot',
    'Event',
    'EventKind'
]
