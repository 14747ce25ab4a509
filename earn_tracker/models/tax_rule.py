"""
Tax rules defined per user and calendar quarter.
"""

from earn_tracker import db
from datetime import datetime
from enum import Enum
from typing import NamedTuple


class TaxRuleKind(str, Enum):
    """How a rule turns into a tax amount."""
    FIXED = "fixed"            # absolute amount in the base currency
    PERCENTAGE = "percentage"  # percentage points of period income


class TaxRule(db.Model):
    """
    A named tax policy active for one (year, quarter).

    Rules are not linked to income entries; they apply to whatever income
    falls into the same user's period at calculation time.
    """

    __tablename__ = 'tax_rules'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)

    name = db.Column(db.String(120), nullable=False)
    kind = db.Column(db.String(20), nullable=False)
    value = db.Column(db.Float, nullable=False)
    active = db.Column(db.Boolean, nullable=False, default=True)

    # Period
    year = db.Column(db.Integer, nullable=False)
    quarter = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint('quarter BETWEEN 1 AND 4', name='ck_tax_rule_quarter'),
        db.CheckConstraint('value >= 0', name='ck_tax_rule_value_non_negative'),
        db.Index('ix_tax_rules_user_period', 'user_id', 'year', 'quarter'),
    )

    def snapshot(self) -> 'TaxRuleSnapshot':
        """Detached copy of the fields that survive a quarter-to-quarter copy."""
        return TaxRuleSnapshot(name=self.name, kind=self.kind, value=self.value, active=self.active)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'kind': self.kind,
            'value': self.value,
            'active': self.active,
            'year': self.year,
            'quarter': self.quarter,
        }

    def __repr__(self) -> str:
        return f'<TaxRule {self.name} {self.kind}={self.value} {self.year}Q{self.quarter}>'


class TaxRuleSnapshot(NamedTuple):
    """Rule fields copied between periods, independent of any session."""
    name: str
    kind: str
    value: float
    active: bool = True
