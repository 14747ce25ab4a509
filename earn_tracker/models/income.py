"""
Income entries recorded in their original currency.
"""

from earn_tracker import db
from datetime import datetime
from decimal import Decimal


class IncomeEntry(db.Model):
    """A single income event with the exchange rate used to normalize it."""

    __tablename__ = 'incomes'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)

    amount = db.Column(db.Float, nullable=False)
    currency = db.Column(db.String(3), nullable=False)
    exchange_rate = db.Column(db.Float, nullable=False)  # base currency per 1 unit of `currency`
    description = db.Column(db.Text, nullable=True)
    date = db.Column(db.Date, nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint('amount > 0', name='ck_income_amount_positive'),
        db.CheckConstraint('exchange_rate > 0', name='ck_income_rate_positive'),
    )

    @property
    def normalized_amount(self) -> Decimal:
        """Amount converted to the base currency."""
        return Decimal(str(self.amount)) * Decimal(str(self.exchange_rate))

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'amount': self.amount,
            'currency': self.currency,
            'exchange_rate': self.exchange_rate,
            'normalized_amount': float(self.normalized_amount),
            'description': self.description,
            'date': self.date.isoformat(),
        }

    def __repr__(self) -> str:
        return f'<IncomeEntry {self.date} {self.amount} {self.currency} @ {self.exchange_rate}>'
