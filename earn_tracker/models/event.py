"""
Scheduled compliance events (tax payments, report submissions).
"""

from earn_tracker import db
from datetime import datetime, date
from enum import Enum


class EventKind(str, Enum):
    """Kinds of compliance events."""
    TAX_PAYMENT = "tax_payment"
    REPORT_SUBMISSION = "report_submission"
    OTHER = "other"


class Event(db.Model):
    """A dated compliance item a user has to take care of."""

    __tablename__ = 'events'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)

    kind = db.Column(db.String(30), nullable=False)
    description = db.Column(db.Text, nullable=False)
    date = db.Column(db.Date, nullable=False, index=True)
    completed = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def is_overdue(self) -> bool:
        """Pending and already past its date."""
        return not self.completed and self.date < date.today()

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'kind': self.kind,
            'description': self.description,
            'date': self.date.isoformat(),
            'completed': self.completed,
            'is_overdue': self.is_overdue,
        }

    def __repr__(self) -> str:
        return f'<Event {self.kind} {self.date}>'
