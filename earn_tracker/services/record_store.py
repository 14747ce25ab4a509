"""
Record store backed by a SQLAlchemy session.

All reads and writes of users, income entries, tax rules and events go
through here. Services receive a RecordStore instance instead of reaching
for ``db.session`` themselves, so the tax code can be exercised against any
session (or a fake store) in tests.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, List, Optional
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from earn_tracker.errors import DuplicateUsername, NotFound, TransactionFailure
from earn_tracker.models.event import Event
from earn_tracker.models.income import IncomeEntry
from earn_tracker.models.tax_rule import TaxRule, TaxRuleSnapshot
from earn_tracker.models.user import User

logger = logging.getLogger(__name__)

EVENT_STATUSES = ('all', 'pending', 'completed')


class RecordStore:
    """Data access for one database session."""

    def __init__(self, session):
        self.session = session

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _commit(self, action: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Failed to %s", action, exc_info=True)
            raise TransactionFailure(f'Failed to {action}') from e

    def _get_owned(self, model, record_id: int, user_id: int):
        record = self.session.query(model).filter_by(id=record_id, user_id=user_id).first()
        if record is None:
            raise NotFound(f'{model.__name__} {record_id} not found')
        return record

    def _apply(self, record, fields: dict):
        for name, value in fields.items():
            setattr(record, name, value)
        record.updated_at = datetime.utcnow()
        return record

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_user(self, user_id: int) -> User:
        user = self.session.get(User, user_id)
        if user is None:
            raise NotFound(f'User {user_id} not found')
        return user

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.session.query(User).filter_by(username=username).first()

    def list_users(self) -> List[User]:
        return self.session.query(User).order_by(User.username).all()

    def create_user(self, username: str, password: str) -> User:
        if self.get_user_by_username(username) is not None:
            raise DuplicateUsername(f'User {username!r} already exists')

        user = User(username=username)
        user.set_password(password)
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same name.
            self.session.rollback()
            raise DuplicateUsername(f'User {username!r} already exists')

        logger.info("Created user %s (id=%s)", username, user.id)
        return user

    def delete_user(self, user_id: int) -> None:
        """Delete a user together with all of their records."""
        user = self.get_user(user_id)
        self.session.delete(user)
        self._commit(f'delete user {user_id}')
        logger.info("Deleted user %s and all owned records", user_id)

    # ------------------------------------------------------------------
    # Income
    # ------------------------------------------------------------------

    def fetch_income(self, user_id: int, start_date: date, end_date: date) -> List[IncomeEntry]:
        """Income entries dated within [start_date, end_date], oldest first."""
        return self.session.query(IncomeEntry).filter(
            IncomeEntry.user_id == user_id,
            IncomeEntry.date >= start_date,
            IncomeEntry.date <= end_date
        ).order_by(IncomeEntry.date, IncomeEntry.id).all()

    def list_income(self, user_id: int) -> List[IncomeEntry]:
        return self.session.query(IncomeEntry).filter_by(user_id=user_id).order_by(
            IncomeEntry.date.desc(), IncomeEntry.id.desc()
        ).all()

    def create_income(self, user_id: int, fields: dict) -> IncomeEntry:
        entry = IncomeEntry(user_id=user_id, **fields)
        self.session.add(entry)
        self._commit('create income entry')
        return entry

    def update_income(self, user_id: int, income_id: int, fields: dict) -> IncomeEntry:
        entry = self._apply(self._get_owned(IncomeEntry, income_id, user_id), fields)
        self._commit(f'update income entry {income_id}')
        return entry

    def delete_income(self, user_id: int, income_id: int) -> None:
        self.session.delete(self._get_owned(IncomeEntry, income_id, user_id))
        self._commit(f'delete income entry {income_id}')

    # ------------------------------------------------------------------
    # Tax rules
    # ------------------------------------------------------------------

    def fetch_active_tax_rules(self, user_id: int, year: int, quarter: int) -> List[TaxRule]:
        return self.session.query(TaxRule).filter_by(
            user_id=user_id, year=year, quarter=quarter, active=True
        ).order_by(TaxRule.id).all()

    def fetch_all_tax_rules(self, user_id: int, year: int, quarter: int) -> List[TaxRule]:
        return self.session.query(TaxRule).filter_by(
            user_id=user_id, year=year, quarter=quarter
        ).order_by(TaxRule.id).all()

    def list_tax_rules(self, user_id: int, year: Optional[int] = None,
                       quarter: Optional[int] = None) -> List[TaxRule]:
        query = self.session.query(TaxRule).filter_by(user_id=user_id)
        if year is not None:
            query = query.filter_by(year=year)
        if quarter is not None:
            query = query.filter_by(quarter=quarter)
        return query.order_by(TaxRule.year, TaxRule.quarter, TaxRule.id).all()

    def create_tax_rule(self, user_id: int, fields: dict) -> TaxRule:
        rule = TaxRule(user_id=user_id, **fields)
        self.session.add(rule)
        self._commit('create tax rule')
        return rule

    def update_tax_rule(self, user_id: int, rule_id: int, fields: dict) -> TaxRule:
        rule = self._apply(self._get_owned(TaxRule, rule_id, user_id), fields)
        self._commit(f'update tax rule {rule_id}')
        return rule

    def delete_tax_rule(self, user_id: int, rule_id: int) -> None:
        self.session.delete(self._get_owned(TaxRule, rule_id, user_id))
        self._commit(f'delete tax rule {rule_id}')

    def replace_tax_rules(self, user_id: int, year: int, quarter: int,
                          snapshots: Iterable[TaxRuleSnapshot]) -> int:
        """
        Replace every rule of a user's period with the given snapshots.

        The delete and the inserts are committed together. If anything
        fails the session is rolled back, so the period keeps the rules it
        had before the call.

        Raises:
            TransactionFailure: if the replacement could not be committed.
        """
        snapshots = list(snapshots)
        try:
            self.session.query(TaxRule).filter_by(
                user_id=user_id, year=year, quarter=quarter
            ).delete(synchronize_session='fetch')

            for snapshot in snapshots:
                self.session.add(TaxRule(
                    user_id=user_id,
                    name=snapshot.name,
                    kind=snapshot.kind,
                    value=snapshot.value,
                    active=snapshot.active,
                    year=year,
                    quarter=quarter
                ))

            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Replacing tax rules for user %s %sQ%s failed: %s",
                         user_id, year, quarter, e, exc_info=True)
            raise TransactionFailure(
                f'Could not replace tax rules for {year} Q{quarter}; nothing was changed',
                details={'year': year, 'quarter': quarter},
            ) from e

        return len(snapshots)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def list_events(self, user_id: int, status: str = 'all') -> List[Event]:
        if status not in EVENT_STATUSES:
            raise ValueError(f'Unknown event status filter: {status}')

        query = self.session.query(Event).filter_by(user_id=user_id)
        if status == 'pending':
            query = query.filter_by(completed=False)
        elif status == 'completed':
            query = query.filter_by(completed=True)
        return query.order_by(Event.date, Event.id).all()

    def upcoming_events(self, user_id: int, limit: int = 5, today: Optional[date] = None) -> List[Event]:
        """Nearest pending events on or after today."""
        today = today or date.today()
        return self.session.query(Event).filter(
            Event.user_id == user_id,
            Event.completed == False,  # noqa: E712
            Event.date >= today
        ).order_by(Event.date, Event.id).limit(limit).all()

    def create_event(self, user_id: int, fields: dict) -> Event:
        event = Event(user_id=user_id, **fields)
        self.session.add(event)
        self._commit('create event')
        return event

    def update_event(self, user_id: int, event_id: int, fields: dict) -> Event:
        event = self._apply(self._get_owned(Event, event_id, user_id), fields)
        self._commit(f'update event {event_id}')
        return event

    def delete_event(self, user_id: int, event_id: int) -> None:
        self.session.delete(self._get_owned(Event, event_id, user_id))
        self._commit(f'delete event {event_id}')
