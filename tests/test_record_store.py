"""
RecordStore tests: scoped queries, CRUD and cascade deletes.
"""
import pytest
from datetime import date

from earn_tracker.errors import DuplicateUsername, NotFound, TransactionFailure
from earn_tracker.models import Event, IncomeEntry, TaxRule, User


class TestUsers:

    def test_password_is_hashed(self, user):
        assert user.password_hash != 'secret123'
        assert user.password_hash.startswith('pbkdf2:sha256')
        assert user.check_password('secret123')
        assert not user.check_password('secret124')

    def test_duplicate_username(self, store, user):
        with pytest.raises(DuplicateUsername):
            store.create_user('tester', 'another-pass')

    def test_get_missing_user(self, store):
        with pytest.raises(NotFound):
            store.get_user(999)

    def test_delete_user_cascades(self, store, user, other_user, make_income, make_rule):
        make_income(user, 100)
        make_rule(user, 'A', 'fixed', 1)
        store.create_event(user.id, {'kind': 'other', 'description': 'x', 'date': date(2024, 1, 1)})
        make_income(other_user, 5)

        store.delete_user(user.id)

        session = store.session
        assert session.query(User).filter_by(username='tester').first() is None
        assert session.query(IncomeEntry).count() == 1
        assert session.query(TaxRule).count() == 0
        assert session.query(Event).count() == 0


class TestIncome:

    def test_fetch_income_inclusive_range(self, store, user, make_income):
        make_income(user, 1, on=date(2024, 1, 1))
        make_income(user, 2, on=date(2024, 3, 31))
        make_income(user, 3, on=date(2024, 4, 1))
        make_income(user, 4, on=date(2023, 12, 31))

        entries = store.fetch_income(user.id, date(2024, 1, 1), date(2024, 3, 31))

        assert [e.amount for e in entries] == [1, 2]

    def test_fetch_income_empty(self, store, user):
        assert store.fetch_income(user.id, date(2024, 1, 1), date(2024, 3, 31)) == []

    def test_normalized_amount(self, user, make_income):
        entry = make_income(user, 150, exchange_rate=41.1, currency='USD')
        assert float(entry.normalized_amount) == pytest.approx(6165.0)

    def test_update_income_refreshes_timestamp(self, store, user, make_income):
        entry = make_income(user, 100)
        before = entry.updated_at

        updated = store.update_income(user.id, entry.id, {'amount': 200})

        assert updated.amount == 200
        assert updated.updated_at >= before

    def test_cannot_touch_other_users_income(self, store, user, other_user, make_income):
        entry = make_income(other_user, 100)
        with pytest.raises(NotFound):
            store.update_income(user.id, entry.id, {'amount': 1})
        with pytest.raises(NotFound):
            store.delete_income(user.id, entry.id)

    def test_delete_income(self, store, user, make_income):
        entry = make_income(user, 100)
        store.delete_income(user.id, entry.id)
        assert store.list_income(user.id) == []

    def test_delete_missing_income(self, store, user):
        with pytest.raises(NotFound):
            store.delete_income(user.id, 12345)


class TestTaxRules:

    def test_active_vs_all(self, store, user, make_rule):
        make_rule(user, 'on', 'fixed', 1, active=True)
        make_rule(user, 'off', 'fixed', 1, active=False)
        make_rule(user, 'elsewhere', 'fixed', 1, quarter=2)

        assert [r.name for r in store.fetch_active_tax_rules(user.id, 2024, 1)] == ['on']
        assert [r.name for r in store.fetch_all_tax_rules(user.id, 2024, 1)] == ['on', 'off']

    def test_list_filters(self, store, user, make_rule):
        make_rule(user, 'a', 'fixed', 1, year=2023, quarter=4)
        make_rule(user, 'b', 'fixed', 1, year=2024, quarter=1)
        make_rule(user, 'c', 'fixed', 1, year=2024, quarter=2)

        assert [r.name for r in store.list_tax_rules(user.id)] == ['a', 'b', 'c']
        assert [r.name for r in store.list_tax_rules(user.id, year=2024)] == ['b', 'c']
        assert [r.name for r in store.list_tax_rules(user.id, year=2024, quarter=2)] == ['c']

    def test_update_and_delete(self, store, user, make_rule):
        rule = make_rule(user, 'a', 'fixed', 1)
        store.update_tax_rule(user.id, rule.id, {'active': False, 'value': 3})
        assert store.fetch_active_tax_rules(user.id, 2024, 1) == []

        store.delete_tax_rule(user.id, rule.id)
        assert store.fetch_all_tax_rules(user.id, 2024, 1) == []

    def test_replace_tax_rules_returns_count(self, store, user, make_rule):
        rule = make_rule(user, 'a', 'fixed', 1)
        count = store.replace_tax_rules(user.id, 2024, 3, [rule.snapshot(), rule.snapshot()])
        assert count == 2
        assert len(store.fetch_all_tax_rules(user.id, 2024, 3)) == 2


class TestEvents:

    @pytest.fixture
    def events(self, store, user):
        store.create_event(user.id, {'kind': 'tax_payment', 'description': 'b', 'date': date(2024, 4, 20)})
        store.create_event(user.id, {'kind': 'report_submission', 'description': 'a',
                                     'date': date(2024, 2, 9), 'completed': True})
        store.create_event(user.id, {'kind': 'other', 'description': 'c', 'date': date(2024, 7, 1)})

    def test_status_filters(self, store, user, events):
        assert [e.description for e in store.list_events(user.id)] == ['a', 'b', 'c']
        assert [e.description for e in store.list_events(user.id, 'pending')] == ['b', 'c']
        assert [e.description for e in store.list_events(user.id, 'completed')] == ['a']

    def test_unknown_status(self, store, user):
        with pytest.raises(ValueError):
            store.list_events(user.id, 'overdue')

    def test_upcoming_events(self, store, user, events):
        upcoming = store.upcoming_events(user.id, limit=1, today=date(2024, 1, 1))
        assert [e.description for e in upcoming] == ['b']

    def test_complete_event(self, store, user, events):
        event = store.list_events(user.id, 'pending')[0]
        store.update_event(user.id, event.id, {'completed': True})
        assert [e.description for e in store.list_events(user.id, 'pending')] == ['c']


def test_failed_write_raises_transaction_failure(store, user, monkeypatch):
    from sqlalchemy.exc import OperationalError

    def failing_commit():
        raise OperationalError('COMMIT', {}, Exception('database is locked'))

    monkeypatch.setattr(store.session, 'commit', failing_commit)
    with pytest.raises(TransactionFailure):
        store.create_income(user.id, {
            'amount': 10, 'currency': 'UAH', 'exchange_rate': 1, 'date': date(2024, 1, 1)
        })
    monkeypatch.undo()

    assert store.session.query(IncomeEntry).count() == 0
