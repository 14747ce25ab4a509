"""
Shared fixtures: an application on an in-memory database, a record store
bound to its session, and users with and without a logged-in client.
"""
import pytest
from datetime import date

from earn_tracker import create_app, db
from earn_tracker.services.record_store import RecordStore

PASSWORD = 'secret123'


@pytest.fixture
def app():
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SEED_ADMIN': False,
        'LOG_LEVEL': 'WARNING',
    })
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return RecordStore(db.session)


@pytest.fixture
def user(store):
    return store.create_user('tester', PASSWORD)


@pytest.fixture
def other_user(store):
    return store.create_user('other', PASSWORD)


@pytest.fixture
def auth_client(client, user):
    """Test client with ``user`` logged in."""
    resp = client.post('/auth/login', json={'username': 'tester', 'password': PASSWORD})
    assert resp.status_code == 200
    return client


@pytest.fixture
def make_income(store):
    def _make(user, amount, exchange_rate=1, on=date(2024, 2, 10), currency='UAH', description=None):
        return store.create_income(user.id, {
            'amount': amount,
            'currency': currency,
            'exchange_rate': exchange_rate,
            'description': description,
            'date': on,
        })
    return _make


@pytest.fixture
def make_rule(store):
    def _make(user, name, kind, value, year=2024, quarter=1, active=True):
        return store.create_tax_rule(user.id, {
            'name': name,
            'kind': kind,
            'value': value,
            'active': active,
            'year': year,
            'quarter': quarter,
        })
    return _make
