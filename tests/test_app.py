"""
Application factory tests.
"""
from earn_tracker import create_app, db
from earn_tracker.models import User
from earn_tracker.utils.init_db import init_admin_user


def _make_app(**overrides):
    config = {
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'LOG_LEVEL': 'WARNING',
        'SEED_ADMIN': False,
    }
    config.update(overrides)
    return create_app(config)


def test_seed_admin_is_hashed_and_can_log_in():
    app = _make_app(SEED_ADMIN=True, ADMIN_USERNAME='owner', ADMIN_PASSWORD='owner-pass')
    with app.app_context():
        admin = User.query.filter_by(username='owner').one()
        assert admin.password_hash != 'owner-pass'

        resp = app.test_client().post('/auth/login', json={'username': 'owner', 'password': 'owner-pass'})
        assert resp.status_code == 200
        db.drop_all()


def test_seed_skipped_when_users_exist():
    app = _make_app()
    with app.app_context():
        init_admin_user('first', 'first-pass')
        init_admin_user('second', 'second-pass')
        assert [u.username for u in User.query.all()] == ['first']
        db.drop_all()


def test_config_override():
    app = _make_app(BASE_CURRENCY='EUR')
    assert app.config['BASE_CURRENCY'] == 'EUR'
    assert app.config['SQLALCHEMY_DATABASE_URI'] == 'sqlite:///:memory:'
