"""
Database initialization utilities.
"""

from earn_tracker import db
from earn_tracker.models.user import User
import logging

logger = logging.getLogger(__name__)


def init_admin_user(username: str, password: str) -> User:
    """Create the seed account on an empty database."""
    if User.query.count() > 0:
        return User.query.filter_by(username=username).first()

    admin = User(username=username)
    admin.set_password(password)
    db.session.add(admin)
    db.session.commit()
    logger.info("Seed user created: %s", username)
    return admin
