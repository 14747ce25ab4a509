"""
Authentication routes - register, login, logout, account removal.
"""

from flask import Blueprint, jsonify, request
from flask_login import login_user, logout_user, current_user, login_required
from earn_tracker import db
from earn_tracker.errors import AuthenticationError, ValidationError
from earn_tracker.services.record_store import RecordStore
from earn_tracker.utils.validation import parse_bool, parse_credentials
import logging

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


@auth_bp.route('/register', methods=['POST'])
def register():
    """Create an account; the password is stored hashed."""
    username, password = parse_credentials(request.get_json(silent=True))

    user = RecordStore(db.session).create_user(username, password)
    return jsonify(user.to_dict()), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    """Start a session for valid credentials."""
    data = request.get_json(silent=True) or {}
    username, password = parse_credentials(data)

    user = RecordStore(db.session).get_user_by_username(username)
    if not user or not user.check_password(password):
        # Same message for unknown users and bad passwords
        logger.info("Failed login for %s", username)
        raise AuthenticationError('Invalid username or password')

    try:
        remember = parse_bool(data.get('remember', False), 'remember')
    except ValueError as e:
        raise ValidationError(str(e))
    login_user(user, remember=remember)
    logger.info("User %s logged in", username)
    return jsonify(user.to_dict())


@auth_bp.route('/logout', methods=['POST'])
def logout():
    if current_user.is_authenticated:
        logger.info("User %s logged out", current_user.username)
    logout_user()
    return jsonify({'message': 'Logged out'})


@auth_bp.route('/me')
@login_required
def me():
    return jsonify(current_user.to_dict())


@auth_bp.route('/me', methods=['DELETE'])
@login_required
def delete_account():
    """Delete the logged-in user and every record they own."""
    user_id = current_user.id
    logout_user()
    RecordStore(db.session).delete_user(user_id)
    return jsonify({'message': 'Account deleted'})
