"""
Main application routes - index and dashboard summary.
"""

from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from earn_tracker import db
from earn_tracker.services.record_store import RecordStore
from earn_tracker.services.tax_service import TaxService
from earn_tracker.utils.serialization import dashboard_to_dict

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    """Service status and whether the caller is logged in."""
    return jsonify({
        'status': 'ok',
        'authenticated': current_user.is_authenticated,
    })


@main_bp.route('/dashboard')
@login_required
def dashboard():
    """Income totals, current quarter taxes and upcoming events."""
    result = TaxService(RecordStore(db.session)).dashboard(current_user.id)
    return jsonify(dashboard_to_dict(result))
