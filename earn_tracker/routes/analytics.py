"""
Analytics routes - income and tax totals per quarter and year.
"""

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from earn_tracker import db
from earn_tracker.errors import ValidationError
from earn_tracker.services.record_store import RecordStore
from earn_tracker.services.tax_service import TaxService
from earn_tracker.utils.serialization import (
    income_period_to_dict, tax_result_to_dict, year_overview_to_dict
)

analytics_bp = Blueprint('analytics', __name__, url_prefix='/api/analytics')


def _date_range_args():
    start_date = request.args.get('start_date')
    end_date = request.args.get('end_date')
    if not start_date or not end_date:
        raise ValidationError('start_date and end_date are required')
    return start_date, end_date


@analytics_bp.route('/income')
@login_required
def income_by_period():
    start_date, end_date = _date_range_args()
    result = TaxService(RecordStore(db.session)).income_by_period(current_user.id, start_date, end_date)
    return jsonify(income_period_to_dict(result))


@analytics_bp.route('/taxes')
@login_required
def calculate_taxes():
    """Tax breakdown for a date range, using the rules of the quarter it starts in."""
    start_date, end_date = _date_range_args()
    result = TaxService(RecordStore(db.session)).compute_quarter_taxes(current_user.id, start_date, end_date)
    return jsonify(tax_result_to_dict(result))


@analytics_bp.route('/year/<int:year>')
@login_required
def year_overview(year):
    result = TaxService(RecordStore(db.session)).year_overview(current_user.id, year)
    return jsonify(year_overview_to_dict(result))
