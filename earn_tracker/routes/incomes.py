"""
Income routes - record, edit and remove income entries.
"""

from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required, current_user
from earn_tracker import db
from earn_tracker.errors import NotFound, ValidationError
from earn_tracker.services.record_store import RecordStore
from earn_tracker.utils.exchange_rates import get_currency_rate
from earn_tracker.utils.validation import parse_income
from datetime import date
import logging

logger = logging.getLogger(__name__)

incomes_bp = Blueprint('incomes', __name__, url_prefix='/api/incomes')


@incomes_bp.route('', methods=['GET'])
@login_required
def list_incomes():
    """All income entries of the current user, newest first."""
    incomes = RecordStore(db.session).list_income(current_user.id)
    return jsonify([entry.to_dict() for entry in incomes])


@incomes_bp.route('', methods=['POST'])
@login_required
def create_income():
    fields = parse_income(request.get_json(silent=True))
    entry = RecordStore(db.session).create_income(current_user.id, fields)
    logger.info("User %s recorded income %s %s on %s",
                current_user.id, entry.amount, entry.currency, entry.date)
    return jsonify(entry.to_dict()), 201


@incomes_bp.route('/<int:income_id>', methods=['PATCH', 'PUT'])
@login_required
def update_income(income_id):
    fields = parse_income(request.get_json(silent=True), partial=request.method == 'PATCH')
    entry = RecordStore(db.session).update_income(current_user.id, income_id, fields)
    return jsonify(entry.to_dict())


@incomes_bp.route('/<int:income_id>', methods=['DELETE'])
@login_required
def delete_income(income_id):
    RecordStore(db.session).delete_income(current_user.id, income_id)
    return jsonify({'message': 'Income deleted successfully'})


@incomes_bp.route('/exchange-rate')
@login_required
def exchange_rate():
    """Official NBU rate used to prefill the income form."""
    currency = request.args.get('currency', '').strip().upper()
    if not currency:
        raise ValidationError('currency is required')
    on_date = request.args.get('date') or date.today().isoformat()

    rate = get_currency_rate(
        currency,
        on_date,
        api_url=current_app.config['NBU_API_URL'],
        base_currency=current_app.config['BASE_CURRENCY'],
        timeout=current_app.config['EXCHANGE_RATE_TIMEOUT']
    )
    if rate is None:
        raise NotFound(f'No exchange rate available for {currency} on {on_date}')

    return jsonify({'currency': currency, 'date': on_date, 'rate': float(rate)})
