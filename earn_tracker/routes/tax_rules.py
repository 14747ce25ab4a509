"""
Tax rule routes - per-quarter tax settings and copying them between quarters.
"""

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from earn_tracker import db
from earn_tracker.errors import ValidationError
from earn_tracker.services.record_store import RecordStore
from earn_tracker.services.tax_service import TaxService
from earn_tracker.utils.period import validate_period
from earn_tracker.utils.validation import parse_int, parse_tax_rule

tax_rules_bp = Blueprint('tax_rules', __name__, url_prefix='/api/tax-rules')


def _int_arg(name):
    value = request.args.get(name)
    if value is None or value == '':
        return None
    try:
        return parse_int(value, name)
    except ValueError as e:
        raise ValidationError(str(e))


@tax_rules_bp.route('', methods=['GET'])
@login_required
def list_tax_rules():
    """Tax rules of the current user, optionally narrowed to a year and quarter."""
    year = _int_arg('year')
    quarter = _int_arg('quarter')
    if quarter is not None:
        validate_period(year if year is not None else 1, quarter)

    rules = RecordStore(db.session).list_tax_rules(current_user.id, year=year, quarter=quarter)
    return jsonify([rule.to_dict() for rule in rules])


@tax_rules_bp.route('', methods=['POST'])
@login_required
def create_tax_rule():
    fields = parse_tax_rule(request.get_json(silent=True))
    rule = RecordStore(db.session).create_tax_rule(current_user.id, fields)
    return jsonify(rule.to_dict()), 201


@tax_rules_bp.route('/<int:rule_id>', methods=['PATCH', 'PUT'])
@login_required
def update_tax_rule(rule_id):
    fields = parse_tax_rule(request.get_json(silent=True), partial=request.method == 'PATCH')
    rule = RecordStore(db.session).update_tax_rule(current_user.id, rule_id, fields)
    return jsonify(rule.to_dict())


@tax_rules_bp.route('/<int:rule_id>', methods=['DELETE'])
@login_required
def delete_tax_rule(rule_id):
    RecordStore(db.session).delete_tax_rule(current_user.id, rule_id)
    return jsonify({'message': 'Tax rule deleted successfully'})


@tax_rules_bp.route('/copy', methods=['POST'])
@login_required
def copy_tax_rules():
    """Replace the target quarter's rules with a copy of the source quarter's."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')

    errors = []
    periods = {}
    for field in ('source_year', 'source_quarter', 'target_year', 'target_quarter'):
        if field not in data:
            errors.append(f'{field} is required')
            continue
        try:
            periods[field] = parse_int(data[field], field)
        except ValueError as e:
            errors.append(str(e))
    if errors:
        raise ValidationError('Invalid input', details={'errors': errors})

    result = TaxService(RecordStore(db.session)).copy_tax_rules(current_user.id, **periods)
    return jsonify(result)
