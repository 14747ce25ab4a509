"""
Event routes - scheduled tax payments and report submissions.
"""

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from earn_tracker import db
from earn_tracker.errors import ValidationError
from earn_tracker.services.record_store import RecordStore, EVENT_STATUSES
from earn_tracker.utils.validation import parse_event

events_bp = Blueprint('events', __name__, url_prefix='/api/events')


@events_bp.route('', methods=['GET'])
@login_required
def list_events():
    """Events in date order; ``status`` is all, pending or completed."""
    status = request.args.get('status', 'all')
    if status not in EVENT_STATUSES:
        raise ValidationError(f'status must be one of: {", ".join(EVENT_STATUSES)}')

    events = RecordStore(db.session).list_events(current_user.id, status=status)
    return jsonify([event.to_dict() for event in events])


@events_bp.route('', methods=['POST'])
@login_required
def create_event():
    fields = parse_event(request.get_json(silent=True))
    event = RecordStore(db.session).create_event(current_user.id, fields)
    return jsonify(event.to_dict()), 201


@events_bp.route('/<int:event_id>', methods=['PATCH', 'PUT'])
@login_required
def update_event(event_id):
    fields = parse_event(request.get_json(silent=True), partial=request.method == 'PATCH')
    event = RecordStore(db.session).update_event(current_user.id, event_id, fields)
    return jsonify(event.to_dict())


@events_bp.route('/<int:event_id>', methods=['DELETE'])
@login_required
def delete_event(event_id):
    RecordStore(db.session).delete_event(current_user.id, event_id)
    return jsonify({'message': 'Event deleted successfully'})
