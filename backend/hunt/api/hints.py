from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from hunt.services import hints as hint_service
from hunt.socketio_events import broadcast_hunt_update
from .validation import get_payload, query_int, require_int


hints = Blueprint('hints', __name__)


@hints.route('/request', methods=['POST'])
def request_hint():
    data = get_payload()
    team_id = require_int(data, 'teamId')
    round_number = require_int(data, 'roundNumber')

    hint_request = hint_service.request_hint(team_id, round_number)
    broadcast_hunt_update('hint_request', team_id=team_id)
    return jsonify({
        'message': 'Hint request submitted successfully',
        'request': {
            'id': hint_request.id,
            'status': hint_request.status,
            'requestedAt': hint_request.to_dict()['requestedAt'],
        },
    }), 201


@hints.route('/my-request', methods=['GET'])
def my_hint_request():
    team_id = query_int('teamId')
    round_number = query_int('roundNumber')

    hint_request, hint = hint_service.latest_hint_request(team_id, round_number)
    return jsonify({
        'request': hint_request.to_dict() if hint_request else None,
        # Only set once the request has been approved
        'hint': hint,
    })


@hints.route('/requests', methods=['GET'])
@login_required
def list_hint_requests():
    status = request.args.get('status')
    round_number = request.args.get('roundNumber', type=int)
    items = hint_service.list_hint_requests(status=status, round_number=round_number)
    return jsonify({'requests': [hint_service.hint_request_admin_view(r) for r in items]})


def _review(request_id, approve):
    reviewer = getattr(current_user, 'email', None) or current_app.config.get('HINT_REVIEWER_FALLBACK', 'admin')
    hint_request = hint_service.review_hint_request(request_id, approve=approve, reviewer=reviewer)
    broadcast_hunt_update('hint_review', team_id=hint_request.team_id)
    return {
        'message': f"Hint request {hint_request.status}",
        'request': {
            'id': hint_request.id,
            'status': hint_request.status,
            'reviewedAt': hint_request.to_dict()['reviewedAt'],
        },
    }


@hints.route('/requests/<int:request_id>/approve', methods=['POST'])
@login_required
def approve_hint_request(request_id):
    return jsonify(_review(request_id, approve=True))


@hints.route('/requests/<int:request_id>/reject', methods=['POST'])
@login_required
def reject_hint_request(request_id):
    return jsonify(_review(request_id, approve=False))
