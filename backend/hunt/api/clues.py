from flask import Blueprint, jsonify, current_app
from flask_login import login_required
from hunt import db
from hunt.errors import Conflict, NotFound, ValidationError
from hunt.models import ClueAssignment, HintRequest, Round, Team, generate_qr_id
from hunt.services.persistence import commit, delete
from hunt.services.views import assignment_results
from .validation import get_payload, optional_string, require_id_list, require_int, require_string


clues = Blueprint('clues', __name__)


def _get_assignment_or_404(assignment_id: int) -> ClueAssignment:
    assignment = ClueAssignment.query.filter_by(id=assignment_id).first()
    if not assignment:
        raise NotFound('Clue assignment not found')
    return assignment


@clues.route('', methods=['GET'])
@login_required
def list_clue_assignments():
    items = ClueAssignment.query.order_by(ClueAssignment.round_number.asc(), ClueAssignment.created_at.asc()).all()
    return jsonify([a.to_dict() for a in items])


@clues.route('', methods=['POST'])
@login_required
def create_clue_assignment():
    data = get_payload()
    round_number = require_int(data, 'roundNumber')
    clue_text = require_string(data, 'clueText', min_length=5)
    unlock_code = require_string(data, 'unlockCode', min_length=3).upper()
    time_limit = require_int(data, 'timeLimitSeconds')
    team_ids = set(require_id_list(data, 'teamIds'))

    if not Round.query.filter_by(round_number=round_number).first():
        raise ValidationError(f'Round {round_number} does not exist')

    teams = Team.query.filter(Team.id.in_(team_ids)).all()
    if len(teams) != len(team_ids):
        raise ValidationError('One or more teams not found')

    if ClueAssignment.query.filter_by(unlock_code=unlock_code).first():
        raise Conflict('Unlock code must be unique')

    assignment = ClueAssignment(
        round_number=round_number,
        clue_text=clue_text,
        description=optional_string(data, 'description'),
        hint=optional_string(data, 'hint'),
        unlock_code=unlock_code,
        qr_id=generate_qr_id(round_number),
        time_limit_seconds=time_limit,
        teams=teams,
    )
    commit(assignment, conflict_message='Unlock code must be unique')
    current_app.logger.info(
        f"[assignment-create] id={assignment.id} round={round_number} teams={sorted(team_ids)}"
    )
    return jsonify(assignment.to_dict()), 201


@clues.route('/<int:assignment_id>', methods=['DELETE'])
@login_required
def delete_clue_assignment(assignment_id):
    assignment = _get_assignment_or_404(assignment_id)
    # Keep hint request history; it just loses the assignment reference
    HintRequest.query.filter_by(assignment_id=assignment.id).update({'assignment_id': None})
    db.session.flush()
    delete(assignment)
    current_app.logger.info(f"[assignment-delete] id={assignment_id}")
    return '', 204


@clues.route('/<int:assignment_id>/results', methods=['GET'])
@login_required
def get_clue_assignment_results(assignment_id):
    return jsonify(assignment_results(_get_assignment_or_404(assignment_id)))
