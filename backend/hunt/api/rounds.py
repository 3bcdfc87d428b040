from flask import Blueprint, jsonify, current_app
from flask_login import login_required
from hunt.errors import Conflict, NotFound
from hunt.models import Round, generate_qr_id
from hunt.services.persistence import commit, delete
from hunt.services.timer import apply_timer_action, compute_elapsed_seconds
from hunt.socketio_events import broadcast_hunt_update
from .validation import get_payload, optional_string, require_int, require_string


rounds = Blueprint('rounds', __name__)


def _round_view(rnd: Round) -> dict:
    payload = rnd.to_dict()
    payload['elapsedSeconds'] = compute_elapsed_seconds(rnd)
    return payload


def _get_round_or_404(round_id: int) -> Round:
    rnd = Round.query.filter_by(id=round_id).first()
    if not rnd:
        raise NotFound('Round not found')
    return rnd


@rounds.route('', methods=['GET'])
@login_required
def list_rounds():
    items = Round.query.order_by(Round.round_number.asc()).all()
    return jsonify([_round_view(r) for r in items])


@rounds.route('', methods=['POST'])
@login_required
def create_round():
    data = get_payload()
    round_number = require_int(data, 'roundNumber')
    clue_text = require_string(data, 'clueText', min_length=5)
    unlock_code = require_string(data, 'unlockCode', min_length=3)

    if Round.query.filter_by(round_number=round_number).first():
        raise Conflict(f'Round {round_number} already exists')

    rnd = Round(
        round_number=round_number,
        clue_text=clue_text,
        description=optional_string(data, 'description'),
        hint=optional_string(data, 'hint'),
        unlock_code=unlock_code.upper(),
        qr_id=generate_qr_id(round_number),
    )
    commit(rnd, conflict_message=f'Round {round_number} already exists')
    current_app.logger.info(f"[round-create] round={rnd.round_number} id={rnd.id}")
    return jsonify(_round_view(rnd)), 201


@rounds.route('/<int:round_id>', methods=['GET'])
@login_required
def get_round(round_id):
    return jsonify(_round_view(_get_round_or_404(round_id)))


@rounds.route('/<int:round_id>', methods=['PATCH'])
@login_required
def update_round(round_id):
    rnd = _get_round_or_404(round_id)
    data = get_payload()

    if 'roundNumber' in data:
        round_number = require_int(data, 'roundNumber')
        clash = Round.query.filter(Round.round_number == round_number, Round.id != rnd.id).first()
        if clash:
            raise Conflict(f'Round {round_number} already exists')
        rnd.round_number = round_number
    if 'clueText' in data:
        rnd.clue_text = require_string(data, 'clueText', min_length=5)
    if 'unlockCode' in data:
        rnd.unlock_code = require_string(data, 'unlockCode', min_length=3).upper()
    if 'description' in data:
        rnd.description = optional_string(data, 'description')
    if 'hint' in data:
        rnd.hint = optional_string(data, 'hint')

    commit(rnd, conflict_message='Round number already exists')
    return jsonify(_round_view(rnd))


@rounds.route('/<int:round_id>', methods=['DELETE'])
@login_required
def delete_round(round_id):
    rnd = _get_round_or_404(round_id)
    delete(rnd)
    current_app.logger.info(f"[round-delete] id={round_id}")
    return '', 204


@rounds.route('/<int:round_id>/timer', methods=['POST'])
@login_required
def update_round_timer(round_id):
    data = get_payload()
    action = data.get('action')
    rnd = _get_round_or_404(round_id)

    apply_timer_action(rnd, action)
    commit(rnd)
    broadcast_hunt_update('timer', round_id=rnd.id)
    return jsonify(_round_view(rnd))
